"""
Legal assistant chat endpoint.

POST /api/chat/ — one question in, one plain-text answer out.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies.services import get_legal_chatbot
from app.models.schemas import ChatRequest, ChatResponse
from app.services.completion_client import CompletionError
from app.services.legal_chatbot import LegalChatbotService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/", response_model=ChatResponse, status_code=status.HTTP_200_OK)
async def chat(
    request: ChatRequest,
    chatbot: LegalChatbotService = Depends(get_legal_chatbot),
):
    """Ask Saarthi a legal or site question."""
    if not request.message.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Message must not be blank.",
        )

    try:
        reply = await chatbot.ask(request.message)
    except CompletionError as exc:
        logger.error("chat error (%s): %s", exc.kind, exc.service_message)
        raise HTTPException(status_code=exc.status_code, detail=exc.user_message)

    return ChatResponse(reply=reply)
