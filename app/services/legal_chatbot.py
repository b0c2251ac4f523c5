"""
Saarthi, the site's legal assistant.

Sends one question to Gemini and returns a plain-text answer. The model is
told not to use markdown; any asterisks it emits anyway are removed.
"""
from __future__ import annotations

import logging
from typing import Optional

from app.config import settings
from app.services.completion_client import GeminiClient
from app.services.prompt_builder import build_chat_prompt
from app.utils.helpers import strip_emphasis

logger = logging.getLogger(__name__)


class LegalChatbotService:
    """Single-turn question answering; no conversation state is kept."""

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        max_output_tokens: Optional[int] = None,
    ) -> None:
        self.client = client or GeminiClient()
        self.max_output_tokens = max_output_tokens or settings.CHAT_MAX_OUTPUT_TOKENS

    async def ask(self, message: str) -> str:
        prompt = build_chat_prompt(message)
        answer = await self.client.generate(prompt, self.max_output_tokens)
        reply = strip_emphasis(answer).strip()
        logger.info("ask: %d-char question answered with %d chars", len(message), len(reply))
        return reply
