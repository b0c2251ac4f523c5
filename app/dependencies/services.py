"""
Service dependencies for FastAPI routes.

Routes receive their Gemini-backed services through these providers, so tests
can swap the completion client via ``app.dependency_overrides``.
"""
from __future__ import annotations

from fastapi import Depends

from app.services.completion_client import GeminiClient
from app.services.document_analyzer import DocumentAnalysisService
from app.services.document_parser import DocumentParser
from app.services.legal_chatbot import LegalChatbotService


def get_completion_client() -> GeminiClient:
    """Client configured from settings."""
    return GeminiClient()


def get_document_analyzer(
    client: GeminiClient = Depends(get_completion_client),
) -> DocumentAnalysisService:
    return DocumentAnalysisService(client=client)


def get_legal_chatbot(
    client: GeminiClient = Depends(get_completion_client),
) -> LegalChatbotService:
    return LegalChatbotService(client=client)


def get_document_parser() -> DocumentParser:
    return DocumentParser()
