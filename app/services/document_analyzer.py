"""
Document analysis pipeline.

prompt_builder → GeminiClient → section_extractor → result_assembler.

Every call is independent: the service holds no per-request state, so one
instance can serve the whole application.

Public API
----------
DocumentAnalysisService.analyze(request) -> AnalysisOutcome
"""
from __future__ import annotations

import dataclasses
import enum
import logging
from typing import Optional

from app.config import settings
from app.services.completion_client import GeminiClient
from app.services.prompt_builder import format_analysis_prompt, truncate_document
from app.services.result_assembler import AnalysisResult, assemble
from app.services.section_extractor import extract_sections

logger = logging.getLogger(__name__)


class ContentKind(str, enum.Enum):
    """Where the document text came from."""

    TEXT = "text"
    IMAGE = "image"  # OCR output


@dataclasses.dataclass(frozen=True)
class AnalysisRequest:
    """Decoded document text plus its declared kind."""

    text: str
    kind: ContentKind = ContentKind.TEXT


@dataclasses.dataclass(frozen=True)
class AnalysisOutcome:
    """Returned by DocumentAnalysisService.analyze."""

    result: AnalysisResult
    kind: ContentKind
    truncated: bool


class DocumentAnalysisService:
    """Runs one document through the analysis pipeline."""

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        max_output_tokens: Optional[int] = None,
        max_document_chars: Optional[int] = None,
    ) -> None:
        self.client = client or GeminiClient()
        self.max_output_tokens = max_output_tokens or settings.ANALYSIS_MAX_OUTPUT_TOKENS
        self.max_document_chars = max_document_chars or settings.MAX_DOCUMENT_CHARS

    async def analyze(self, request: AnalysisRequest) -> AnalysisOutcome:
        """
        Analyse *request* and return the structured result.

        Completion failures propagate as ``CompletionError`` subclasses;
        sections the model left out are filled with placeholders instead.
        """
        content, truncated = truncate_document(request.text, self.max_document_chars)
        if truncated:
            logger.info(
                "analyze: %s document truncated from %d to %d chars",
                request.kind.value,
                len(request.text),
                self.max_document_chars,
            )

        prompt = format_analysis_prompt(content)
        completion = await self.client.generate(prompt, self.max_output_tokens)

        result = assemble(extract_sections(completion))
        return AnalysisOutcome(result=result, kind=request.kind, truncated=truncated)
