"""
Document analysis endpoints.

Routes
------
POST /api/analysis/text    — analyse decoded text        → AnalysisResponse
POST /api/analysis/upload  — decode a file, then analyse → AnalysisResponse
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.config import settings
from app.dependencies.services import get_document_analyzer, get_document_parser
from app.models.schemas import (
    AnalysisResponse,
    AnalysisTextRequest,
    ContentKindSchema,
    LegalActResponse,
)
from app.services.completion_client import CompletionError
from app.services.document_analyzer import (
    AnalysisOutcome,
    AnalysisRequest,
    ContentKind,
    DocumentAnalysisService,
)
from app.services.document_parser import DocumentParser

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _to_response(outcome: AnalysisOutcome, filename: Optional[str] = None) -> AnalysisResponse:
    result = outcome.result
    return AnalysisResponse(
        summary=result.summary,
        key_points=list(result.key_points),
        legal_acts=[LegalActResponse.model_validate(act) for act in result.legal_acts],
        legal_implications=list(result.legal_implications),
        recommendations=list(result.recommendations),
        content_kind=ContentKindSchema(outcome.kind.value),
        truncated=outcome.truncated,
        filename=filename,
    )


async def _run_analysis(
    analyzer: DocumentAnalysisService,
    request: AnalysisRequest,
) -> AnalysisOutcome:
    """Run the pipeline, turning completion failures into HTTP errors."""
    try:
        return await analyzer.analyze(request)
    except CompletionError as exc:
        logger.warning("analysis failed (%s): %s", exc.kind, exc.service_message)
        raise HTTPException(status_code=exc.status_code, detail=exc.user_message)


# ---------------------------------------------------------------------------
# POST /text
# ---------------------------------------------------------------------------

@router.post("/text", response_model=AnalysisResponse, status_code=status.HTTP_200_OK)
async def analyze_text(
    payload: AnalysisTextRequest,
    analyzer: DocumentAnalysisService = Depends(get_document_analyzer),
) -> AnalysisResponse:
    """Analyse document text that the client has already extracted."""
    if not payload.text.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Document contains no extractable text.",
        )

    request = AnalysisRequest(text=payload.text, kind=ContentKind(payload.kind.value))
    outcome = await _run_analysis(analyzer, request)
    return _to_response(outcome)


# ---------------------------------------------------------------------------
# POST /upload
# ---------------------------------------------------------------------------

@router.post("/upload", response_model=AnalysisResponse, status_code=status.HTTP_200_OK)
async def analyze_upload(
    file: UploadFile = File(...),
    analyzer: DocumentAnalysisService = Depends(get_document_analyzer),
    parser: DocumentParser = Depends(get_document_parser),
) -> AnalysisResponse:
    """
    Upload a PDF, Word document, text file or image and analyse it.

    - Max file size: 10 MB (configurable via MAX_FILE_SIZE)
    - Images are run through OCR first
    - Nothing is stored; the file is discarded after analysis
    """
    if not file.filename:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Upload must include a filename.",
        )

    file_ext = Path(file.filename).suffix.lower()
    if file_ext not in settings.SUPPORTED_FILE_TYPES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=(
                f"Unsupported file type '{file_ext}'. "
                f"Accepted: {', '.join(settings.SUPPORTED_FILE_TYPES)}"
            ),
        )

    # Read in slices while enforcing the size limit
    content = bytearray()
    while True:
        chunk = await file.read(1024 * 1024)   # 1 MB slices
        if not chunk:
            break
        content.extend(chunk)
        if len(content) > settings.MAX_FILE_SIZE:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=(
                    f"File exceeds the {settings.MAX_FILE_SIZE // (1024 * 1024)} MB "
                    "size limit."
                ),
            )

    logger.info(f"Received {file.filename!r} ({len(content):,} bytes)")

    try:
        parsed = await parser.parse_upload(file.filename, bytes(content))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except RuntimeError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )

    if not parsed.text.strip():
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Document contains no extractable text.",
        )

    outcome = await _run_analysis(analyzer, parsed.to_request())
    return _to_response(outcome, filename=file.filename)
