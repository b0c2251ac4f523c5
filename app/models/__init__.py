"""Request and response schemas for LawWise."""
from app.models.schemas import (
    AnalysisResponse,
    AnalysisTextRequest,
    ChatRequest,
    ChatResponse,
    ContentKindSchema,
    HealthCheckResponse,
    LegalActResponse,
)

__all__ = [
    "AnalysisResponse",
    "AnalysisTextRequest",
    "ChatRequest",
    "ChatResponse",
    "ContentKindSchema",
    "HealthCheckResponse",
    "LegalActResponse",
]
