"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
from datetime import datetime
from enum import Enum


class ContentKindSchema(str, Enum):
    """Declared origin of the submitted text."""

    TEXT = "text"
    IMAGE = "image"


# Analysis Schemas
class AnalysisTextRequest(BaseModel):
    """Schema for analysing already-decoded document text."""

    text: str = Field(..., min_length=1)
    kind: ContentKindSchema = ContentKindSchema.TEXT


class LegalActResponse(BaseModel):
    """One act or clause referenced by the analysis."""

    name: str
    definition: str = ""
    application: str = ""

    model_config = ConfigDict(from_attributes=True)


class AnalysisResponse(BaseModel):
    """Schema for a structured document analysis."""

    summary: str
    key_points: List[str]
    legal_acts: List[LegalActResponse] = Field(default_factory=list)
    legal_implications: List[str]
    recommendations: List[str]
    content_kind: ContentKindSchema = ContentKindSchema.TEXT
    truncated: bool = False
    filename: Optional[str] = None


# Chat Schemas
class ChatRequest(BaseModel):
    """Schema for a question to the legal assistant."""

    message: str = Field(..., min_length=1, max_length=4000)


class ChatResponse(BaseModel):
    """Schema for the assistant's reply."""

    reply: str
    assistant: str = "Saarthi"


# Health Check Schema
class HealthCheckResponse(BaseModel):
    """Schema for health check response."""

    status: str
    completion_service: str
    timestamp: datetime
