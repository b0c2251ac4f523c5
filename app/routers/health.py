"""
Health check endpoint.
"""
from fastapi import APIRouter, Depends
from datetime import datetime
import logging

from app.dependencies.services import get_completion_client
from app.models.schemas import HealthCheckResponse
from app.services.completion_client import GeminiClient

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check(client: GeminiClient = Depends(get_completion_client)):
    """
    Health check endpoint to verify system status.

    Returns:
        HealthCheckResponse with status of the Gemini completion service
    """
    completion_status = "ok"
    try:
        if not await client.check_health():
            completion_status = "error"
    except Exception as e:
        logger.error(f"Completion service health check failed: {e}")
        completion_status = "error"

    overall_status = "healthy" if completion_status == "ok" else "degraded"

    return HealthCheckResponse(
        status=overall_status,
        completion_service=completion_status,
        timestamp=datetime.utcnow()
    )
