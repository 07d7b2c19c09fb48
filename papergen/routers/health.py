"""
Health check endpoint.
"""
from fastapi import APIRouter
from datetime import datetime, timezone
import logging

from papergen.config import settings
from papergen.models.schemas import HealthCheckResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=HealthCheckResponse)
async def health_check():
    """
    Health check endpoint to verify service status.

    Returns:
        HealthCheckResponse with the configured model and whether a
        server-side API key is available
    """
    api_key_configured = bool(settings.GEMINI_API_KEY.strip())
    if not api_key_configured:
        logger.debug("Health check: no server-side GEMINI_API_KEY configured")

    return HealthCheckResponse(
        status="healthy" if api_key_configured else "degraded",
        gemini_model=settings.GEMINI_MODEL,
        api_key_configured=api_key_configured,
        timestamp=datetime.now(timezone.utc),
    )
