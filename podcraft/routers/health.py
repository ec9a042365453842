"""
Health check and error-log endpoints.
"""
from fastapi import APIRouter, Depends, Query
from typing import Dict, Any
from datetime import datetime, timezone
from podcraft import __version__
from podcraft.config import get_settings
from podcraft.dependencies import get_error_classifier
from podcraft.models.schemas import ErrorStatsResponse
from podcraft.utils.error_classifier import ErrorClassifier
from podcraft.utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])
settings = get_settings()

@router.get("/", response_model=Dict[str, Any])
async def health_check(classifier: ErrorClassifier = Depends(get_error_classifier)):
    """Basic health check endpoint."""
    return {
        "status": "healthy" if classifier.is_system_healthy() else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": settings.APP_NAME,
        "version": __version__,
        "providers": settings.configured_services,
    }

@router.get("/errors", response_model=ErrorStatsResponse)
async def get_error_stats(
    limit: int = Query(10, ge=0, le=100, description="Number of recent errors to include"),
    classifier: ErrorClassifier = Depends(get_error_classifier),
):
    """Aggregated view of the recent error log."""
    stats = classifier.error_stats(recent_limit=limit)
    return ErrorStatsResponse(**stats, healthy=classifier.is_system_healthy())

@router.delete("/errors")
async def clear_error_log(classifier: ErrorClassifier = Depends(get_error_classifier)):
    """Clear the error log."""
    cleared = len(classifier.error_log)
    classifier.clear()
    logger.info(f"Cleared {cleared} error log entries via API")
    return {"cleared": cleared, "timestamp": datetime.now(timezone.utc).isoformat()}
