"""
Health check routes.

This module reports application liveness and the configured answer mode, and
exposes a connectivity check for the generative model.
"""

from datetime import datetime
from typing import Any, Dict
import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from clientqa.config.settings import settings
from clientqa.services.orchestrator_service import AnswerOrchestrator

logger = structlog.get_logger(__name__)

router = APIRouter()


class HealthStatus(BaseModel):
    """Health status response model."""

    status: str
    message: str
    timestamp: datetime
    version: str
    environment: str
    mode: str
    uptime_seconds: float


# Track application start time for uptime calculation
app_start_time = datetime.utcnow()


def get_orchestrator() -> AnswerOrchestrator:
    """Get the answer orchestrator from application state."""
    from clientqa.app import app_state

    orchestrator = getattr(app_state, "orchestrator", None)
    if not orchestrator:
        raise HTTPException(status_code=503, detail="Answer service not available")
    return orchestrator


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """
    Basic health check endpoint.

    Returns application status without calling the model.
    """
    from clientqa.app import app_state

    config = app_state.assistant_config
    return HealthStatus(
        status="OK",
        message=f"Server is running with SQLite and {config.mode_label if config else 'no answer service'}",
        timestamp=datetime.utcnow(),
        version=settings.version,
        environment=settings.environment,
        mode=config.mode_label if config else "unavailable",
        uptime_seconds=(datetime.utcnow() - app_start_time).total_seconds(),
    )


@router.get("/test-model")
async def test_model(orchestrator: AnswerOrchestrator = Depends(get_orchestrator)) -> Dict[str, Any]:
    """Check the configured answer path; reports the free tier without calling the model."""
    result = await orchestrator.test_connection()
    logger.info("Model connection test completed", success=result.get("success"), mode=orchestrator.mode)
    return result
