"""Health check endpoints."""

from datetime import datetime, timezone
from typing import Dict

from fastapi import APIRouter

from ...core.config import settings

router = APIRouter(prefix="/health", tags=["health"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/")
async def health_check() -> Dict[str, str]:
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": _now(),
        "service": settings.app_name,
        "version": settings.app_version,
    }


@router.get("/live")
async def liveness_check() -> Dict[str, str]:
    """Liveness check."""
    return {
        "status": "alive",
        "timestamp": _now(),
    }
