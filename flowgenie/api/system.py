"""System API: health check."""

from datetime import datetime, timezone

from fastapi import APIRouter

from flowgenie import __version__

router = APIRouter(tags=["system"])


@router.get("/health")
def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "service": "FlowGenie Backend API",
        "version": __version__,
    }
