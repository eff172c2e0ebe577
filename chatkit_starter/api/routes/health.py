"""Health check endpoint."""

from fastapi import APIRouter

from chatkit_starter import __version__
from chatkit_starter.config.settings import settings

router = APIRouter(tags=["health"])


@router.get("/api/health")
async def health_check() -> dict:
    return {
        "status": "ok",
        "environment": settings.ENVIRONMENT,
        "version": __version__,
    }
