"""
Health Routes
=============

Liveness probe.
"""

from fastapi import APIRouter

from svg2png.config.settings import get_settings
from svg2png.models.schemas import HealthStatus

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthStatus)
async def health_check() -> HealthStatus:
    """Report that the process is alive."""
    return HealthStatus(version=get_settings().app_version)
