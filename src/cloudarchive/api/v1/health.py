# Health router — liveness and configuration summary.
# Created: 2026-10-12

from __future__ import annotations

import logging

from fastapi import APIRouter

from cloudarchive.api.v1.schemas.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def get_health_status():
    """Report liveness and whether storage and sign-in are configured."""
    from cloudarchive import __version__
    from cloudarchive.config import get_settings

    settings = get_settings()
    return HealthResponse(
        version=__version__,
        storage_configured=bool(settings.google_service_account),
        sign_in_configured=bool(settings.google_client_id and settings.google_client_secret),
    )
