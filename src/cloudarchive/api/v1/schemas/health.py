# Health schemas.
# Created: 2026-10-12

from __future__ import annotations

from cloudarchive.api.v1.schemas.common import APIResponse


class HealthResponse(APIResponse):
    """Liveness and configuration status."""

    status: str = "ok"
    version: str = ""
    storage_configured: bool = False
    sign_in_configured: bool = False
