# Auth schemas.
# Created: 2026-10-12

from __future__ import annotations

from cloudarchive.api.v1.schemas.common import APIResponse


class MeResponse(APIResponse):
    """The signed-in user."""

    email: str
    name: str = ""
