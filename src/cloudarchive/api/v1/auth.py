# Auth router — signed-in identity.
# Created: 2026-10-12
#
# The sign-in flow itself (redirects and cookies) lives in dashboard_auth.

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from cloudarchive.api.deps import require_identity
from cloudarchive.api.v1.schemas.auth import MeResponse
from cloudarchive.auth import Identity

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])


@router.get("/me", response_model=MeResponse)
async def get_me(identity: Identity = Depends(require_identity)):
    """Return the signed-in user's e-mail and display name."""
    return MeResponse(email=identity.email, name=identity.name)
