# Shared FastAPI dependencies for the API layer.
# Created: 2026-10-12

from __future__ import annotations

from fastapi import Depends, HTTPException, Request

from cloudarchive.auth import Identity
from cloudarchive.hierarchy import BrowserRegistry, BucketBrowser, get_browser_registry
from cloudarchive.storage import GCSClient, get_storage_client


def require_identity(request: Request) -> Identity:
    """FastAPI dependency returning the signed-in user.

    The auth middleware normally resolves the session first and stashes it
    on ``request.state``; routers mounted without the middleware (tests, the
    API-only app) fall back to reading the cookie here.
    """
    from cloudarchive.dashboard_auth import session_identity

    email = getattr(request.state, "user", None)
    if email:
        return Identity(email=email, name=getattr(request.state, "user_name", ""))
    identity = session_identity(request)
    if identity is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return identity


def require_user(identity: Identity = Depends(require_identity)) -> str:
    """FastAPI dependency returning the signed-in e-mail."""
    return identity.email


def get_storage() -> GCSClient:
    return get_storage_client()


def get_registry() -> BrowserRegistry:
    return get_browser_registry()


def get_browser(
    user: str = Depends(require_user),
    registry: BrowserRegistry = Depends(get_registry),
) -> BucketBrowser:
    """The signed-in user's bucket browser."""
    return registry.get(user)
