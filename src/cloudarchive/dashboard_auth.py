"""Authentication middleware and Google sign-in routes for Cloud Archive.

Contains:
- ``session_identity()`` / ``session_user()`` — resolve the signed-in user from
  the session cookie
- ``auth_middleware()`` — HTTP middleware (registered by dashboard.py)
- ``auth_router`` — APIRouter with the Google redirect, OAuth callback and
  logout (POST) endpoints
"""

import logging
import secrets

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse

from cloudarchive.auth import (
    AuthRejected,
    GoogleSignIn,
    Identity,
    SignInError,
    create_session_token,
    verify_session_token,
)
from cloudarchive.config import Settings, get_settings

logger = logging.getLogger(__name__)

auth_router = APIRouter()

SESSION_COOKIE = "cloudarchive_session"
STATE_COOKIE = "cloudarchive_oauth_state"
STATE_TTL_SECONDS = 600

# Routes reachable without a session
EXEMPT_PATHS = (
    "/static",
    "/favicon.ico",
    "/login",
    "/auth/",
    "/api/v1/health",
)


def get_sign_in(settings: Settings | None = None) -> GoogleSignIn:
    """Build the sign-in component from settings (allow-list passed explicitly)."""
    settings = settings or get_settings()
    return GoogleSignIn(
        client_id=settings.google_client_id,
        client_secret=settings.google_client_secret,
        redirect_uri=settings.oauth_redirect_uri,
        allow_list=settings.allow_list(),
    )


def session_identity(request: Request) -> Identity | None:
    """The signed-in user, or None.

    A valid cookie is not enough on its own: the e-mail must still be on the
    allow-list, so removing someone from ALLOWED_USERS ends their session.
    """
    settings = get_settings()
    subject = verify_session_token(request.cookies.get(SESSION_COOKIE), settings.session_secret)
    identity = Identity.from_subject(subject)
    if identity and settings.allow_list().is_user_allowed(identity.email):
        return identity
    return None


def session_user(request: Request) -> str | None:
    """E-mail of the signed-in user, or None."""
    identity = session_identity(request)
    return identity.email if identity else None


# ---------------------------------------------------------------------------
# HTTP auth middleware (registered by dashboard.py via app.middleware)
# ---------------------------------------------------------------------------


async def auth_middleware(request: Request, call_next):
    path = request.url.path
    if any(path.startswith(exempt) for exempt in EXEMPT_PATHS):
        return await call_next(request)

    identity = session_identity(request)
    if identity is None:
        if path.startswith("/api"):
            return JSONResponse(status_code=401, content={"detail": "Unauthorized"})
        return RedirectResponse("/login", status_code=303)

    request.state.user = identity.email
    request.state.user_name = identity.name
    return await call_next(request)


# ---------------------------------------------------------------------------
# Google sign-in
# ---------------------------------------------------------------------------


def _login_redirect(reason: str) -> RedirectResponse:
    response = RedirectResponse(f"/login?error={reason}", status_code=303)
    response.delete_cookie(STATE_COOKIE, path="/auth")
    return response


@auth_router.get("/auth/google")
async def start_google_sign_in():
    """Redirect to the Google consent screen."""
    settings = get_settings()
    sign_in = get_sign_in(settings)
    if not sign_in.configured:
        logger.error("Google sign-in requested but GOOGLE_CLIENT_ID/SECRET are not set")
        return _login_redirect("Configuration")

    nonce = secrets.token_urlsafe(16)
    state = create_session_token(settings.session_secret, nonce, ttl_seconds=STATE_TTL_SECONDS)

    response = RedirectResponse(sign_in.get_auth_url(state=state), status_code=303)
    response.set_cookie(
        key=STATE_COOKIE,
        value=nonce,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/auth",
        max_age=STATE_TTL_SECONDS,
    )
    return response


@auth_router.get("/auth/callback")
async def google_callback(
    request: Request,
    code: str = Query(""),
    state: str = Query(""),
    error: str = Query(""),
):
    """OAuth callback — exchange the code, enforce the allow-list, set the session."""
    settings = get_settings()

    if error:
        logger.info("Google sign-in returned error: %s", error)
        return _login_redirect("SignInFailed")

    nonce = verify_session_token(state, settings.session_secret)
    expected = request.cookies.get(STATE_COOKIE)
    if not nonce or not expected or not secrets.compare_digest(nonce, expected):
        logger.warning("OAuth callback with invalid or expired state")
        return _login_redirect("SignInFailed")

    if not code:
        return _login_redirect("SignInFailed")

    try:
        identity = await get_sign_in(settings).authenticate(code)
    except AuthRejected:
        return _login_redirect(AuthRejected.reason)
    except SignInError:
        return _login_redirect(SignInError.reason)

    session_token = create_session_token(
        settings.session_secret,
        identity.to_subject(),
        ttl_seconds=settings.session_ttl_hours * 3600,
    )
    response = RedirectResponse("/", status_code=303)
    response.set_cookie(
        key=SESSION_COOKIE,
        value=session_token,
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
        path="/",
        max_age=settings.session_ttl_hours * 3600,
    )
    response.delete_cookie(STATE_COOKIE, path="/auth")
    return response


@auth_router.post("/auth/logout")
async def logout(request: Request):
    """Clear the session cookie and forget the user's browsing state."""
    from cloudarchive.hierarchy import get_browser_registry

    user = session_user(request)
    if user:
        get_browser_registry().discard(user)
        logger.info("Signed out %s", user)

    response = RedirectResponse("/login", status_code=303)
    response.delete_cookie(key=SESSION_COOKIE, path="/")
    return response
