# Google sign-in — OAuth 2.0 authorization code flow + userinfo lookup.
# Created: 2026-10-12

from __future__ import annotations

import json
import logging
import urllib.parse
from dataclasses import dataclass

import httpx

from cloudarchive.auth.allowlist import AllowList
from cloudarchive.auth.errors import AuthRejected, SignInError

logger = logging.getLogger(__name__)


GOOGLE_ENDPOINTS: dict[str, str] = {
    "auth_url": "https://accounts.google.com/o/oauth2/v2/auth",
    "token_url": "https://oauth2.googleapis.com/token",
    "userinfo_url": "https://openidconnect.googleapis.com/v1/userinfo",
}

SIGN_IN_SCOPES = ["openid", "email", "profile"]


@dataclass(frozen=True)
class Identity:
    """A signed-in user as reported by Google."""

    email: str
    name: str = ""

    def to_subject(self) -> str:
        """Serialize for a session token subject."""
        return json.dumps({"email": self.email, "name": self.name})

    @classmethod
    def from_subject(cls, subject: str | None) -> Identity | None:
        if not subject:
            return None
        try:
            data = json.loads(subject)
            return cls(email=str(data["email"]), name=str(data.get("name") or ""))
        except (ValueError, TypeError, KeyError, AttributeError):
            return None


class GoogleSignIn:
    """Google OAuth 2.0 sign-in gated by an allow-list.

    Supports:
    - Authorization URL generation
    - Code exchange and userinfo lookup
    - Allow-list enforcement (rejects sign-in, not just the session)
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        allow_list: AllowList,
        timeout: float = 15,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.allow_list = allow_list
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def get_auth_url(self, state: str = "") -> str:
        """Generate the Google consent URL.

        Args:
            state: Signed state value echoed back to the callback (CSRF guard).

        Returns:
            Authorization URL to redirect the user to.
        """
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(SIGN_IN_SCOPES),
            "access_type": "offline",
            "prompt": "select_account",
        }
        if state:
            params["state"] = state

        return f"{GOOGLE_ENDPOINTS['auth_url']}?{urllib.parse.urlencode(params)}"

    async def authenticate(self, code: str) -> Identity:
        """Exchange *code* for tokens and return the allowed identity.

        Raises:
            AuthRejected: the account has no e-mail or is not on the allow-list.
            SignInError: the provider exchange failed.
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(
                    GOOGLE_ENDPOINTS["token_url"],
                    data={
                        "code": code,
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "redirect_uri": self.redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
                resp.raise_for_status()
                access_token = resp.json()["access_token"]

                resp = await client.get(
                    GOOGLE_ENDPOINTS["userinfo_url"],
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                resp.raise_for_status()
                profile = resp.json()
        except (httpx.HTTPError, KeyError, ValueError) as e:
            logger.warning("Google sign-in exchange failed: %s", e)
            raise SignInError("Google sign-in failed") from e

        email = (profile.get("email") or "").strip()
        if not email:
            logger.warning("Google account without e-mail attempted sign-in")
            raise AuthRejected(None)
        if profile.get("email_verified") is False:
            logger.warning("Unverified e-mail %s attempted sign-in", email)
            raise AuthRejected(email)
        if not self.allow_list.is_user_allowed(email):
            logger.warning("Sign-in refused for %s (not on allow-list)", email)
            raise AuthRejected(email)

        logger.info("Signed in %s", email)
        return Identity(email=email.lower(), name=profile.get("name", ""))
