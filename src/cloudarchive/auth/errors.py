# Sign-in errors.
# Created: 2026-10-12

from __future__ import annotations


class SignInError(Exception):
    """The identity provider exchange failed."""

    reason = "SignInFailed"


class AuthRejected(SignInError):
    """The authenticated identity is not permitted to sign in."""

    reason = "AccessDenied"

    def __init__(self, email: str | None = None):
        self.email = email
        super().__init__(f"Sign-in refused for {email or 'account without e-mail'}")
