"""Sign-in and session handling for Cloud Archive."""

from cloudarchive.auth.allowlist import AllowList
from cloudarchive.auth.errors import AuthRejected, SignInError
from cloudarchive.auth.google import GoogleSignIn, Identity
from cloudarchive.auth.session_tokens import create_session_token, verify_session_token

__all__ = [
    "AllowList",
    "AuthRejected",
    "GoogleSignIn",
    "Identity",
    "SignInError",
    "create_session_token",
    "verify_session_token",
]
