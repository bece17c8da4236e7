"""HMAC-based stateless session tokens with TTL.

Token format: ``{b64url(subject)}:{expires_unix}:{hex_hmac}``

The server-side session secret is the HMAC key, so rotating the secret
instantly invalidates every outstanding session cookie and OAuth state
value. No server-side session store is required.
"""

import base64
import binascii
import hashlib
import hmac
import time

__all__ = ["create_session_token", "verify_session_token"]


def create_session_token(secret: str, subject: str, ttl_seconds: int = 24 * 3600) -> str:
    """Issue a token for *subject* (an e-mail, or an OAuth state nonce).

    Expires after *ttl_seconds*.
    """
    encoded = base64.urlsafe_b64encode(subject.encode()).decode().rstrip("=")
    expires = str(int(time.time()) + ttl_seconds)
    sig = _sign(secret, f"{encoded}:{expires}")
    return f"{encoded}:{expires}:{sig}"


def verify_session_token(token: str | None, secret: str) -> str | None:
    """Return the token's subject if valid and not expired, else None."""
    if not token:
        return None
    parts = token.split(":")
    if len(parts) != 3:
        return None

    encoded, expires_str, sig = parts
    try:
        expires = int(expires_str)
    except ValueError:
        return None

    if time.time() > expires:
        return None

    expected = _sign(secret, f"{encoded}:{expires_str}")
    if not hmac.compare_digest(sig, expected):
        return None

    try:
        padding = "=" * (-len(encoded) % 4)
        return base64.urlsafe_b64decode(encoded + padding).decode()
    except (binascii.Error, UnicodeDecodeError):
        return None


def _sign(key: str, message: str) -> str:
    return hmac.new(key.encode(), message.encode(), hashlib.sha256).hexdigest()
