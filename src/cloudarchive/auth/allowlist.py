# Allow-list — e-mail addresses permitted to sign in.
# Created: 2026-10-12

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class AllowList:
    """Explicit set of permitted e-mail addresses (stored lowercased)."""

    emails: frozenset[str] = frozenset()

    @classmethod
    def from_string(cls, raw: str | None, separator: str = ";") -> AllowList:
        """Parse ``"a@x.com; b@y.com"``; blanks are dropped, case is folded."""
        emails = {part.strip().lower() for part in (raw or "").split(separator)}
        emails.discard("")
        return cls(frozenset(emails))

    def is_user_allowed(self, email: str | None) -> bool:
        if not email:
            return False
        return email.strip().lower() in self.emails

    def __contains__(self, email: object) -> bool:
        return isinstance(email, str) and self.is_user_allowed(email)

    def __len__(self) -> int:
        return len(self.emails)
