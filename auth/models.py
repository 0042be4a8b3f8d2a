"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in study/models.py -- dataclasses own domain shape; stores and services do
the work.

Layer rule: no imports from api/, study/, or notify/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered account.

    email is always stored lower-cased; the store normalizes on write and on
    lookup so matching is case-insensitive.

    verification_token is set at registration (and on resend) and cleared when
    email_verified flips to True. reset_token / reset_token_expiry are set by
    forgot-password and cleared after a successful reset. Both tokens are
    UNIQUE in the store.

    id is None before the record is written to the database.
    """

    email: str
    password_hash: str
    id: int | None = None
    email_verified: bool = False
    verification_token: str | None = None
    reset_token: str | None = None
    reset_token_expiry: str | None = None  # ISO 8601 UTC
    created_at: str | None = None
