"""
auth/tokens.py -- Session JWTs, password hashing, and one-time token utilities.

Security design decisions:
  JWT: python-jose with HS256. Session tokens are signed with SECRET_KEY and
       carry only the user id (sub) plus expiry. decode_session_token() returns
       None on any verification failure; the dependency layer turns that into
       a 403. A missing signing key is different: it raises ConfigurationError
       (500) because no token could ever be valid.

  Passwords: bcrypt, called directly. The _DUMMY_HASH constant enables timing
       equalization in authenticate_user() so response time does not reveal
       whether an email is registered.

  One-time tokens: secrets.token_hex() -- CSPRNG output, 32 bytes (64 hex
       chars) by default. Used for email verification and password reset.

Layer rule: no imports from api/, study/, or notify/. Import from core/ is
allowed -- core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from core.config import get_settings
from core.errors import ConfigurationError

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("flashcards.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------


def hash_password(plain: str) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    bcrypt silently truncates input beyond 72 bytes. The request models cap
    passwords at 72 UTF-8 bytes so nothing is silently dropped.
    """
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


# Computed once at module load so the first login attempt is not measurably
# slower than later ones.
_DUMMY_HASH: str = hash_password("flashcards_timing_dummy")


# ---------------------------------------------------------------------------
# One-time tokens (verification / reset)
# ---------------------------------------------------------------------------


def generate_token(byte_length: int = 32) -> str:
    """Return a cryptographically random token as 2 * byte_length hex chars."""
    return secrets.token_hex(byte_length)


def generate_expiry(hours: int = 24) -> datetime:
    """Return the current UTC time advanced by the given number of hours."""
    return datetime.now(timezone.utc) + timedelta(hours=hours)


# ---------------------------------------------------------------------------
# Session JWT encode / decode
# ---------------------------------------------------------------------------


def _signing_key() -> str:
    if not _settings.secret_key:
        logger.error("SECRET_KEY is not configured; cannot sign or verify session tokens")
        raise ConfigurationError("Server configuration error.")
    return _settings.secret_key


def create_session_token(user_id: int, expire_seconds: int = 0) -> str:
    """Encode a signed JWT whose only identity claim is the user id.

    Args:
        user_id:        Numeric user ID stored in the DB.
        expire_seconds: Validity window in seconds. If 0 (default), uses
                        Settings.token_expire_seconds (7 days).
    """
    duration = expire_seconds if expire_seconds > 0 else _settings.token_expire_seconds
    expire = datetime.now(timezone.utc) + timedelta(seconds=duration)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, _signing_key(), algorithm=_ALGORITHM)


def decode_session_token(token: str) -> int | None:
    """Verify a session JWT and return the embedded user id, or None.

    None covers bad signatures, malformed tokens, expiry, and a missing or
    non-numeric sub claim. Raises ConfigurationError if no signing key is set.
    """
    key = _signing_key()
    try:
        payload = jwt.decode(token, key, algorithms=[_ALGORITHM])
    except JWTError:
        return None
    sub = payload.get("sub")
    if sub is None:
        return None
    try:
        return int(sub)
    except (TypeError, ValueError):
        return None


# ---------------------------------------------------------------------------
# Credential check (constant-time with respect to user existence)
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Check an email/password pair with timing equalization.

    Always runs bcrypt whether or not the user exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real hash

    Returns the User on success, None on any failure. Email verification state
    is not checked here; the caller decides how to report it.
    """
    user = store.get_by_email(email)
    if user is None:
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
