"""
auth/service.py -- Account lifecycle: registration, login, email verification,
and password recovery.

AuthService receives its collaborators in the constructor (UserStore, a mailer
with send_verification_email / send_password_reset_email, and Settings). Routes
get the instance from app.state through a FastAPI dependency, and tests can
build one around an in-memory store and a recording mailer.

Anti-enumeration:
  resend_verification() and forgot_password() return normally whether or not
  the account exists; the route always answers with the same generic message.
  The one exception is resend_verification() on an already-verified account,
  which reports already_verified -- an accepted disclosure.

Email delivery is best-effort on every path. A failed send is logged and the
operation still succeeds; the user can ask for another email. Surfacing the
failure on forgot-password would also leak account existence through a 500.

Single-use tokens:
  Consumption goes through conditional UPDATEs in UserStore keyed on the token
  value. If the UPDATE matches no row, someone else consumed the token between
  our lookup and our write, and the caller sees the same not-found error as
  for an unknown token.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.password_policy import validate_password
from auth.store import UserStore, normalize_email
from auth.tokens import (
    authenticate_user,
    create_session_token,
    generate_expiry,
    generate_token,
    hash_password,
)
from core.config import Settings
from core.errors import Conflict, Forbidden, NotFound, Unauthenticated, ValidationFailed

logger = logging.getLogger("flashcards.auth")

RESEND_MESSAGE = "If the email exists, a verification email will be sent."
FORGOT_MESSAGE = "If the email exists, a password reset link will be sent."


class AuthService:
    def __init__(self, store: UserStore, mailer, settings: Settings) -> None:
        self.store = store
        self.mailer = mailer
        self.settings = settings

    # ------------------------------------------------------------------
    # Registration / login
    # ------------------------------------------------------------------

    def register(self, email: str, password: str) -> int:
        """Create an unverified account and email a verification link.

        Returns the new user id. Raises ValidationFailed (weak password) or
        Conflict (email already registered, any casing).
        """
        _require_strong_password(password)
        email = normalize_email(email)

        if self.store.get_by_email(email) is not None:
            raise Conflict("Email already registered.", code="email_taken")

        verification_token = generate_token()
        try:
            user_id = self.store.create_user(
                User(
                    email=email,
                    password_hash=hash_password(password),
                    verification_token=verification_token,
                )
            )
        except IntegrityError as exc:
            # Lost a race with a concurrent registration for the same email.
            raise Conflict("Email already registered.", code="email_taken") from exc

        logger.info("Registered user %d", user_id)
        self._deliver(self.mailer.send_verification_email, email, verification_token)
        return user_id

    def login(self, email: str, password: str) -> tuple[str, User]:
        """Return (session_token, user) for valid credentials of a verified account.

        Unknown email and wrong password produce the same Unauthenticated error.
        Correct credentials on an unverified account raise Forbidden.
        """
        user = authenticate_user(self.store, email, password)
        if user is None:
            raise Unauthenticated("Invalid email or password.", code="bad_credentials")
        if not user.email_verified:
            raise Forbidden(
                "Please verify your email address before logging in.",
                code="email_not_verified",
            )
        token = create_session_token(user.id, expire_seconds=self.settings.token_expire_seconds)
        logger.info("User %d logged in", user.id)
        return token, user

    # ------------------------------------------------------------------
    # Email verification
    # ------------------------------------------------------------------

    def verify_email(self, token: str) -> None:
        user = self.store.get_by_verification_token(token)
        if user is None:
            raise NotFound("Invalid or expired verification token.", code="invalid_token")
        if user.email_verified:
            raise ValidationFailed("Email already verified.", code="already_verified")
        if not self.store.mark_email_verified(user.id, token):
            raise NotFound("Invalid or expired verification token.", code="invalid_token")
        logger.info("User %d verified their email", user.id)

    def resend_verification(self, email: str) -> None:
        user = self.store.get_by_email(email)
        if user is None:
            return
        if user.email_verified:
            raise ValidationFailed("Email already verified.", code="already_verified")
        token = generate_token()
        self.store.set_verification_token(user.id, token)
        self._deliver(self.mailer.send_verification_email, user.email, token)

    # ------------------------------------------------------------------
    # Password recovery
    # ------------------------------------------------------------------

    def forgot_password(self, email: str) -> None:
        """Issue a reset token (overwriting any earlier one) if the account exists."""
        user = self.store.get_by_email(email)
        if user is None:
            return
        token = generate_token()
        expiry = generate_expiry(self.settings.reset_token_expire_hours)
        self.store.set_reset_token(user.id, token, expiry.isoformat())
        logger.info("Password reset requested for user %d", user.id)
        self._deliver(self.mailer.send_password_reset_email, user.email, token)

    def reset_password(self, token: str, new_password: str) -> None:
        """Replace the password of the account holding this reset token.

        An expired token is reported but left in place; the next
        forgot-password request overwrites it.
        """
        _require_strong_password(new_password)

        user = self.store.get_by_reset_token(token)
        if user is None or not user.reset_token_expiry:
            raise NotFound("Invalid or expired reset token.", code="invalid_token")
        if datetime.now(timezone.utc) > _parse_expiry(user.reset_token_expiry):
            raise ValidationFailed("Reset token has expired.", code="token_expired")

        if not self.store.consume_reset_token(user.id, token, hash_password(new_password)):
            raise NotFound("Invalid or expired reset token.", code="invalid_token")
        logger.info("Password reset completed for user %d", user.id)

    # ------------------------------------------------------------------
    # Lookups for authenticated routes
    # ------------------------------------------------------------------

    def get_user(self, user_id: int) -> User:
        user = self.store.get_by_id(user_id)
        if user is None:
            raise NotFound("User not found.")
        return user

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _deliver(self, send: Callable[[str, str], None], email: str, token: str) -> None:
        try:
            send(email, token)
        except Exception:
            logger.exception("Failed to send %s", getattr(send, "__name__", "email"))


def _require_strong_password(password: str) -> None:
    result = validate_password(password)
    if not result.is_valid:
        raise ValidationFailed(
            "Password does not meet requirements.",
            code="weak_password",
            errors=result.errors,
        )


def _parse_expiry(value: str) -> datetime:
    """Parse a stored ISO 8601 expiry; naive values are treated as UTC."""
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt
