"""
auth/password_policy.py -- Password strength rules.

One implementation shared by registration and password reset. Every rule is
checked independently so the caller can show the user all problems at once
rather than one per round trip.

Rules:
  - at least 8 characters
  - at least one uppercase letter
  - at least one lowercase letter
  - at least one digit
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

MIN_LENGTH = 8

_RULES: list[tuple[re.Pattern, str]] = [
    (re.compile(r"[A-Z]"), "Password must contain at least one uppercase letter"),
    (re.compile(r"[a-z]"), "Password must contain at least one lowercase letter"),
    (re.compile(r"[0-9]"), "Password must contain at least one number"),
]


@dataclass
class PasswordValidationResult:
    is_valid: bool
    errors: list[str] = field(default_factory=list)


def validate_password(password: str) -> PasswordValidationResult:
    """Check password against every rule. Never raises."""
    errors: list[str] = []
    if len(password) < MIN_LENGTH:
        errors.append(f"Password must be at least {MIN_LENGTH} characters long")
    for pattern, message in _RULES:
        if not pattern.search(password):
            errors.append(message)
    return PasswordValidationResult(is_valid=not errors, errors=errors)
