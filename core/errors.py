"""
core/errors.py -- Application error taxonomy.

Services raise these; api/main.py owns the single exception handler that turns
them into the JSON error envelope. Each class carries its HTTP status so the
mapping lives in one place instead of being repeated in every route.

  ValidationFailed    400  malformed, missing or oversized input
  Unauthenticated     401  missing session token or bad credentials
  Forbidden           403  valid session but not allowed (or bad/expired token)
  NotFound            404  resource or token does not exist
  Conflict            409  duplicate email
  ConfigurationError  500  server misconfiguration (e.g. no signing key)

Layer rule: core/ imports nothing from the rest of the project.
"""

from __future__ import annotations

from typing import Optional


class AppError(Exception):
    """Base class for errors that are safe to show to API clients.

    message -- human-readable summary.
    code    -- machine-readable code; defaults to the class default_code.
    errors  -- optional list of every violated rule (validation failures).
    """

    status_code: int = 500
    default_code: str = "internal_error"

    def __init__(self, message: str, code: Optional[str] = None, errors: Optional[list[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.errors = errors


class ValidationFailed(AppError):
    status_code = 400
    default_code = "validation_error"


class Unauthenticated(AppError):
    status_code = 401
    default_code = "unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_code = "forbidden"


class NotFound(AppError):
    status_code = 404
    default_code = "not_found"


class Conflict(AppError):
    status_code = 409
    default_code = "conflict"


class ConfigurationError(AppError):
    status_code = 500
    default_code = "configuration_error"
