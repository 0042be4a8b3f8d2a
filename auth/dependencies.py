"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

get_current_user_id() is the session verification step in front of every
protected route:

  no "Authorization: Bearer <token>" header  -> 401 unauthorized
  bad signature / malformed / expired token   -> 403 invalid_token
  SECRET_KEY missing                          -> 500 configuration_error
  otherwise                                   -> the embedded user id

get_auth_service() hands routes the AuthService built in the app lifespan.

Layer rule: no imports from api/, study/, or notify/.
  auth/dependencies.py may import from fastapi (for Request) because this
  module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import Request

from auth.service import AuthService
from auth.tokens import decode_session_token
from core.errors import Forbidden, Unauthenticated


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    scheme, _, token = auth_header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_current_user_id(request: Request) -> int:
    """Require a valid session token and return the caller's user id.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(user_id: int = Depends(get_current_user_id)): ...
    """
    token = _bearer_token(request)
    if token is None:
        raise Unauthenticated("Access token required.")
    user_id = decode_session_token(token)
    if user_id is None:
        raise Forbidden("Invalid or expired token.", code="invalid_token")
    return user_id


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service
