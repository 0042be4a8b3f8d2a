"""
api/routes/auth.py -- Account REST endpoints.

Routes:
  POST /api/auth/register             -- create account, email verification link
  POST /api/auth/login                -- email/password login; returns session JWT
  GET  /api/auth/verify-email?token=  -- consume a verification token
  POST /api/auth/resend-verification  -- issue a fresh verification token
  POST /api/auth/forgot-password      -- issue a reset token (24 h)
  POST /api/auth/reset-password       -- consume a reset token, set new password
  GET  /api/auth/me                   -- current user info (requires auth)

Security:
  Login and register are rate-limited with LOGIN_LIMIT per client address;
  the recovery endpoints with RECOVERY_LIMIT.
  Login failures use one message for unknown email and wrong password.
  resend-verification and forgot-password answer the same way whether or
  not the account exists.
  Cache-Control: no-store on login responses.

Handlers are plain `def`: bcrypt and the SQLAlchemy store are blocking, so
FastAPI runs them in its threadpool.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response

from api.limiter import LOGIN_LIMIT, RECOVERY_LIMIT, limiter
from api.models import (
    EmailRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    UserPublic,
)
from auth.dependencies import get_auth_service, get_current_user_id
from auth.service import FORGOT_MESSAGE, RESEND_MESSAGE, AuthService

# Auth policy:
# - everything under /auth is public except GET /auth/me (get_current_user_id)
router = APIRouter()


@limiter.limit(LOGIN_LIMIT)
@router.post("/auth/register", response_model=RegisterResponse, status_code=201)
def register(
    request: Request,
    body: RegisterRequest,
    auth: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """Create an unverified account and send the verification email.

    400 if the email is malformed or the password breaks any policy rule
    (every broken rule is listed); 409 if the email is already registered.
    """
    user_id = auth.register(body.email, body.password)
    return RegisterResponse(
        message="User registered successfully. Please check your email to verify your account.",
        user_id=user_id,
    )


@limiter.limit(LOGIN_LIMIT)
@router.post("/auth/login", response_model=LoginResponse)
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    auth: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """Exchange email and password for a 7-day session token.

    401 bad_credentials for unknown email or wrong password (same message);
    403 email_not_verified when the password is right but the email is not
    yet confirmed.
    """
    response.headers["Cache-Control"] = "no-store"
    token, user = auth.login(body.email, body.password)
    return LoginResponse(
        token=token,
        expires_in=auth.settings.token_expire_seconds,
        user=UserPublic(id=user.id, email=user.email),
    )


@router.get("/auth/verify-email", response_model=MessageResponse)
def verify_email(
    token: str = Query(min_length=1, max_length=128),
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Mark the email owning this token as verified. The token is single-use."""
    auth.verify_email(token)
    return MessageResponse(message="Email verified successfully. You can now login.")


@limiter.limit(RECOVERY_LIMIT)
@router.post("/auth/resend-verification", response_model=MessageResponse)
def resend_verification(
    request: Request,
    body: EmailRequest,
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    auth.resend_verification(body.email)
    return MessageResponse(message=RESEND_MESSAGE)


@limiter.limit(RECOVERY_LIMIT)
@router.post("/auth/forgot-password", response_model=MessageResponse)
def forgot_password(
    request: Request,
    body: EmailRequest,
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    auth.forgot_password(body.email)
    return MessageResponse(message=FORGOT_MESSAGE)


@limiter.limit(RECOVERY_LIMIT)
@router.post("/auth/reset-password", response_model=MessageResponse)
def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    auth: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Set a new password using a reset token. The token is single-use.

    400 for a weak password or an expired token; 404 for an unknown token.
    """
    auth.reset_password(body.token, body.new_password)
    return MessageResponse(message="Password reset successfully. You can now login.")


@router.get("/auth/me", response_model=MeResponse)
def me(
    user_id: int = Depends(get_current_user_id),
    auth: AuthService = Depends(get_auth_service),
) -> MeResponse:
    """Return identity information for the currently authenticated user."""
    return MeResponse.from_user(auth.get_user(user_id))
