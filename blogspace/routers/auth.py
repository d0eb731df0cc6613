"""Authentication API endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from blogspace.database import get_db
from blogspace.dependencies import CurrentUser, get_current_user
from blogspace.rate_limit import limiter
from blogspace.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    TokenVerifyResponse,
    UpdatePasswordRequest,
)
from blogspace.services.auth import AuthResult, get_auth_service
from blogspace.services.email import DeliveryError, get_email_service
from blogspace.services.jwt import get_jwt_service

logger = logging.getLogger("blogspace")

router = APIRouter(prefix="/api/v1/auth", tags=["Authentication"])

FORGOT_PASSWORD_MESSAGE = "If an account exists with that email, a reset code has been sent to it."


def _token_response(result: AuthResult) -> TokenResponse:
    token = get_jwt_service().create_token(user_id=result.user_id, is_admin=result.is_admin)  # type: ignore[arg-type]
    return TokenResponse(
        id=result.user_id,  # type: ignore[arg-type]
        username=result.username,  # type: ignore[arg-type]
        email=result.email,  # type: ignore[arg-type]
        is_admin=result.is_admin,
        token=token,
    )


@router.post("/register", response_model=TokenResponse, status_code=201)
@limiter.limit("5/minute")
def register(request: Request, body: RegisterRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Register a new user account."""
    auth_service = get_auth_service()
    result = auth_service.register(db, body.username, body.email, body.password)

    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    return _token_response(result)


@router.post("/login", response_model=TokenResponse)
@limiter.limit("10/minute")
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Authenticate and receive a bearer token."""
    auth_service = get_auth_service()
    result = auth_service.authenticate(db, body.email, body.password)

    if not result.success:
        raise HTTPException(status_code=401, detail=result.error)

    return _token_response(result)


@router.get("/verify", response_model=TokenVerifyResponse)
def verify_token(token: str) -> TokenVerifyResponse:
    """Verify a bearer token and return the identity it carries."""
    identity = get_jwt_service().verify_token(token)

    if identity is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return TokenVerifyResponse(valid=True, user_id=identity.user_id, is_admin=identity.is_admin)


@router.put("/update-password", response_model=MessageResponse)
@limiter.limit("5/minute")
def update_password(
    request: Request,
    body: UpdatePasswordRequest,
    user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Change the caller's password."""
    auth_service = get_auth_service()
    result = auth_service.change_password(db, user.user_id, body.current_password, body.new_password)

    if not result.success:
        status_code = 404 if result.error == "User not found" else 400
        raise HTTPException(status_code=status_code, detail=result.error)

    return MessageResponse(message="Password updated successfully")


@router.post("/forgot-password", response_model=MessageResponse)
@limiter.limit("3/minute")
def forgot_password(request: Request, body: ForgotPasswordRequest, db: Session = Depends(get_db)) -> MessageResponse:
    """Email a short-lived reset code. The response never reveals whether the account exists."""
    auth_service = get_auth_service()
    try:
        auth_service.request_password_reset(db, body.email, get_email_service())
    except DeliveryError:
        raise HTTPException(
            status_code=503,
            detail="Could not send the reset email. Please try again later.",
        ) from None

    return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)


@router.post("/reset-password", response_model=TokenResponse)
@limiter.limit("5/minute")
def reset_password(request: Request, body: ResetPasswordRequest, db: Session = Depends(get_db)) -> TokenResponse:
    """Reset password using a valid code. Returns a token for auto-login."""
    auth_service = get_auth_service()
    result = auth_service.reset_password(db, body.email, body.code, body.new_password)

    if not result.success:
        raise HTTPException(status_code=400, detail=result.error)

    return _token_response(result)
