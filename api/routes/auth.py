"""
Login, sign-up and password endpoints
"""

from fastapi import APIRouter, Depends, Request, status
from typing import Optional
from api.dependencies import get_current_user, get_email_service, get_optional_records, get_records
from core.config import settings
from core.exceptions import AuthenticationError, ConfigurationError
from core.security import create_access_token, create_reset_token, decode_reset_token, verify_password
from models.base import UserRole
from models.user import User
from schemas.api import ForgotPasswordResponse, MessageResponse, TokenResponse
from schemas.requests import (
    ChangePasswordRequest,
    FirstLoginUpdate,
    ForgotPasswordRequest,
    LoginRequest,
    ResetPasswordRequest,
    SignupRequest,
)
from services.email import EmailService
from services.records import RecordsService
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["Auth"])

INVALID_CREDENTIALS = "Invalid email or password"


def demo_user(email: str) -> User:
    """Synthetic account for local development without a table service."""
    local_part = email.split("@")[0]
    lowered = email.lower()
    if "admin" in lowered:
        role = UserRole.ADMIN
    elif "china" in lowered:
        role = UserRole.CHINA_TEAM
    elif "ghana" in lowered:
        role = UserRole.GHANA_TEAM
    else:
        role = UserRole.CUSTOMER
    return User(
        id=f"demo-{uuid.uuid4().hex[:12]}",
        name=local_part[:1].upper() + local_part[1:],
        email=email,
        role=role,
    )


def issue_token(user: User) -> TokenResponse:
    token = create_access_token(user.id, user.email, user.role.value, name=user.name)
    return TokenResponse(
        access_token=token,
        user=user,
        requires_password_change=user.is_first_login,
    )


@router.post("/login", response_model=TokenResponse)
async def login(
    request: Request,
    body: LoginRequest,
    records: Optional[RecordsService] = Depends(get_optional_records)
):
    """
    Exchange email and password for a bearer token.

    In development, with no table service configured, any credentials log in
    as a demo user whose role is taken from the email address.
    """
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")
    logger.info(f"[{request_id}] POST /auth/login")

    if records is None:
        if settings.ENVIRONMENT != "development":
            raise ConfigurationError("Table service is not configured")
        user = demo_user(body.email.strip().lower())
        logger.warning(f"[{request_id}] Table service not configured, demo login as {user.role.value}")
        return issue_token(user)

    user = await records.get_user_by_email(body.email)
    if not user or not verify_password(body.password, user.password):
        raise AuthenticationError(INVALID_CREDENTIALS)

    logger.info(f"[{request_id}] User {user.id} logged in as {user.role.value}")
    return issue_token(user)


@router.post("/signup", response_model=User, status_code=status.HTTP_201_CREATED)
async def signup(body: SignupRequest, records: RecordsService = Depends(get_records)):
    """Self-service customer registration."""
    return await records.create_user(
        name=body.name,
        email=body.email,
        password=body.password,
        role=UserRole.CUSTOMER,
        phone=body.phone,
        address=body.address,
        created_by_team=False,
    )


@router.get("/me", response_model=User)
async def me(user: User = Depends(get_current_user)):
    return user


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    records: RecordsService = Depends(get_records)
):
    await records.update_user_password(user.id, body.new_password)
    return MessageResponse(message="Password changed successfully")


@router.post("/first-login", response_model=User)
async def set_first_login(
    body: FirstLoginUpdate,
    user: User = Depends(get_current_user),
    records: RecordsService = Depends(get_records)
):
    return await records.toggle_user_first_login(user.id, body.is_first_login)


@router.post("/forgot-password", response_model=ForgotPasswordResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    records: RecordsService = Depends(get_records),
    email_service: EmailService = Depends(get_email_service)
):
    user = await records.request_password_reset(body.email)
    if not user:
        return ForgotPasswordResponse(
            message="No account found with this email address",
            account_exists=False,
        )

    token = create_reset_token(user.email)
    reset_url = f"{settings.APP_BASE_URL}/reset-password?token={token}"
    email_sent = await email_service.send_password_reset_email(user.name, user.email, reset_url)

    return ForgotPasswordResponse(
        message="Password reset instructions have been sent to your email",
        account_exists=True,
        email_sent=email_sent,
    )


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(body: ResetPasswordRequest, records: RecordsService = Depends(get_records)):
    email = decode_reset_token(body.token)
    user = await records.get_user_by_email(email)
    if not user:
        raise AuthenticationError("Invalid or expired token")

    await records.update_user_password(user.id, body.new_password)
    logger.info(f"Password reset completed for user {user.id}")
    return MessageResponse(message="Password has been reset. You can now log in.")
