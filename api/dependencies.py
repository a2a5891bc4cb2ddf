"""
FastAPI dependencies: hosted-service clients and the authenticated user.
"""

from typing import AsyncIterator, Callable, Optional
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from core.airtable import AirtableClient
from core.config import settings
from core.exceptions import AuthenticationError, ConfigurationError, PermissionDeniedError
from core.security import decode_access_token
from models.base import UserRole
from models.user import User
from services.email import EmailService
from services.images import ImageUploader
from services.records import RecordsService
import logging

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


async def get_airtable() -> AsyncIterator[AirtableClient]:
    """One table-service client per request, closed when the request ends."""
    if not settings.airtable_configured:
        raise ConfigurationError(
            "Table service is not configured",
            context={"missing": ["AIRTABLE_API_KEY", "AIRTABLE_BASE_ID"]}
        )
    async with AirtableClient.from_settings() as client:
        yield client


def get_records(client: AirtableClient = Depends(get_airtable)) -> RecordsService:
    return RecordsService(client)


async def get_optional_records() -> AsyncIterator[Optional[RecordsService]]:
    """Like get_records, but yields None when the table service is not configured."""
    if not settings.airtable_configured:
        yield None
        return
    async with AirtableClient.from_settings() as client:
        yield RecordsService(client)


def get_image_uploader() -> ImageUploader:
    return ImageUploader.from_settings()


def get_email_service() -> EmailService:
    return EmailService()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)
) -> User:
    """
    Resolve the caller from the bearer token.

    The token carries id, email, role and name, so no table lookup is made.
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    return User(
        id=payload["sub"],
        email=payload.get("email", ""),
        role=payload.get("role", UserRole.CUSTOMER.value),
        name=payload.get("name", ""),
    )


def require_roles(*roles: UserRole) -> Callable:
    """Dependency factory: the caller must hold one of the roles (admins always pass)."""

    async def check(user: User = Depends(get_current_user)) -> User:
        if not any(user.has_role(role) for role in roles):
            logger.warning(f"User {user.id} ({user.role.value}) denied; requires {[r.value for r in roles]}")
            raise PermissionDeniedError(
                "You do not have permission to access this page",
                context={"role": user.role.value}
            )
        return user

    return check


require_admin = require_roles(UserRole.ADMIN)
require_china_team = require_roles(UserRole.CHINA_TEAM)
require_ghana_team = require_roles(UserRole.GHANA_TEAM)
require_customer = require_roles(UserRole.CUSTOMER)
