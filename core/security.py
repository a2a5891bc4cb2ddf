"""
Password hashing and signed tokens.

Passwords are stored as bcrypt hashes in the Users table. Sessions are
stateless HS256 JWTs; password-reset links carry a short-lived JWT with
purpose "reset".
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from core.config import DEFAULT_SECRET_KEY, settings
from core.exceptions import AuthenticationError, ConfigurationError
import logging

logger = logging.getLogger(__name__)

ACCESS_PURPOSE = "access"
RESET_PURPOSE = "reset"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.PASSWORD_BCRYPT_ROUNDS,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Return False for a missing or malformed hash instead of raising."""
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.warning(f"Password hash could not be verified: {e}")
        return False


def _signing_key() -> str:
    if settings.ENVIRONMENT != "development" and settings.SECRET_KEY == DEFAULT_SECRET_KEY:
        raise ConfigurationError(
            "SECRET_KEY must be set outside development",
            context={"environment": settings.ENVIRONMENT},
        )
    return settings.SECRET_KEY


def _encode(claims: Dict[str, Any], expires_delta: timedelta) -> str:
    now = datetime.utcnow()
    payload = dict(claims)
    payload["iat"] = int(now.timestamp())
    payload["exp"] = int((now + expires_delta).timestamp())
    return jwt.encode(payload, _signing_key(), algorithm=settings.JWT_ALGORITHM)


def _decode(token: str, purpose: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, _signing_key(), algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise AuthenticationError("Invalid or expired token", original_exception=e)

    if payload.get("purpose") != purpose:
        raise AuthenticationError("Token cannot be used for this action", context={"purpose": purpose})
    return payload


def create_access_token(
    user_id: str,
    email: str,
    role: str,
    name: str = "",
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a session token for a logged-in user.

    Args:
        user_id: Users table record id
        email: Login email
        role: UserRole value
        name: Display name
        expires_delta: Custom lifetime (defaults to ACCESS_TOKEN_EXPIRE_MINUTES)
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {
        "sub": user_id,
        "email": email,
        "role": role,
        "name": name,
        "purpose": ACCESS_PURPOSE,
    }
    return _encode(claims, expires_delta)


def decode_access_token(token: str) -> Dict[str, Any]:
    return _decode(token, ACCESS_PURPOSE)


def create_reset_token(email: str, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.RESET_TOKEN_EXPIRE_MINUTES)
    return _encode({"sub": email, "purpose": RESET_PURPOSE}, expires_delta)


def decode_reset_token(token: str) -> str:
    """Return the email a reset token was issued for."""
    return _decode(token, RESET_PURPOSE)["sub"]
