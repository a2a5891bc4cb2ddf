"""
Application configuration using Pydantic Settings
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Optional, Tuple


REQUIRED_SETTINGS = (
    "AIRTABLE_API_KEY",
    "AIRTABLE_BASE_ID",
    "CLOUDINARY_CLOUD_NAME",
    "CLOUDINARY_UPLOAD_PRESET",
)

# Reported as missing outside development
DEFAULT_SECRET_KEY = "change-me-in-production"


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    # Hosted table service (Airtable)
    AIRTABLE_API_KEY: str = ""
    AIRTABLE_BASE_ID: str = ""
    AIRTABLE_API_URL: str = "https://api.airtable.com/v0"

    # Hosted image service (Cloudinary, unsigned uploads)
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_UPLOAD_PRESET: str = ""
    CLOUDINARY_API_KEY: Optional[str] = None
    CLOUDINARY_FOLDER: str = "afreq"

    # Mail delivery
    MAIL_ENDPOINT_URL: Optional[str] = None
    EMAILJS_SERVICE_ID: Optional[str] = None
    EMAILJS_TEMPLATE_ID: Optional[str] = None
    EMAILJS_PUBLIC_KEY: Optional[str] = None
    EMAILJS_API_URL: str = "https://api.emailjs.com/api/v1.0/email/send"
    MAIL_FROM_NAME: str = "AFREQ Logistics"

    # Frontend origin used in login and reset links
    APP_BASE_URL: str = "http://localhost:5173"

    # Authentication
    SECRET_KEY: str = DEFAULT_SECRET_KEY
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12
    RESET_TOKEN_EXPIRE_MINUTES: int = 30
    PASSWORD_BCRYPT_ROUNDS: int = 10

    # Outbound HTTP
    HTTP_TIMEOUT: float = 30.0

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    CORS_ORIGINS: List[str] = ["http://localhost:5173"]

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Fallback pricing when no Settings record exists
    DEFAULT_USD_TO_GHS_RATE: float = 15.0
    DEFAULT_USD_TO_CNY_RATE: float = 7.2
    DEFAULT_SEA_RATE_PER_CBM: float = 1000.0
    DEFAULT_AIR_RATE_PER_KG: float = 5.0

    @field_validator("APP_BASE_URL", "AIRTABLE_API_URL")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def airtable_configured(self) -> bool:
        return bool(self.AIRTABLE_API_KEY and self.AIRTABLE_BASE_ID)

    @property
    def emailjs_configured(self) -> bool:
        return bool(
            self.EMAILJS_SERVICE_ID
            and self.EMAILJS_TEMPLATE_ID
            and self.EMAILJS_PUBLIC_KEY
        )


def validate_config(config: Optional[Settings] = None) -> Tuple[bool, List[str]]:
    """
    Check that the four required hosted-service values are present.

    Outside development SECRET_KEY must also be changed from its default.

    Returns:
        (is_valid, missing) where missing lists the unset variable names
    """
    config = config or settings
    missing = [name for name in REQUIRED_SETTINGS if not getattr(config, name)]
    if config.ENVIRONMENT != "development" and config.SECRET_KEY == DEFAULT_SECRET_KEY:
        missing.append("SECRET_KEY")
    return not missing, missing


settings = Settings()
