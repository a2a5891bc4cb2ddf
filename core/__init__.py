"""
Core utilities and configuration for the AFREQ tracking service.

This package provides foundational components used by every view:

Modules:
    config: Application configuration and environment variable management
    airtable: Async client for the hosted table service (the only database)
    exceptions: Custom exception hierarchy for error handling
    logging: Logging configuration and utilities
    security: Password hashing and signed session / reset tokens

Usage:
    from core.config import settings, validate_config
    from core.airtable import AirtableClient, Tables
    from core.exceptions import TableServiceError, DuplicateEmailError
    from core.logging import setup_logging

Example:
    # Initialize logging
    setup_logging()

    # Read records
    async with AirtableClient.from_settings() as client:
        customers = await client.select(
            Tables.USERS,
            formula="{role} = 'customer'",
            sort=[("name", "asc")],
        )
"""

__all__ = [
    "settings",
    "validate_config",
    "setup_logging",
    "AirtableClient",
    "Tables",
    # Security
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_access_token",
    # Exceptions
    "TrackerException",
    "ConfigurationError",
    "ServiceError",
    "TableServiceError",
    "RecordNotFoundError",
    "ImageUploadError",
    "EmailDeliveryError",
    "ValidationError",
    "DuplicateEmailError",
    "CustomerNotFoundError",
    "ImportFormatError",
    "AuthenticationError",
    "PermissionDeniedError",
]
