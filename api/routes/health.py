"""
Health check endpoint with configuration and table-service status
"""

from fastapi import APIRouter, Depends
from typing import Optional
from api.dependencies import get_optional_records
from core.config import settings, validate_config
from core.exceptions import TrackerException
from schemas.api import ConfigStatus, HealthCheckResponse
from services.records import RecordsService
from datetime import datetime
import logging

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthCheckResponse)
async def health_check(records: Optional[RecordsService] = Depends(get_optional_records)):
    """
    Health check endpoint.

    Returns:
    - Missing required environment values
    - Table service reachability (one Settings lookup)
    """
    is_valid, missing = validate_config()

    table_service_connected = False
    if records is not None:
        try:
            await records.get_system_settings()
            table_service_connected = True
        except TrackerException as e:
            logger.error(f"Table service check failed: {e.message}")

    # Status is derived by the validator in HealthCheckResponse
    return HealthCheckResponse(
        timestamp=datetime.utcnow(),
        environment=settings.ENVIRONMENT,
        config=ConfigStatus(is_valid=is_valid, missing=missing),
        table_service_connected=table_service_connected,
    )
