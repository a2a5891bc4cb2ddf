"""
Script to verify configuration and table-service access before deploying
"""

import asyncio
import logging
import sys
import os

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.airtable import AirtableClient, Tables
from core.config import settings, validate_config
from core.exceptions import TrackerException

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def check_configuration() -> int:
    is_valid, missing = validate_config()
    if not is_valid:
        logger.error(f"Missing required configuration: {', '.join(missing)}")
        return 1
    logger.info("All required environment values are set")

    if not settings.MAIL_ENDPOINT_URL and not settings.emailjs_configured:
        logger.warning("No mail transport configured; credentials emails will only be logged")

    failed = False
    async with AirtableClient.from_settings() as client:
        for table in (Tables.USERS, Tables.ITEMS, Tables.SETTINGS):
            try:
                await client.select(table, max_records=1)
                logger.info(f"Table {table}: reachable")
            except TrackerException as e:
                logger.error(f"Table {table}: {e.message}")
                failed = True

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(asyncio.run(check_configuration()))
