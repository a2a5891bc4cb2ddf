"""
Script to apply a CSV of tracking updates to the Items table

Usage:
    python scripts/import_tracking.py updates.csv
"""

import asyncio
import sys
import os
import logging

# Add current directory to path to allow imports from core, models, etc.
sys.path.append(os.getcwd())

from core.airtable import AirtableClient
from core.config import settings
from core.exceptions import TrackerException
from core.logging import setup_logging
from ingestion.extractors.csv_extractor import TrackingCSVExtractor
from ingestion.runner import TrackingImportRunner
from services.records import RecordsService

setup_logging()
logger = logging.getLogger(__name__)


async def run_import(file_path: str) -> int:
    """Run the import for one file; returns the process exit code."""
    if not settings.airtable_configured:
        logger.error("AIRTABLE_API_KEY and AIRTABLE_BASE_ID must be set")
        return 1

    try:
        async with AirtableClient.from_settings() as client:
            runner = TrackingImportRunner(RecordsService(client))
            summary = await runner.run_file(TrackingCSVExtractor(file_path))
    except TrackerException as e:
        logger.error(f"Import failed: {e.message}")
        return 1

    for result in summary.results:
        if not result.success:
            logger.warning(f"Row {result.row_number} ({result.tracking_number}): {result.message}")

    logger.info(
        f"Import {summary.status}: {summary.success_count} updated, "
        f"{summary.failure_count} failed, {summary.total_rows} rows"
    )
    return 0 if summary.failure_count == 0 else 2


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("Usage: python scripts/import_tracking.py <file.csv>")
        sys.exit(1)
    sys.exit(asyncio.run(run_import(sys.argv[1])))
