# ============================================================================
# File: ingestion/runner.py
# Description: Applies CSV tracking updates to the Items table
# ============================================================================
"""
Tracking import runner.

Each CSV row is matched to an item by tracking number (case-insensitive) and
its status and/or container number are written back. Rows are processed one
at a time; a failing row is recorded in the summary and the import moves on.
"""

from typing import Dict, List, Optional, Sequence
import logging

from ingestion.extractors.csv_extractor import TrackingCSVExtractor, TrackingRow
from models.item import Item
from schemas.api import ImportRowResult, ImportSummary
from services.records import RecordsService

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Tracking number not found in system"
NO_FIELDS_MESSAGE = "No update fields found (need status or container)"


class TrackingImportRunner:
    """
    Orchestrates a tracking import: read rows, match items, update, summarise.
    """

    def __init__(self, records: RecordsService):
        self.records = records

    async def run_file(self, extractor: TrackingCSVExtractor) -> ImportSummary:
        """
        Extract rows from a CSV source and apply them.

        Raises:
            ImportFormatError: The file itself is unusable (nothing is updated)
        """
        rows = extractor.extract()
        return await self.run(rows)

    async def run(self, rows: Sequence[TrackingRow]) -> ImportSummary:
        logger.info(f"Starting tracking import for {len(rows)} rows")

        # One fetch for the whole import
        items = await self.records.get_all_items()
        by_tracking = self._index_items(items)

        results: List[ImportRowResult] = []
        for row in rows:
            results.append(await self._apply_row(row, by_tracking.get(row.tracking_number.lower())))

        success_count = sum(1 for r in results if r.success)
        failure_count = len(results) - success_count

        if failure_count == 0:
            status = "success"
        elif success_count == 0:
            status = "failed"
        else:
            status = "partial_success"

        logger.info(
            f"Tracking import completed: {status} - "
            f"Rows: {len(results)}, Updated: {success_count}, Failed: {failure_count}"
        )

        return ImportSummary(
            status=status,
            total_rows=len(results),
            success_count=success_count,
            failure_count=failure_count,
            results=results,
        )

    async def _apply_row(self, row: TrackingRow, item: Optional[Item]) -> ImportRowResult:
        if item is None:
            return self._result(row, False, NOT_FOUND_MESSAGE)

        changes = {}
        if row.status:
            changes["status"] = row.status.value
        if row.container_number:
            changes["containerNumber"] = row.container_number

        if not changes:
            return self._result(row, False, NO_FIELDS_MESSAGE)

        try:
            await self.records.update_item(item.id, changes)
        except Exception as e:
            logger.error(
                f"Tracking import failed for row {row.row_number} ({row.tracking_number}): {str(e)}",
                extra={"error_context": {"item_id": item.id, "changes": changes}}
            )
            return self._result(row, False, f"Update failed: {getattr(e, 'message', e)}")

        updates = []
        if row.status:
            updates.append(f"status: {row.status.value}")
        if row.container_number:
            updates.append(f"container: {row.container_number}")
        return self._result(row, True, f"Updated {', '.join(updates)}")

    @staticmethod
    def _index_items(items: Sequence[Item]) -> Dict[str, Item]:
        return {item.tracking_number.lower(): item for item in items if item.tracking_number}

    @staticmethod
    def _result(row: TrackingRow, success: bool, message: str) -> ImportRowResult:
        return ImportRowResult(
            row_number=row.row_number,
            tracking_number=row.tracking_number,
            success=success,
            message=message,
        )
