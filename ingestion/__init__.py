"""
Bulk tracking import from CSV files.

Modules:
    runner: Matches rows to items by tracking number and applies the updates

Subpackages:
    extractors: CSV reading and header detection (pandas)

Flow:
    1. Extract - Read the CSV, find the tracking/status/container columns,
       drop rows without a tracking number
    2. Match - Fetch all items once and index them by lower-cased tracking number
    3. Apply - Update status and/or container number row by row; failures are
       recorded per row and never abort the import

Usage:
    from ingestion.extractors.csv_extractor import TrackingCSVExtractor
    from ingestion.runner import TrackingImportRunner

    extractor = TrackingCSVExtractor("updates.csv")
    summary = await TrackingImportRunner(records).run_file(extractor)

    print(f"Updated {summary.success_count} of {summary.total_rows} rows")
"""

__all__ = [
    "TrackingCSVExtractor",
    "TrackingImportRunner",
]
