"""
CSV extractor for bulk tracking updates
"""

import io
import pandas as pd
from typing import List, Optional, Union
from pathlib import Path
from pydantic import BaseModel
from core.exceptions import ImportFormatError
from models.base import ShipmentStatus
import logging

logger = logging.getLogger(__name__)

TEMPLATE_CSV = (
    "tracking_number,status,container_number\n"
    "TRACK001,in_transit,CONT-2024-001\n"
    "TRACK002,arrived_ghana,CONT-2024-001\n"
    "TRACK003,ready_for_pickup,\n"
)

VALID_STATUSES = {status.value for status in ShipmentStatus}


class TrackingRow(BaseModel):
    """One usable CSV line; row_number is the 1-based line in the file (header is 1)."""
    row_number: int
    tracking_number: str
    status: Optional[ShipmentStatus] = None
    container_number: Optional[str] = None


class TrackingCSVExtractor:
    """
    Read tracking updates from a CSV file or uploaded bytes.

    Header handling:
    - Names are stripped and lower-cased
    - The tracking, status and container columns are the first headers
      containing "tracking", "status" and "container"
    - Only the tracking column is required
    """

    def __init__(self, source: Union[str, Path, bytes], source_name: Optional[str] = None):
        self.source = source
        if isinstance(source, bytes):
            self.source_name = source_name or "upload.csv"
        else:
            self.source_name = source_name or str(source)

    def read_frame(self) -> pd.DataFrame:
        if isinstance(self.source, bytes):
            buffer = io.BytesIO(self.source)
        else:
            path = Path(self.source)
            if not path.exists():
                raise ImportFormatError(f"CSV file not found: {path}", context={"source": self.source_name})
            buffer = path

        try:
            df = pd.read_csv(
                buffer,
                dtype=str,
                keep_default_na=False,
                skip_blank_lines=True,
                skipinitialspace=True,
            )
        except pd.errors.EmptyDataError as e:
            raise ImportFormatError("CSV file is empty", context={"source": self.source_name}, original_exception=e)
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise ImportFormatError(
                "Could not parse CSV file",
                context={"source": self.source_name},
                original_exception=e
            )

        # Short rows are padded with NaN even with keep_default_na off
        df = df.fillna("")
        df.columns = df.columns.str.strip().str.lower()
        return df

    def extract(self) -> List[TrackingRow]:
        """
        Parse usable rows.

        Raises:
            ImportFormatError: Empty or unreadable file, or no tracking column
        """
        df = self.read_frame()

        tracking_col = self._find_column(df.columns, "tracking")
        if tracking_col is None:
            raise ImportFormatError(
                'CSV must have a "tracking" column',
                context={"source": self.source_name, "columns": list(df.columns)}
            )
        status_col = self._find_column(df.columns, "status")
        container_col = self._find_column(df.columns, "container")

        rows = []
        # Blank lines are dropped by pandas; +2 accounts for the header line and 0-based index
        for index, record in df.iterrows():
            tracking_number = str(record[tracking_col]).strip()
            if not tracking_number:
                continue

            rows.append(TrackingRow(
                row_number=int(index) + 2,
                tracking_number=tracking_number,
                status=self._parse_status(record[status_col]) if status_col else None,
                container_number=self._clean(record[container_col]) if container_col else None,
            ))

        logger.info(f"Read {len(rows)} tracking rows from {self.source_name}")
        return rows

    @staticmethod
    def _find_column(columns, keyword: str) -> Optional[str]:
        for column in columns:
            if keyword in column:
                return column
        return None

    @staticmethod
    def _clean(value) -> Optional[str]:
        text = str(value).strip()
        return text or None

    @staticmethod
    def _parse_status(value) -> Optional[ShipmentStatus]:
        """'Ready For Pickup' -> ready_for_pickup; unknown values are dropped."""
        normalized = "_".join(str(value).strip().lower().split())
        if normalized in VALID_STATUSES:
            return ShipmentStatus(normalized)
        return None
