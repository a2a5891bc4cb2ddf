"""
Thin async client for the Airtable REST API (v0).

The table service is the only database this application has. This module
knows about HTTP, pagination, batching limits and error mapping; it knows
nothing about the shape of individual tables (see services.records).
"""

import httpx
from typing import Any, Dict, List, Optional, Sequence, Tuple
from urllib.parse import quote
from core.config import Settings, settings
from core.exceptions import TableServiceError, RecordNotFoundError
import logging

logger = logging.getLogger(__name__)

# Airtable rejects create/update/delete calls with more than 10 records
BATCH_SIZE = 10


class Tables:
    """Table names in the base"""
    USERS = "Users"
    ITEMS = "Items"
    CONTAINERS = "Containers"
    INVOICES = "Invoices"
    SUPPORT_REQUESTS = "SupportRequests"
    ANNOUNCEMENTS = "Announcements"
    SETTINGS = "Settings"
    WAREHOUSES = "Warehouses"


def escape_formula_value(value: Any) -> str:
    """Quote a value for use inside filterByFormula."""
    text = str(value).replace("\\", "\\\\").replace("'", "\\'")
    return f"'{text}'"


def flatten_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Merge an API record's id and fields into one flat dict."""
    flat = dict(record.get("fields", {}))
    flat["id"] = record["id"]
    if "createdTime" in record:
        flat.setdefault("createdTime", record["createdTime"])
    return flat


def chunked(values: Sequence[Any], size: int = BATCH_SIZE) -> List[Sequence[Any]]:
    return [values[i:i + size] for i in range(0, len(values), size)]


class AirtableClient:
    """
    Async Airtable client.

    Features:
    - Offset pagination for list calls
    - filterByFormula / sort / fields / maxRecords support
    - Batched create, update and delete (10 records per call)
    - HTTP status mapping onto TableServiceError / RecordNotFoundError

    There is no retry: a failed call is reported to the caller once.
    """

    def __init__(
        self,
        api_key: str,
        base_id: str,
        api_url: str = "https://api.airtable.com/v0",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_id = base_id
        self._client = httpx.AsyncClient(
            base_url=f"{api_url.rstrip('/')}/{base_id}",
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_settings(
        cls,
        config: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "AirtableClient":
        config = config or settings
        return cls(
            api_key=config.AIRTABLE_API_KEY,
            base_id=config.AIRTABLE_BASE_ID,
            api_url=config.AIRTABLE_API_URL,
            timeout=config.HTTP_TIMEOUT,
            transport=transport,
        )

    async def __aenter__(self) -> "AirtableClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Low-level request handling
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        table: str,
        path: str = "",
        params: Any = None,
        json: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        url = f"/{quote(table)}{path}"

        try:
            response = await self._client.request(method, url, params=params, json=json)
        except httpx.TimeoutException as e:
            raise TableServiceError(
                f"Request to table {table} timed out",
                context={"table": table, "method": method},
                original_exception=e
            )
        except httpx.HTTPError as e:
            raise TableServiceError(
                f"Network error talking to table {table}",
                context={"table": table, "method": method},
                original_exception=e
            )

        if response.status_code == 404:
            raise RecordNotFoundError(
                f"Not found in table {table}: {self._error_message(response)}",
                context={"table": table, "path": path, "status_code": 404}
            )

        if response.status_code >= 400:
            message = self._error_message(response)
            logger.error(f"Table service {method} {table}{path} failed ({response.status_code}): {message}")
            raise TableServiceError(
                f"Table service error on {table}: {message}",
                context={
                    "table": table,
                    "method": method,
                    "status_code": response.status_code,
                    "response_body": response.text[:500],
                }
            )

        if not response.content:
            return {}
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200] or response.reason_phrase

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return error.get("message") or error.get("type") or str(error)
        if error:
            return str(error)
        return response.reason_phrase

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def select(
        self,
        table: str,
        formula: Optional[str] = None,
        sort: Optional[List[Tuple[str, str]]] = None,
        fields: Optional[List[str]] = None,
        max_records: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        """
        List records, following offset pagination until exhausted.

        Args:
            table: Table name
            formula: filterByFormula expression
            sort: [(field, "asc" | "desc"), ...]
            fields: Restrict returned fields
            max_records: Stop after this many records

        Returns:
            Flattened records (id merged into fields)
        """
        base_params: List[Tuple[str, Any]] = []
        if formula:
            base_params.append(("filterByFormula", formula))
        for index, (field, direction) in enumerate(sort or []):
            base_params.append((f"sort[{index}][field]", field))
            base_params.append((f"sort[{index}][direction]", direction))
        for field in fields or []:
            base_params.append(("fields[]", field))
        if max_records:
            base_params.append(("maxRecords", max_records))

        records: List[Dict[str, Any]] = []
        offset: Optional[str] = None

        while True:
            params = list(base_params)
            if offset:
                params.append(("offset", offset))

            page = await self._request("GET", table, params=params)
            records.extend(flatten_record(r) for r in page.get("records", []))

            offset = page.get("offset")
            if not offset or (max_records and len(records) >= max_records):
                break

        logger.debug(f"Selected {len(records)} records from {table}")
        return records[:max_records] if max_records else records

    async def first(
        self,
        table: str,
        formula: str,
        sort: Optional[List[Tuple[str, str]]] = None
    ) -> Optional[Dict[str, Any]]:
        records = await self.select(table, formula=formula, sort=sort, max_records=1)
        return records[0] if records else None

    async def get(self, table: str, record_id: str) -> Dict[str, Any]:
        return flatten_record(await self._request("GET", table, f"/{record_id}"))

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create(self, table: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        created = await self.create_many(table, [fields])
        return created[0]

    async def create_many(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        created: List[Dict[str, Any]] = []
        for batch in chunked(rows):
            body = {"records": [{"fields": fields} for fields in batch]}
            result = await self._request("POST", table, json=body)
            created.extend(flatten_record(r) for r in result.get("records", []))
        return created

    async def update(self, table: str, record_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        updated = await self.update_many(table, [(record_id, fields)])
        return updated[0]

    async def update_many(
        self,
        table: str,
        updates: List[Tuple[str, Dict[str, Any]]]
    ) -> List[Dict[str, Any]]:
        """PATCH records in batches; fields not named are left untouched."""
        updated: List[Dict[str, Any]] = []
        for batch in chunked(updates):
            body = {"records": [{"id": record_id, "fields": fields} for record_id, fields in batch]}
            result = await self._request("PATCH", table, json=body)
            updated.extend(flatten_record(r) for r in result.get("records", []))
        return updated

    async def destroy(self, table: str, record_id: str) -> None:
        await self._request("DELETE", table, f"/{record_id}")
