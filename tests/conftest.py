"""
Pytest configuration and fixtures
"""

import json
import httpx
import pytest
import pytest_asyncio
from typing import Any, Callable, Dict, List
from unittest.mock import AsyncMock
from core.airtable import AirtableClient
from core.config import Settings
from models.base import ShipmentStatus, ShippingMethod, UserRole
from models.item import Item
from models.settings import SystemSettings
from models.user import User
from services.records import RecordsService


@pytest.fixture
def test_settings():
    """Settings with every hosted service configured and no .env lookup"""
    return Settings(
        _env_file=None,
        AIRTABLE_API_KEY="key_test",
        AIRTABLE_BASE_ID="appTEST",
        CLOUDINARY_CLOUD_NAME="demo-cloud",
        CLOUDINARY_UPLOAD_PRESET="unsigned_test",
        MAIL_ENDPOINT_URL="https://mail.test/send",
        APP_BASE_URL="https://tracker.test/",
    )


@pytest.fixture
def rates():
    return SystemSettings(
        usd_to_ghs_rate=15.0,
        usd_to_cny_rate=7.2,
        sea_shipping_rate_per_cbm=1000.0,
        air_shipping_rate_per_kg=5.0,
    )


@pytest.fixture
def customers():
    return [
        User(id="recCust1", name="Ama Mensah", email="ama@example.com", phone="0241234567",
             address="12 Ring Road, Accra"),
        User(id="recCust2", name="Kofi Boateng", email="kofi@example.com"),
        User(id="recCust3", name="Esi Owusu", email="esi@example.com", phone="0209876543"),
    ]


@pytest.fixture
def admin_user():
    return User(id="recAdmin", name="Admin", email="admin@afreq.test", role=UserRole.ADMIN)


@pytest.fixture
def sample_items():
    """A small warehouse covering every pipeline stage"""
    return [
        Item(
            id="recItem1", name="Phone case", tracking_number="AFQ0001", customer_id="recCust1",
            receiving_date="2024-01-10", created_at="2024-01-10T08:00:00Z",
            length=50, width=40, height=30, cbm=0.06, cost_usd=60.0, cost_cedis=900.0,
            status=ShipmentStatus.CHINA_WAREHOUSE,
        ),
        Item(
            id="recItem2", name="Sneakers", tracking_number="AFQ0002", customer_id="recCust1",
            receiving_date="2024-01-12", created_at="2024-01-12T09:30:00Z",
            cbm=0.1, cost_usd=100.0, cost_cedis=1500.0, carton_number="CTN-20240112-001",
            status=ShipmentStatus.CHINA_WAREHOUSE,
        ),
        Item(
            id="recItem3", name="Laptop stand", tracking_number="AFQ0003", customer_id="recCust2",
            receiving_date="2024-01-05", created_at="2024-01-05T10:00:00Z",
            cbm=0.2, cost_usd=200.0, cost_cedis=3000.0, container_number="CONT-2024-001",
            carton_number="CTN-20240105-007", status=ShipmentStatus.IN_TRANSIT,
        ),
        Item(
            id="recItem4", name="Headphones", tracking_number="AFQ0004", customer_id="recCust1",
            receiving_date="2024-01-02", created_at="2024-01-02T10:00:00Z",
            shipping_method=ShippingMethod.AIR, weight=2.0, cost_usd=10.0, cost_cedis=150.0,
            container_number="CONT-2024-002", status=ShipmentStatus.ARRIVED_GHANA,
        ),
        Item(
            id="recItem5", name="Blender", tracking_number="AFQ0005", customer_id="recCust1",
            receiving_date="2023-12-20", created_at="2023-12-20T10:00:00Z",
            cbm=0.05, cost_usd=50.0, cost_cedis=750.0, container_number="CONT-2023-009",
            status=ShipmentStatus.PICKED_UP,
        ),
        Item(
            id="recItem6", name="Unlabelled box", tracking_number="AFQ0006",
            receiving_date="2024-01-03", cbm=0.01, cost_usd=10.0, cost_cedis=150.0,
            container_number="CONT-2024-002", status=ShipmentStatus.ARRIVED_GHANA,
            is_damaged=True,
        ),
    ]


def airtable_record(record_id: str, **fields) -> Dict[str, Any]:
    """Build a record as the table service returns it"""
    return {"id": record_id, "createdTime": "2024-01-01T00:00:00.000Z", "fields": fields}


class AirtableStub:
    """
    Records every request sent through an httpx MockTransport and answers
    with the queued responses (or a default empty page).
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responses: List[httpx.Response] = []

    def queue(self, status_code: int = 200, body: Any = None) -> None:
        self.responses.append(httpx.Response(status_code, json=body if body is not None else {}))

    def queue_records(self, *records: Dict[str, Any], offset: str = None) -> None:
        body: Dict[str, Any] = {"records": list(records)}
        if offset:
            body["offset"] = offset
        self.queue(200, body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.responses:
            return self.responses.pop(0)
        return httpx.Response(200, json={"records": []})

    def body(self, index: int) -> Dict[str, Any]:
        return json.loads(self.requests[index].content)


@pytest.fixture
def airtable_stub():
    return AirtableStub()


@pytest_asyncio.fixture
async def airtable_client(airtable_stub):
    """AirtableClient whose HTTP calls go to airtable_stub"""
    client = AirtableClient(
        api_key="key_test",
        base_id="appTEST",
        transport=httpx.MockTransport(airtable_stub.handler),
    )
    yield client
    await client.close()


@pytest.fixture
def records_service(airtable_client, test_settings):
    return RecordsService(airtable_client, config=test_settings)


@pytest.fixture
def mock_records(rates):
    """RecordsService double for route and runner tests"""
    records = AsyncMock(spec=RecordsService)
    records.get_rates.return_value = rates
    records.get_system_settings.return_value = rates
    return records


@pytest.fixture
def record_factory() -> Callable[..., Dict[str, Any]]:
    return airtable_record
