"""
Ghana warehouse endpoints: container arrival, tagging, customer
accounts and CSV tracking import
"""

import asyncio
from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from fastapi.responses import Response
from typing import List, Optional
from api.dependencies import get_email_service, get_records, require_ghana_team
from core.exceptions import ImportFormatError
from ingestion.extractors.csv_extractor import TEMPLATE_CSV, TrackingCSVExtractor
from ingestion.runner import TrackingImportRunner
from models.base import ShipmentStatus, UserRole
from models.item import Item
from models.user import User
from schemas.api import ArrivalResult, ContainerArrivalView, CustomerCreateResult, ImportSummary, TaggingView
from schemas.requests import CustomerCreateRequest, ItemDetailsUpdate
from services import views
from services.calculations import price_item
from services.email import EmailService
from services.helpers import generate_temporary_password
from services.records import RecordsService
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/ghana-team", tags=["Ghana Team"], dependencies=[Depends(require_ghana_team)])


# ============================================================================
# Container arrival
# ============================================================================

@router.get("/containers", response_model=ContainerArrivalView)
async def container_arrival(
    request: Request,
    search: Optional[str] = Query(None, description="Match container number"),
    status_filter: Optional[ShipmentStatus] = Query(None, alias="status"),
    records: RecordsService = Depends(get_records)
):
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")
    logger.info(f"[{request_id}] GET /ghana-team/containers - search={search}, status={status_filter}")

    items = await records.get_all_items()
    return views.container_arrival_view(items, search=search, status=status_filter)


@router.get("/containers/{container_number}/items", response_model=List[Item])
async def container_items(container_number: str, records: RecordsService = Depends(get_records)):
    return await records.get_items_by_container_number(container_number)


@router.post("/containers/{container_number}/arrive", response_model=ArrivalResult)
async def mark_container_arrived(container_number: str, records: RecordsService = Depends(get_records)):
    """Move every item in the container to arrived_ghana."""
    updated = await records.update_items_by_container(
        container_number,
        {"status": ShipmentStatus.ARRIVED_GHANA.value},
    )
    return ArrivalResult(container_number=container_number, items_updated=updated)


# ============================================================================
# Tagging
# ============================================================================

@router.get("/tagging", response_model=TaggingView)
async def tagging(
    search: Optional[str] = Query(None, description="Match tracking, name, container or customer name"),
    records: RecordsService = Depends(get_records)
):
    items, customers = await asyncio.gather(
        records.get_all_items(),
        records.get_all_customers(),
    )
    return views.tagging_view(items, customers, search=search)


@router.put("/items/{item_id}/details", response_model=Item)
async def update_item_details(
    item_id: str,
    body: ItemDetailsUpdate,
    records: RecordsService = Depends(get_records)
):
    """Tag an item to a customer and recompute its cost from the entered measurements."""
    rates = await records.get_rates()
    _, cost_usd, cost_cedis = price_item(
        body.shipping_method, body.length, body.width, body.height,
        body.dimension_unit, body.weight, body.weight_unit, rates,
    )

    fields = body.to_fields()
    fields.update({"costUSD": cost_usd, "costCedis": cost_cedis})
    return await records.update_item(item_id, fields)


# ============================================================================
# Customer accounts
# ============================================================================

@router.get("/customers", response_model=List[User])
async def list_customers(records: RecordsService = Depends(get_records)):
    return await records.get_all_customers()


@router.post("/customers", response_model=CustomerCreateResult, status_code=status.HTTP_201_CREATED)
async def create_customer(
    body: CustomerCreateRequest,
    records: RecordsService = Depends(get_records),
    email_service: EmailService = Depends(get_email_service)
):
    """
    Create a customer with a temporary password and email the credentials.

    The account is created even when no email could be sent; the caller gets
    the temporary password back to pass on by hand.
    """
    temporary_password = generate_temporary_password()
    customer = await records.create_user(
        name=body.name,
        email=body.email,
        password=temporary_password,
        role=UserRole.CUSTOMER,
        phone=body.phone,
        address=body.address,
        created_by_team=True,
    )
    email_sent = await email_service.send_customer_credentials_email(
        customer.name, customer.email, temporary_password
    )
    return CustomerCreateResult(
        customer=customer,
        temporary_password=temporary_password,
        email_sent=email_sent,
    )


# ============================================================================
# CSV import
# ============================================================================

@router.post("/import", response_model=ImportSummary)
async def import_tracking(
    file: UploadFile = File(...),
    records: RecordsService = Depends(get_records)
):
    filename = file.filename or "upload.csv"
    if not filename.lower().endswith(".csv"):
        raise ImportFormatError("Please select a CSV file", context={"filename": filename})

    extractor = TrackingCSVExtractor(await file.read(), source_name=filename)
    return await TrackingImportRunner(records).run_file(extractor)


@router.get("/import/template")
async def import_template():
    return Response(
        content=TEMPLATE_CSV,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="tracking_import_template.csv"'},
    )
