"""
Customer endpoints: the signed-in customer's packages, invoices and support
"""

import asyncio
from datetime import date
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse
from typing import List, Optional
from api.dependencies import require_customer, get_records
from core.exceptions import PermissionDeniedError, RecordNotFoundError
from models.announcement import Announcement
from models.base import ShipmentStatus
from models.item import Item
from models.support_request import SupportRequest
from models.user import User
from schemas.api import (
    CustomerDashboardView,
    EstimatedArrivalView,
    InvoicesView,
    PackagesView,
    StatusView,
    SupportView,
)
from schemas.requests import SupportRequestCreate
from services import views
from services.helpers import utc_now_iso
from services.labels import render_invoice
from services.records import RecordsService
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/customer", tags=["Customer"])


@router.get("/dashboard", response_model=CustomerDashboardView)
async def dashboard(
    request: Request,
    user: User = Depends(require_customer),
    records: RecordsService = Depends(get_records)
):
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")
    logger.info(f"[{request_id}] GET /customer/dashboard for {user.id}")

    items, invoices, requests, announcements = await asyncio.gather(
        records.get_items_by_customer_id(user.id),
        records.get_invoices_by_customer_id(user.id),
        records.get_support_requests_by_customer_id(user.id),
        records.get_active_announcements(),
    )
    return views.customer_dashboard(items, invoices, requests, announcements)


@router.get("/packages", response_model=PackagesView)
async def packages(
    search: Optional[str] = Query(None, description="Match tracking number, name or container"),
    status_filter: Optional[ShipmentStatus] = Query(None, alias="status"),
    user: User = Depends(require_customer),
    records: RecordsService = Depends(get_records)
):
    items = await records.get_items_by_customer_id(user.id)
    return views.packages_view(items, search=search, status=status_filter)


@router.get("/status", response_model=StatusView)
async def package_status(
    search: Optional[str] = Query(None, description="Match name or tracking number"),
    status_filter: Optional[ShipmentStatus] = Query(None, alias="status"),
    start_date: Optional[date] = Query(None, description="Inclusive, whole day"),
    end_date: Optional[date] = Query(None, description="Inclusive, whole day"),
    user: User = Depends(require_customer),
    records: RecordsService = Depends(get_records)
):
    items = await records.get_items_by_customer_id(user.id)
    return views.status_view(items, search=search, status=status_filter, start_date=start_date, end_date=end_date)


@router.get("/estimated-arrival", response_model=EstimatedArrivalView)
async def estimated_arrival(
    user: User = Depends(require_customer),
    records: RecordsService = Depends(get_records)
):
    items, containers = await asyncio.gather(
        records.get_items_by_customer_id(user.id),
        records.get_all_containers(),
    )
    return views.estimated_arrival_view(items, containers)


@router.get("/items/{tracking_number}", response_model=Item)
async def item_by_tracking_number(
    tracking_number: str,
    user: User = Depends(require_customer),
    records: RecordsService = Depends(get_records)
):
    item = await records.get_item_by_tracking_number(tracking_number)
    if not item or item.customer_id != user.id:
        raise RecordNotFoundError(
            "No package found with this tracking number",
            context={"tracking_number": tracking_number}
        )
    return item


# ============================================================================
# Invoices
# ============================================================================

@router.get("/invoices", response_model=InvoicesView)
async def invoices(user: User = Depends(require_customer), records: RecordsService = Depends(get_records)):
    return views.invoices_view(await records.get_invoices_by_customer_id(user.id))


@router.get("/invoices/{invoice_id}/print", response_class=HTMLResponse)
async def print_invoice(
    invoice_id: str,
    user: User = Depends(require_customer),
    records: RecordsService = Depends(get_records)
):
    invoice, customer = await asyncio.gather(
        records.get_invoice(invoice_id),
        records.get_user(user.id),
    )
    if invoice.customer_id != user.id:
        raise PermissionDeniedError("This invoice belongs to another customer", context={"invoice_id": invoice_id})
    return HTMLResponse(render_invoice(invoice, customer))


# ============================================================================
# Support / announcements
# ============================================================================

@router.get("/support", response_model=SupportView)
async def support_requests(user: User = Depends(require_customer), records: RecordsService = Depends(get_records)):
    return views.support_view(await records.get_support_requests_by_customer_id(user.id))


@router.post("/support", response_model=SupportRequest, status_code=status.HTTP_201_CREATED)
async def create_support_request(
    body: SupportRequestCreate,
    user: User = Depends(require_customer),
    records: RecordsService = Depends(get_records)
):
    fields = body.to_fields()
    fields.update({"customerId": user.id, "createdAt": utc_now_iso()})
    return await records.create_support_request(fields)


@router.get("/announcements", response_model=List[Announcement])
async def announcements(user: User = Depends(require_customer), records: RecordsService = Depends(get_records)):
    return await records.get_active_announcements()
