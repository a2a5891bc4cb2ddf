"""
Admin endpoints: customers, support desk, settings, warehouses,
announcements and invoices
"""

import asyncio
from fastapi import APIRouter, Depends, Query, Request, Response, status
from typing import Any, Dict, List, Optional
from api.dependencies import get_records, require_admin
from models.announcement import Announcement
from models.base import InvoiceStatus, SupportCategory, SupportStatus, WarehouseType
from models.invoice import Invoice
from models.settings import SystemSettings, Warehouse
from models.support_request import SupportRequest
from models.user import User
from schemas.api import AdminDashboardView, AdminSupportView, CustomerListView
from schemas.requests import (
    AnnouncementCreate,
    AnnouncementUpdate,
    InvoiceCreate,
    InvoiceUpdate,
    SettingsUpdate,
    SupportResponseUpdate,
    SupportStatusUpdate,
    WarehouseCreate,
    WarehouseUpdate,
)
from services import views
from services.calculations import calculate_invoice_totals
from services.helpers import generate_invoice_number, utc_now_iso
from services.records import RecordsService
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


def build_invoice_fields(body: InvoiceCreate) -> Dict[str, Any]:
    """Column values for a new invoice, with line and grand totals computed."""
    line_totals, subtotal, total = calculate_invoice_totals(
        [(line.quantity, line.unit_price) for line in body.items],
        charges=[
            body.shipping_charges,
            body.handling_charges,
            body.storage_charges,
            body.pickup_charges,
        ],
        tax=body.tax,
    )

    fields = body.to_fields()
    fields["items"] = [
        {**line.to_fields(), "total": line_total}
        for line, line_total in zip(body.items, line_totals)
    ]
    fields.update({
        "invoiceNumber": generate_invoice_number(),
        "subtotal": subtotal,
        "total": total,
        "status": InvoiceStatus.PENDING.value,
        "createdAt": utc_now_iso(),
    })
    return fields


# ============================================================================
# Dashboard / customers
# ============================================================================

@router.get("/dashboard", response_model=AdminDashboardView)
async def dashboard(request: Request, records: RecordsService = Depends(get_records)):
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")
    logger.info(f"[{request_id}] GET /admin/dashboard")

    customers, items, requests, announcements = await asyncio.gather(
        records.get_all_customers(),
        records.get_all_items(),
        records.get_all_support_requests(),
        records.get_all_announcements(),
    )
    return views.admin_dashboard(customers, items, requests, announcements)


@router.get("/customers", response_model=CustomerListView)
async def list_customers(
    search: Optional[str] = Query(None, description="Match name, email or phone"),
    records: RecordsService = Depends(get_records)
):
    customers = await records.get_all_customers()
    matched = views.search_customers(customers, search)
    return CustomerListView(customers=matched, total=len(customers))


@router.get("/customers/{customer_id}/invoices", response_model=List[Invoice])
async def customer_invoices(customer_id: str, records: RecordsService = Depends(get_records)):
    return await records.get_invoices_by_customer_id(customer_id)


# ============================================================================
# Support desk
# ============================================================================

@router.get("/support-requests", response_model=AdminSupportView)
async def list_support_requests(
    status_filter: Optional[SupportStatus] = Query(None, alias="status"),
    category: Optional[SupportCategory] = Query(None),
    records: RecordsService = Depends(get_records)
):
    requests, customers = await asyncio.gather(
        records.get_all_support_requests(),
        records.get_all_customers(),
    )
    return views.admin_support_view(requests, customers, status=status_filter, category=category)


@router.patch("/support-requests/{request_id}/status", response_model=SupportRequest)
async def change_support_status(
    request_id: str,
    body: SupportStatusUpdate,
    records: RecordsService = Depends(get_records)
):
    return await records.update_support_request_status(request_id, body.status)


@router.patch("/support-requests/{request_id}/response", response_model=SupportRequest)
async def respond_to_support_request(
    request_id: str,
    body: SupportResponseUpdate,
    records: RecordsService = Depends(get_records)
):
    updated = await records.update_support_request(request_id, body.to_fields(exclude={"status"}))
    if body.status:
        updated = await records.update_support_request_status(request_id, body.status)
    return updated


# ============================================================================
# Settings / warehouses
# ============================================================================

@router.get("/settings", response_model=SystemSettings)
async def get_settings(records: RecordsService = Depends(get_records)):
    return await records.get_rates()


@router.put("/settings", response_model=SystemSettings)
async def update_settings(body: SettingsUpdate, records: RecordsService = Depends(get_records)):
    return await records.update_system_settings(body.to_fields())


@router.get("/warehouses", response_model=List[Warehouse])
async def list_warehouses(
    kind: Optional[WarehouseType] = Query(None, alias="type", description="Only active warehouses of this type"),
    records: RecordsService = Depends(get_records)
):
    if kind is None:
        return await records.get_all_warehouses()
    return await records.get_active_warehouses(kind)


@router.post("/warehouses", response_model=Warehouse, status_code=status.HTTP_201_CREATED)
async def create_warehouse(body: WarehouseCreate, records: RecordsService = Depends(get_records)):
    return await records.create_warehouse(body.to_fields())


@router.patch("/warehouses/{warehouse_id}", response_model=Warehouse)
async def update_warehouse(
    warehouse_id: str,
    body: WarehouseUpdate,
    records: RecordsService = Depends(get_records)
):
    return await records.update_warehouse(warehouse_id, body.to_fields())


@router.delete("/warehouses/{warehouse_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_warehouse(warehouse_id: str, records: RecordsService = Depends(get_records)):
    await records.delete_warehouse(warehouse_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Announcements
# ============================================================================

@router.get("/announcements", response_model=List[Announcement])
async def list_announcements(records: RecordsService = Depends(get_records)):
    return await records.get_all_announcements()


@router.post("/announcements", response_model=Announcement, status_code=status.HTTP_201_CREATED)
async def create_announcement(
    body: AnnouncementCreate,
    user: User = Depends(require_admin),
    records: RecordsService = Depends(get_records)
):
    fields = body.to_fields()
    fields["createdBy"] = user.name or user.email
    return await records.create_announcement(fields)


@router.patch("/announcements/{announcement_id}", response_model=Announcement)
async def update_announcement(
    announcement_id: str,
    body: AnnouncementUpdate,
    records: RecordsService = Depends(get_records)
):
    return await records.update_announcement(announcement_id, body.to_fields())


# ============================================================================
# Invoices
# ============================================================================

@router.post("/invoices", response_model=Invoice, status_code=status.HTTP_201_CREATED)
async def create_invoice(body: InvoiceCreate, records: RecordsService = Depends(get_records)):
    return await records.create_invoice(build_invoice_fields(body))


@router.patch("/invoices/{invoice_id}", response_model=Invoice)
async def update_invoice(
    invoice_id: str,
    body: InvoiceUpdate,
    records: RecordsService = Depends(get_records)
):
    fields = body.to_fields()
    if body.status == InvoiceStatus.PAID:
        fields["paidAt"] = utc_now_iso()
    return await records.update_invoice(invoice_id, fields)
