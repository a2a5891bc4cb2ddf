"""
China warehouse endpoints: receiving, packaging and container loading
"""

import asyncio
from datetime import date
from fastapi import APIRouter, Depends, File, Request, Response, UploadFile, status
from fastapi.responses import HTMLResponse
from typing import List
from api.dependencies import get_image_uploader, get_records, require_china_team
from core.exceptions import ValidationError
from models.base import ShipmentStatus
from models.item import Item
from models.user import User
from schemas.api import (
    CartonNumberResponse,
    ChinaDashboardStats,
    ContainerManagementView,
    LoadContainerResult,
    PackagingResult,
    PackagingView,
    UploadedPhotos,
)
from schemas.requests import ItemCreate, ItemUpdate, LoadContainerRequest, PackagingRequest
from services import views
from services.calculations import price_item
from services.helpers import generate_carton_number, generate_tracking_number
from services.images import ImageUploader
from services.labels import render_carton_label
from services.records import RecordsService
import uuid
import logging

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/china-team", tags=["China Team"], dependencies=[Depends(require_china_team)])


@router.get("/dashboard", response_model=ChinaDashboardStats)
async def dashboard(request: Request, records: RecordsService = Depends(get_records)):
    request_id = getattr(request.state, "request_id", f"req_{uuid.uuid4().hex[:12]}")
    logger.info(f"[{request_id}] GET /china-team/dashboard")

    items, customers = await asyncio.gather(
        records.get_all_items(),
        records.get_all_customers(),
    )
    return views.china_dashboard(items, customers)


@router.get("/customers", response_model=List[User])
async def list_customers(records: RecordsService = Depends(get_records)):
    return await records.get_all_customers()


# ============================================================================
# Receiving
# ============================================================================

@router.post("/photos", response_model=UploadedPhotos)
async def upload_receiving_photos(
    files: List[UploadFile] = File(...),
    uploader: ImageUploader = Depends(get_image_uploader)
):
    """Upload receiving photos into today's folder."""
    payload = [
        (upload.filename or "photo.jpg", await upload.read(), upload.content_type or "image/jpeg")
        for upload in files
    ]
    today = date.today()
    uploaded = await uploader.upload_bulk_images(payload, upload_date=today)
    return UploadedPhotos(
        urls=[image.secure_url for image in uploaded],
        thumbnails=[uploader.get_thumbnail_url(image.public_id) for image in uploaded],
        folder=f"{uploader.folder}/{today.isoformat()}",
    )


@router.post("/items", response_model=Item, status_code=status.HTTP_201_CREATED)
async def receive_item(body: ItemCreate, records: RecordsService = Depends(get_records)):
    """Register a parcel at the China warehouse with its computed volume and cost."""
    rates = await records.get_rates()
    cbm, cost_usd, cost_cedis = price_item(
        body.shipping_method, body.length, body.width, body.height,
        body.dimension_unit, body.weight, body.weight_unit, rates,
    )

    fields = body.to_fields()
    fields.setdefault("trackingNumber", generate_tracking_number())
    fields.setdefault("receivingDate", date.today().isoformat())
    fields.update({
        "costUSD": cost_usd,
        "costCedis": cost_cedis,
        "status": ShipmentStatus.CHINA_WAREHOUSE.value,
    })
    item = await records.create_item(fields)
    logger.info(f"Received item {item.tracking_number} ({cbm} CBM, ${cost_usd})")
    return item


@router.get("/items", response_model=List[Item])
async def list_items(records: RecordsService = Depends(get_records)):
    return await records.get_all_items()


@router.patch("/items/{item_id}", response_model=Item)
async def update_item(item_id: str, body: ItemUpdate, records: RecordsService = Depends(get_records)):
    return await records.update_item(item_id, body.to_fields())


@router.delete("/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(item_id: str, records: RecordsService = Depends(get_records)):
    await records.delete_item(item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ============================================================================
# Packaging
# ============================================================================

@router.get("/packaging/carton-number", response_model=CartonNumberResponse)
async def new_carton_number():
    return CartonNumberResponse(carton_number=generate_carton_number())


@router.get("/packaging/{customer_id}", response_model=PackagingView)
async def packaging_view(customer_id: str, records: RecordsService = Depends(get_records)):
    customer, items = await asyncio.gather(
        records.get_user(customer_id),
        records.get_items_by_customer_id(customer_id),
    )
    return PackagingView(customer=customer, available_items=views.packaging_candidates(items))


async def _selected_items(records: RecordsService, body: PackagingRequest) -> List[Item]:
    items = await records.get_items_by_customer_id(body.customer_id)
    wanted = set(body.item_ids)
    selected = [item for item in items if item.id in wanted]
    if len(selected) != len(wanted):
        raise ValidationError(
            "Selected items must belong to the customer",
            context={"customer_id": body.customer_id, "field_name": "itemIds"}
        )
    return selected


@router.post("/packaging", response_model=PackagingResult)
async def package_items(body: PackagingRequest, records: RecordsService = Depends(get_records)):
    """Put the selected items into one carton."""
    selected = await _selected_items(records, body)
    available = {item.id for item in views.packaging_candidates(selected)}
    unavailable = [item.tracking_number for item in selected if item.id not in available]
    if unavailable:
        raise ValidationError(
            f"Items already packaged or shipped: {', '.join(unavailable)}",
            context={"customer_id": body.customer_id, "field_name": "itemIds"}
        )
    carton_number = body.carton_number or generate_carton_number()

    updated = await records.update_items([item.id for item in selected], {"cartonNumber": carton_number})
    logger.info(f"Packaged {len(updated)} items into carton {carton_number}")
    return PackagingResult(
        carton_number=carton_number,
        items=updated,
        totals=views.cost_totals(updated),
    )


@router.post("/packaging/label", response_class=HTMLResponse)
async def carton_label(body: PackagingRequest, records: RecordsService = Depends(get_records)):
    """Printable label for a carton holding the selected items."""
    if not body.carton_number:
        raise ValidationError("Please generate or enter a carton number first.", context={"field_name": "cartonNumber"})

    customer, selected = await asyncio.gather(
        records.get_user(body.customer_id),
        _selected_items(records, body),
    )
    return HTMLResponse(render_carton_label(body.carton_number, customer, selected))


# ============================================================================
# Containers
# ============================================================================

@router.get("/containers", response_model=ContainerManagementView)
async def container_management(records: RecordsService = Depends(get_records)):
    return views.container_management_view(await records.get_all_items())


@router.post("/containers/load", response_model=LoadContainerResult)
async def load_container(body: LoadContainerRequest, records: RecordsService = Depends(get_records)):
    """Assign the selected cartoned items to a container and mark them in transit."""
    updated = await records.update_items(
        body.item_ids,
        {"containerNumber": body.container_number, "status": ShipmentStatus.IN_TRANSIT.value},
    )
    logger.info(f"Loaded {len(updated)} items into container {body.container_number}")
    return LoadContainerResult(
        container_number=body.container_number,
        items_loaded=len(updated),
        items=updated,
    )
