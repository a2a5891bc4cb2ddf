"""
Items table: one row per parcel received at the China warehouse.
"""

from typing import List, Optional, Union
from pydantic import BaseModel, Field, field_validator
from models.base import (
    TableRecord,
    ShipmentStatus,
    ShippingMethod,
    DimensionUnit,
    WeightUnit,
)


class PhotoRef(BaseModel):
    """A hosted photo; order is None for photos stored without one."""
    url: str
    order: Optional[int] = None


class Item(TableRecord):
    name: Optional[str] = None
    tracking_number: str = ""
    customer_id: Optional[str] = None
    container_number: Optional[str] = None
    receiving_date: Optional[str] = None
    quantity: int = 1

    length: float = 0
    width: float = 0
    height: float = 0
    dimension_unit: DimensionUnit = DimensionUnit.CM
    cbm: float = 0

    shipping_method: ShippingMethod = ShippingMethod.SEA
    weight: Optional[float] = None
    weight_unit: Optional[WeightUnit] = None

    cost_usd: float = Field(default=0, alias="costUSD")
    cost_cedis: float = 0

    status: ShipmentStatus = ShipmentStatus.CHINA_WAREHOUSE
    photos: List[Union[PhotoRef, str]] = Field(default_factory=list)
    carton_number: Optional[str] = None
    is_damaged: bool = False
    is_missing: bool = False

    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("photos", mode="before")
    @classmethod
    def coerce_attachments(cls, v):
        """Attachment objects come back with extra keys (id, filename, size...)."""
        if not v:
            return []
        photos = []
        for photo in v:
            if isinstance(photo, dict):
                photos.append({"url": photo.get("url", ""), "order": photo.get("order")})
            else:
                photos.append(photo)
        return photos

    @property
    def is_tagged(self) -> bool:
        return bool(self.customer_id)
