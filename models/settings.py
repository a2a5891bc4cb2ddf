"""
Settings and Warehouses tables (admin-maintained reference data).
"""

from typing import Optional
from pydantic import Field
from models.base import TableRecord


class SystemSettings(TableRecord):
    """Single row keyed id='default' holding exchange and shipping rates."""
    id: str = "default"
    record_id: Optional[str] = Field(default=None, exclude=True)
    usd_to_ghs_rate: float = 15.0
    usd_to_cny_rate: float = 7.2
    sea_shipping_rate_per_cbm: float = Field(default=1000.0, alias="seaShippingRatePerCBM")
    air_shipping_rate_per_kg: float = 5.0
    updated_at: Optional[str] = None


class Warehouse(TableRecord):
    name: str = ""
    country: str = ""
    city: str = ""
    address: str = ""
    is_origin: bool = False
    is_destination: bool = False
    is_active: bool = True
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
