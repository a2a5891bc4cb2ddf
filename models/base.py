"""
Shared enums and the base class for records mirrored from the table service.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
import enum


class TableRecord(BaseModel):
    """
    A row read back from the table service.

    Python attributes are snake_case; the stored field names (and the JSON
    the API emits) are camelCase. Unknown fields are ignored because the
    bases carry helper columns (lookups, rollups) the service never reads.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = ""


# ============================================================================
# ENUMS
# ============================================================================

class UserRole(str, enum.Enum):
    """Who is logged in"""
    CUSTOMER = "customer"
    CHINA_TEAM = "china_team"
    GHANA_TEAM = "ghana_team"
    ADMIN = "admin"


class ShipmentStatus(str, enum.Enum):
    """Pipeline an item moves through, in order"""
    CHINA_WAREHOUSE = "china_warehouse"
    IN_TRANSIT = "in_transit"
    ARRIVED_GHANA = "arrived_ghana"
    READY_FOR_PICKUP = "ready_for_pickup"
    DELIVERED = "delivered"
    PICKED_UP = "picked_up"


class ShippingMethod(str, enum.Enum):
    SEA = "sea"
    AIR = "air"


class DimensionUnit(str, enum.Enum):
    INCHES = "inches"
    CM = "cm"


class WeightUnit(str, enum.Enum):
    KG = "kg"
    LBS = "lbs"


class SupportCategory(str, enum.Enum):
    MISSING_ITEM = "missing_item"
    WRONG_DELIVERY = "wrong_delivery"
    GENERAL = "general"


class SupportStatus(str, enum.Enum):
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"


class InvoiceStatus(str, enum.Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


class Currency(str, enum.Enum):
    USD = "USD"
    GHS = "GHS"


class AnnouncementType(str, enum.Enum):
    GENERAL = "general"
    IMPORTANT = "important"
    UPDATE = "update"
    PROMOTION = "promotion"


class WarehouseType(str, enum.Enum):
    """Filter for active warehouse lookups"""
    ORIGIN = "origin"
    DESTINATION = "destination"
    ALL = "all"
