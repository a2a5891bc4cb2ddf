"""
Turn flattened table-service rows into validated record models
"""

import json
from enum import Enum
from typing import Any, Dict, Optional, Type
from models.announcement import Announcement
from models.base import (
    AnnouncementType,
    DimensionUnit,
    ShipmentStatus,
    ShippingMethod,
    SupportCategory,
    WeightUnit,
)
from models.container import Container
from models.invoice import Invoice
from models.item import Item
from models.settings import SystemSettings, Warehouse
from models.support_request import SupportRequest
from models.user import User
from services.photos import sort_photos_by_order
import logging

logger = logging.getLogger(__name__)

# Items link to Users through this legacy linked-record column
ITEM_CUSTOMER_LINK = "customerId_old"

ITEM_ENUM_FIELDS = (
    ("status", ShipmentStatus),
    ("shippingMethod", ShippingMethod),
    ("dimensionUnit", DimensionUnit),
    ("weightUnit", WeightUnit),
)


class RecordNormalizer:
    """
    Normalize rows from each table into its model.

    Handles:
    - Linked-record arrays collapsed to a single id
    - Empty cells dropped so model defaults apply
    - Legacy field names and defaults (category, type, shippingMethod)
    - Unknown enum values on items replaced by the model default
    - Item photos sorted into display order
    - JSON-encoded line items on invoices
    """

    def user(self, record: Dict[str, Any]) -> User:
        return User.model_validate(self._clean(record))

    def item(self, record: Dict[str, Any]) -> Item:
        data = self._clean(record)
        linked = data.pop(ITEM_CUSTOMER_LINK, None)
        data["customerId"] = self._first_link(linked) or self._first_link(data.get("customerId"))
        for field in ("length", "width", "height", "cbm", "weight", "costUSD", "costCedis"):
            if field in data:
                data[field] = self._parse_float(data[field])
        if "quantity" in data:
            data["quantity"] = self._parse_int(data["quantity"]) or 1
        for field, enum_class in ITEM_ENUM_FIELDS:
            self._drop_unknown_enum(data, field, enum_class)
        item = Item.model_validate(self._clean(data))
        return item.model_copy(update={"photos": sort_photos_by_order(item.photos)})

    def container(self, record: Dict[str, Any]) -> Container:
        data = self._clean(record)
        data.setdefault("shippingMethod", ShippingMethod.SEA.value)
        return Container.model_validate(data)

    def invoice(self, record: Dict[str, Any]) -> Invoice:
        data = self._clean(record)
        data["customerId"] = self._first_link(data.get("customerId"))
        lines = data.get("items")
        if isinstance(lines, str):
            try:
                data["items"] = json.loads(lines)
            except ValueError:
                logger.warning(f"Invoice {data.get('id')} has unreadable line items")
                data["items"] = []
        return Invoice.model_validate(self._clean(data))

    def support_request(self, record: Dict[str, Any]) -> SupportRequest:
        data = self._clean(record)
        data["customerId"] = self._first_link(data.get("customerId"))
        category = data.get("category") or data.get("type")
        if category not in {c.value for c in SupportCategory}:
            category = SupportCategory.GENERAL.value
        data["category"] = category
        if "relatedTrackingNumber" not in data and data.get("relatedTrackingNumbers"):
            related = data["relatedTrackingNumbers"]
            data["relatedTrackingNumber"] = ", ".join(related) if isinstance(related, list) else related
        return SupportRequest.model_validate(self._clean(data))

    def announcement(self, record: Dict[str, Any]) -> Announcement:
        data = self._clean(record)
        if data.get("type") not in {t.value for t in AnnouncementType}:
            data["type"] = AnnouncementType.GENERAL.value
        return Announcement.model_validate(data)

    def system_settings(self, record: Dict[str, Any]) -> SystemSettings:
        # The row's "id" cell holds the settings key and is shadowed by the record id
        data = self._clean(record)
        data["recordId"] = data.pop("id", None)
        data["id"] = "default"
        return SystemSettings.model_validate(data)

    def warehouse(self, record: Dict[str, Any]) -> Warehouse:
        return Warehouse.model_validate(self._clean(record))

    @staticmethod
    def _clean(record: Dict[str, Any]) -> Dict[str, Any]:
        return {k: v for k, v in record.items() if v is not None and v != ""}

    @staticmethod
    def _drop_unknown_enum(data: Dict[str, Any], field: str, enum_class: Type[Enum]) -> None:
        value = data.get(field)
        if value is None:
            return
        if value not in {member.value for member in enum_class}:
            logger.warning(f"Record {data.get('id')} has unknown {field} {value!r}, using the default")
            data.pop(field)

    @staticmethod
    def _first_link(value: Any) -> Optional[str]:
        """Linked-record cells come back as lists of record ids."""
        if isinstance(value, list):
            return str(value[0]) if value else None
        if value:
            return str(value)
        return None

    @staticmethod
    def _parse_float(value: Any) -> Optional[float]:
        """Safely parse float value"""
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (ValueError, TypeError):
            return None

    @staticmethod
    def _parse_int(value: Any) -> Optional[int]:
        """Safely parse int value"""
        if value is None or value == "":
            return None
        try:
            return int(float(value))
        except (ValueError, TypeError):
            return None
