"""
Display helpers, identifier generators and small validators.
"""

import random
import re
import secrets
import string
from datetime import datetime, timezone
from typing import Dict, Optional, Tuple, Union
from models.base import (
    AnnouncementType,
    ShipmentStatus,
    SupportCategory,
    SupportStatus,
)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

STATUS_LABELS: Dict[ShipmentStatus, str] = {
    ShipmentStatus.CHINA_WAREHOUSE: "At China Warehouse",
    ShipmentStatus.IN_TRANSIT: "In Transit",
    ShipmentStatus.ARRIVED_GHANA: "Arrived Ghana",
    ShipmentStatus.READY_FOR_PICKUP: "Ready for Pickup",
    ShipmentStatus.DELIVERED: "Delivered",
    ShipmentStatus.PICKED_UP: "Picked Up",
}

STATUS_BADGE_CLASSES: Dict[ShipmentStatus, str] = {
    ShipmentStatus.CHINA_WAREHOUSE: "badge-light-info",
    ShipmentStatus.IN_TRANSIT: "badge-light-primary",
    ShipmentStatus.ARRIVED_GHANA: "badge-light-warning",
    ShipmentStatus.READY_FOR_PICKUP: "badge-light-success",
    ShipmentStatus.DELIVERED: "badge-light-success",
    ShipmentStatus.PICKED_UP: "badge-light-success",
}

# (css class, label)
SUPPORT_STATUS_BADGES: Dict[SupportStatus, Tuple[str, str]] = {
    SupportStatus.OPEN: ("badge-light-info", "Open"),
    SupportStatus.IN_PROGRESS: ("badge-light-warning", "In Progress"),
    SupportStatus.RESOLVED: ("badge-light-success", "Resolved"),
    SupportStatus.CLOSED: ("badge-light-secondary", "Closed"),
}

SUPPORT_CATEGORY_BADGES: Dict[SupportCategory, Tuple[str, str]] = {
    SupportCategory.MISSING_ITEM: ("badge-light-danger", "Missing Item"),
    SupportCategory.WRONG_DELIVERY: ("badge-light-warning", "Wrong Delivery"),
    SupportCategory.GENERAL: ("badge-light-primary", "General"),
}

ANNOUNCEMENT_BADGES: Dict[AnnouncementType, Tuple[str, str]] = {
    AnnouncementType.IMPORTANT: ("badge-danger", "Important"),
    AnnouncementType.UPDATE: ("badge-info", "Update"),
    AnnouncementType.PROMOTION: ("badge-success", "Promotion"),
    AnnouncementType.GENERAL: ("badge-secondary", "General"),
}


def get_status_label(status: Union[ShipmentStatus, str]) -> str:
    return STATUS_LABELS[ShipmentStatus(status)]


def get_status_badge_class(status: Union[ShipmentStatus, str]) -> str:
    return STATUS_BADGE_CLASSES[ShipmentStatus(status)]


# ============================================================================
# Dates
# ============================================================================

def parse_date(value: Union[str, datetime, None]) -> Optional[datetime]:
    """
    Parse a stored date or timestamp into a naive UTC datetime.

    The table service returns plain dates ("2024-01-15") for date columns
    and ISO timestamps with a Z suffix for created/updated columns.
    Unparseable values yield None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def format_date(value: Union[str, datetime, None]) -> str:
    """15 Jan 2024"""
    parsed = parse_date(value)
    return parsed.strftime("%d %b %Y") if parsed else ""


def format_datetime(value: Union[str, datetime, None]) -> str:
    """15 Jan 2024, 10:00"""
    parsed = parse_date(value)
    return parsed.strftime("%d %b %Y, %H:%M") if parsed else ""


def utc_now_iso() -> str:
    return datetime.utcnow().replace(microsecond=0).isoformat() + "Z"


# ============================================================================
# Generators
# ============================================================================

def generate_tracking_number(now: Optional[datetime] = None) -> str:
    """AFQ + last 8 digits of the millisecond clock + 4 random characters."""
    now = now or datetime.utcnow()
    millis = str(int(now.replace(tzinfo=timezone.utc).timestamp() * 1000))
    suffix = "".join(random.choices(string.ascii_uppercase + string.digits, k=4))
    return f"AFQ{millis[-8:]}{suffix}"


def generate_invoice_number(now: Optional[datetime] = None) -> str:
    """INV-YYMM-NNNN"""
    now = now or datetime.utcnow()
    return f"INV-{now:%y%m}-{random.randint(0, 9999):04d}"


def generate_carton_number(now: Optional[datetime] = None) -> str:
    """CTN-YYYYMMDD-NNN"""
    now = now or datetime.utcnow()
    return f"CTN-{now:%Y%m%d}-{random.randint(0, 999):03d}"


def generate_temporary_password(length: int = 8) -> str:
    alphabet = string.ascii_uppercase + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(length))


# ============================================================================
# Validation / text
# ============================================================================

def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def truncate_text(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
