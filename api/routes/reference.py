"""
Display metadata shared by every dashboard: status labels and badge classes
"""

from fastapi import APIRouter
from typing import Dict
from schemas.api import Badge
from services.helpers import (
    ANNOUNCEMENT_BADGES,
    STATUS_BADGE_CLASSES,
    STATUS_LABELS,
    SUPPORT_CATEGORY_BADGES,
    SUPPORT_STATUS_BADGES,
)

router = APIRouter(prefix="/reference", tags=["Reference"])


@router.get("/statuses", response_model=Dict[str, Badge])
async def shipment_statuses():
    """Pipeline order: china_warehouse through picked_up."""
    return {
        status.value: Badge(css_class=STATUS_BADGE_CLASSES[status], label=label)
        for status, label in STATUS_LABELS.items()
    }


@router.get("/badges", response_model=Dict[str, Dict[str, Badge]])
async def badges():
    return {
        "supportStatus": {k.value: Badge(css_class=c, label=l) for k, (c, l) in SUPPORT_STATUS_BADGES.items()},
        "supportCategory": {k.value: Badge(css_class=c, label=l) for k, (c, l) in SUPPORT_CATEGORY_BADGES.items()},
        "announcementType": {k.value: Badge(css_class=c, label=l) for k, (c, l) in ANNOUNCEMENT_BADGES.items()},
    }
