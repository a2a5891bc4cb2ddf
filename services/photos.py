"""
Helpers for item photo lists.

Photos are stored either as plain URLs (older records) or as PhotoRef
objects carrying an explicit display order.
"""

import sys
from typing import List, Optional, Union
from models.item import PhotoRef

Photo = Union[PhotoRef, str]


def _order_key(photo: Photo) -> int:
    if isinstance(photo, PhotoRef) and photo.order is not None:
        return photo.order
    return sys.maxsize


def sort_photos_by_order(photos: List[Photo]) -> List[Photo]:
    """Ordered photos first; unordered ones keep their upload sequence at the end."""
    return sorted(photos, key=_order_key)


def get_photo_url(photo: Photo) -> str:
    return photo if isinstance(photo, str) else photo.url


def get_first_photo_url(photos: Optional[List[Photo]]) -> Optional[str]:
    if not photos:
        return None
    return get_photo_url(sort_photos_by_order(photos)[0])


def convert_to_ordered_photos(photos: List[Photo]) -> List[PhotoRef]:
    """Plain URLs get their list index as order; PhotoRefs are kept as-is."""
    return [
        PhotoRef(url=photo, order=index) if isinstance(photo, str) else photo
        for index, photo in enumerate(photos)
    ]


def has_multiple_photos(photos: Optional[List[Photo]]) -> bool:
    return bool(photos) and len(photos) > 1
