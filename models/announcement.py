"""
Announcements table.
"""

from typing import Optional
from pydantic import model_validator
from models.base import TableRecord, AnnouncementType


class Announcement(TableRecord):
    title: str = ""
    content: str = ""
    message: str = ""
    type: AnnouncementType = AnnouncementType.GENERAL
    created_by: Optional[str] = None
    created_at: Optional[str] = None
    is_active: bool = True

    @model_validator(mode="after")
    def fill_message(self):
        if not self.message:
            self.message = self.content
        return self
