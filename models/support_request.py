"""
SupportRequests table.
"""

from typing import Optional
from pydantic import model_validator
from models.base import TableRecord, SupportCategory, SupportStatus


class SupportRequest(TableRecord):
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    subject: str = ""
    description: str = ""
    message: str = ""
    category: SupportCategory = SupportCategory.GENERAL
    related_tracking_number: Optional[str] = None
    status: SupportStatus = SupportStatus.OPEN
    admin_response: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    resolved_at: Optional[str] = None

    @model_validator(mode="after")
    def fill_message(self):
        if not self.message:
            self.message = self.description
        return self
