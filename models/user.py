"""
Users table: customers, warehouse teams and admins share one table.
"""

from typing import Optional
from pydantic import Field
from models.base import TableRecord, UserRole


class User(TableRecord):
    name: str = ""
    email: str = ""
    role: UserRole = UserRole.CUSTOMER
    phone: Optional[str] = None
    address: Optional[str] = None
    is_first_login: bool = False
    password_changed_at: Optional[str] = None
    created_at: Optional[str] = None

    # Never serialized back to API callers
    password: Optional[str] = Field(default=None, exclude=True)
    temp_password: Optional[str] = Field(default=None, exclude=True)

    def has_role(self, role: UserRole) -> bool:
        """Admins pass every role check."""
        return self.role == role or self.role == UserRole.ADMIN
