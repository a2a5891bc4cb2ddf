"""
Invoices table.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from models.base import TableRecord, Currency, InvoiceStatus


class InvoiceLine(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    item_id: Optional[str] = None
    description: str = ""
    quantity: float = 1
    unit_price: float = 0
    total: float = 0


class Invoice(TableRecord):
    customer_id: Optional[str] = None
    invoice_number: str = ""
    items: List[InvoiceLine] = Field(default_factory=list)

    shipping_charges: float = 0
    handling_charges: float = 0
    storage_charges: float = 0
    pickup_charges: float = 0
    subtotal: float = 0
    tax: float = 0
    total: float = 0
    total_amount: float = 0

    currency: Currency = Currency.USD
    status: InvoiceStatus = InvoiceStatus.PENDING
    description: Optional[str] = None
    notes: Optional[str] = None

    created_at: Optional[str] = None
    issue_date: Optional[str] = None
    due_date: Optional[str] = None
    paid_at: Optional[str] = None

    @model_validator(mode="after")
    def fill_aliases(self):
        if not self.total_amount:
            self.total_amount = self.total
        if not self.issue_date:
            self.issue_date = self.created_at
        return self
