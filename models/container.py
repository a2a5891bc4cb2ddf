"""
Containers table.
"""

from typing import Optional
from pydantic import Field, model_validator
from models.base import TableRecord, ShipmentStatus, ShippingMethod


class Container(TableRecord):
    container_number: str = ""
    receiving_date: Optional[str] = None
    expected_arrival_ghana: Optional[str] = None
    estimated_arrival: Optional[str] = None
    actual_arrival_ghana: Optional[str] = None
    departure_date: Optional[str] = None
    status: ShipmentStatus = ShipmentStatus.CHINA_WAREHOUSE
    shipping_method: ShippingMethod = ShippingMethod.SEA
    item_count: int = 0
    photo_folder_path: Optional[str] = Field(default=None)

    @model_validator(mode="after")
    def fill_estimated_arrival(self):
        if not self.estimated_arrival:
            self.estimated_arrival = self.expected_arrival_ghana
        return self
