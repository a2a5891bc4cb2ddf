"""
Record models mirrored 1:1 from the hosted table service.

Each table in the base has a Pydantic model here. Models are read-side
views: they tolerate missing cells (the table service omits empty fields)
and fill the legacy alias fields the dashboards still read.

Models:
    base: TableRecord base class and every enum (roles, statuses, units)
    user: User
    item: Item, PhotoRef
    container: Container
    invoice: Invoice, InvoiceLine
    support_request: SupportRequest
    announcement: Announcement
    settings: SystemSettings, Warehouse

Serialization:
    Attributes are snake_case in Python and camelCase on the wire:

        item = Item.model_validate({"trackingNumber": "AFQ123", "costUSD": 40})
        assert item.tracking_number == "AFQ123"
        item.model_dump(by_alias=True)["costUSD"]  # 40.0

Relationships:
    Records reference each other by id only (Item.customer_id,
    Invoice.customer_id, SupportRequest.customer_id). Lookups are resolved
    in services.views against lists that were already fetched.
"""

__all__ = [
    "TableRecord",
    "UserRole",
    "ShipmentStatus",
    "ShippingMethod",
    "DimensionUnit",
    "WeightUnit",
    "SupportCategory",
    "SupportStatus",
    "InvoiceStatus",
    "Currency",
    "AnnouncementType",
    "WarehouseType",
    "User",
    "Item",
    "PhotoRef",
    "Container",
    "Invoice",
    "InvoiceLine",
    "SupportRequest",
    "Announcement",
    "SystemSettings",
    "Warehouse",
]
