"""
Records-access layer over the hosted table service.

One method per read or write the dashboards perform. Each method maps
between record models and the raw column names of the base, then delegates
to core.airtable.AirtableClient. Nothing is cached: every view reads fresh.
"""

import json
from typing import Any, Dict, List, Optional, Union
from core.airtable import AirtableClient, Tables, escape_formula_value
from core.config import Settings, settings
from core.exceptions import (
    CustomerNotFoundError,
    DuplicateEmailError,
    RecordNotFoundError,
    TableServiceError,
    is_duplicate_error,
)
from core.security import hash_password
from models.announcement import Announcement
from models.base import SupportStatus, UserRole, WarehouseType
from models.container import Container
from models.invoice import Invoice
from models.item import Item, PhotoRef
from models.settings import SystemSettings, Warehouse
from models.support_request import SupportRequest
from models.user import User
from services.helpers import utc_now_iso
from services.normalizer import ITEM_CUSTOMER_LINK, RecordNormalizer
from services.photos import convert_to_ordered_photos, get_photo_url, sort_photos_by_order
import logging

logger = logging.getLogger(__name__)

# Columns the table service fills in itself
READ_ONLY_FIELDS = {"id", "createdAt", "updatedAt", "createdTime"}

# Lookup columns on SupportRequests
SUPPORT_LOOKUP_FIELDS = {"customerName", "customerEmail"}

SETTINGS_FORMULA = "{id} = 'default'"


class RecordsService:
    """
    Typed access to every table in the base.

    Args:
        client: An open AirtableClient
        config: Settings used for password rounds and fallback pricing
    """

    def __init__(self, client: AirtableClient, config: Optional[Settings] = None):
        self.client = client
        self.config = config or settings
        self.normalize = RecordNormalizer()

    # ========================================================================
    # Users
    # ========================================================================

    async def get_user_by_email(self, email: str) -> Optional[User]:
        formula = f"LOWER({{email}}) = {escape_formula_value(email.strip().lower())}"
        record = await self.client.first(Tables.USERS, formula)
        return self.normalize.user(record) if record else None

    async def get_user(self, user_id: str) -> User:
        return self.normalize.user(await self.client.get(Tables.USERS, user_id))

    async def get_all_customers(self) -> List[User]:
        records = await self.client.select(
            Tables.USERS,
            formula=f"{{role}} = {escape_formula_value(UserRole.CUSTOMER.value)}",
            sort=[("name", "asc")],
        )
        return [self.normalize.user(r) for r in records]

    async def create_user(
        self,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.CUSTOMER,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        created_by_team: bool = False
    ) -> User:
        """
        Create an account.

        Team-created accounts start with isFirstLogin set so the customer is
        asked to replace the temporary password, which is also kept in
        tempPassword for staff to read back. Self sign-ups do neither.

        Raises:
            DuplicateEmailError: An account with this email exists
        """
        email = email.strip().lower()
        if await self.get_user_by_email(email):
            raise DuplicateEmailError(
                "An account with this email already exists.",
                context={"field_name": "email"}
            )

        fields: Dict[str, Any] = {
            "name": name.strip(),
            "email": email,
            "role": UserRole(role).value,
            "password": hash_password(password),
            "isFirstLogin": created_by_team,
        }
        if phone:
            fields["phone"] = phone
        if address:
            fields["address"] = address
        if created_by_team:
            fields["tempPassword"] = password

        try:
            record = await self.client.create(Tables.USERS, fields)
        except TableServiceError as e:
            if is_duplicate_error(e):
                raise DuplicateEmailError(
                    "An account with this email already exists.",
                    context={"field_name": "email"},
                    original_exception=e
                )
            raise

        logger.info(f"Created {fields['role']} account {record['id']} (team created: {created_by_team})")
        return self.normalize.user(record)

    async def update_user(self, user_id: str, changes: Dict[str, Any]) -> User:
        fields = {k: v for k, v in changes.items() if k not in READ_ONLY_FIELDS | {"password"}}
        return self.normalize.user(await self.client.update(Tables.USERS, user_id, fields))

    async def update_user_password(self, user_id: str, new_password: str) -> User:
        fields = {
            "password": hash_password(new_password),
            "isFirstLogin": False,
            "passwordChangedAt": utc_now_iso(),
            "tempPassword": None,
        }
        record = await self.client.update(Tables.USERS, user_id, fields)
        logger.info(f"Password changed for user {user_id}")
        return self.normalize.user(record)

    async def toggle_user_first_login(self, user_id: str, is_first_login: bool) -> User:
        record = await self.client.update(Tables.USERS, user_id, {"isFirstLogin": is_first_login})
        return self.normalize.user(record)

    async def request_password_reset(self, email: str) -> Optional[User]:
        """Return the account a reset was requested for, if it exists."""
        user = await self.get_user_by_email(email)
        if not user:
            logger.info("Password reset requested for unknown email")
        return user

    # ========================================================================
    # Items
    # ========================================================================

    async def get_all_items(self) -> List[Item]:
        records = await self.client.select(Tables.ITEMS, sort=[("receivingDate", "desc")])
        return [self.normalize.item(r) for r in records]

    async def get_items_by_customer_id(self, customer_id: str) -> List[Item]:
        # Linked-record cells cannot be matched by id in a formula
        return [item for item in await self.get_all_items() if item.customer_id == customer_id]

    async def get_item(self, item_id: str) -> Item:
        return self.normalize.item(await self.client.get(Tables.ITEMS, item_id))

    async def get_item_by_tracking_number(self, tracking_number: str) -> Optional[Item]:
        formula = f"{{trackingNumber}} = {escape_formula_value(tracking_number)}"
        record = await self.client.first(Tables.ITEMS, formula)
        return self.normalize.item(record) if record else None

    async def get_items_by_container_number(self, container_number: str) -> List[Item]:
        formula = f"{{containerNumber}} = {escape_formula_value(container_number)}"
        records = await self.client.select(Tables.ITEMS, formula=formula)
        return [self.normalize.item(r) for r in records]

    async def create_item(self, data: Dict[str, Any]) -> Item:
        """
        Create an item from camelCase field values.

        customerId may be a Users record id ("rec...") or a customer email.
        cbm is not written; the base computes it from the dimensions.
        """
        fields = await self._item_fields(data)
        fields.pop("cbm", None)
        record = await self.client.create(Tables.ITEMS, fields)
        logger.info(f"Created item {record['id']} ({fields.get('trackingNumber')})")
        return self.normalize.item(record)

    async def update_item(self, item_id: str, changes: Dict[str, Any]) -> Item:
        fields = await self._item_fields(changes)
        return self.normalize.item(await self.client.update(Tables.ITEMS, item_id, fields))

    async def update_items(self, item_ids: List[str], changes: Dict[str, Any]) -> List[Item]:
        """Apply the same changes to several items, 10 per request."""
        if not item_ids:
            return []
        fields = await self._item_fields(changes)
        records = await self.client.update_many(Tables.ITEMS, [(item_id, fields) for item_id in item_ids])
        return [self.normalize.item(r) for r in records]

    async def update_items_by_container(self, container_number: str, changes: Dict[str, Any]) -> int:
        """Update every item in a container; returns how many were updated."""
        items = await self.get_items_by_container_number(container_number)
        if not items:
            return 0
        updated = await self.update_items([item.id for item in items], changes)
        logger.info(f"Updated {len(updated)} items in container {container_number}")
        return len(updated)

    async def delete_item(self, item_id: str) -> None:
        await self.client.destroy(Tables.ITEMS, item_id)
        logger.info(f"Deleted item {item_id}")

    async def _item_fields(self, data: Dict[str, Any]) -> Dict[str, Any]:
        fields = {k: v for k, v in data.items() if k not in READ_ONLY_FIELDS and v is not None}

        customer = fields.pop("customerId", None)
        if customer:
            fields[ITEM_CUSTOMER_LINK] = [await self._resolve_customer_id(customer)]

        if "photos" in fields:
            # Attachment cells keep no order key, so they are written in display order
            ordered = sort_photos_by_order(convert_to_ordered_photos([self._photo(p) for p in fields["photos"]]))
            fields["photos"] = [{"url": get_photo_url(p)} for p in ordered]

        return fields

    async def _resolve_customer_id(self, customer: str) -> str:
        if customer.startswith("rec"):
            return customer

        user = await self.get_user_by_email(customer)
        if not user:
            raise CustomerNotFoundError(
                f"Customer not found with email: {customer}",
                context={"field_name": "customerId"}
            )
        return user.id

    @staticmethod
    def _photo(photo: Union[str, PhotoRef, Dict[str, Any]]) -> Union[str, PhotoRef]:
        if isinstance(photo, dict):
            return PhotoRef(url=photo["url"], order=photo.get("order"))
        return photo

    # ========================================================================
    # Containers
    # ========================================================================

    async def get_all_containers(self) -> List[Container]:
        records = await self.client.select(Tables.CONTAINERS, sort=[("receivingDate", "desc")])
        return [self.normalize.container(r) for r in records]

    async def create_container(self, data: Dict[str, Any]) -> Container:
        fields = {k: v for k, v in data.items() if k not in READ_ONLY_FIELDS | {"estimatedArrival"}}
        return self.normalize.container(await self.client.create(Tables.CONTAINERS, fields))

    async def update_container(self, container_id: str, changes: Dict[str, Any]) -> Container:
        fields = {k: v for k, v in changes.items() if k not in READ_ONLY_FIELDS | {"estimatedArrival"}}
        return self.normalize.container(await self.client.update(Tables.CONTAINERS, container_id, fields))

    # ========================================================================
    # Invoices
    # ========================================================================

    async def get_invoices_by_customer_id(self, customer_id: str) -> List[Invoice]:
        records = await self.client.select(
            Tables.INVOICES,
            formula=f"{{customerId}} = {escape_formula_value(customer_id)}",
            sort=[("createdAt", "desc")],
        )
        return [self.normalize.invoice(r) for r in records]

    async def get_invoice(self, invoice_id: str) -> Invoice:
        return self.normalize.invoice(await self.client.get(Tables.INVOICES, invoice_id))

    async def create_invoice(self, data: Dict[str, Any]) -> Invoice:
        fields = self._invoice_fields(data)
        record = await self.client.create(Tables.INVOICES, fields)
        logger.info(f"Created invoice {fields.get('invoiceNumber')} for customer {fields.get('customerId')}")
        return self.normalize.invoice(record)

    async def update_invoice(self, invoice_id: str, changes: Dict[str, Any]) -> Invoice:
        fields = self._invoice_fields(changes)
        return self.normalize.invoice(await self.client.update(Tables.INVOICES, invoice_id, fields))

    @staticmethod
    def _invoice_fields(data: Dict[str, Any]) -> Dict[str, Any]:
        fields = {
            k: v for k, v in data.items()
            if k not in {"id", "totalAmount", "issueDate", "createdTime"} and v is not None
        }
        if isinstance(fields.get("items"), list):
            fields["items"] = json.dumps(fields["items"])
        return fields

    # ========================================================================
    # Support requests
    # ========================================================================

    async def get_support_requests_by_customer_id(self, customer_id: str) -> List[SupportRequest]:
        return [
            request for request in await self.get_all_support_requests()
            if request.customer_id == customer_id
        ]

    async def get_all_support_requests(self) -> List[SupportRequest]:
        records = await self.client.select(Tables.SUPPORT_REQUESTS, sort=[("createdAt", "desc")])
        return [self.normalize.support_request(r) for r in records]

    async def create_support_request(self, data: Dict[str, Any]) -> SupportRequest:
        fields = {
            k: v for k, v in data.items()
            if k not in READ_ONLY_FIELDS | SUPPORT_LOOKUP_FIELDS and v is not None
        }
        fields.setdefault("status", SupportStatus.OPEN.value)
        if fields.get("customerId"):
            fields["customerId"] = [fields["customerId"]]
        record = await self.client.create(Tables.SUPPORT_REQUESTS, fields)
        logger.info(f"Created support request {record['id']}")
        return self.normalize.support_request(record)

    async def update_support_request_status(
        self,
        request_id: str,
        status: SupportStatus
    ) -> SupportRequest:
        now = utc_now_iso()
        fields: Dict[str, Any] = {"status": SupportStatus(status).value, "updatedAt": now}
        if status == SupportStatus.RESOLVED:
            fields["resolvedAt"] = now
        record = await self.client.update(Tables.SUPPORT_REQUESTS, request_id, fields)
        logger.info(f"Support request {request_id} moved to {fields['status']}")
        return self.normalize.support_request(record)

    async def update_support_request(self, request_id: str, changes: Dict[str, Any]) -> SupportRequest:
        fields = {
            k: v for k, v in changes.items()
            if k not in READ_ONLY_FIELDS | SUPPORT_LOOKUP_FIELDS | {"customerId", "message"}
        }
        fields["updatedAt"] = utc_now_iso()
        record = await self.client.update(Tables.SUPPORT_REQUESTS, request_id, fields)
        return self.normalize.support_request(record)

    # ========================================================================
    # Announcements
    # ========================================================================

    async def get_active_announcements(self) -> List[Announcement]:
        records = await self.client.select(
            Tables.ANNOUNCEMENTS,
            formula="{isActive} = TRUE()",
            sort=[("createdAt", "desc")],
        )
        return [self.normalize.announcement(r) for r in records]

    async def get_all_announcements(self) -> List[Announcement]:
        records = await self.client.select(Tables.ANNOUNCEMENTS, sort=[("createdAt", "desc")])
        return [self.normalize.announcement(r) for r in records]

    async def create_announcement(self, data: Dict[str, Any]) -> Announcement:
        fields = {k: v for k, v in data.items() if k not in {"id", "message"} and v is not None}
        fields.setdefault("createdAt", utc_now_iso())
        fields.setdefault("isActive", True)
        return self.normalize.announcement(await self.client.create(Tables.ANNOUNCEMENTS, fields))

    async def update_announcement(self, announcement_id: str, changes: Dict[str, Any]) -> Announcement:
        fields = {k: v for k, v in changes.items() if k not in READ_ONLY_FIELDS | {"message"}}
        return self.normalize.announcement(
            await self.client.update(Tables.ANNOUNCEMENTS, announcement_id, fields)
        )

    # ========================================================================
    # Settings
    # ========================================================================

    async def get_system_settings(self) -> Optional[SystemSettings]:
        record = await self.client.first(Tables.SETTINGS, SETTINGS_FORMULA)
        return self.normalize.system_settings(record) if record else None

    async def get_rates(self) -> SystemSettings:
        """Stored settings, or the configured defaults when none are stored."""
        stored = await self.get_system_settings()
        if stored:
            return stored
        return SystemSettings(
            usd_to_ghs_rate=self.config.DEFAULT_USD_TO_GHS_RATE,
            usd_to_cny_rate=self.config.DEFAULT_USD_TO_CNY_RATE,
            sea_shipping_rate_per_cbm=self.config.DEFAULT_SEA_RATE_PER_CBM,
            air_shipping_rate_per_kg=self.config.DEFAULT_AIR_RATE_PER_KG,
        )

    async def update_system_settings(self, changes: Dict[str, Any]) -> SystemSettings:
        current = await self.get_system_settings()
        if not current or not current.record_id:
            raise RecordNotFoundError("Settings record not found", context={"table": Tables.SETTINGS})

        fields = {k: v for k, v in changes.items() if k not in READ_ONLY_FIELDS and v is not None}
        fields["updatedAt"] = utc_now_iso()
        record = await self.client.update(Tables.SETTINGS, current.record_id, fields)
        logger.info(f"System settings updated: {sorted(fields)}")
        return self.normalize.system_settings(record)

    # ========================================================================
    # Warehouses
    # ========================================================================

    async def get_all_warehouses(self) -> List[Warehouse]:
        records = await self.client.select(Tables.WAREHOUSES, sort=[("name", "asc")])
        return [self.normalize.warehouse(r) for r in records]

    async def get_active_warehouses(self, kind: WarehouseType = WarehouseType.ALL) -> List[Warehouse]:
        formula = "{isActive} = TRUE()"
        if kind == WarehouseType.ORIGIN:
            formula = "AND({isActive} = TRUE(), {isOrigin} = TRUE())"
        elif kind == WarehouseType.DESTINATION:
            formula = "AND({isActive} = TRUE(), {isDestination} = TRUE())"

        records = await self.client.select(Tables.WAREHOUSES, formula=formula, sort=[("name", "asc")])
        return [self.normalize.warehouse(r) for r in records]

    async def create_warehouse(self, data: Dict[str, Any]) -> Warehouse:
        fields = {k: v for k, v in data.items() if k not in READ_ONLY_FIELDS}
        now = utc_now_iso()
        fields["createdAt"] = now
        fields["updatedAt"] = now
        return self.normalize.warehouse(await self.client.create(Tables.WAREHOUSES, fields))

    async def update_warehouse(self, warehouse_id: str, changes: Dict[str, Any]) -> Warehouse:
        fields = {k: v for k, v in changes.items() if k not in READ_ONLY_FIELDS}
        fields["updatedAt"] = utc_now_iso()
        return self.normalize.warehouse(await self.client.update(Tables.WAREHOUSES, warehouse_id, fields))

    async def delete_warehouse(self, warehouse_id: str) -> None:
        await self.client.destroy(Tables.WAREHOUSES, warehouse_id)
        logger.info(f"Deleted warehouse {warehouse_id}")

