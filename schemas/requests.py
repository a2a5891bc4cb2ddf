"""
Pydantic schemas for API request bodies

Bodies accept camelCase (what the dashboards send) or snake_case.
to_fields() yields the camelCase column values the records layer writes.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from models.base import (
    AnnouncementType,
    Currency,
    DimensionUnit,
    InvoiceStatus,
    ShipmentStatus,
    ShippingMethod,
    SupportCategory,
    SupportStatus,
    WeightUnit,
)
from services.helpers import is_valid_email


class RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_fields(self, exclude: Optional[set] = None) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json", exclude=exclude)


def _passwords_match(password: str, confirm: Optional[str]) -> None:
    if confirm is not None and password != confirm:
        raise ValueError("Passwords do not match")


def _valid_email(value: str) -> str:
    value = value.strip().lower()
    if not is_valid_email(value):
        raise ValueError("Please enter a valid email address")
    return value


# ============================================================================
# Auth
# ============================================================================

class LoginRequest(RequestModel):
    email: str
    password: str


class SignupRequest(RequestModel):
    name: str = Field(..., min_length=1)
    email: str
    password: str = Field(..., min_length=8)
    confirm_password: str
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _valid_email(v)

    @model_validator(mode="after")
    def check_passwords(self):
        _passwords_match(self.password, self.confirm_password)
        return self


class ChangePasswordRequest(RequestModel):
    new_password: str = Field(..., min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def check_passwords(self):
        _passwords_match(self.new_password, self.confirm_password)
        return self


class FirstLoginUpdate(RequestModel):
    is_first_login: bool


class ForgotPasswordRequest(RequestModel):
    email: str

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _valid_email(v)


class ResetPasswordRequest(RequestModel):
    token: str
    new_password: str = Field(..., min_length=6)
    confirm_password: str

    @model_validator(mode="after")
    def check_passwords(self):
        _passwords_match(self.new_password, self.confirm_password)
        return self


# ============================================================================
# Items
# ============================================================================

class ItemCreate(RequestModel):
    """Receiving form: one parcel arriving at the China warehouse"""
    tracking_number: Optional[str] = Field(None, description="Generated when omitted")
    customer_id: Optional[str] = Field(None, description="Users record id or customer email")
    name: Optional[str] = None
    receiving_date: Optional[str] = None
    quantity: int = Field(1, ge=1)
    length: float = Field(0, ge=0)
    width: float = Field(0, ge=0)
    height: float = Field(0, ge=0)
    dimension_unit: DimensionUnit = DimensionUnit.CM
    shipping_method: ShippingMethod = ShippingMethod.SEA
    weight: Optional[float] = Field(None, gt=0)
    weight_unit: WeightUnit = WeightUnit.KG
    photos: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_method_inputs(self):
        if self.shipping_method == ShippingMethod.AIR and not self.weight:
            raise ValueError("Weight is required for air shipping")
        return self


class ItemUpdate(RequestModel):
    name: Optional[str] = None
    tracking_number: Optional[str] = None
    customer_id: Optional[str] = None
    container_number: Optional[str] = None
    carton_number: Optional[str] = None
    receiving_date: Optional[str] = None
    status: Optional[ShipmentStatus] = None
    is_damaged: Optional[bool] = None
    is_missing: Optional[bool] = None
    photos: Optional[List[str]] = None


class ItemDetailsUpdate(RequestModel):
    """Ghana tagging form; cost is recomputed from these values"""
    tracking_number: str = Field(..., min_length=1)
    customer_id: str = Field(..., min_length=1)
    name: Optional[str] = None
    quantity: int = Field(1, ge=1)
    receiving_date: Optional[str] = None
    shipping_method: ShippingMethod = ShippingMethod.SEA
    length: Optional[float] = Field(None, gt=0)
    width: Optional[float] = Field(None, gt=0)
    height: Optional[float] = Field(None, gt=0)
    dimension_unit: DimensionUnit = DimensionUnit.CM
    weight: Optional[float] = Field(None, gt=0)
    weight_unit: WeightUnit = WeightUnit.KG

    @field_validator("tracking_number", "customer_id")
    @classmethod
    def strip(cls, v: str) -> str:
        return v.strip()

    @model_validator(mode="after")
    def check_method_inputs(self):
        if self.shipping_method == ShippingMethod.SEA and not (self.length and self.width and self.height):
            raise ValueError("Please enter all dimensions (Length, Width, Height) for sea shipping")
        if self.shipping_method == ShippingMethod.AIR and not self.weight:
            raise ValueError("Please enter weight (required for air shipping)")
        return self


# ============================================================================
# Packaging / containers
# ============================================================================

class PackagingRequest(RequestModel):
    customer_id: str
    item_ids: List[str] = Field(..., min_length=1)
    carton_number: Optional[str] = None


class LoadContainerRequest(RequestModel):
    container_number: str = Field(..., min_length=1)
    item_ids: List[str] = Field(..., min_length=1)

    @field_validator("container_number")
    @classmethod
    def normalize_number(cls, v: str) -> str:
        v = v.strip().upper()
        if not v:
            raise ValueError("Container number is required")
        return v


# ============================================================================
# Customers / support / announcements
# ============================================================================

class CustomerCreateRequest(RequestModel):
    name: str = Field(..., min_length=1)
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return _valid_email(v)


class SupportRequestCreate(RequestModel):
    subject: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: SupportCategory = SupportCategory.GENERAL
    related_tracking_number: Optional[str] = None


class SupportStatusUpdate(RequestModel):
    status: SupportStatus


class SupportResponseUpdate(RequestModel):
    admin_response: str = Field(..., min_length=1)
    status: Optional[SupportStatus] = None


class AnnouncementCreate(RequestModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    type: AnnouncementType = AnnouncementType.GENERAL
    is_active: bool = True


class AnnouncementUpdate(RequestModel):
    title: Optional[str] = None
    content: Optional[str] = None
    type: Optional[AnnouncementType] = None
    is_active: Optional[bool] = None


# ============================================================================
# Settings / warehouses
# ============================================================================

class SettingsUpdate(RequestModel):
    usd_to_ghs_rate: Optional[float] = Field(None, gt=0)
    usd_to_cny_rate: Optional[float] = Field(None, gt=0)
    sea_shipping_rate_per_cbm: Optional[float] = Field(None, gt=0, alias="seaShippingRatePerCBM")
    air_shipping_rate_per_kg: Optional[float] = Field(None, gt=0)


class WarehouseCreate(RequestModel):
    name: str = Field(..., min_length=1)
    country: str
    city: str
    address: str = ""
    is_origin: bool = False
    is_destination: bool = False
    is_active: bool = True


class WarehouseUpdate(RequestModel):
    name: Optional[str] = None
    country: Optional[str] = None
    city: Optional[str] = None
    address: Optional[str] = None
    is_origin: Optional[bool] = None
    is_destination: Optional[bool] = None
    is_active: Optional[bool] = None


# ============================================================================
# Invoices
# ============================================================================

class InvoiceLineIn(RequestModel):
    item_id: Optional[str] = None
    description: str
    quantity: float = Field(1, gt=0)
    unit_price: float = Field(..., ge=0)


class InvoiceCreate(RequestModel):
    customer_id: str
    items: List[InvoiceLineIn] = Field(default_factory=list)
    shipping_charges: float = Field(0, ge=0)
    handling_charges: float = Field(0, ge=0)
    storage_charges: float = Field(0, ge=0)
    pickup_charges: float = Field(0, ge=0)
    tax: float = Field(0, ge=0)
    currency: Currency = Currency.USD
    description: Optional[str] = None
    due_date: Optional[str] = None
    notes: Optional[str] = None


class InvoiceUpdate(RequestModel):
    status: Optional[InvoiceStatus] = None
    due_date: Optional[str] = None
    notes: Optional[str] = None
