"""
Pydantic schemas for API response models
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import List, Optional
from datetime import datetime
from models.announcement import Announcement
from models.base import ShipmentStatus, ShippingMethod
from models.container import Container
from models.invoice import Invoice
from models.item import Item
from models.support_request import SupportRequest
from models.user import User


class ViewModel(BaseModel):
    """camelCase on the wire, like the records it carries"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Health Check Schemas
# ============================================================================

class ConfigStatus(ViewModel):
    is_valid: bool
    missing: List[str] = Field(default_factory=list)


class HealthCheckResponse(ViewModel):
    """Health check response model"""
    status: str = Field("healthy", description="Overall system status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    environment: str
    config: ConfigStatus
    table_service_connected: bool

    @model_validator(mode="after")
    def determine_status(self):
        """Determine overall health status"""
        if not self.config.is_valid:
            self.status = "unhealthy"
        elif not self.table_service_connected:
            self.status = "degraded"
        else:
            self.status = "healthy"
        return self

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "status": "healthy",
                "timestamp": "2024-01-15T10:30:00Z",
                "environment": "production",
                "config": {"isValid": True, "missing": []},
                "tableServiceConnected": True,
            }
        },
    )


# ============================================================================
# Auth Schemas
# ============================================================================

class TokenResponse(ViewModel):
    access_token: str
    token_type: str = "bearer"
    user: User
    requires_password_change: bool = False


class ForgotPasswordResponse(ViewModel):
    message: str
    account_exists: bool
    email_sent: bool = False


class MessageResponse(ViewModel):
    message: str


# ============================================================================
# Shared Aggregates
# ============================================================================

class StatusCounts(ViewModel):
    """Item counts per pipeline status; completed = delivered + picked up"""
    total: int = 0
    china_warehouse: int = 0
    in_transit: int = 0
    arrived_ghana: int = 0
    ready_for_pickup: int = 0
    delivered: int = 0
    picked_up: int = 0
    completed: int = 0


class CostTotals(ViewModel):
    item_count: int = 0
    total_cbm: float = 0
    total_usd: float = 0
    total_cedis: float = 0


class SupportStats(ViewModel):
    total: int = 0
    open: int = 0
    in_progress: int = 0
    resolved: int = 0
    closed: int = 0


class Badge(ViewModel):
    css_class: str
    label: str


# ============================================================================
# Admin Schemas
# ============================================================================

class AdminDashboardView(ViewModel):
    total_customers: int
    status_counts: StatusCounts
    open_support_requests: int
    active_announcements: int


class CustomerListView(ViewModel):
    customers: List[User]
    total: int


class AdminSupportView(ViewModel):
    requests: List[SupportRequest]
    stats: SupportStats


# ============================================================================
# China Team Schemas
# ============================================================================

class DateBucket(ViewModel):
    date: str
    count: int


class ChinaDashboardStats(ViewModel):
    status_counts: StatusCounts
    ready_to_package: int
    packaged: int
    sea_shipping: int
    air_shipping: int
    total_value_usd: float
    total_value_cedis: float
    total_cbm: float
    total_customers: int
    customers_with_items: int
    received_last_7_days: int
    damaged: int
    missing: int
    recent_items: List[Item]
    items_by_date: List[DateBucket]


class PackagingView(ViewModel):
    customer: User
    available_items: List[Item]


class CartonNumberResponse(ViewModel):
    carton_number: str


class PackagingResult(ViewModel):
    carton_number: str
    items: List[Item]
    totals: CostTotals


class ContainerSummary(ViewModel):
    container_number: str
    item_count: int
    total_cbm: float
    total_value: float
    items: List[Item] = Field(default_factory=list)


class ContainerManagementView(ViewModel):
    containers: List[ContainerSummary]
    available_items: List[Item]


class LoadContainerResult(ViewModel):
    container_number: str
    items_loaded: int
    items: List[Item]


# ============================================================================
# Ghana Team Schemas
# ============================================================================

class VirtualContainer(ViewModel):
    """A container reconstructed from the items that carry its number"""
    container_number: str
    status: ShipmentStatus
    receiving_date: Optional[str] = None
    shipping_method: Optional[ShippingMethod] = None
    item_count: int
    total_cbm: float
    total_value_usd: float


class ContainerArrivalView(ViewModel):
    containers: List[VirtualContainer]
    in_transit: int
    arrived: int


class ArrivalResult(ViewModel):
    container_number: str
    items_updated: int


class TaggedItem(ViewModel):
    item: Item
    customer_name: Optional[str] = None


class TaggingView(ViewModel):
    untagged: List[Item]
    tagged: List[TaggedItem]


class CustomerCreateResult(ViewModel):
    customer: User
    temporary_password: str
    email_sent: bool


class ImportRowResult(ViewModel):
    row_number: int
    tracking_number: str
    success: bool
    message: str


class ImportSummary(ViewModel):
    status: str
    total_rows: int
    success_count: int
    failure_count: int
    results: List[ImportRowResult]


# ============================================================================
# Customer Schemas
# ============================================================================

class CustomerDashboardView(ViewModel):
    status_counts: StatusCounts
    pending_invoice_amount: float
    recent_items: List[Item]
    open_support_requests: int
    announcements: List[Announcement]


class PackagesView(ViewModel):
    items: List[Item]
    status_counts: StatusCounts
    total_value_usd: float
    total_value_cedis: float


class StatusView(ViewModel):
    items: List[Item]
    status_counts: StatusCounts


class ArrivalEstimate(ViewModel):
    container: Container
    items: List[Item]
    total_cost_usd: float
    days_until_arrival: Optional[int] = None


class EstimatedArrivalView(ViewModel):
    containers: List[ArrivalEstimate]
    unassigned_items: List[Item]


class InvoicesView(ViewModel):
    invoices: List[Invoice]
    total_amount: float
    pending_amount: float
    paid_amount: float


class SupportView(ViewModel):
    requests: List[SupportRequest]
    stats: SupportStats


class UploadedPhotos(ViewModel):
    urls: List[str]
    thumbnails: List[str] = Field(default_factory=list, description="200px previews, same order as urls")
    folder: str


# ============================================================================
# Error Response Schema
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response"""
    error: str
    detail: Optional[str] = None
    timestamp: datetime = Field(default_factory=datetime.utcnow)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Resource not found",
                "detail": "The requested item does not exist",
                "timestamp": "2024-01-15T10:30:00Z"
            }
        }
    )

