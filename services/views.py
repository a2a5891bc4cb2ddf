"""
Role views: filtering, grouping and aggregation over fetched records.

Everything here is pure. Routes fetch the records (in parallel where the
view needs several tables) and hand them to these functions.
"""

import math
from collections import OrderedDict
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Union
from models.announcement import Announcement
from models.base import InvoiceStatus, ShipmentStatus, ShippingMethod, SupportCategory, SupportStatus
from models.container import Container
from models.invoice import Invoice
from models.item import Item
from models.support_request import SupportRequest
from models.user import User
from schemas.api import (
    AdminDashboardView,
    AdminSupportView,
    ArrivalEstimate,
    ChinaDashboardStats,
    ContainerArrivalView,
    ContainerManagementView,
    ContainerSummary,
    CostTotals,
    CustomerDashboardView,
    DateBucket,
    EstimatedArrivalView,
    InvoicesView,
    PackagesView,
    StatusCounts,
    StatusView,
    SupportStats,
    SupportView,
    TaggedItem,
    TaggingView,
    VirtualContainer,
)
from services.helpers import parse_date

ALL = "all"
UNKNOWN_CUSTOMER = "Unknown Customer"
RECENT_ITEMS_LIMIT = 10
DATE_BUCKET_LIMIT = 7
DASHBOARD_RECENT_LIMIT = 5

StatusFilter = Union[ShipmentStatus, str, None]


# ============================================================================
# Shared filters and aggregates
# ============================================================================

def matches_search(query: Optional[str], *values: Optional[str]) -> bool:
    """Case-insensitive substring match against any of the values."""
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return any(value and needle in value.lower() for value in values)


def matches_status(status: StatusFilter, actual) -> bool:
    if status is None or status == "" or status == ALL:
        return True
    return actual == status


def _item_date(item: Item) -> Optional[datetime]:
    return parse_date(item.created_at or item.receiving_date)


def sort_newest_first(items: Iterable[Item]) -> List[Item]:
    """Newest first by createdAt, falling back to receivingDate; undated items last."""
    return sorted(items, key=lambda item: _item_date(item) or datetime.min, reverse=True)


def status_counts(items: Sequence[Item], fold_picked_up: bool = False) -> StatusCounts:
    """
    Count items per status.

    Args:
        items: Items to count
        fold_picked_up: Also count picked-up items as delivered (customer views)
    """
    counts = {status: 0 for status in ShipmentStatus}
    for item in items:
        counts[item.status] += 1

    delivered = counts[ShipmentStatus.DELIVERED]
    if fold_picked_up:
        delivered += counts[ShipmentStatus.PICKED_UP]

    return StatusCounts(
        total=len(items),
        china_warehouse=counts[ShipmentStatus.CHINA_WAREHOUSE],
        in_transit=counts[ShipmentStatus.IN_TRANSIT],
        arrived_ghana=counts[ShipmentStatus.ARRIVED_GHANA],
        ready_for_pickup=counts[ShipmentStatus.READY_FOR_PICKUP],
        delivered=delivered,
        picked_up=counts[ShipmentStatus.PICKED_UP],
        completed=counts[ShipmentStatus.DELIVERED] + counts[ShipmentStatus.PICKED_UP],
    )


def cost_totals(items: Sequence[Item]) -> CostTotals:
    return CostTotals(
        item_count=len(items),
        total_cbm=round(sum(item.cbm or 0 for item in items), 6),
        total_usd=round(sum(item.cost_usd or 0 for item in items), 2),
        total_cedis=round(sum(item.cost_cedis or 0 for item in items), 2),
    )


def customer_names(customers: Iterable[User]) -> Dict[str, str]:
    return {customer.id: customer.name for customer in customers}


# ============================================================================
# Admin
# ============================================================================

def search_customers(customers: Sequence[User], search: Optional[str] = None) -> List[User]:
    return [
        customer for customer in customers
        if matches_search(search, customer.name, customer.email, customer.phone)
    ]


def support_stats(requests: Sequence[SupportRequest]) -> SupportStats:
    counts = {status: 0 for status in SupportStatus}
    for request in requests:
        counts[request.status] += 1
    return SupportStats(
        total=len(requests),
        open=counts[SupportStatus.OPEN],
        in_progress=counts[SupportStatus.IN_PROGRESS],
        resolved=counts[SupportStatus.RESOLVED],
        closed=counts[SupportStatus.CLOSED],
    )


def attach_customer_details(
    requests: Sequence[SupportRequest],
    customers: Sequence[User]
) -> List[SupportRequest]:
    """Copy of each request with the customer's name and email filled in."""
    by_id = {customer.id: customer for customer in customers}
    resolved = []
    for request in requests:
        customer = by_id.get(request.customer_id or "")
        resolved.append(request.model_copy(update={
            "customer_name": customer.name if customer else UNKNOWN_CUSTOMER,
            "customer_email": customer.email if customer else None,
        }))
    return resolved


def admin_support_view(
    requests: Sequence[SupportRequest],
    customers: Sequence[User],
    status: Union[SupportStatus, str, None] = None,
    category: Union[SupportCategory, str, None] = None
) -> AdminSupportView:
    """Stats cover every request; the list honours the filters."""
    filtered = [
        request for request in requests
        if matches_status(status, request.status) and matches_status(category, request.category)
    ]
    return AdminSupportView(
        requests=attach_customer_details(filtered, customers),
        stats=support_stats(requests),
    )


def admin_dashboard(
    customers: Sequence[User],
    items: Sequence[Item],
    requests: Sequence[SupportRequest],
    announcements: Sequence[Announcement]
) -> AdminDashboardView:
    return AdminDashboardView(
        total_customers=len(customers),
        status_counts=status_counts(items),
        open_support_requests=sum(
            1 for r in requests if r.status in (SupportStatus.OPEN, SupportStatus.IN_PROGRESS)
        ),
        active_announcements=sum(1 for a in announcements if a.is_active),
    )


# ============================================================================
# China team
# ============================================================================

def china_dashboard(
    items: Sequence[Item],
    customers: Sequence[User],
    now: Optional[datetime] = None
) -> ChinaDashboardStats:
    now = now or datetime.utcnow()
    week_ago = now - timedelta(days=7)

    received_dates = [(item, parse_date(item.receiving_date)) for item in items]
    recent = sorted(received_dates, key=lambda pair: pair[1] or datetime.min, reverse=True)

    buckets: Dict[date, int] = {}
    for _, received in received_dates:
        if received:
            buckets[received.date()] = buckets.get(received.date(), 0) + 1
    newest_days = sorted(buckets.items(), reverse=True)[:DATE_BUCKET_LIMIT]

    totals = cost_totals(items)

    return ChinaDashboardStats(
        status_counts=status_counts(items),
        ready_to_package=len(packaging_candidates(items)),
        packaged=sum(1 for item in items if item.carton_number),
        sea_shipping=sum(1 for item in items if item.shipping_method == ShippingMethod.SEA),
        air_shipping=sum(1 for item in items if item.shipping_method == ShippingMethod.AIR),
        total_value_usd=totals.total_usd,
        total_value_cedis=totals.total_cedis,
        total_cbm=totals.total_cbm,
        total_customers=len(customers),
        customers_with_items=len({item.customer_id for item in items if item.customer_id}),
        received_last_7_days=sum(1 for _, received in received_dates if received and received >= week_ago),
        damaged=sum(1 for item in items if item.is_damaged),
        missing=sum(1 for item in items if item.is_missing),
        recent_items=[item for item, _ in recent[:RECENT_ITEMS_LIMIT]],
        items_by_date=[DateBucket(date=day.isoformat(), count=count) for day, count in newest_days],
    )


def packaging_candidates(items: Iterable[Item]) -> List[Item]:
    """Items still at the China warehouse that have not been put in a carton."""
    return [
        item for item in items
        if item.status == ShipmentStatus.CHINA_WAREHOUSE and not item.carton_number
    ]


def loadable_items(items: Iterable[Item]) -> List[Item]:
    """Cartoned items at the China warehouse with no container yet."""
    return [
        item for item in items
        if item.carton_number
        and not item.container_number
        and item.status == ShipmentStatus.CHINA_WAREHOUSE
    ]


def group_by_container(items: Iterable[Item]) -> "OrderedDict[str, List[Item]]":
    grouped: "OrderedDict[str, List[Item]]" = OrderedDict()
    for item in items:
        if item.container_number:
            grouped.setdefault(item.container_number, []).append(item)
    return grouped


def container_summaries(items: Iterable[Item]) -> List[ContainerSummary]:
    summaries = []
    for number, members in group_by_container(items).items():
        totals = cost_totals(members)
        summaries.append(ContainerSummary(
            container_number=number,
            item_count=totals.item_count,
            total_cbm=totals.total_cbm,
            total_value=totals.total_usd,
            items=members,
        ))
    return sorted(summaries, key=lambda s: s.container_number, reverse=True)


def container_management_view(items: Sequence[Item]) -> ContainerManagementView:
    return ContainerManagementView(
        containers=container_summaries(items),
        available_items=loadable_items(items),
    )


# ============================================================================
# Ghana team
# ============================================================================

def virtual_containers(items: Iterable[Item]) -> List[VirtualContainer]:
    """
    Rebuild containers from the items carrying a container number.

    The container takes the status and shipping method of its first item and
    the earliest receiving date among its items.
    """
    containers = []
    for number, members in group_by_container(items).items():
        dates = sorted(item.receiving_date for item in members if item.receiving_date)
        totals = cost_totals(members)
        containers.append(VirtualContainer(
            container_number=number,
            status=members[0].status,
            receiving_date=dates[0] if dates else None,
            shipping_method=members[0].shipping_method,
            item_count=totals.item_count,
            total_cbm=totals.total_cbm,
            total_value_usd=totals.total_usd,
        ))
    return containers


def _arrival_sort_key(container: VirtualContainer):
    received = parse_date(container.receiving_date) or datetime.max
    return (container.status != ShipmentStatus.IN_TRANSIT, received)


def container_arrival_view(
    items: Sequence[Item],
    search: Optional[str] = None,
    status: StatusFilter = None
) -> ContainerArrivalView:
    """In-transit containers first, then oldest receiving date first."""
    containers = virtual_containers(items)
    filtered = [
        container for container in containers
        if matches_search(search, container.container_number)
        and matches_status(status, container.status)
    ]
    return ContainerArrivalView(
        containers=sorted(filtered, key=_arrival_sort_key),
        in_transit=sum(1 for c in containers if c.status == ShipmentStatus.IN_TRANSIT),
        arrived=sum(1 for c in containers if c.status == ShipmentStatus.ARRIVED_GHANA),
    )


def tagging_view(
    items: Sequence[Item],
    customers: Sequence[User],
    search: Optional[str] = None
) -> TaggingView:
    names = customer_names(customers)
    untagged = [
        item for item in items
        if not item.customer_id
        and matches_search(search, item.tracking_number, item.name, item.container_number)
    ]
    tagged = []
    for item in items:
        if not item.customer_id:
            continue
        name = names.get(item.customer_id, UNKNOWN_CUSTOMER)
        if matches_search(search, item.tracking_number, item.name, item.container_number, name):
            tagged.append(TaggedItem(item=item, customer_name=name))
    return TaggingView(untagged=untagged, tagged=tagged)


# ============================================================================
# Customer
# ============================================================================

def pending_invoice_amount(invoices: Iterable[Invoice]) -> float:
    return round(sum(inv.total_amount for inv in invoices if inv.status == InvoiceStatus.PENDING), 2)


def customer_dashboard(
    items: Sequence[Item],
    invoices: Sequence[Invoice],
    requests: Sequence[SupportRequest],
    announcements: Sequence[Announcement]
) -> CustomerDashboardView:
    return CustomerDashboardView(
        status_counts=status_counts(items),
        pending_invoice_amount=pending_invoice_amount(invoices),
        recent_items=sort_newest_first(items)[:DASHBOARD_RECENT_LIMIT],
        open_support_requests=sum(
            1 for r in requests if r.status in (SupportStatus.OPEN, SupportStatus.IN_PROGRESS)
        ),
        announcements=list(announcements),
    )


def packages_view(
    items: Sequence[Item],
    search: Optional[str] = None,
    status: StatusFilter = None
) -> PackagesView:
    """Counts and totals cover every package; the list honours the filters."""
    filtered = [
        item for item in sort_newest_first(items)
        if matches_status(status, item.status)
        and matches_search(search, item.tracking_number, item.name, item.container_number)
    ]
    totals = cost_totals(items)
    return PackagesView(
        items=filtered,
        status_counts=status_counts(items, fold_picked_up=True),
        total_value_usd=totals.total_usd,
        total_value_cedis=totals.total_cedis,
    )


def status_view(
    items: Sequence[Item],
    search: Optional[str] = None,
    status: StatusFilter = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> StatusView:
    """Date bounds are whole days: start at 00:00, end at 23:59:59.999999."""
    start = datetime.combine(start_date, time.min) if start_date else None
    end = datetime.combine(end_date, time.max) if end_date else None

    def in_range(item: Item) -> bool:
        if not start and not end:
            return True
        when = _item_date(item)
        if when is None:
            return False
        if start and when < start:
            return False
        if end and when > end:
            return False
        return True

    filtered = [
        item for item in items
        if matches_search(search, item.name, item.tracking_number)
        and matches_status(status, item.status)
        and in_range(item)
    ]
    return StatusView(items=filtered, status_counts=status_counts(items))


def days_until(target: Optional[str], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days until the target, rounded up; negative once it has passed."""
    when = parse_date(target)
    if when is None:
        return None
    now = now or datetime.utcnow()
    return math.ceil((when - now).total_seconds() / 86400)


def estimated_arrival_view(
    items: Sequence[Item],
    containers: Sequence[Container],
    now: Optional[datetime] = None
) -> EstimatedArrivalView:
    grouped = group_by_container(items)
    estimates = []
    for container in containers:
        members = grouped.get(container.container_number)
        if not members:
            continue
        estimates.append(ArrivalEstimate(
            container=container,
            items=members,
            total_cost_usd=cost_totals(members).total_usd,
            days_until_arrival=days_until(container.estimated_arrival, now),
        ))
    return EstimatedArrivalView(
        containers=estimates,
        unassigned_items=[item for item in items if not item.container_number],
    )


def invoices_view(invoices: Sequence[Invoice]) -> InvoicesView:
    return InvoicesView(
        invoices=list(invoices),
        total_amount=round(sum(inv.total_amount for inv in invoices), 2),
        pending_amount=pending_invoice_amount(invoices),
        paid_amount=round(sum(inv.total_amount for inv in invoices if inv.status == InvoiceStatus.PAID), 2),
    )


def support_view(requests: Sequence[SupportRequest]) -> SupportView:
    return SupportView(requests=list(requests), stats=support_stats(requests))
