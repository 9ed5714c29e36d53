"""Order board — the admin listing of fulfillment orders.

One row per order, kept current by a projector so that listing, filtering
and searching never load full aggregates with their history and notes.
"""

from datetime import datetime

import structlog
from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.order.events import (
    FulfillmentOrderCreated,
    OrderFlagsUpdated,
    OrderStatusChanged,
    StaffAssigned,
    TrackingUpdated,
)
from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.status import INACTIVE_STATUSES, OrderStatus

logger = structlog.get_logger(__name__)

MAX_PAGE_SIZE = 100
_SCAN_PAGE_SIZE = 500
_SEARCHABLE = ("order_name", "customer_name", "customer_email", "sku", "tracking_number")


@fulfillment.projection
class OrderBoardView:
    order_id = Identifier(identifier=True, required=True)
    commerce_order_id = Identifier()
    user_id = Identifier(required=True)
    store_id = Identifier()
    order_name = String()
    store_name = String()
    customer_name = String()
    customer_email = String()
    sku = String(max_length=500)
    item_count = Integer(default=0)
    order_value = Integer(default=0)
    status = String(required=True)
    is_priority = Boolean(default=False)
    is_delayed = Boolean(default=False)
    has_issue = Boolean(default=False)
    assigned_picker_id = Identifier()
    assigned_packer_id = Identifier()
    tracking_number = String()
    courier_provider = String()
    created_at = DateTime()
    updated_at = DateTime()


def _view_from_order(order: FulfillmentOrder) -> OrderBoardView:
    return OrderBoardView(
        order_id=str(order.id),
        commerce_order_id=order.commerce_order_id,
        user_id=order.user_id,
        store_id=order.store_id,
        order_name=order.order_name,
        store_name=order.store_name,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        sku=order.sku,
        item_count=order.item_count,
        order_value=order.order_value,
        status=order.status,
        is_priority=order.is_priority,
        is_delayed=order.is_delayed,
        has_issue=order.has_issue,
        assigned_picker_id=order.assigned_picker_id,
        assigned_packer_id=order.assigned_packer_id,
        tracking_number=order.tracking_number,
        courier_provider=order.courier_provider,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _row_for(event, event_name: str) -> OrderBoardView | None:
    """The board row ``event`` applies to, rebuilt from the order if it has gone missing.

    Returns ``None`` when neither exists; the event is then skipped, since
    the order change it reports has already been committed.
    """
    try:
        return current_domain.repository_for(OrderBoardView).get(event.order_id)
    except ObjectNotFoundError:
        pass

    try:
        order = current_domain.repository_for(FulfillmentOrder).get(event.order_id)
    except ObjectNotFoundError:
        logger.warning("Board row missing, event skipped", order_id=str(event.order_id), event_name=event_name)
        return None

    logger.warning("Board row missing, rebuilt from order", order_id=str(event.order_id), event_name=event_name)
    return _view_from_order(order)


@fulfillment.projector(projector_for=OrderBoardView, aggregates=[FulfillmentOrder])
class OrderBoardProjector:
    @on(FulfillmentOrderCreated)
    def on_order_created(self, event):
        current_domain.repository_for(OrderBoardView).add(
            OrderBoardView(
                order_id=event.order_id,
                commerce_order_id=event.commerce_order_id,
                user_id=event.user_id,
                store_id=event.store_id,
                order_name=event.order_name,
                store_name=event.store_name,
                customer_name=event.customer_name,
                customer_email=event.customer_email,
                sku=event.sku,
                item_count=event.item_count,
                order_value=event.order_value,
                status=event.status,
                created_at=event.created_at,
                updated_at=event.created_at,
            )
        )

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        view = _row_for(event, "OrderStatusChanged")
        if view is None:
            return
        view.status = event.new_status
        view.updated_at = event.changed_at
        current_domain.repository_for(OrderBoardView).add(view)

    @on(StaffAssigned)
    def on_staff_assigned(self, event):
        view = _row_for(event, "StaffAssigned")
        if view is None:
            return
        view.assigned_picker_id = event.assigned_picker_id
        view.assigned_packer_id = event.assigned_packer_id
        view.updated_at = event.assigned_at
        current_domain.repository_for(OrderBoardView).add(view)

    @on(TrackingUpdated)
    def on_tracking_updated(self, event):
        view = _row_for(event, "TrackingUpdated")
        if view is None:
            return
        view.tracking_number = event.tracking_number
        view.courier_provider = event.courier_provider
        view.updated_at = event.updated_at
        current_domain.repository_for(OrderBoardView).add(view)

    @on(OrderFlagsUpdated)
    def on_flags_updated(self, event):
        view = _row_for(event, "OrderFlagsUpdated")
        if view is None:
            return
        view.is_priority = event.is_priority
        view.is_delayed = event.is_delayed
        view.has_issue = event.has_issue
        view.updated_at = event.updated_at
        current_domain.repository_for(OrderBoardView).add(view)


def _matches(view: OrderBoardView, search: str) -> bool:
    needle = search.lower()
    return any(needle in (getattr(view, field) or "").lower() for field in _SEARCHABLE)


def _search(query, search: str, offset: int, limit: int) -> tuple[list[OrderBoardView], int]:
    """Free-text search runs over the filtered rows in memory, then sorts and pages them."""
    rows = []
    scanned = 0
    while True:
        page = query.offset(scanned).limit(_SCAN_PAGE_SIZE).all()
        rows.extend(row for row in page.items if _matches(row, search))
        scanned += len(page.items)
        if not page.items or scanned >= page.total:
            break

    rows.sort(key=lambda row: row.created_at.timestamp() if row.created_at else 0, reverse=True)
    rows.sort(key=lambda row: not row.is_priority)
    return rows[offset : offset + limit], len(rows)


def list_board(
    status: str | None = None,
    user_id: str | None = None,
    store_id: str | None = None,
    assigned_picker_id: str | None = None,
    is_priority: bool | None = None,
    has_issue: bool | None = None,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[OrderBoardView], int]:
    """Filtered board rows, priority orders first and newest first within that.

    ``status="active"`` selects every order that still needs work. Returns
    the requested page and the total number of matching rows. Filters,
    ordering and paging run in the query; only ``search`` is applied in
    memory.
    """
    limit = max(1, min(limit, MAX_PAGE_SIZE))
    offset = max(0, offset)

    criteria = {}
    if status == "active":
        criteria["status__in"] = [s.value for s in OrderStatus if s not in INACTIVE_STATUSES]
    elif status:
        criteria["status"] = status
    if user_id:
        criteria["user_id"] = user_id
    if store_id:
        criteria["store_id"] = store_id
    if assigned_picker_id:
        criteria["assigned_picker_id"] = assigned_picker_id
    if has_issue is not None:
        criteria["has_issue"] = has_issue
    if start_date is not None:
        criteria["created_at__gte"] = start_date
    if end_date is not None:
        criteria["created_at__lte"] = end_date

    dao = current_domain.repository_for(OrderBoardView)._dao

    if search:
        if is_priority is not None:
            criteria["is_priority"] = is_priority
        return _search(dao.query.filter(**criteria), search, offset, limit)

    # Priority rows come first, so page through the priority group and then the rest
    rows = []
    total = 0
    for priority in (True, False) if is_priority is None else (is_priority,):
        query = dao.query.filter(**criteria, is_priority=priority).order_by("-created_at")
        wanted = limit - len(rows)
        if wanted > 0:
            page = query.offset(max(0, offset - total)).limit(wanted).all()
            rows.extend(page.items)
        else:
            page = query.limit(1).all()
        total += page.total
    return rows, total
