"""Point-in-time statistics over fulfillment orders for the admin dashboard.

Figures are computed from a plain read of the order store; an order that
changes while the numbers are being added up may be counted in its old or
its new state.
"""

from collections import Counter
from datetime import datetime

from protean.utils.globals import current_domain

from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.status import INACTIVE_STATUSES, OrderStatus

_PAGE_SIZE = 500
_MS_PER_HOUR = 3_600_000


def _iter_orders(start_date: datetime | None, end_date: datetime | None):
    criteria = {}
    if start_date is not None:
        criteria["created_at__gte"] = start_date
    if end_date is not None:
        criteria["created_at__lte"] = end_date

    query = current_domain.repository_for(FulfillmentOrder)._dao.query.filter(**criteria)
    offset = 0
    while True:
        page = query.offset(offset).limit(_PAGE_SIZE).all()
        yield from page.items
        offset += len(page.items)
        if not page.items or offset >= page.total:
            return


def compute_order_stats(start_date: datetime | None = None, end_date: datetime | None = None) -> dict:
    """Counts, revenue, delivered profit and processing time for orders created in range."""
    status_counts: Counter = Counter()
    total_revenue = 0
    total_profit = 0
    priority_count = 0
    issue_count = 0
    processing_times: list[float] = []

    for order in _iter_orders(start_date, end_date):
        status_counts[order.status] += 1
        total_revenue += order.order_value or 0
        if order.is_priority:
            priority_count += 1
        if order.has_issue:
            issue_count += 1

        if order.status == OrderStatus.DELIVERED.value:
            total_profit += order.profit or 0
            if order.delivered_at and order.wallet_deducted_at:
                elapsed = order.delivered_at - order.wallet_deducted_at
                processing_times.append(elapsed.total_seconds() * 1000)

    inactive = {status.value for status in INACTIVE_STATUSES}
    avg_ms = round(sum(processing_times) / len(processing_times)) if processing_times else 0

    return {
        "total_orders": sum(status_counts.values()),
        "status_counts": dict(status_counts),
        "active_count": sum(count for status, count in status_counts.items() if status not in inactive),
        "total_revenue": total_revenue,
        "total_profit": total_profit,
        "avg_processing_time_ms": avg_ms,
        "avg_processing_time_hours": round(avg_ms / _MS_PER_HOUR, 2),
        "priority_count": priority_count,
        "issue_count": issue_count,
    }
