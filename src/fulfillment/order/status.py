"""Order status policy — which statuses an order may move to next.

Pure functions over the closed status enumeration. Administrators may skip
ahead any number of stages on the main path in a single transition, so an
order that jumps (for example) from ``sourcing`` to ``dispatched`` keeps
null ``sourced_at`` and ``packed_at`` timestamps. That is expected data, not
an integrity defect.

Main path:
    PENDING → SOURCING → SOURCED → PACKING → PACKED → READY_FOR_DISPATCH
    → DISPATCHED → SHIPPED → OUT_FOR_DELIVERY → DELIVERED
RTO path:
    RTO_INITIATED → RTO_DELIVERED → RETURNED
Side branches reachable from any non-terminal status:
    CANCELLED, FAILED (FAILED may only retry to PENDING or be CANCELLED)
"""

from enum import Enum

from protean.exceptions import ValidationError

from fulfillment.errors import InvalidTransitionError


class OrderStatus(Enum):
    PENDING = "pending"
    SOURCING = "sourcing"
    SOURCED = "sourced"
    PACKING = "packing"
    PACKED = "packed"
    READY_FOR_DISPATCH = "ready_for_dispatch"
    DISPATCHED = "dispatched"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    RTO_INITIATED = "rto_initiated"
    RTO_DELIVERED = "rto_delivered"
    RETURNED = "returned"
    CANCELLED = "cancelled"
    FAILED = "failed"


MAIN_PATH = (
    OrderStatus.PENDING,
    OrderStatus.SOURCING,
    OrderStatus.SOURCED,
    OrderStatus.PACKING,
    OrderStatus.PACKED,
    OrderStatus.READY_FOR_DISPATCH,
    OrderStatus.DISPATCHED,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
)

RTO_PATH = (
    OrderStatus.RTO_INITIATED,
    OrderStatus.RTO_DELIVERED,
    OrderStatus.RETURNED,
)

TERMINAL_STATUSES = frozenset({OrderStatus.DELIVERED, OrderStatus.RETURNED, OrderStatus.CANCELLED})

# Orders in these statuses are not counted as "active" on the admin board
INACTIVE_STATUSES = TERMINAL_STATUSES | {OrderStatus.FAILED}

# Milestone statuses and the timestamp field stamped the first time each is reached
STAGE_TIMESTAMP_FIELDS = {
    OrderStatus.SOURCED: "sourced_at",
    OrderStatus.PACKED: "packed_at",
    OrderStatus.DISPATCHED: "dispatched_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
}

# The commerce order knows a coarser vocabulary; unlisted statuses pass through
_COARSE_STATUS = {
    OrderStatus.SOURCED: "sourcing",
    OrderStatus.PACKED: "packing",
    OrderStatus.CANCELLED: "failed",
}


def parse_status(value) -> OrderStatus:
    """Coerce a raw status value into an ``OrderStatus``."""
    if isinstance(value, OrderStatus):
        return value
    if not value:
        raise ValidationError({"status": ["Status is required"]})
    try:
        return OrderStatus(str(value).strip().lower())
    except ValueError:
        raise ValidationError({"status": [f"Unknown status: {value}"]}) from None


def valid_transitions(current) -> list[OrderStatus]:
    """Return every status reachable from ``current`` in one transition.

    The list order is stable (forward states first, then side branches) so
    callers can render it directly.
    """
    current = parse_status(current)

    if current in TERMINAL_STATUSES:
        return []

    if current == OrderStatus.FAILED:
        return [OrderStatus.PENDING, OrderStatus.CANCELLED]

    if current in RTO_PATH:
        forward = list(RTO_PATH[RTO_PATH.index(current) + 1 :])
        return forward + [OrderStatus.CANCELLED, OrderStatus.FAILED]

    forward = list(MAIN_PATH[MAIN_PATH.index(current) + 1 :])
    return forward + [OrderStatus.RTO_INITIATED, OrderStatus.CANCELLED, OrderStatus.FAILED]


def can_transition(current, target) -> bool:
    return parse_status(target) in valid_transitions(current)


def assert_can_transition(current, target) -> OrderStatus:
    """Validate a transition and return the parsed target status."""
    current = parse_status(current)
    target = parse_status(target)
    allowed = valid_transitions(current)
    if target not in allowed:
        raise InvalidTransitionError(
            current_status=current.value,
            requested_status=target.value,
            valid_transitions=[s.value for s in allowed],
        )
    return target


def coarse_status(status) -> str:
    """Project a fulfillment status onto the commerce-order vocabulary."""
    status = parse_status(status)
    return _COARSE_STATUS.get(status, status.value)


def humanize_status(status) -> str:
    """``out_for_delivery`` → ``OUT FOR DELIVERY`` for customer-facing text."""
    return parse_status(status).value.replace("_", " ").upper()
