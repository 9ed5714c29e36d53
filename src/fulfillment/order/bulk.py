"""Bulk operations over many fulfillment orders.

Each order is handled on its own, through the same commands a single-order
request would use, so every item gets its own unit of work and a failure on
one order never affects the others. Status updates carry the status just
read as ``expected_status`` and therefore share the transition path's
protection against concurrent writers.
"""

import json
from dataclasses import dataclass, field

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from fulfillment.errors import FulfillmentError, InvalidTransitionError
from fulfillment.order.assignment import AssignStaff
from fulfillment.order.flags import UpdateFlags
from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.transition import ChangeOrderStatus
from fulfillment.staff.access import authorize_actor

logger = structlog.get_logger(__name__)

DEFAULT_BULK_NOTE = "Bulk status update"


class BulkAction:
    UPDATE_STATUS = "update_status"
    ASSIGN_PICKER = "assign_picker"
    ASSIGN_PACKER = "assign_packer"
    MARK_PRIORITY = "mark_priority"
    UNMARK_PRIORITY = "unmark_priority"


@dataclass
class BulkResult:
    succeeded: list[str] = field(default_factory=list)
    failed: list[dict] = field(default_factory=list)

    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    def to_dict(self) -> dict:
        return {
            "succeeded": list(self.succeeded),
            "failed": [dict(item) for item in self.failed],
            "succeeded_count": self.succeeded_count,
            "failed_count": self.failed_count,
        }


class _ItemFailure(Exception):
    pass


def _error_message(exc: Exception) -> str:
    if isinstance(exc, (InvalidTransitionError, FulfillmentError)):
        return exc.message
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return "; ".join(f"{key}: {', '.join(str(m) for m in value)}" for key, value in messages.items())
    return str(messages or exc)


def run_bulk_operation(
    order_ids: list[str],
    action: str,
    actor_id: str,
    status: str | None = None,
    note: str | None = None,
    picker_id: str | None = None,
    packer_id: str | None = None,
    origin: str = "",
) -> BulkResult:
    """Apply ``action`` to every order in ``order_ids``, collecting per-order outcomes."""
    if not order_ids:
        raise ValidationError({"order_ids": ["Order IDs array is required"]})
    if not action:
        raise ValidationError({"action": ["Action is required"]})
    authorize_actor(actor_id)

    result = BulkResult()
    repo = current_domain.repository_for(FulfillmentOrder)

    for order_id in order_ids:
        try:
            order = repo.get(str(order_id))
        except ObjectNotFoundError:
            result.failed.append({"id": str(order_id), "error": "Order not found"})
            continue

        try:
            _apply(order, action, str(actor_id), status, note, picker_id, packer_id, origin)
        except _ItemFailure as exc:
            result.failed.append({"id": str(order_id), "error": str(exc)})
        except (ObjectNotFoundError, ValidationError, FulfillmentError) as exc:
            result.failed.append({"id": str(order_id), "error": _error_message(exc)})
        else:
            result.succeeded.append(str(order_id))

    logger.info(
        "Bulk operation completed",
        action=action,
        actor_id=str(actor_id),
        succeeded=result.succeeded_count,
        failed=result.failed_count,
    )
    return result


def _apply(order, action, actor_id, status, note, picker_id, packer_id, origin) -> None:
    if action == BulkAction.UPDATE_STATUS:
        if not status:
            raise _ItemFailure("Status required for status update")
        current_domain.process(
            ChangeOrderStatus(
                order_id=str(order.id),
                status=status,
                actor_id=actor_id,
                note=note or DEFAULT_BULK_NOTE,
                expected_status=order.status,
                origin=origin,
            ),
            asynchronous=False,
        )
    elif action == BulkAction.ASSIGN_PICKER:
        if picker_id:
            _assign(order, actor_id, "picker", picker_id)
    elif action == BulkAction.ASSIGN_PACKER:
        if packer_id:
            _assign(order, actor_id, "packer", packer_id)
    elif action in (BulkAction.MARK_PRIORITY, BulkAction.UNMARK_PRIORITY):
        current_domain.process(
            UpdateFlags(
                order_id=str(order.id),
                actor_id=actor_id,
                is_priority=action == BulkAction.MARK_PRIORITY,
            ),
            asynchronous=False,
        )
    else:
        raise _ItemFailure(f"Unknown action: {action}")


def _assign(order, actor_id: str, role: str, staff_id: str) -> None:
    current_domain.process(
        AssignStaff(
            order_id=str(order.id),
            actor_id=actor_id,
            assignments=json.dumps({role: staff_id}),
        ),
        asynchronous=False,
    )
