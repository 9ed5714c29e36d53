"""Append an audit record for every accepted status change.

``previous_status`` is taken from the event, which the aggregate fills from
the status it held before the write. It is therefore correct even when
other transitions land on the same order in quick succession.
"""

from protean.utils.mixins import handle

from fulfillment.audit import get_audit_sink
from fulfillment.domain import fulfillment
from fulfillment.order.dispatch import dispatch_best_effort
from fulfillment.order.events import OrderStatusChanged
from fulfillment.order.order import FulfillmentOrder

EFFECT = "audit"

STATUS_UPDATE_ACTION = "ORDER_STATUS_UPDATE"


def _record(**entry) -> None:
    get_audit_sink().record(**entry)


@fulfillment.event_handler(part_of=FulfillmentOrder)
class AuditTrailHandler:
    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        dispatch_best_effort(
            EFFECT,
            _record,
            actor_id=str(event.changed_by),
            action=STATUS_UPDATE_ACTION,
            success=True,
            details={
                "order_id": str(event.order_id),
                "previous_status": event.previous_status,
                "new_status": event.new_status,
                "note": event.note or "",
            },
            origin=event.origin or "",
            timestamp=event.changed_at,
        )
