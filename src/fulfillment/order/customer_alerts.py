"""Notify the merchant when their order moves or gets a tracking number."""

from protean.utils.mixins import handle

from fulfillment.domain import fulfillment
from fulfillment.notifier import get_notifier
from fulfillment.order.dispatch import dispatch_best_effort
from fulfillment.order.events import OrderStatusChanged, TrackingUpdated
from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.status import humanize_status

EFFECT = "notification"

NOTIFICATION_TYPE = "system_update"
ORDERS_LINK = "/dashboard/orders"


def _notify(**notification) -> None:
    get_notifier().notify(**notification)


@fulfillment.event_handler(part_of=FulfillmentOrder)
class CustomerAlertHandler:
    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        name = event.order_name or "Order"
        dispatch_best_effort(
            EFFECT,
            _notify,
            user_id=str(event.user_id),
            notification_type=NOTIFICATION_TYPE,
            title="Order Status Updated",
            message=f"Your order {name} status has been updated to: {humanize_status(event.new_status)}",
            link=ORDERS_LINK,
            metadata={"order_id": str(event.order_id), "status": event.new_status},
        )

    @handle(TrackingUpdated)
    def on_tracking_updated(self, event: TrackingUpdated) -> None:
        # Only a newly set or changed tracking number is worth a notification
        if not event.tracking_number or event.tracking_number == event.previous_tracking_number:
            return

        name = event.order_name or "Order"
        dispatch_best_effort(
            EFFECT,
            _notify,
            user_id=str(event.user_id),
            notification_type=NOTIFICATION_TYPE,
            title="Tracking Info Added",
            message=f"Tracking number {event.tracking_number} has been added to your order {name}",
            link=ORDERS_LINK,
            metadata={"order_id": str(event.order_id), "tracking_number": event.tracking_number},
        )
