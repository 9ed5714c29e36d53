"""Mirror fulfillment changes onto the merchant's commerce order.

The commerce order only knows a coarse status vocabulary (see
``coarse_status``) plus the tracking details. Writes are best-effort: a
failure is logged and counted, and the fulfillment order stays as it is.
"""

import structlog
from protean.utils.mixins import handle

from fulfillment.commerce import get_commerce
from fulfillment.domain import fulfillment
from fulfillment.order.dispatch import dispatch_best_effort
from fulfillment.order.events import OrderStatusChanged, TrackingUpdated
from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.status import coarse_status

logger = structlog.get_logger(__name__)

EFFECT = "commerce_sync"

_TRACKING_FIELDS = ("tracking_number", "tracking_url", "courier_provider")


def _push_status(commerce_order_id: str, status: str) -> None:
    get_commerce().update_status(commerce_order_id, status)


def _push_tracking(commerce_order_id: str, tracking: dict) -> None:
    get_commerce().update_tracking(commerce_order_id, tracking)


@fulfillment.event_handler(part_of=FulfillmentOrder)
class CommerceOrderSyncHandler:
    @handle(OrderStatusChanged)
    def on_status_changed(self, event: OrderStatusChanged) -> None:
        if not event.commerce_order_id:
            logger.info("Order has no commerce order to sync", order_id=str(event.order_id))
            return

        dispatch_best_effort(
            EFFECT,
            _push_status,
            str(event.commerce_order_id),
            coarse_status(event.new_status),
        )

    @handle(TrackingUpdated)
    def on_tracking_updated(self, event: TrackingUpdated) -> None:
        if not event.commerce_order_id:
            return

        tracking = {field: getattr(event, field) for field in _TRACKING_FIELDS if getattr(event, field) is not None}
        if not tracking:
            return

        dispatch_best_effort(EFFECT, _push_tracking, str(event.commerce_order_id), tracking)
