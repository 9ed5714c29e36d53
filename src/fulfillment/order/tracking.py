"""Carrier tracking — command and handler."""

from protean import handle
from protean.fields import DateTime, Identifier, String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.order.order import FulfillmentOrder
from fulfillment.staff.access import authorize_actor


@fulfillment.command(part_of="FulfillmentOrder")
class UpdateTracking:
    """Add or correct tracking details. Omitted fields are left unchanged."""

    order_id = Identifier(required=True)
    actor_id = Identifier()
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=1000)
    courier_provider = String(max_length=100)
    estimated_delivery_date = DateTime()
    actual_delivery_date = DateTime()


@fulfillment.command_handler(part_of=FulfillmentOrder)
class TrackingHandler:
    @handle(UpdateTracking)
    def update_tracking(self, command):
        authorize_actor(command.actor_id)

        repo = current_domain.repository_for(FulfillmentOrder)
        order = repo.get(command.order_id)
        order.update_tracking(
            changed_by=str(command.actor_id),
            tracking_number=command.tracking_number,
            tracking_url=command.tracking_url,
            courier_provider=command.courier_provider,
            estimated_delivery_date=command.estimated_delivery_date,
            actual_delivery_date=command.actual_delivery_date,
        )
        repo.add(order)
