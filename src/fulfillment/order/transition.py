"""Order status transitions — command and handler.

The handler is the only writer of ``status``. It authorizes the actor,
validates the move against the status policy and writes the order back
conditionally, so a transition computed from a stale read is rejected
instead of silently overwriting a newer status. Commerce sync, customer
alerts and the audit trail react to the resulting ``OrderStatusChanged``
event and can never undo the transition.
"""

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.errors import ConcurrentModificationError
from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.status import parse_status
from fulfillment.staff.access import authorize_actor

logger = structlog.get_logger(__name__)


@fulfillment.command(part_of="FulfillmentOrder")
class ChangeOrderStatus:
    """Move an order to a new status.

    ``expected_status`` is the status the caller last saw; when supplied the
    transition is refused if the order has moved on since.
    """

    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    actor_id = Identifier()
    note = Text()
    expected_status = String(max_length=50)
    origin = String(max_length=100)


@fulfillment.command_handler(part_of=FulfillmentOrder)
class OrderTransitionHandler:
    @handle(ChangeOrderStatus)
    def change_status(self, command):
        authorize_actor(command.actor_id)

        repo = current_domain.repository_for(FulfillmentOrder)
        order = repo.get(command.order_id)

        observed_status = order.status
        observed_version = order.status_version
        expected = parse_status(command.expected_status).value if command.expected_status else None
        if expected and expected != observed_status:
            raise ConcurrentModificationError(str(order.id), expected, observed_status)

        previous_status = order.transition_to(
            command.status,
            changed_by=str(command.actor_id),
            note=command.note,
            origin=command.origin,
        )
        repo.save_transition(order, expected_status=observed_status, expected_version=observed_version)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            previous_status=previous_status,
            new_status=order.status,
            actor_id=str(command.actor_id),
        )
        return order.status_view()
