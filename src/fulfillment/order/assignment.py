"""Staff assignment — command and handler.

Assignments sit outside the status machine: an order can be (re)assigned in
any status, including terminal ones.
"""

import json

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.order.order import FulfillmentOrder
from fulfillment.staff.access import authorize_actor, ensure_staff_exist


@fulfillment.command(part_of="FulfillmentOrder")
class AssignStaff:
    """Set or clear assigned staff per role."""

    order_id = Identifier(required=True)
    actor_id = Identifier()
    assignments = Text(required=True)  # JSON object: role -> staff id, null to unassign


@fulfillment.command_handler(part_of=FulfillmentOrder)
class AssignmentHandler:
    @handle(AssignStaff)
    def assign_staff(self, command):
        authorize_actor(command.actor_id)

        assignments = json.loads(command.assignments) if isinstance(command.assignments, str) else command.assignments

        repo = current_domain.repository_for(FulfillmentOrder)
        order = repo.get(command.order_id)

        ensure_staff_exist(assignments.values())
        order.assign_staff(assignments, changed_by=str(command.actor_id))
        repo.add(order)
