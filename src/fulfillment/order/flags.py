"""Priority, delay and issue flags — command and handler."""

from protean import handle
from protean.fields import Boolean, Identifier, String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.order.order import FulfillmentOrder
from fulfillment.staff.access import authorize_actor


@fulfillment.command(part_of="FulfillmentOrder")
class UpdateFlags:
    """Change only the flags that are supplied."""

    order_id = Identifier(required=True)
    actor_id = Identifier()
    is_priority = Boolean()
    is_delayed = Boolean()
    has_issue = Boolean()
    issue_description = String(max_length=1000)


@fulfillment.command_handler(part_of=FulfillmentOrder)
class FlagsHandler:
    @handle(UpdateFlags)
    def update_flags(self, command):
        authorize_actor(command.actor_id)

        repo = current_domain.repository_for(FulfillmentOrder)
        order = repo.get(command.order_id)
        order.update_flags(
            changed_by=str(command.actor_id),
            is_priority=command.is_priority,
            is_delayed=command.is_delayed,
            has_issue=command.has_issue,
            issue_description=command.issue_description,
        )
        repo.add(order)
