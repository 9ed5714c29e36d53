"""Internal notes and attachments — commands and handler."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.order.order import FulfillmentOrder
from fulfillment.staff.access import authorize_actor


@fulfillment.command(part_of="FulfillmentOrder")
class AddInternalNote:
    order_id = Identifier(required=True)
    actor_id = Identifier()
    text = Text()


@fulfillment.command(part_of="FulfillmentOrder")
class AddAttachment:
    order_id = Identifier(required=True)
    actor_id = Identifier()
    url = String(max_length=1000)


@fulfillment.command_handler(part_of=FulfillmentOrder)
class OrderNotesHandler:
    @handle(AddInternalNote)
    def add_internal_note(self, command):
        actor = authorize_actor(command.actor_id)

        repo = current_domain.repository_for(FulfillmentOrder)
        order = repo.get(command.order_id)
        order.add_internal_note(author=actor.email or "Admin", text=command.text)
        repo.add(order)
        return order.rendered_notes()

    @handle(AddAttachment)
    def add_attachment(self, command):
        authorize_actor(command.actor_id)

        repo = current_domain.repository_for(FulfillmentOrder)
        order = repo.get(command.order_id)
        order.attach(command.url, changed_by=str(command.actor_id))
        repo.add(order)
        return order.attachment_urls()
