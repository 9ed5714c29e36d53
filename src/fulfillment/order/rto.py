"""Return-to-origin address — command and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.order.order import FulfillmentOrder
from fulfillment.staff.access import authorize_actor


@fulfillment.command(part_of="FulfillmentOrder")
class UpdateRtoAddress:
    """Replace the RTO address as a whole; omitted parts are cleared."""

    order_id = Identifier(required=True)
    actor_id = Identifier()
    name = String(max_length=200)
    phone = String(max_length=50)
    address_line1 = String(max_length=500)
    address_line2 = String(max_length=500)
    city = String(max_length=100)
    state = String(max_length=100)
    pincode = String(max_length=20)
    country = String(max_length=100)


@fulfillment.command_handler(part_of=FulfillmentOrder)
class RtoAddressHandler:
    @handle(UpdateRtoAddress)
    def update_rto_address(self, command):
        authorize_actor(command.actor_id)

        repo = current_domain.repository_for(FulfillmentOrder)
        order = repo.get(command.order_id)
        order.update_rto_address(
            changed_by=str(command.actor_id),
            name=command.name,
            phone=command.phone,
            address_line1=command.address_line1,
            address_line2=command.address_line2,
            city=command.city,
            state=command.state,
            pincode=command.pincode,
            country=command.country,
        )
        repo.add(order)
