"""Cost revisions — command and handler. Profit is recomputed on every save."""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.order.order import FulfillmentOrder
from fulfillment.staff.access import authorize_actor


@fulfillment.command(part_of="FulfillmentOrder")
class ReviseCosts:
    order_id = Identifier(required=True)
    actor_id = Identifier()
    product_cost = Integer(min_value=0)
    shipping_cost = Integer(min_value=0)
    service_fee = Integer(min_value=0)


@fulfillment.command_handler(part_of=FulfillmentOrder)
class PricingHandler:
    @handle(ReviseCosts)
    def revise_costs(self, command):
        authorize_actor(command.actor_id)

        repo = current_domain.repository_for(FulfillmentOrder)
        order = repo.get(command.order_id)
        order.revise_costs(
            changed_by=str(command.actor_id),
            product_cost=command.product_cost,
            shipping_cost=command.shipping_cost,
            service_fee=command.service_fee,
        )
        repo.add(order)
        return order.profit
