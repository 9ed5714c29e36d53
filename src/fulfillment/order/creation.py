"""Fulfillment order creation — command and handler.

Called by the purchase flow once the merchant's wallet has been debited.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from fulfillment.domain import fulfillment
from fulfillment.order.order import FulfillmentOrder


@fulfillment.command(part_of="FulfillmentOrder")
class CreateFulfillmentOrder:
    """Open a fulfillment order for a wallet-funded purchase."""

    commerce_order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    store_id = Identifier(required=True)
    store_name = String(required=True, max_length=255)
    order_value = Integer(required=True, min_value=0)
    wallet_deducted_amount = Integer(required=True, min_value=0)
    wallet_deducted_at = DateTime()
    order_name = String(max_length=100)
    customer_name = String(max_length=255)
    customer_email = String(max_length=255)
    customer_phone = String(max_length=50)
    shipping_address = Text()
    sku = String(max_length=500)
    item_count = Integer(min_value=0)
    variants = Text()  # JSON list of variant dicts
    product_cost = Integer(min_value=0)
    shipping_cost = Integer(min_value=0)
    service_fee = Integer(min_value=0)


_OPTIONAL_DETAILS = (
    "order_name",
    "customer_name",
    "customer_email",
    "customer_phone",
    "shipping_address",
    "sku",
    "item_count",
    "product_cost",
    "shipping_cost",
    "service_fee",
)


@fulfillment.command_handler(part_of=FulfillmentOrder)
class CreateFulfillmentOrderHandler:
    @handle(CreateFulfillmentOrder)
    def create_fulfillment_order(self, command):
        repo = current_domain.repository_for(FulfillmentOrder)
        if repo.find_by_commerce_order(command.commerce_order_id):
            raise ValidationError(
                {"commerce_order_id": [f"A fulfillment order already exists for {command.commerce_order_id}"]}
            )

        variants_data = json.loads(command.variants) if isinstance(command.variants, str) else command.variants
        details = {
            field: getattr(command, field) for field in _OPTIONAL_DETAILS if getattr(command, field) is not None
        }
        order = FulfillmentOrder.create(
            commerce_order_id=command.commerce_order_id,
            user_id=command.user_id,
            store_id=command.store_id,
            store_name=command.store_name,
            order_value=command.order_value,
            wallet_deducted_amount=command.wallet_deducted_amount,
            wallet_deducted_at=command.wallet_deducted_at,
            variants_data=variants_data,
            **details,
        )
        repo.add(order)
        return str(order.id)
