"""Fulfillment order domain events — immutable facts about order changes.

All events are past tense, versioned, and carry sufficient data for the
side-effect handlers and the admin board projector to act without reloading
the aggregate.
"""

from protean.fields import Boolean, DateTime, Identifier, Integer, String, Text

from fulfillment.domain import fulfillment


@fulfillment.event(part_of="FulfillmentOrder")
class FulfillmentOrderCreated:
    """A fulfillment order was opened after the merchant's wallet was debited."""

    __version__ = 1

    order_id = Identifier(required=True)
    commerce_order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    store_id = Identifier(required=True)
    order_name = String()
    store_name = String()
    customer_name = String()
    customer_email = String()
    sku = String()
    item_count = Integer(default=0)
    order_value = Integer(required=True)
    wallet_deducted_amount = Integer(required=True)
    status = String(required=True)
    created_at = DateTime(required=True)


@fulfillment.event(part_of="FulfillmentOrder")
class OrderStatusChanged:
    """An administrator moved the order to a new status."""

    __version__ = 1

    order_id = Identifier(required=True)
    commerce_order_id = Identifier()
    user_id = Identifier(required=True)
    order_name = String()
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_by = Identifier(required=True)
    note = Text()
    origin = String()
    status_version = Integer(required=True)
    changed_at = DateTime(required=True)


@fulfillment.event(part_of="FulfillmentOrder")
class StaffAssigned:
    """Picker, packer, QC or courier assignments changed."""

    __version__ = 1

    order_id = Identifier(required=True)
    assigned_picker_id = Identifier()
    assigned_packer_id = Identifier()
    assigned_qc_id = Identifier()
    assigned_courier_person_id = Identifier()
    changed_by = Identifier(required=True)
    assigned_at = DateTime(required=True)


@fulfillment.event(part_of="FulfillmentOrder")
class TrackingUpdated:
    """Carrier tracking details were added or corrected."""

    __version__ = 1

    order_id = Identifier(required=True)
    commerce_order_id = Identifier()
    user_id = Identifier(required=True)
    order_name = String()
    tracking_number = String()
    previous_tracking_number = String()
    tracking_url = String()
    courier_provider = String()
    estimated_delivery_date = DateTime()
    actual_delivery_date = DateTime()
    changed_by = Identifier(required=True)
    updated_at = DateTime(required=True)


@fulfillment.event(part_of="FulfillmentOrder")
class RtoAddressUpdated:
    """The return-to-origin address was overwritten."""

    __version__ = 1

    order_id = Identifier(required=True)
    city = String()
    pincode = String()
    changed_by = Identifier(required=True)
    updated_at = DateTime(required=True)


@fulfillment.event(part_of="FulfillmentOrder")
class InternalNoteAdded:
    """An administrator left an internal note on the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    author = String(required=True)
    text = Text(required=True)
    added_at = DateTime(required=True)


@fulfillment.event(part_of="FulfillmentOrder")
class AttachmentAdded:
    """A document URL was attached to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    url = String(required=True, max_length=1000)
    attachment_count = Integer(required=True)
    changed_by = Identifier(required=True)
    added_at = DateTime(required=True)


@fulfillment.event(part_of="FulfillmentOrder")
class OrderFlagsUpdated:
    """Priority, delay or issue flags changed."""

    __version__ = 1

    order_id = Identifier(required=True)
    is_priority = Boolean(default=False)
    is_delayed = Boolean(default=False)
    has_issue = Boolean(default=False)
    issue_description = String()
    changed_by = Identifier(required=True)
    updated_at = DateTime(required=True)


@fulfillment.event(part_of="FulfillmentOrder")
class OrderCostsRevised:
    """Sourcing, shipping or service costs were corrected; profit follows."""

    __version__ = 1

    order_id = Identifier(required=True)
    product_cost = Integer(required=True)
    shipping_cost = Integer(required=True)
    service_fee = Integer(required=True)
    profit = Integer(required=True)
    changed_by = Identifier(required=True)
    revised_at = DateTime(required=True)
