"""Fulfillment bounded context — wallet-funded order sourcing and delivery.

Tracks each purchased order from sourcing through packing, dispatch,
delivery and return-to-origin. Uses CQRS: the FulfillmentOrder aggregate is
the source of truth, and commerce-order status, customer notifications and
the audit trail are best-effort reactions to its events.
"""

from protean.domain import Domain

from fulfillment.utils.logging import configure_logging

configure_logging()

fulfillment = Domain(name="fulfillment")
