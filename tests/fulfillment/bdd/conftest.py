"""Shared BDD fixtures and step definitions for the fulfillment order lifecycle."""

import pytest
from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.status import valid_transitions
from fulfillment.order.transition import ChangeOrderStatus
from protean import current_domain
from pytest_bdd import given, parsers, then


@pytest.fixture()
def outcome():
    """Container for the rejection raised by a When step, if any."""
    return {"exc": None}


def _move(order_id, actor_id, status):
    current_domain.process(
        ChangeOrderStatus(order_id=order_id, actor_id=actor_id, status=status),
        asynchronous=False,
    )


def _load(order_id):
    return current_domain.repository_for(FulfillmentOrder).get(order_id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an active administrator", target_fixture="actor_id")
def _(admin_id):
    return admin_id


@given("a pending fulfillment order", target_fixture="lifecycle_order_id")
def _(order_id):
    return order_id


@given(parsers.cfparse('the order is "{status}"'))
def _(lifecycle_order_id, actor_id, status):
    _move(lifecycle_order_id, actor_id, status)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(lifecycle_order_id, status):
    assert _load(lifecycle_order_id).status == status


@then("the order has no valid transitions")
def _(lifecycle_order_id):
    assert valid_transitions(_load(lifecycle_order_id).status) == []
