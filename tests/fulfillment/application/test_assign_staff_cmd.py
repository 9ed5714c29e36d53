"""Application tests for assigning warehouse staff to orders."""

import json

import pytest
from fulfillment.errors import UnauthorizedError
from fulfillment.order.assignment import AssignStaff
from fulfillment.order.dispatch import wait_for_side_effects
from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.transition import ChangeOrderStatus
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _assign(order_id, actor_id, **assignments):
    current_domain.process(
        AssignStaff(order_id=order_id, actor_id=actor_id, assignments=json.dumps(assignments)),
        asynchronous=False,
    )


def _load(order_id):
    return current_domain.repository_for(FulfillmentOrder).get(order_id)


class TestAssignStaff:
    def test_assign_picker_and_packer(self, order_id, admin_id, picker_id, packer_id):
        _assign(order_id, admin_id, picker=picker_id, packer=packer_id)
        order = _load(order_id)
        assert order.assigned_picker_id == picker_id
        assert order.assigned_packer_id == packer_id

    def test_unassign_with_null(self, order_id, admin_id, picker_id):
        _assign(order_id, admin_id, picker=picker_id)
        _assign(order_id, admin_id, picker=None)
        assert _load(order_id).assigned_picker_id is None

    def test_other_roles_untouched(self, order_id, admin_id, picker_id, packer_id):
        _assign(order_id, admin_id, picker=picker_id)
        _assign(order_id, admin_id, packer=packer_id)
        order = _load(order_id)
        assert order.assigned_picker_id == picker_id
        assert order.assigned_packer_id == packer_id

    def test_unknown_staff_id(self, order_id, admin_id):
        with pytest.raises(ObjectNotFoundError):
            _assign(order_id, admin_id, picker="nobody")
        assert _load(order_id).assigned_picker_id is None

    def test_unknown_role(self, order_id, admin_id, picker_id):
        with pytest.raises(ValidationError):
            _assign(order_id, admin_id, forklift=picker_id)

    def test_requires_admin(self, order_id, picker_id):
        with pytest.raises(UnauthorizedError):
            _assign(order_id, picker_id, picker=picker_id)

    def test_assignment_after_delivery(self, order_id, admin_id, picker_id):
        current_domain.process(
            ChangeOrderStatus(order_id=order_id, status="delivered", actor_id=admin_id),
            asynchronous=False,
        )
        _assign(order_id, admin_id, qc=picker_id)
        order = _load(order_id)
        assert order.assigned_qc_id == picker_id
        assert order.status == "delivered"

    def test_assignment_does_not_change_status(self, order_id, admin_id, picker_id, notifier):
        _assign(order_id, admin_id, picker=picker_id)
        order = _load(order_id)
        assert order.status == "pending"
        assert order.status_version == 1
        wait_for_side_effects()
        assert notifier.sent == []
