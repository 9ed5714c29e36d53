"""Application tests for bulk operations — per-order isolation of failures."""

import pytest
from fulfillment.errors import UnauthorizedError
from fulfillment.order.bulk import run_bulk_operation
from fulfillment.order.dispatch import wait_for_side_effects
from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.transition import ChangeOrderStatus
from protean import current_domain
from protean.exceptions import ValidationError


def _load(order_id):
    return current_domain.repository_for(FulfillmentOrder).get(order_id)


def _deliver(order_id, admin_id):
    current_domain.process(
        ChangeOrderStatus(order_id=order_id, status="delivered", actor_id=admin_id),
        asynchronous=False,
    )


class TestBulkStatusUpdate:
    def test_mixed_batch(self, make_order, admin_id):
        pending = make_order(commerce_order_id="co-A")
        delivered = make_order(commerce_order_id="co-B")
        _deliver(delivered, admin_id)

        result = run_bulk_operation([pending, delivered, "missing-C"], "update_status", admin_id, status="sourcing")

        assert result.succeeded == [pending]
        assert result.succeeded_count == 1
        assert result.failed_count == 2
        failures = {item["id"]: item["error"] for item in result.failed}
        assert failures[delivered].startswith("Invalid status transition from delivered to sourcing")
        assert failures["missing-C"] == "Order not found"
        assert _load(pending).status == "sourcing"
        assert _load(delivered).status == "delivered"

    def test_default_note(self, order_id, admin_id):
        run_bulk_operation([order_id], "update_status", admin_id, status="sourcing")
        assert _load(order_id).history[-1].note == "Bulk status update"

    def test_custom_note(self, order_id, admin_id):
        run_bulk_operation([order_id], "update_status", admin_id, status="sourcing", note="Morning batch")
        assert _load(order_id).history[-1].note == "Morning batch"

    def test_status_required(self, order_id, admin_id):
        result = run_bulk_operation([order_id], "update_status", admin_id)
        assert result.failed == [{"id": order_id, "error": "Status required for status update"}]
        assert _load(order_id).status == "pending"

    def test_side_effects_fire_per_item(self, make_order, admin_id, notifier, audit_sink):
        ids = [make_order(commerce_order_id=f"co-{n}") for n in range(3)]
        run_bulk_operation(ids, "update_status", admin_id, status="packed", origin="10.0.0.5")
        wait_for_side_effects()
        assert len(notifier.sent) == 3
        assert {record["origin"] for record in audit_sink.records} == {"10.0.0.5"}

    def test_notifier_failure_does_not_fail_items(self, make_order, admin_id, notifier):
        notifier.configure(should_succeed=False)
        ids = [make_order(commerce_order_id=f"co-{n}") for n in range(2)]
        result = run_bulk_operation(ids, "update_status", admin_id, status="sourcing")
        assert result.succeeded_count == 2


class TestBulkAssignment:
    def test_assign_picker(self, make_order, admin_id, picker_id):
        ids = [make_order(commerce_order_id="co-1"), make_order(commerce_order_id="co-2")]
        result = run_bulk_operation(ids, "assign_picker", admin_id, picker_id=picker_id)
        assert result.succeeded == ids
        assert all(_load(order_id).assigned_picker_id == picker_id for order_id in ids)

    def test_assign_packer(self, order_id, admin_id, packer_id):
        run_bulk_operation([order_id], "assign_packer", admin_id, packer_id=packer_id)
        assert _load(order_id).assigned_packer_id == packer_id

    def test_assign_without_id_changes_nothing(self, order_id, admin_id):
        result = run_bulk_operation([order_id], "assign_picker", admin_id)
        assert result.succeeded == [order_id]
        assert _load(order_id).assigned_picker_id is None

    def test_unknown_staff_reported_per_item(self, order_id, admin_id):
        result = run_bulk_operation([order_id], "assign_picker", admin_id, picker_id="nobody")
        assert result.failed_count == 1
        assert result.failed[0]["id"] == order_id


class TestBulkPriority:
    def test_mark_and_unmark(self, order_id, admin_id):
        run_bulk_operation([order_id], "mark_priority", admin_id)
        assert _load(order_id).is_priority is True

        run_bulk_operation([order_id], "unmark_priority", admin_id)
        assert _load(order_id).is_priority is False


class TestBulkValidation:
    def test_unknown_action_reported_per_item(self, order_id, admin_id):
        result = run_bulk_operation([order_id], "teleport", admin_id)
        assert result.failed == [{"id": order_id, "error": "Unknown action: teleport"}]

    def test_empty_ids(self, admin_id):
        with pytest.raises(ValidationError):
            run_bulk_operation([], "update_status", admin_id, status="sourcing")

    def test_missing_action(self, order_id, admin_id):
        with pytest.raises(ValidationError):
            run_bulk_operation([order_id], "", admin_id)

    def test_unauthorized_actor_touches_nothing(self, order_id, picker_id):
        with pytest.raises(UnauthorizedError):
            run_bulk_operation([order_id], "update_status", picker_id, status="sourcing")
        assert _load(order_id).status == "pending"

    def test_result_as_dict(self, order_id, admin_id):
        result = run_bulk_operation([order_id, "missing"], "mark_priority", admin_id)
        assert result.to_dict() == {
            "succeeded": [order_id],
            "failed": [{"id": "missing", "error": "Order not found"}],
            "succeeded_count": 1,
            "failed_count": 1,
        }
