"""Application tests for tracking, RTO address, notes, attachments, flags and costs."""

import pytest
from fulfillment.errors import UnauthorizedError
from fulfillment.order.dispatch import wait_for_side_effects
from fulfillment.order.flags import UpdateFlags
from fulfillment.order.notes import AddAttachment, AddInternalNote
from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.pricing import ReviseCosts
from fulfillment.order.rto import UpdateRtoAddress
from fulfillment.order.tracking import UpdateTracking
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


def _process(command):
    return current_domain.process(command, asynchronous=False)


def _load(order_id):
    return current_domain.repository_for(FulfillmentOrder).get(order_id)


class TestUpdateTracking:
    def test_tracking_saved_and_propagated(self, order_id, admin_id, commerce):
        _process(
            UpdateTracking(
                order_id=order_id,
                actor_id=admin_id,
                tracking_number="AWB123",
                courier_provider="Delhivery",
            )
        )

        order = _load(order_id)
        assert order.tracking_number == "AWB123"
        assert order.courier_provider == "Delhivery"
        wait_for_side_effects()
        assert commerce.orders["co-1001"] == {"tracking_number": "AWB123", "courier_provider": "Delhivery"}

    def test_new_tracking_number_notifies_merchant(self, order_id, admin_id, notifier):
        _process(UpdateTracking(order_id=order_id, actor_id=admin_id, tracking_number="AWB123"))
        wait_for_side_effects()

        assert len(notifier.sent) == 1
        assert notifier.sent[0]["title"] == "Tracking Info Added"
        assert notifier.sent[0]["message"] == "Tracking number AWB123 has been added to your order #1001"

    def test_unchanged_tracking_number_does_not_notify_again(self, order_id, admin_id, notifier):
        _process(UpdateTracking(order_id=order_id, actor_id=admin_id, tracking_number="AWB123"))
        _process(UpdateTracking(order_id=order_id, actor_id=admin_id, tracking_url="https://t.example.com/AWB123"))
        _process(UpdateTracking(order_id=order_id, actor_id=admin_id, tracking_number="AWB123"))
        wait_for_side_effects()
        assert len(notifier.sent) == 1

    def test_corrected_tracking_number_notifies(self, order_id, admin_id, notifier):
        _process(UpdateTracking(order_id=order_id, actor_id=admin_id, tracking_number="AWB123"))
        _process(UpdateTracking(order_id=order_id, actor_id=admin_id, tracking_number="AWB999"))
        wait_for_side_effects()
        assert len(notifier.sent) == 2

    def test_commerce_failure_keeps_tracking(self, order_id, admin_id, commerce):
        commerce.configure(should_succeed=False)
        _process(UpdateTracking(order_id=order_id, actor_id=admin_id, tracking_number="AWB123"))
        assert _load(order_id).tracking_number == "AWB123"

    def test_unknown_order(self, admin_id):
        with pytest.raises(ObjectNotFoundError):
            _process(UpdateTracking(order_id="missing", actor_id=admin_id, tracking_number="AWB1"))


class TestUpdateRtoAddress:
    def test_overwrite(self, order_id, admin_id):
        _process(UpdateRtoAddress(order_id=order_id, actor_id=admin_id, name="Acme Returns", city="Pune"))
        _process(UpdateRtoAddress(order_id=order_id, actor_id=admin_id, city="Nagpur", pincode="440001"))

        address = _load(order_id).rto_address
        assert address.city == "Nagpur"
        assert address.pincode == "440001"
        assert address.name == ""
        assert address.country == "India"

    def test_requires_admin(self, order_id):
        with pytest.raises(UnauthorizedError):
            _process(UpdateRtoAddress(order_id=order_id, actor_id="stranger", city="Pune"))


class TestNotesAndAttachments:
    def test_note_author_is_actor_email(self, order_id, admin_id):
        rendered = _process(AddInternalNote(order_id=order_id, actor_id=admin_id, text="Supplier delayed"))
        assert "asha@ops.example.com:\nSupplier delayed" in rendered
        assert _load(order_id).rendered_notes() == rendered

    def test_notes_accumulate(self, order_id, admin_id):
        _process(AddInternalNote(order_id=order_id, actor_id=admin_id, text="first"))
        rendered = _process(AddInternalNote(order_id=order_id, actor_id=admin_id, text="second"))
        assert rendered.count("\n\n") == 1
        assert rendered.index("first") < rendered.index("second")

    def test_empty_note_rejected(self, order_id, admin_id):
        with pytest.raises(ValidationError):
            _process(AddInternalNote(order_id=order_id, actor_id=admin_id, text=""))

    def test_attachment(self, order_id, admin_id):
        urls = _process(AddAttachment(order_id=order_id, actor_id=admin_id, url="https://files.example.com/a.pdf"))
        assert urls == ["https://files.example.com/a.pdf"]


class TestFlags:
    def test_partial_flag_update(self, order_id, admin_id):
        _process(UpdateFlags(order_id=order_id, actor_id=admin_id, is_priority=True))
        _process(UpdateFlags(order_id=order_id, actor_id=admin_id, has_issue=True, issue_description="Wrong size"))

        order = _load(order_id)
        assert order.is_priority is True
        assert order.has_issue is True
        assert order.issue_description == "Wrong size"
        assert order.is_delayed is False


class TestReviseCosts:
    def test_profit_follows_costs(self, order_id, admin_id):
        profit = _process(ReviseCosts(order_id=order_id, actor_id=admin_id, product_cost=6000))
        assert profit == 3200
        assert _load(order_id).profit == 3200

    def test_requires_some_cost(self, order_id, admin_id):
        with pytest.raises(ValidationError):
            _process(ReviseCosts(order_id=order_id, actor_id=admin_id))
