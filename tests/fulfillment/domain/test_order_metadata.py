"""Tests for the editable order details that sit outside the status machine."""

from datetime import UTC, datetime, timedelta

import pytest
from fulfillment.order.events import (
    AttachmentAdded,
    InternalNoteAdded,
    OrderCostsRevised,
    OrderFlagsUpdated,
    RtoAddressUpdated,
    StaffAssigned,
    TrackingUpdated,
)
from fulfillment.order.order import FulfillmentOrder
from protean.exceptions import ValidationError


def _make_order():
    order = FulfillmentOrder.create(
        commerce_order_id="co-1",
        user_id="merchant-1",
        store_id="store-1",
        store_name="Acme Store",
        order_value=10000,
        wallet_deducted_amount=4800,
        order_name="#1001",
        product_cost=4000,
        shipping_cost=500,
        service_fee=300,
    )
    order._events.clear()
    return order


def _delivered_order():
    order = _make_order()
    order.transition_to("delivered", changed_by="admin-1")
    order._events.clear()
    return order


class TestAssignStaff:
    def test_assign_picker_and_packer(self):
        order = _make_order()
        order.assign_staff({"picker": "staff-1", "packer": "staff-2"}, changed_by="admin-1")
        assert order.assigned_picker_id == "staff-1"
        assert order.assigned_packer_id == "staff-2"
        assert order.assigned_qc_id is None
        assert isinstance(order._events[0], StaffAssigned)

    def test_none_unassigns(self):
        order = _make_order()
        order.assign_staff({"picker": "staff-1"}, changed_by="admin-1")
        order.assign_staff({"picker": None}, changed_by="admin-1")
        assert order.assigned_picker_id is None

    def test_unknown_role_rejected(self):
        order = _make_order()
        with pytest.raises(ValidationError) as exc_info:
            order.assign_staff({"driver": "staff-1"}, changed_by="admin-1")
        assert "assignments" in exc_info.value.messages

    def test_empty_assignments_rejected(self):
        with pytest.raises(ValidationError):
            _make_order().assign_staff({}, changed_by="admin-1")

    def test_assignment_allowed_on_terminal_order(self):
        order = _delivered_order()
        order.assign_staff({"courier_person": "staff-9"}, changed_by="admin-1")
        assert order.assigned_courier_person_id == "staff-9"
        assert order.status == "delivered"


class TestTracking:
    def test_partial_update_keeps_other_fields(self):
        order = _make_order()
        order.update_tracking(changed_by="admin-1", tracking_number="AWB1", courier_provider="Delhivery")
        order.update_tracking(changed_by="admin-1", tracking_url="https://track.example.com/AWB1")

        assert order.tracking_number == "AWB1"
        assert order.courier_provider == "Delhivery"
        assert order.tracking_url == "https://track.example.com/AWB1"

    def test_event_carries_previous_tracking_number(self):
        order = _make_order()
        order.update_tracking(changed_by="admin-1", tracking_number="AWB1")
        order.update_tracking(changed_by="admin-1", tracking_number="AWB2")

        first, second = order._events
        assert isinstance(second, TrackingUpdated)
        assert first.previous_tracking_number is None
        assert second.previous_tracking_number == "AWB1"
        assert second.tracking_number == "AWB2"

    def test_delivery_dates(self):
        order = _make_order()
        eta = datetime.now(UTC) + timedelta(days=3)
        order.update_tracking(changed_by="admin-1", estimated_delivery_date=eta)
        assert order.estimated_delivery_date == eta

    def test_nothing_supplied_rejected(self):
        with pytest.raises(ValidationError):
            _make_order().update_tracking(changed_by="admin-1")

    def test_tracking_does_not_touch_status(self):
        order = _make_order()
        order.update_tracking(changed_by="admin-1", tracking_number="AWB1")
        assert order.status == "pending"
        assert order.status_version == 1


class TestRtoAddress:
    def test_full_overwrite_with_defaults(self):
        order = _make_order()
        order.update_rto_address(changed_by="admin-1", name="Acme Returns", city="Pune", pincode="411001")
        order.update_rto_address(changed_by="admin-1", city="Mumbai")

        address = order.rto_address
        assert address.city == "Mumbai"
        assert address.name == ""
        assert address.pincode == ""
        assert address.country == "India"
        assert isinstance(order._events[-1], RtoAddressUpdated)

    def test_explicit_country_kept(self):
        order = _make_order()
        order.update_rto_address(changed_by="admin-1", city="Dubai", country="UAE")
        assert order.rto_address.country == "UAE"

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError):
            _make_order().update_rto_address(changed_by="admin-1", planet="Mars")


class TestNotes:
    def test_notes_render_like_legacy_blob(self):
        order = _make_order()
        order.add_internal_note(author="asha@ops.example.com", text="Supplier delayed")
        order.add_internal_note(author="asha@ops.example.com", text="Called customer")

        rendered = order.rendered_notes()
        blocks = rendered.split("\n\n")
        assert len(blocks) == 2
        assert blocks[0].endswith("] asha@ops.example.com:\nSupplier delayed")
        assert blocks[0].startswith("[")
        assert blocks[1].endswith(":\nCalled customer")
        assert isinstance(order._events[0], InternalNoteAdded)

    def test_empty_note_rejected(self):
        with pytest.raises(ValidationError):
            _make_order().add_internal_note(author="asha@ops.example.com", text="   ")

    def test_note_on_terminal_order(self):
        order = _delivered_order()
        order.add_internal_note(author="Admin", text="Customer confirmed receipt")
        assert "Customer confirmed receipt" in order.rendered_notes()


class TestAttachments:
    def test_attach_appends(self):
        order = _make_order()
        order.attach("https://files.example.com/invoice.pdf", changed_by="admin-1")
        order.attach("https://files.example.com/label.pdf", changed_by="admin-1")
        assert order.attachment_urls() == [
            "https://files.example.com/invoice.pdf",
            "https://files.example.com/label.pdf",
        ]
        event = order._events[-1]
        assert isinstance(event, AttachmentAdded)
        assert event.attachment_count == 2

    def test_blank_url_rejected(self):
        with pytest.raises(ValidationError):
            _make_order().attach("", changed_by="admin-1")


class TestFlags:
    def test_only_supplied_flags_change(self):
        order = _make_order()
        order.update_flags(changed_by="admin-1", is_priority=True)
        order.update_flags(changed_by="admin-1", has_issue=True, issue_description="Damaged box")

        assert order.is_priority is True
        assert order.has_issue is True
        assert order.is_delayed is False
        assert order.issue_description == "Damaged box"

    def test_flags_can_be_cleared(self):
        order = _make_order()
        order.update_flags(changed_by="admin-1", is_priority=True)
        order.update_flags(changed_by="admin-1", is_priority=False)
        assert order.is_priority is False
        assert order._events[-1].is_priority is False
        assert isinstance(order._events[-1], OrderFlagsUpdated)


class TestCosts:
    def test_revising_costs_recomputes_profit(self):
        order = _make_order()
        order.revise_costs(changed_by="admin-1", shipping_cost=1500)
        assert order.profit == 4200
        event = order._events[-1]
        assert isinstance(event, OrderCostsRevised)
        assert event.profit == 4200

    def test_no_costs_supplied_rejected(self):
        with pytest.raises(ValidationError):
            _make_order().revise_costs(changed_by="admin-1")
