"""FulfillmentOrder aggregate (CQRS) — the core of the fulfillment domain.

One FulfillmentOrder exists per wallet-funded purchase. Status changes go
through the status policy in ``fulfillment.order.status`` and are recorded in
an append-only history. Staff assignment, tracking, RTO address, flags, notes,
attachments and costs sit outside the state machine and stay editable in
every status, terminal ones included, so post-delivery corrections remain
possible.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from fulfillment.domain import fulfillment
from fulfillment.order.events import (
    AttachmentAdded,
    FulfillmentOrderCreated,
    InternalNoteAdded,
    OrderCostsRevised,
    OrderFlagsUpdated,
    OrderStatusChanged,
    RtoAddressUpdated,
    StaffAssigned,
    TrackingUpdated,
)
from fulfillment.order.status import STAGE_TIMESTAMP_FIELDS, OrderStatus, assert_can_transition


class AssignmentRole(Enum):
    """Warehouse roles an order can be assigned to."""

    PICKER = "picker"
    PACKER = "packer"
    QC = "qc"
    COURIER_PERSON = "courier_person"


_ASSIGNMENT_FIELDS = {
    AssignmentRole.PICKER.value: "assigned_picker_id",
    AssignmentRole.PACKER.value: "assigned_packer_id",
    AssignmentRole.QC.value: "assigned_qc_id",
    AssignmentRole.COURIER_PERSON.value: "assigned_courier_person_id",
}

_RTO_FIELDS = (
    "name",
    "phone",
    "address_line1",
    "address_line2",
    "city",
    "state",
    "pincode",
    "country",
)

DEFAULT_RTO_COUNTRY = "India"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@fulfillment.value_object(part_of="FulfillmentOrder")
class RtoAddress:
    """Where returned goods are sent back to."""

    name = String(max_length=200, default="")
    phone = String(max_length=50, default="")
    address_line1 = String(max_length=500, default="")
    address_line2 = String(max_length=500, default="")
    city = String(max_length=100, default="")
    state = String(max_length=100, default="")
    pincode = String(max_length=20, default="")
    country = String(max_length=100, default=DEFAULT_RTO_COUNTRY)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@fulfillment.entity(part_of="FulfillmentOrder")
class StatusHistoryEntry:
    """One accepted status change. Never modified after it is appended."""

    sequence = Integer(required=True, min_value=1)
    status = String(required=True, choices=OrderStatus)
    changed_by = Identifier(required=True)
    changed_at = DateTime(required=True)
    note = Text(default="")


@fulfillment.entity(part_of="FulfillmentOrder")
class InternalNote:
    """An admin-only note, kept as structured data instead of a text blob."""

    author = String(required=True, max_length=255)
    text = Text(required=True)
    created_at = DateTime(required=True)

    def render(self) -> str:
        return f"[{self.created_at.isoformat()}] {self.author}:\n{self.text}"


@fulfillment.entity(part_of="FulfillmentOrder")
class OrderAttachment:
    url = String(required=True, max_length=1000)
    added_by = Identifier(required=True)
    added_at = DateTime(required=True)


@fulfillment.entity(part_of="FulfillmentOrder")
class OrderVariant:
    """A purchased product variant (prices in minor currency units)."""

    title = String(max_length=255, default="")
    sku = String(max_length=100, default="")
    quantity = Integer(min_value=1, default=1)
    price = Integer(min_value=0, default=0)


# ---------------------------------------------------------------------------
# Aggregate Root (CQRS)
# ---------------------------------------------------------------------------
@fulfillment.aggregate
class FulfillmentOrder:
    commerce_order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    store_id = Identifier(required=True)

    # Display info (denormalized for the admin board)
    order_name = String(max_length=100, default="")
    store_name = String(required=True, max_length=255)
    customer_name = String(max_length=255, default="Guest")
    customer_email = String(max_length=255, default="")
    customer_phone = String(max_length=50, default="")
    shipping_address = Text(default="")

    # Product info
    sku = String(max_length=500, default="")
    variants = HasMany(OrderVariant)
    item_count = Integer(min_value=0, default=0)

    # Pricing, all in minor currency units
    order_value = Integer(required=True, min_value=0)
    product_cost = Integer(min_value=0, default=0)
    shipping_cost = Integer(min_value=0, default=0)
    service_fee = Integer(min_value=0, default=0)
    wallet_deducted_amount = Integer(required=True, min_value=0)
    profit = Integer(default=0)

    # Status
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    status_history = HasMany(StatusHistoryEntry)
    status_version = Integer(min_value=0, default=0)

    # Assignments
    assigned_picker_id = Identifier()
    assigned_packer_id = Identifier()
    assigned_qc_id = Identifier()
    assigned_courier_person_id = Identifier()

    # Tracking
    tracking_number = String(max_length=255)
    tracking_url = String(max_length=1000)
    courier_provider = String(max_length=100)
    estimated_delivery_date = DateTime()
    actual_delivery_date = DateTime()

    rto_address = ValueObject(RtoAddress)

    notes = HasMany(InternalNote)
    attachments = HasMany(OrderAttachment)

    # Flags
    is_priority = Boolean(default=False)
    is_delayed = Boolean(default=False)
    has_issue = Boolean(default=False)
    issue_description = String(max_length=1000, default="")

    # Stage timestamps
    wallet_deducted_at = DateTime(required=True)
    sourced_at = DateTime()
    packed_at = DateTime()
    dispatched_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()

    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        commerce_order_id: str,
        user_id: str,
        store_id: str,
        store_name: str,
        order_value: int,
        wallet_deducted_amount: int,
        wallet_deducted_at: datetime | None = None,
        variants_data: list[dict] | None = None,
        **details,
    ):
        """Open a fulfillment order for a purchase the merchant has paid for."""
        now = datetime.now(UTC)
        variants_data = variants_data or []
        order = cls(
            commerce_order_id=commerce_order_id,
            user_id=user_id,
            store_id=store_id,
            store_name=store_name,
            order_value=order_value,
            wallet_deducted_amount=wallet_deducted_amount,
            wallet_deducted_at=wallet_deducted_at or now,
            status=OrderStatus.PENDING.value,
            created_at=now,
            updated_at=now,
            **details,
        )
        for variant_data in variants_data:
            order.add_variants(OrderVariant(**variant_data))
        if not order.item_count and variants_data:
            order.item_count = sum(v.get("quantity", 1) for v in variants_data)

        order._append_history(OrderStatus.PENDING, changed_by=user_id, note="", at=now)
        order.recalculate_profit()

        order.raise_(
            FulfillmentOrderCreated(
                order_id=str(order.id),
                commerce_order_id=commerce_order_id,
                user_id=user_id,
                store_id=store_id,
                order_name=order.order_name,
                store_name=store_name,
                customer_name=order.customer_name,
                customer_email=order.customer_email,
                sku=order.sku,
                item_count=order.item_count,
                order_value=order_value,
                wallet_deducted_amount=wallet_deducted_amount,
                status=order.status,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Derived fields
    # -------------------------------------------------------------------
    def recalculate_profit(self) -> int:
        self.profit = (
            (self.order_value or 0) - (self.product_cost or 0) - (self.shipping_cost or 0) - (self.service_fee or 0)
        )
        return self.profit

    @property
    def history(self) -> list:
        """Status history in the order the transitions were accepted."""
        return sorted(self.status_history or [], key=lambda entry: entry.sequence)

    @property
    def display_name(self) -> str:
        return self.order_name or "Order"

    def rendered_notes(self) -> str:
        """Notes as one text blob, the way the legacy admin screen shows them."""
        ordered = sorted(self.notes or [], key=lambda note: note.created_at)
        return "\n\n".join(note.render() for note in ordered)

    def status_view(self) -> dict:
        """Current status and full history, as returned to the admin surface."""
        return {
            "id": str(self.id),
            "status": self.status,
            "status_version": self.status_version,
            "status_history": [
                {
                    "status": entry.status,
                    "changed_by": str(entry.changed_by),
                    "changed_at": entry.changed_at.isoformat(),
                    "note": entry.note or "",
                }
                for entry in self.history
            ],
        }

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def _append_history(self, status: OrderStatus, changed_by: str, note: str, at: datetime) -> None:
        self.status_version = (self.status_version or 0) + 1
        self.add_status_history(
            StatusHistoryEntry(
                sequence=self.status_version,
                status=status.value,
                changed_by=changed_by,
                changed_at=at,
                note=note or "",
            )
        )

    def transition_to(self, target, changed_by: str, note: str | None = None, origin: str | None = None) -> str:
        """Move to ``target`` if the status policy allows it.

        Returns the status the order had before the change.
        """
        target = assert_can_transition(self.status, target)
        previous_status = self.status
        now = datetime.now(UTC)

        self.status = target.value
        stamp_field = STAGE_TIMESTAMP_FIELDS.get(target)
        if stamp_field and getattr(self, stamp_field) is None:
            setattr(self, stamp_field, now)
        self._append_history(target, changed_by=changed_by, note=note or "", at=now)
        self.updated_at = now

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                commerce_order_id=str(self.commerce_order_id) if self.commerce_order_id else None,
                user_id=str(self.user_id),
                order_name=self.display_name,
                previous_status=previous_status,
                new_status=target.value,
                changed_by=changed_by,
                note=note or "",
                origin=origin or "",
                status_version=self.status_version,
                changed_at=now,
            )
        )
        return previous_status

    # -------------------------------------------------------------------
    # Staff assignment
    # -------------------------------------------------------------------
    def assign_staff(self, assignments: dict, changed_by: str) -> None:
        """Set or clear staff per role. ``None`` or ``""`` unassigns."""
        unknown = sorted(set(assignments) - set(_ASSIGNMENT_FIELDS))
        if unknown:
            raise ValidationError({"assignments": [f"Unknown staff role(s): {', '.join(unknown)}"]})
        if not assignments:
            raise ValidationError({"assignments": ["At least one assignment is required"]})

        now = datetime.now(UTC)
        for role, staff_id in assignments.items():
            setattr(self, _ASSIGNMENT_FIELDS[role], staff_id or None)
        self.updated_at = now
        self.raise_(
            StaffAssigned(
                order_id=str(self.id),
                assigned_picker_id=self.assigned_picker_id,
                assigned_packer_id=self.assigned_packer_id,
                assigned_qc_id=self.assigned_qc_id,
                assigned_courier_person_id=self.assigned_courier_person_id,
                changed_by=changed_by,
                assigned_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Tracking
    # -------------------------------------------------------------------
    def update_tracking(
        self,
        changed_by: str,
        tracking_number: str | None = None,
        tracking_url: str | None = None,
        courier_provider: str | None = None,
        estimated_delivery_date: datetime | None = None,
        actual_delivery_date: datetime | None = None,
    ) -> None:
        """Partial update: only the supplied fields are touched."""
        supplied = {
            "tracking_number": tracking_number,
            "tracking_url": tracking_url,
            "courier_provider": courier_provider,
            "estimated_delivery_date": estimated_delivery_date,
            "actual_delivery_date": actual_delivery_date,
        }
        supplied = {field: value for field, value in supplied.items() if value is not None}
        if not supplied:
            raise ValidationError({"tracking": ["No tracking fields supplied"]})

        previous_tracking_number = self.tracking_number
        now = datetime.now(UTC)
        for field, value in supplied.items():
            setattr(self, field, value)
        self.updated_at = now
        self.raise_(
            TrackingUpdated(
                order_id=str(self.id),
                commerce_order_id=str(self.commerce_order_id) if self.commerce_order_id else None,
                user_id=str(self.user_id),
                order_name=self.display_name,
                tracking_number=self.tracking_number,
                previous_tracking_number=previous_tracking_number,
                tracking_url=self.tracking_url,
                courier_provider=self.courier_provider,
                estimated_delivery_date=self.estimated_delivery_date,
                actual_delivery_date=self.actual_delivery_date,
                changed_by=changed_by,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # RTO address
    # -------------------------------------------------------------------
    def update_rto_address(self, changed_by: str, **address) -> None:
        """Overwrite the whole RTO address; missing parts become empty."""
        unknown = sorted(set(address) - set(_RTO_FIELDS))
        if unknown:
            raise ValidationError({"rto_address": [f"Unknown address field(s): {', '.join(unknown)}"]})

        values = {field: str(address.get(field) or "") for field in _RTO_FIELDS}
        values["country"] = values["country"] or DEFAULT_RTO_COUNTRY

        now = datetime.now(UTC)
        self.rto_address = RtoAddress(**values)
        self.updated_at = now
        self.raise_(
            RtoAddressUpdated(
                order_id=str(self.id),
                city=values["city"],
                pincode=values["pincode"],
                changed_by=changed_by,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Notes and attachments
    # -------------------------------------------------------------------
    def add_internal_note(self, author: str, text: str) -> None:
        if not text or not text.strip():
            raise ValidationError({"note": ["Note is required"]})

        now = datetime.now(UTC)
        self.add_notes(InternalNote(author=author or "Admin", text=text, created_at=now))
        self.updated_at = now
        self.raise_(
            InternalNoteAdded(
                order_id=str(self.id),
                author=author or "Admin",
                text=text,
                added_at=now,
            )
        )

    def attachment_urls(self) -> list[str]:
        return [a.url for a in sorted(self.attachments or [], key=lambda a: a.added_at)]

    def attach(self, url: str, changed_by: str) -> None:
        if not url or not url.strip():
            raise ValidationError({"url": ["Attachment URL is required"]})

        now = datetime.now(UTC)
        self.add_attachments(OrderAttachment(url=url.strip(), added_by=changed_by, added_at=now))
        self.updated_at = now
        self.raise_(
            AttachmentAdded(
                order_id=str(self.id),
                url=url.strip(),
                attachment_count=len(self.attachments),
                changed_by=changed_by,
                added_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Flags
    # -------------------------------------------------------------------
    def update_flags(
        self,
        changed_by: str,
        is_priority: bool | None = None,
        is_delayed: bool | None = None,
        has_issue: bool | None = None,
        issue_description: str | None = None,
    ) -> None:
        """Change only the flags that were supplied."""
        if is_priority is not None:
            self.is_priority = is_priority
        if is_delayed is not None:
            self.is_delayed = is_delayed
        if has_issue is not None:
            self.has_issue = has_issue
        if issue_description is not None:
            self.issue_description = issue_description

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            OrderFlagsUpdated(
                order_id=str(self.id),
                is_priority=bool(self.is_priority),
                is_delayed=bool(self.is_delayed),
                has_issue=bool(self.has_issue),
                issue_description=self.issue_description or "",
                changed_by=changed_by,
                updated_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Costs
    # -------------------------------------------------------------------
    def revise_costs(
        self,
        changed_by: str,
        product_cost: int | None = None,
        shipping_cost: int | None = None,
        service_fee: int | None = None,
    ) -> None:
        if product_cost is None and shipping_cost is None and service_fee is None:
            raise ValidationError({"costs": ["No cost fields supplied"]})

        if product_cost is not None:
            self.product_cost = product_cost
        if shipping_cost is not None:
            self.shipping_cost = shipping_cost
        if service_fee is not None:
            self.service_fee = service_fee
        self.recalculate_profit()

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            OrderCostsRevised(
                order_id=str(self.id),
                product_cost=self.product_cost,
                shipping_cost=self.shipping_cost,
                service_fee=self.service_fee,
                profit=self.profit,
                changed_by=changed_by,
                revised_at=now,
            )
        )
