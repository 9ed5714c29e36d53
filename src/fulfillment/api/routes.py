"""FastAPI routes for the fulfillment admin surface.

The acting administrator is identified by the ``X-Actor-Id`` header and the
request origin by the client address; both are handed to the domain, which
decides what the actor may do.
"""

import json
from datetime import datetime

from fastapi import APIRouter, Header, Query, Request
from protean.utils.globals import current_domain

from fulfillment.api.schemas import (
    AddAttachmentRequest,
    AddNoteRequest,
    AssignStaffRequest,
    AttachmentsResponse,
    BoardResponse,
    BoardRowResponse,
    BulkOperationRequest,
    BulkOperationResponse,
    ChangeStatusRequest,
    CreateFulfillmentOrderRequest,
    NotesResponse,
    OrderIdResponse,
    OrderStatsResponse,
    ProfitResponse,
    RegisterStaffRequest,
    ReviseCostsRequest,
    RtoAddressRequest,
    StaffIdResponse,
    StatusChangeResponse,
    StatusResponse,
    TransitionsResponse,
    UpdateFlagsRequest,
    UpdateTrackingRequest,
)
from fulfillment.order.assignment import AssignStaff
from fulfillment.order.bulk import run_bulk_operation
from fulfillment.order.creation import CreateFulfillmentOrder
from fulfillment.order.flags import UpdateFlags
from fulfillment.order.notes import AddAttachment, AddInternalNote
from fulfillment.order.order import FulfillmentOrder
from fulfillment.order.pricing import ReviseCosts
from fulfillment.order.rto import UpdateRtoAddress
from fulfillment.order.status import valid_transitions
from fulfillment.order.tracking import UpdateTracking
from fulfillment.order.transition import ChangeOrderStatus
from fulfillment.projections.order_board import list_board
from fulfillment.reporting.order_stats import compute_order_stats
from fulfillment.staff.management import DeactivateStaff, RegisterStaff


def _origin(request: Request) -> str:
    return request.client.host if request.client else ""


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def _order_detail(order: FulfillmentOrder) -> dict:
    rto = order.rto_address
    return {
        **order.status_view(),
        "commerce_order_id": str(order.commerce_order_id),
        "user_id": str(order.user_id),
        "store_id": str(order.store_id),
        "order_name": order.order_name,
        "store_name": order.store_name,
        "customer": {
            "name": order.customer_name,
            "email": order.customer_email,
            "phone": order.customer_phone,
            "shipping_address": order.shipping_address,
        },
        "sku": order.sku,
        "item_count": order.item_count,
        "variants": [
            {"title": v.title, "sku": v.sku, "quantity": v.quantity, "price": v.price} for v in order.variants or []
        ],
        "pricing": {
            "order_value": order.order_value,
            "product_cost": order.product_cost,
            "shipping_cost": order.shipping_cost,
            "service_fee": order.service_fee,
            "wallet_deducted_amount": order.wallet_deducted_amount,
            "profit": order.profit,
        },
        "assignments": {
            "picker": order.assigned_picker_id,
            "packer": order.assigned_packer_id,
            "qc": order.assigned_qc_id,
            "courier_person": order.assigned_courier_person_id,
        },
        "tracking": {
            "tracking_number": order.tracking_number,
            "tracking_url": order.tracking_url,
            "courier_provider": order.courier_provider,
            "estimated_delivery_date": _iso(order.estimated_delivery_date),
            "actual_delivery_date": _iso(order.actual_delivery_date),
        },
        "rto_address": rto.to_dict() if rto else None,
        "flags": {
            "is_priority": order.is_priority,
            "is_delayed": order.is_delayed,
            "has_issue": order.has_issue,
            "issue_description": order.issue_description,
        },
        "notes": order.rendered_notes(),
        "attachments": order.attachment_urls(),
        "timestamps": {
            "wallet_deducted_at": _iso(order.wallet_deducted_at),
            "sourced_at": _iso(order.sourced_at),
            "packed_at": _iso(order.packed_at),
            "dispatched_at": _iso(order.dispatched_at),
            "shipped_at": _iso(order.shipped_at),
            "delivered_at": _iso(order.delivered_at),
            "created_at": _iso(order.created_at),
            "updated_at": _iso(order.updated_at),
        },
    }


# ---------------------------------------------------------------------------
# Fulfillment Order Router
# ---------------------------------------------------------------------------
fulfillment_order_router = APIRouter(prefix="/fulfillment-orders", tags=["fulfillment-orders"])


@fulfillment_order_router.get("", response_model=BoardResponse)
async def list_orders(
    status: str | None = None,
    user_id: str | None = None,
    store_id: str | None = None,
    assigned_picker: str | None = None,
    is_priority: bool | None = None,
    has_issue: bool | None = None,
    search: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
) -> BoardResponse:
    """List orders for the admin board, priority first. ``status=active`` hides finished orders."""
    rows, total = list_board(
        status=status,
        user_id=user_id,
        store_id=store_id,
        assigned_picker_id=assigned_picker,
        is_priority=is_priority,
        has_issue=has_issue,
        search=search,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return BoardResponse(
        orders=[
            BoardRowResponse(**{field: getattr(row, field) for field in BoardRowResponse.model_fields}) for row in rows
        ],
        total=total,
        limit=limit,
        offset=offset,
    )


@fulfillment_order_router.get("/stats", response_model=OrderStatsResponse)
async def order_stats(start_date: datetime | None = None, end_date: datetime | None = None) -> OrderStatsResponse:
    return OrderStatsResponse(**compute_order_stats(start_date=start_date, end_date=end_date))


@fulfillment_order_router.post("", status_code=201, response_model=OrderIdResponse)
async def create_order(body: CreateFulfillmentOrderRequest) -> OrderIdResponse:
    """Open a fulfillment order for a purchase whose wallet debit has succeeded."""
    payload = body.model_dump(exclude={"variants"})
    command = CreateFulfillmentOrder(
        **{key: value for key, value in payload.items() if value is not None},
        variants=json.dumps([variant.model_dump() for variant in body.variants]),
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdResponse(order_id=result)


@fulfillment_order_router.post("/bulk", response_model=BulkOperationResponse)
async def bulk_operation(
    body: BulkOperationRequest,
    request: Request,
    x_actor_id: str | None = Header(default=None),
) -> BulkOperationResponse:
    """Apply one action to many orders; per-order failures are reported, not raised."""
    result = run_bulk_operation(
        order_ids=body.order_ids,
        action=body.action,
        actor_id=x_actor_id,
        status=body.status,
        note=body.note,
        picker_id=body.picker_id,
        packer_id=body.packer_id,
        origin=_origin(request),
    )
    return BulkOperationResponse(**result.to_dict())


@fulfillment_order_router.get("/{order_id}")
async def get_order(order_id: str) -> dict:
    return _order_detail(current_domain.repository_for(FulfillmentOrder).get(order_id))


@fulfillment_order_router.get("/{order_id}/transitions", response_model=TransitionsResponse)
async def get_transitions(order_id: str) -> TransitionsResponse:
    order = current_domain.repository_for(FulfillmentOrder).get(order_id)
    return TransitionsResponse(
        current_status=order.status,
        valid_transitions=[status.value for status in valid_transitions(order.status)],
    )


@fulfillment_order_router.put("/{order_id}/status", response_model=StatusChangeResponse)
async def change_status(
    order_id: str,
    body: ChangeStatusRequest,
    request: Request,
    x_actor_id: str | None = Header(default=None),
) -> StatusChangeResponse:
    """Move the order to a new status. Rejections list the statuses that are allowed."""
    command = ChangeOrderStatus(
        order_id=order_id,
        status=body.status,
        actor_id=x_actor_id,
        note=body.note,
        expected_status=body.expected_status,
        origin=_origin(request),
    )
    result = current_domain.process(command, asynchronous=False)
    return StatusChangeResponse(**result)


@fulfillment_order_router.put("/{order_id}/assign", response_model=StatusResponse)
async def assign_staff(
    order_id: str,
    body: AssignStaffRequest,
    x_actor_id: str | None = Header(default=None),
) -> StatusResponse:
    command = AssignStaff(
        order_id=order_id,
        actor_id=x_actor_id,
        assignments=json.dumps(body.model_dump(exclude_unset=True)),
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="staff_assigned")


@fulfillment_order_router.put("/{order_id}/tracking", response_model=StatusResponse)
async def update_tracking(
    order_id: str,
    body: UpdateTrackingRequest,
    x_actor_id: str | None = Header(default=None),
) -> StatusResponse:
    command = UpdateTracking(order_id=order_id, actor_id=x_actor_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="tracking_updated")


@fulfillment_order_router.put("/{order_id}/rto-address", response_model=StatusResponse)
async def update_rto_address(
    order_id: str,
    body: RtoAddressRequest,
    x_actor_id: str | None = Header(default=None),
) -> StatusResponse:
    command = UpdateRtoAddress(order_id=order_id, actor_id=x_actor_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="rto_address_updated")


@fulfillment_order_router.post("/{order_id}/notes", response_model=NotesResponse)
async def add_note(
    order_id: str,
    body: AddNoteRequest,
    x_actor_id: str | None = Header(default=None),
) -> NotesResponse:
    command = AddInternalNote(order_id=order_id, actor_id=x_actor_id, text=body.note)
    return NotesResponse(notes=current_domain.process(command, asynchronous=False))


@fulfillment_order_router.put("/{order_id}/flags", response_model=StatusResponse)
async def update_flags(
    order_id: str,
    body: UpdateFlagsRequest,
    x_actor_id: str | None = Header(default=None),
) -> StatusResponse:
    command = UpdateFlags(order_id=order_id, actor_id=x_actor_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="flags_updated")


@fulfillment_order_router.post("/{order_id}/attachments", response_model=AttachmentsResponse)
async def add_attachment(
    order_id: str,
    body: AddAttachmentRequest,
    x_actor_id: str | None = Header(default=None),
) -> AttachmentsResponse:
    command = AddAttachment(order_id=order_id, actor_id=x_actor_id, url=body.url)
    return AttachmentsResponse(attachments=current_domain.process(command, asynchronous=False))


@fulfillment_order_router.put("/{order_id}/costs", response_model=ProfitResponse)
async def revise_costs(
    order_id: str,
    body: ReviseCostsRequest,
    x_actor_id: str | None = Header(default=None),
) -> ProfitResponse:
    command = ReviseCosts(order_id=order_id, actor_id=x_actor_id, **body.model_dump(exclude_none=True))
    return ProfitResponse(profit=current_domain.process(command, asynchronous=False))


# ---------------------------------------------------------------------------
# Staff Router
# ---------------------------------------------------------------------------
staff_router = APIRouter(prefix="/staff", tags=["staff"])


@staff_router.post("", status_code=201, response_model=StaffIdResponse)
async def register_staff(body: RegisterStaffRequest) -> StaffIdResponse:
    command = RegisterStaff(name=body.name, email=body.email, role=body.role)
    return StaffIdResponse(staff_id=current_domain.process(command, asynchronous=False))


@staff_router.put("/{staff_id}/deactivate", response_model=StatusResponse)
async def deactivate_staff(staff_id: str) -> StatusResponse:
    current_domain.process(DeactivateStaff(staff_id=staff_id), asynchronous=False)
    return StatusResponse(status="deactivated")
