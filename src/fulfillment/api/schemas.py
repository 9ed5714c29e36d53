"""Pydantic API schemas for the fulfillment admin surface.

These are the external API contracts — separate from domain commands.
The routes translate between these schemas and domain commands. All money
amounts are integers in minor currency units.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class VariantRequest(BaseModel):
    title: str = ""
    sku: str = ""
    quantity: int = Field(default=1, ge=1)
    price: int = Field(default=0, ge=0)


class CreateFulfillmentOrderRequest(BaseModel):
    commerce_order_id: str
    user_id: str
    store_id: str
    store_name: str
    order_value: int = Field(ge=0)
    wallet_deducted_amount: int = Field(ge=0)
    wallet_deducted_at: datetime | None = None
    order_name: str | None = None
    customer_name: str | None = None
    customer_email: str | None = None
    customer_phone: str | None = None
    shipping_address: str | None = None
    sku: str | None = None
    item_count: int | None = None
    variants: list[VariantRequest] = []
    product_cost: int | None = None
    shipping_cost: int | None = None
    service_fee: int | None = None


class ChangeStatusRequest(BaseModel):
    status: str
    note: str | None = None
    expected_status: str | None = None


class AssignStaffRequest(BaseModel):
    """Only the roles present in the body change; ``null`` unassigns."""

    picker: str | None = None
    packer: str | None = None
    qc: str | None = None
    courier_person: str | None = None


class UpdateTrackingRequest(BaseModel):
    tracking_number: str | None = None
    tracking_url: str | None = None
    courier_provider: str | None = None
    estimated_delivery_date: datetime | None = None
    actual_delivery_date: datetime | None = None


class RtoAddressRequest(BaseModel):
    name: str | None = None
    phone: str | None = None
    address_line1: str | None = None
    address_line2: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None
    country: str | None = None


class AddNoteRequest(BaseModel):
    note: str


class UpdateFlagsRequest(BaseModel):
    is_priority: bool | None = None
    is_delayed: bool | None = None
    has_issue: bool | None = None
    issue_description: str | None = None


class AddAttachmentRequest(BaseModel):
    url: str


class ReviseCostsRequest(BaseModel):
    product_cost: int | None = Field(default=None, ge=0)
    shipping_cost: int | None = Field(default=None, ge=0)
    service_fee: int | None = Field(default=None, ge=0)


class BulkOperationRequest(BaseModel):
    order_ids: list[str]
    action: str
    status: str | None = None
    note: str | None = None
    picker_id: str | None = None
    packer_id: str | None = None


class RegisterStaffRequest(BaseModel):
    name: str
    email: str
    role: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class OrderIdResponse(BaseModel):
    order_id: str


class StaffIdResponse(BaseModel):
    staff_id: str


class StatusResponse(BaseModel):
    status: str


class HistoryEntryResponse(BaseModel):
    status: str
    changed_by: str
    changed_at: str
    note: str = ""


class StatusChangeResponse(BaseModel):
    id: str
    status: str
    status_version: int
    status_history: list[HistoryEntryResponse]


class TransitionsResponse(BaseModel):
    current_status: str
    valid_transitions: list[str]


class NotesResponse(BaseModel):
    notes: str


class AttachmentsResponse(BaseModel):
    attachments: list[str]


class ProfitResponse(BaseModel):
    profit: int


class BulkFailure(BaseModel):
    id: str
    error: str


class BulkOperationResponse(BaseModel):
    succeeded: list[str]
    failed: list[BulkFailure]
    succeeded_count: int
    failed_count: int


class BoardRowResponse(BaseModel):
    order_id: str
    commerce_order_id: str | None = None
    user_id: str
    order_name: str | None = None
    store_name: str | None = None
    customer_name: str | None = None
    sku: str | None = None
    order_value: int = 0
    status: str
    is_priority: bool = False
    is_delayed: bool = False
    has_issue: bool = False
    assigned_picker_id: str | None = None
    assigned_packer_id: str | None = None
    tracking_number: str | None = None
    created_at: datetime | None = None


class BoardResponse(BaseModel):
    orders: list[BoardRowResponse]
    total: int
    limit: int
    offset: int


class OrderStatsResponse(BaseModel):
    total_orders: int
    status_counts: dict[str, int]
    active_count: int
    total_revenue: int
    total_profit: int
    avg_processing_time_ms: int
    avg_processing_time_hours: float
    priority_count: int
    issue_count: int
