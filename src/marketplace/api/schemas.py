"""Pydantic request/response schemas for the Marketplace API.

These are external contracts, kept separate from internal Protean commands.
"""

from datetime import date

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    vendor_id: str
    product_id: str
    quantity: int
    unit_price: float = Field(ge=0)


class StatusResponse(BaseModel):
    status: str = "ok"


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------
class QuoteRequest(BaseModel):
    zone_or_landmark: str
    cart_lines: list[CartLineSchema]
    vendor_count: int | None = Field(default=None, ge=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "zone_or_landmark": "Amarata",
                    "cart_lines": [
                        {"vendor_id": "ven-1", "product_id": "jollof", "quantity": 2, "unit_price": 1500},
                        {"vendor_id": "ven-2", "product_id": "suya", "quantity": 1, "unit_price": 2000},
                    ],
                }
            ]
        }
    }


class QuoteResponse(BaseModel):
    subtotal: float
    delivery_fee: float
    vat_amount: float
    commission_amount: float
    total: float
    delivery_zone: str
    pricing_mode: str
    vendor_count: int


class LandmarksResponse(BaseModel):
    landmarks: list[str]
    zones: dict[int, list[str]]


class StatesResponse(BaseModel):
    states: list[str]


# ---------------------------------------------------------------------------
# Checkout & payments
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    user_id: str
    zone_or_landmark: str
    cart_lines: list[CartLineSchema]
    delivery_details: dict = Field(default_factory=dict)
    vendor_count: int | None = Field(default=None, ge=1)
    payment_reference: str | None = None
    order_type: str = "menu"
    email: str | None = None


class CheckoutResponse(QuoteResponse):
    payment_id: str
    payment_reference: str
    authorization_url: str | None = None


class VerifyPaymentResponse(BaseModel):
    status: str
    processed: bool
    orders: int
    payouts: int


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrdersRequest(BaseModel):
    user_id: str
    payment_reference: str
    lines: list[CartLineSchema]
    delivery_zone: str | None = None
    delivery_address: str | None = None
    order_type: str = "menu"
    total: float | None = None


class OrderIdsResponse(BaseModel):
    order_ids: list[str]


class SetOrderStatusRequest(BaseModel):
    vendor_id: str
    status: str
    reason: str | None = None


class CancelOrderRequest(BaseModel):
    actor_role: str
    actor_id: str | None = None
    reason: str | None = None


# ---------------------------------------------------------------------------
# Delivery tasks
# ---------------------------------------------------------------------------
class CreateDeliveryTaskRequest(BaseModel):
    order_id: str
    vendor_id: str
    pickup_address: str | None = None
    delivery_address: str | None = None


class TaskIdResponse(BaseModel):
    task_id: str


class TaskSchema(BaseModel):
    task_id: str
    order_id: str
    vendor_id: str
    vendor_location: str
    pickup_address: str | None = None
    delivery_address: str | None = None
    payment_reference: str | None = None
    status: str


class AvailableTasksResponse(BaseModel):
    tasks: list[TaskSchema]


class ClaimTaskRequest(BaseModel):
    rider_id: str


class ClaimTaskResponse(BaseModel):
    task_ids: list[str]


class SetTaskStatusRequest(BaseModel):
    rider_id: str
    status: str


# ---------------------------------------------------------------------------
# Payouts
# ---------------------------------------------------------------------------
class ComputeRiderPayoutsRequest(BaseModel):
    week_start: date
    as_of: date | None = None
    rate: float | None = Field(default=None, ge=0)


class ComputeRiderPayoutsResponse(BaseModel):
    created: int
    revised: int
    unchanged: int
    paid_skipped: int


class MarkRiderPayoutPaidRequest(BaseModel):
    payout_reference: str | None = None


class SettleVendorPayoutRequest(BaseModel):
    succeeded: bool
    payout_reference: str | None = None
    failure_reason: str | None = None


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------
class NotificationSchema(BaseModel):
    notification_id: str
    notification_type: str
    audience: str
    title: str | None = None
    message: str
    payload: dict | None = None
    created_at: str | None = None


class UnreadNotificationsResponse(BaseModel):
    notifications: list[NotificationSchema]


class MarkReadRequest(BaseModel):
    recipient_id: str


class MarkAllReadResponse(BaseModel):
    marked: int


# ---------------------------------------------------------------------------
# Directory
# ---------------------------------------------------------------------------
class RegisterVendorRequest(BaseModel):
    vendor_id: str
    business_name: str
    location: str
    address: str | None = None


class RegisterRiderRequest(BaseModel):
    rider_id: str
    name: str
    location: str


class ProfileIdResponse(BaseModel):
    id: str


class RiderAvailabilityRequest(BaseModel):
    is_available: bool


class RiderApprovalRequest(BaseModel):
    approval: str
