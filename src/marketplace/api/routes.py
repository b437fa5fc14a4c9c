"""FastAPI endpoints for the Marketplace: pricing, orders, delivery, payouts, notifications."""

import json

from fastapi import APIRouter, Header, HTTPException, Request
from protean.utils.globals import current_domain

from marketplace.api.schemas import (
    AvailableTasksResponse,
    CancelOrderRequest,
    CheckoutRequest,
    CheckoutResponse,
    ClaimTaskRequest,
    ClaimTaskResponse,
    ComputeRiderPayoutsRequest,
    ComputeRiderPayoutsResponse,
    CreateDeliveryTaskRequest,
    LandmarksResponse,
    MarkAllReadResponse,
    MarkReadRequest,
    MarkRiderPayoutPaidRequest,
    NotificationSchema,
    OrderIdsResponse,
    PlaceOrdersRequest,
    ProfileIdResponse,
    QuoteRequest,
    QuoteResponse,
    RegisterRiderRequest,
    RegisterVendorRequest,
    RiderApprovalRequest,
    RiderAvailabilityRequest,
    SetOrderStatusRequest,
    SetTaskStatusRequest,
    SettleVendorPayoutRequest,
    StatesResponse,
    StatusResponse,
    TaskIdResponse,
    TaskSchema,
    UnreadNotificationsResponse,
    VerifyPaymentResponse,
)
from marketplace.delivery.claim import ClaimDeliveryTask
from marketplace.delivery.creation import CreateDeliveryTask
from marketplace.delivery.queries import available_tasks
from marketplace.delivery.status import SetTaskStatus
from marketplace.directory.rider import RegisterRider, SetRiderApproval, SetRiderAvailability
from marketplace.directory.vendor import RegisterVendor
from marketplace.notification.reading import (
    MarkAllNotificationsRead,
    MarkNotificationRead,
    unread_notifications,
)
from marketplace.order.cancellation import CancelOrder
from marketplace.order.placement import PlaceOrders
from marketplace.order.status import SetOrderStatus
from marketplace.payment.cancellation import CancelPayment
from marketplace.payment.checkout import InitiateCheckout
from marketplace.payment.gateway import get_gateway
from marketplace.payment.verification import VerifyPayment
from marketplace.payout.settlement import MarkRiderPayoutPaid, SettleVendorPayout
from marketplace.payout.weekly import ComputeRiderPayouts
from marketplace.pricing.engine import quote
from marketplace.pricing.zones import available_landmarks, available_states, landmarks_by_zone

pricing_router = APIRouter(prefix="/pricing", tags=["pricing"])
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])
payment_router = APIRouter(prefix="/payments", tags=["payments"])
order_router = APIRouter(prefix="/orders", tags=["orders"])
delivery_router = APIRouter(prefix="/delivery-tasks", tags=["delivery"])
payout_router = APIRouter(prefix="/payouts", tags=["payouts"])
notification_router = APIRouter(prefix="/notifications", tags=["notifications"])
vendor_router = APIRouter(prefix="/vendors", tags=["directory"])
rider_router = APIRouter(prefix="/riders", tags=["directory"])


def _lines(lines) -> str:
    return json.dumps([line.model_dump() for line in lines])


# --- Pricing ---


@pricing_router.post("/quote", response_model=QuoteResponse)
async def price_cart(body: QuoteRequest) -> QuoteResponse:
    price_quote = quote(
        [line.model_dump() for line in body.cart_lines],
        body.zone_or_landmark,
        vendor_count=body.vendor_count,
    )
    return QuoteResponse(**price_quote.as_dict())


@pricing_router.get("/landmarks", response_model=LandmarksResponse)
async def list_landmarks() -> LandmarksResponse:
    return LandmarksResponse(landmarks=available_landmarks(), zones=landmarks_by_zone())


@pricing_router.get("/states", response_model=StatesResponse)
async def list_states() -> StatesResponse:
    return StatesResponse(states=available_states())


# --- Checkout & payments ---


@checkout_router.post("", status_code=201, response_model=CheckoutResponse)
async def checkout(body: CheckoutRequest) -> CheckoutResponse:
    command = InitiateCheckout(
        user_id=body.user_id,
        zone_or_landmark=body.zone_or_landmark,
        cart_lines=_lines(body.cart_lines),
        delivery_details=json.dumps(body.delivery_details),
        vendor_count=body.vendor_count,
        payment_reference=body.payment_reference,
        order_type=body.order_type,
        email=body.email,
    )
    result = current_domain.process(command, asynchronous=False)
    return CheckoutResponse(**result)


@payment_router.post("/webhook", response_model=StatusResponse)
async def payment_webhook(request: Request, x_paystack_signature: str = Header(default="")) -> StatusResponse:
    """Provider callback. Only a correctly signed ``charge.success`` settles a payment."""
    raw_body = await request.body()
    if not get_gateway().verify_webhook_signature(raw_body, x_paystack_signature):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    try:
        payload = json.loads(raw_body)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid webhook payload") from exc

    data = payload.get("data") if isinstance(payload, dict) else None
    reference = data.get("reference") if isinstance(data, dict) else None
    if not reference or payload.get("event") != "charge.success":
        return StatusResponse(status="ignored")

    current_domain.process(VerifyPayment(payment_reference=reference, verified=True), asynchronous=False)
    return StatusResponse(status="processed")


@payment_router.post("/{payment_reference}/verify", response_model=VerifyPaymentResponse)
async def verify_payment(payment_reference: str) -> VerifyPaymentResponse:
    """Poll the payment provider for ``payment_reference`` and settle accordingly."""
    result = current_domain.process(VerifyPayment(payment_reference=payment_reference), asynchronous=False)
    return VerifyPaymentResponse(**result)


@payment_router.post("/{payment_reference}/cancel", response_model=StatusResponse)
async def cancel_payment(payment_reference: str) -> StatusResponse:
    current_domain.process(CancelPayment(payment_reference=payment_reference), asynchronous=False)
    return StatusResponse()


# --- Orders ---


@order_router.post("", status_code=201, response_model=OrderIdsResponse)
async def place_orders(body: PlaceOrdersRequest) -> OrderIdsResponse:
    command = PlaceOrders(
        user_id=body.user_id,
        payment_reference=body.payment_reference,
        lines=_lines(body.lines),
        delivery_zone=body.delivery_zone,
        delivery_address=body.delivery_address,
        order_type=body.order_type,
        total=body.total,
    )
    result = current_domain.process(command, asynchronous=False)
    return OrderIdsResponse(order_ids=result)


@order_router.put("/{order_id}/status", response_model=StatusResponse)
async def set_order_status(order_id: str, body: SetOrderStatusRequest) -> StatusResponse:
    command = SetOrderStatus(
        order_id=order_id,
        vendor_id=body.vendor_id,
        target=body.status,
        reason=body.reason,
    )
    result = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=result)


@order_router.post("/{order_id}/cancel", response_model=StatusResponse)
async def cancel_order(order_id: str, body: CancelOrderRequest) -> StatusResponse:
    command = CancelOrder(
        order_id=order_id,
        actor_role=body.actor_role,
        actor_id=body.actor_id,
        reason=body.reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="Cancelled")


# --- Delivery tasks ---


@delivery_router.post("", status_code=201, response_model=TaskIdResponse)
async def create_delivery_task(body: CreateDeliveryTaskRequest) -> TaskIdResponse:
    command = CreateDeliveryTask(
        order_id=body.order_id,
        vendor_id=body.vendor_id,
        pickup_address=body.pickup_address,
        delivery_address=body.delivery_address,
    )
    result = current_domain.process(command, asynchronous=False)
    return TaskIdResponse(task_id=result)


@delivery_router.get("/available/{rider_id}", response_model=AvailableTasksResponse)
async def list_available_tasks(rider_id: str) -> AvailableTasksResponse:
    tasks = [
        TaskSchema(
            task_id=str(task.id),
            order_id=str(task.order_id),
            vendor_id=str(task.vendor_id),
            vendor_location=task.vendor_location,
            pickup_address=task.pickup_address,
            delivery_address=task.delivery_address,
            payment_reference=task.payment_reference,
            status=task.status,
        )
        for task in available_tasks(rider_id)
    ]
    return AvailableTasksResponse(tasks=tasks)


@delivery_router.post("/{task_id}/claim", response_model=ClaimTaskResponse)
async def claim_task(task_id: str, body: ClaimTaskRequest) -> ClaimTaskResponse:
    command = ClaimDeliveryTask(task_id=task_id, rider_id=body.rider_id)
    result = current_domain.process(command, asynchronous=False)
    return ClaimTaskResponse(task_ids=result)


@delivery_router.put("/{task_id}/status", response_model=StatusResponse)
async def set_task_status(task_id: str, body: SetTaskStatusRequest) -> StatusResponse:
    command = SetTaskStatus(task_id=task_id, rider_id=body.rider_id, target=body.status)
    result = current_domain.process(command, asynchronous=False)
    return StatusResponse(status=result)


# --- Payouts ---


@payout_router.post("/riders/compute", response_model=ComputeRiderPayoutsResponse)
async def compute_rider_payouts(body: ComputeRiderPayoutsRequest) -> ComputeRiderPayoutsResponse:
    command = ComputeRiderPayouts(week_start=body.week_start, as_of=body.as_of, rate=body.rate)
    result = current_domain.process(command, asynchronous=False)
    return ComputeRiderPayoutsResponse(**result)


@payout_router.post("/riders/{payout_id}/paid", response_model=StatusResponse)
async def mark_rider_payout_paid(payout_id: str, body: MarkRiderPayoutPaidRequest) -> StatusResponse:
    command = MarkRiderPayoutPaid(payout_id=payout_id, payout_reference=body.payout_reference)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="paid")


@payout_router.post("/vendors/{payout_id}/settle", response_model=StatusResponse)
async def settle_vendor_payout(payout_id: str, body: SettleVendorPayoutRequest) -> StatusResponse:
    command = SettleVendorPayout(
        payout_id=payout_id,
        succeeded=body.succeeded,
        payout_reference=body.payout_reference,
        failure_reason=body.failure_reason,
    )
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="completed" if body.succeeded else "failed")


# --- Notifications ---


@notification_router.get("/{recipient_id}/unread", response_model=UnreadNotificationsResponse)
async def list_unread(recipient_id: str) -> UnreadNotificationsResponse:
    items = []
    for notification in unread_notifications(recipient_id):
        payload = notification.payload()
        items.append(
            NotificationSchema(
                notification_id=str(notification.id),
                notification_type=notification.notification_type,
                audience=notification.audience,
                title=notification.title,
                message=notification.message,
                payload=payload.to_dict() if payload is not None else None,
                created_at=notification.created_at.isoformat() if notification.created_at else None,
            )
        )
    return UnreadNotificationsResponse(notifications=items)


@notification_router.post("/{notification_id}/read", response_model=StatusResponse)
async def mark_read(notification_id: str, body: MarkReadRequest) -> StatusResponse:
    command = MarkNotificationRead(notification_id=notification_id, recipient_id=body.recipient_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse()


@notification_router.post("/{recipient_id}/read-all", response_model=MarkAllReadResponse)
async def mark_all_read(recipient_id: str) -> MarkAllReadResponse:
    result = current_domain.process(MarkAllNotificationsRead(recipient_id=recipient_id), asynchronous=False)
    return MarkAllReadResponse(marked=result)


# --- Directory ---


@vendor_router.post("", status_code=201, response_model=ProfileIdResponse)
async def register_vendor(body: RegisterVendorRequest) -> ProfileIdResponse:
    command = RegisterVendor(
        vendor_id=body.vendor_id,
        business_name=body.business_name,
        location=body.location,
        address=body.address,
    )
    return ProfileIdResponse(id=current_domain.process(command, asynchronous=False))


@rider_router.post("", status_code=201, response_model=ProfileIdResponse)
async def register_rider(body: RegisterRiderRequest) -> ProfileIdResponse:
    command = RegisterRider(rider_id=body.rider_id, name=body.name, location=body.location)
    return ProfileIdResponse(id=current_domain.process(command, asynchronous=False))


@rider_router.put("/{rider_id}/availability", response_model=StatusResponse)
async def set_rider_availability(rider_id: str, body: RiderAvailabilityRequest) -> StatusResponse:
    current_domain.process(
        SetRiderAvailability(rider_id=rider_id, is_available=body.is_available),
        asynchronous=False,
    )
    return StatusResponse()


@rider_router.put("/{rider_id}/approval", response_model=StatusResponse)
async def set_rider_approval(rider_id: str, body: RiderApprovalRequest) -> StatusResponse:
    current_domain.process(SetRiderApproval(rider_id=rider_id, approval=body.approval), asynchronous=False)
    return StatusResponse(status=body.approval)


ALL_ROUTERS = [
    pricing_router,
    checkout_router,
    payment_router,
    order_router,
    delivery_router,
    payout_router,
    notification_router,
    vendor_router,
    rider_router,
]
