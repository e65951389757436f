"""Order lifecycle API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Path

from app.api.auth import get_current_identity, get_current_restaurant, get_current_user
from app.models.order import Order
from app.orders.lifecycle import OrderLifecycle, PaymentSessionResult, get_order_lifecycle
from app.schemas.auth import Identity, RestaurantIdentity, UserIdentity
from app.schemas.order import (
    OrderActionResponse,
    OrderCreate,
    OrderItemResponse,
    OrderListResponse,
    OrderResponse,
    PaymentSessionResponse,
)

router = APIRouter()


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        restaurant_id=order.restaurant_id,
        restaurant_name=order.restaurant.name if order.restaurant else None,
        user_id=order.user_id,
        user_name=order.user.username if order.user else None,
        items=[
            OrderItemResponse(name=item.item_name, price=item.item_price, quantity=item.quantity)
            for item in order.items
        ],
        total=order.total,
        status=order.status,
        created_at=order.created_at,
        order_placed_time=order.order_placed_time,
        order_completed_time=order.order_completed_time,
        time_taken=order.time_taken,
    )


def _payment_response(result: PaymentSessionResult) -> PaymentSessionResponse:
    order = result.order
    return PaymentSessionResponse(
        order_id=order.id,
        order_status=order.status,
        payment_status=result.outcome.value,
        provider=order.payment.provider if order.payment else None,
        redirect_url=result.redirect_url,
    )


@router.post("", response_model=OrderResponse, status_code=201)
async def place_order(
    order_data: OrderCreate,
    current_user: UserIdentity = Depends(get_current_user),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    """Place a new order; it starts in payment_pending"""
    order = await lifecycle.place_order(
        user_id=current_user.id,
        restaurant_id=order_data.restaurant_id,
        items=[(item.id, item.quantity) for item in order_data.items],
    )
    return _order_response(order)


@router.get("/pending", response_model=List[OrderResponse])
async def list_pending_orders(
    identity: Identity = Depends(get_current_identity),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    """Open orders for the caller"""
    orders = await lifecycle.list_pending_orders(identity)
    return [_order_response(order) for order in orders]


@router.get("/payment/{order_id}", response_model=PaymentSessionResponse)
async def get_payment_session(
    order_id: UUID,
    current_user: UserIdentity = Depends(get_current_user),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    """Get or create the payment session; polls the provider once it exists"""
    result = await lifecycle.get_or_create_payment_session(order_id, current_user.id)
    return _payment_response(result)


@router.get("/payment/verify/{order_id}", response_model=PaymentSessionResponse)
async def verify_payment(
    order_id: UUID,
    current_user: UserIdentity = Depends(get_current_user),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    """Poll the provider for an existing payment session"""
    result = await lifecycle.verify_payment(order_id, current_user.id)
    return _payment_response(result)


@router.post("/complete/{order_id}", response_model=OrderActionResponse)
async def complete_order(
    order_id: UUID,
    current_restaurant: RestaurantIdentity = Depends(get_current_restaurant),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    """Mark a paid order completed"""
    applied = await lifecycle.complete_order(order_id, current_restaurant.id)
    return OrderActionResponse(order_id=order_id, applied=applied)


@router.post("/cancel/{order_id}", response_model=OrderActionResponse)
async def cancel_order(
    order_id: UUID,
    identity: Identity = Depends(get_current_identity),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    """Cancel a paid order; users only within the cancellation window"""
    applied = await lifecycle.cancel_order(order_id, identity)
    return OrderActionResponse(order_id=order_id, applied=applied)


@router.get("/{days}", response_model=OrderListResponse)
async def list_orders(
    days: int = Path(..., ge=0),
    identity: Identity = Depends(get_current_identity),
    lifecycle: OrderLifecycle = Depends(get_order_lifecycle),
):
    """Order history of the caller for the last `days` days"""
    orders, avg_wait_time = await lifecycle.list_orders(identity, days)
    return OrderListResponse(
        orders=[_order_response(order) for order in orders],
        avg_wait_time=avg_wait_time,
    )
