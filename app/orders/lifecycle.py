"""Order lifecycle controller"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence, Tuple
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.config import settings
from app.database import get_db
from app.models.order import Order, OrderStatus
from app.notifications.dispatcher import NotificationDispatcher, get_notification_dispatcher
from app.orders.catalog import resolve_items
from app.orders.errors import PaymentNotInitiated, ValidationFailed
from app.orders.store import OrderStore
from app.payments.credentials import MerchantCredentials, get_merchant_credentials
from app.payments.gateway import PaymentGateway, get_payment_gateway
from app.payments.providers.base import PaymentOutcome
from app.schemas.auth import Identity, RestaurantIdentity, UserIdentity

logger = structlog.get_logger()

ORDER_STATUS_TO_OUTCOME = {
    OrderStatus.PAYMENT_PENDING: PaymentOutcome.PENDING,
    OrderStatus.PAYMENT_FAILED: PaymentOutcome.FAILED,
    OrderStatus.PAID: PaymentOutcome.PAID,
    OrderStatus.COMPLETED: PaymentOutcome.PAID,
    OrderStatus.CANCELLED: PaymentOutcome.PAID,
}


@dataclass
class PaymentSessionResult:
    """Order state after a payment session fetch or status poll"""
    order: Order
    outcome: PaymentOutcome

    @property
    def redirect_url(self) -> Optional[str]:
        return self.order.payment.redirect_url if self.order.payment else None


class OrderLifecycle:
    """
    Owns the order state machine:

        payment_pending -> paid -> completed
        payment_pending -> payment_failed
        paid -> cancelled

    Transitions go through OrderStore's conditional updates, so a request
    that loses a race sees a no-op instead of overwriting the winner.
    """

    def __init__(
        self,
        db: AsyncSession,
        gateway: Optional[PaymentGateway] = None,
        dispatcher: Optional[NotificationDispatcher] = None,
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.db = db
        self.store = OrderStore(db)
        self.gateway = gateway
        self.dispatcher = dispatcher
        self.clock = clock

    async def place_order(
        self,
        user_id: UUID,
        restaurant_id: UUID,
        items: Sequence[Tuple[UUID, int]],
    ) -> Order:
        """Validate, price and persist an order in one transaction"""
        try:
            credentials = await get_merchant_credentials(self.db, restaurant_id)
            resolved = await resolve_items(self.db, restaurant_id, items)
            order = await self.store.create_order(
                restaurant_id, user_id, resolved, credentials.provider
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Order placed",
            order_id=str(order.id),
            user_id=str(user_id),
            restaurant_id=str(restaurant_id),
            total=order.total,
            item_count=len(resolved),
        )
        return await self.store.get_order(order.id)

    async def get_or_create_payment_session(
        self,
        order_id: UUID,
        user_id: UUID,
    ) -> PaymentSessionResult:
        """
        Return the order's payment session, opening it on first call.

        Later calls poll the provider while the order is payment_pending and
        persist a paid/failed result. Orders past payment_pending are returned
        as they are.
        """
        order = await self.store.get_order(order_id, user_id=user_id)
        if order.status != OrderStatus.PAYMENT_PENDING:
            return self._result(order)

        credentials = await get_merchant_credentials(self.db, order.restaurant_id)

        if order.payment is not None and order.payment.redirect_url:
            return await self._verify(order, credentials)

        try:
            await self.gateway.create_session(self.db, order, credentials)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        order = await self.store.get_order(order_id)
        return PaymentSessionResult(order=order, outcome=PaymentOutcome.PENDING)

    async def verify_payment(self, order_id: UUID, user_id: UUID) -> PaymentSessionResult:
        """Poll the provider without opening a session"""
        order = await self.store.get_order(order_id, user_id=user_id)
        if order.status != OrderStatus.PAYMENT_PENDING:
            return self._result(order)

        if order.payment is None or not order.payment.redirect_url:
            raise PaymentNotInitiated()

        credentials = await get_merchant_credentials(self.db, order.restaurant_id)
        return await self._verify(order, credentials)

    async def complete_order(self, order_id: UUID, restaurant_id: UUID) -> bool:
        """Mark a paid order completed; repeated calls are no-ops"""
        try:
            user_id = await self.store.record_completion(order_id, restaurant_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        if user_id is None:
            logger.info("Order not completable", order_id=str(order_id))
            return False

        logger.info("Order completed", order_id=str(order_id), restaurant_id=str(restaurant_id))

        await self._notify(
            sender_id=restaurant_id,
            recipient_id=user_id,
            title="Order ready",
            body=f"Your order #{order_id.hex[:8]} is ready for pickup.",
            ttl_minutes=settings.completion_notification_ttl_minutes,
        )
        return True

    async def cancel_order(self, order_id: UUID, actor: Identity) -> bool:
        """
        Cancel a paid order.

        Users may cancel within the cancellation window after payment was
        confirmed; restaurants may cancel any paid order and the user is
        notified. Returns False when the cancellation is not permitted.
        """
        if isinstance(actor, UserIdentity):
            return await self._cancel_by_user(order_id, actor.id)
        if isinstance(actor, RestaurantIdentity):
            return await self._cancel_by_restaurant(order_id, actor.id)
        raise TypeError(f"Unsupported actor: {actor!r}")

    async def list_orders(
        self,
        actor: Identity,
        since_days: int,
    ) -> Tuple[List[Order], Optional[int]]:
        """Orders of the actor from the last `since_days` days, with the user's average wait"""
        if since_days < 0:
            raise ValidationFailed("days must not be negative")

        if isinstance(actor, UserIdentity):
            orders = await self.store.list_orders(since_days, user_id=actor.id)
            return orders, await self.store.average_wait_time(actor.id)

        orders = await self.store.list_orders(since_days, restaurant_id=actor.id)
        return orders, None

    async def list_pending_orders(self, actor: Identity) -> List[Order]:
        """Open orders: awaiting payment or kitchen for users, awaiting kitchen for restaurants"""
        if isinstance(actor, UserIdentity):
            return await self.store.list_pending(
                {OrderStatus.PAYMENT_PENDING, OrderStatus.PAID}, user_id=actor.id
            )
        return await self.store.list_pending({OrderStatus.PAID}, restaurant_id=actor.id)

    async def _verify(self, order: Order, credentials: MerchantCredentials) -> PaymentSessionResult:
        try:
            outcome = await self.gateway.verify_status(self.db, order, credentials)

            if outcome == PaymentOutcome.PAID:
                if await self.store.transition_status(
                    order.id, {OrderStatus.PAYMENT_PENDING}, OrderStatus.PAID
                ):
                    await self.store.record_payment_placed(order.id)
                    logger.info("Order paid", order_id=str(order.id))
            elif outcome == PaymentOutcome.FAILED:
                if await self.store.transition_status(
                    order.id, {OrderStatus.PAYMENT_PENDING}, OrderStatus.PAYMENT_FAILED
                ):
                    logger.info("Order payment failed", order_id=str(order.id))

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        order = await self.store.get_order(order.id)
        return PaymentSessionResult(order=order, outcome=outcome)

    async def _cancel_by_user(self, order_id: UUID, user_id: UUID) -> bool:
        order = await self.store.get_order(order_id, user_id=user_id)
        if order.status != OrderStatus.PAID or order.order_placed_time is None:
            return False

        window_start = self.clock() - timedelta(seconds=settings.cancellation_window_seconds)
        if order.order_placed_time < window_start:
            logger.info("User cancellation window elapsed", order_id=str(order_id))
            return False

        try:
            cancelled = await self.store.transition_status(
                order_id,
                {OrderStatus.PAID},
                OrderStatus.CANCELLED,
                user_id=user_id,
                placed_after=window_start,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        if cancelled:
            logger.info("Order cancelled by user", order_id=str(order_id), user_id=str(user_id))
        return cancelled

    async def _cancel_by_restaurant(self, order_id: UUID, restaurant_id: UUID) -> bool:
        order = await self.store.get_order(order_id, restaurant_id=restaurant_id)
        if order.status != OrderStatus.PAID:
            return False

        try:
            cancelled = await self.store.transition_status(
                order_id,
                {OrderStatus.PAID},
                OrderStatus.CANCELLED,
                restaurant_id=restaurant_id,
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        if not cancelled:
            return False

        logger.info(
            "Order cancelled by restaurant",
            order_id=str(order_id),
            restaurant_id=str(restaurant_id),
        )

        await self._notify(
            sender_id=restaurant_id,
            recipient_id=order.user_id,
            title="Order cancelled",
            body=f"Your order #{order_id.hex[:8]} was cancelled by the restaurant.",
            ttl_minutes=settings.cancellation_notification_ttl_minutes,
        )
        return True

    async def _notify(self, **notification) -> None:
        """Fire-and-forget; the order transition is already committed"""
        if self.dispatcher is None:
            return

        try:
            await self.dispatcher.notify(**notification)
        except Exception as e:
            await self.db.rollback()
            logger.error(
                "Failed to send order notification",
                recipient_id=str(notification.get("recipient_id")),
                error=str(e),
            )

    @staticmethod
    def _result(order: Order) -> PaymentSessionResult:
        return PaymentSessionResult(
            order=order,
            outcome=ORDER_STATUS_TO_OUTCOME[OrderStatus(order.status)],
        )


async def get_order_lifecycle(
    db: AsyncSession = Depends(get_db),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> OrderLifecycle:
    return OrderLifecycle(db, gateway=gateway, dispatcher=dispatcher)
