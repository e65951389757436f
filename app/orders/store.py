"""Persistence for orders and their item snapshots"""

from datetime import datetime, timedelta
from typing import Iterable, List, Optional
from uuid import UUID, uuid4

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from app.models.order import Order, OrderItem, OrderStatus
from app.models.payment import Payment, PaymentStatus
from app.orders.catalog import ResolvedItem
from app.orders.errors import OrderNotFound

logger = structlog.get_logger()


class OrderStore:
    """
    Owns the orders, order_items and (at creation) payments tables.

    Every status change is a conditional update keyed by id and expected
    prior status; the affected row count tells the caller whether it won.
    Nothing here commits, the caller owns the transaction.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_order(
        self,
        restaurant_id: UUID,
        user_id: UUID,
        items: List[ResolvedItem],
        payment_provider: str,
    ) -> Order:
        """Insert a payment_pending order with its item snapshots and payment record"""
        total = sum(item.line_total for item in items)

        order = Order(
            id=uuid4(),
            restaurant_id=restaurant_id,
            user_id=user_id,
            total=total,
            status=OrderStatus.PAYMENT_PENDING.value,
            created_at=datetime.utcnow(),
        )
        self.db.add(order)

        for position, item in enumerate(items):
            self.db.add(
                OrderItem(
                    order_id=order.id,
                    position=position,
                    item_name=item.name,
                    item_price=item.price,
                    quantity=item.quantity,
                )
            )

        self.db.add(
            Payment(
                order_id=order.id,
                provider=payment_provider,
                provider_transaction_id=order.id.hex,
                status=PaymentStatus.PENDING.value,
            )
        )

        await self.db.flush()
        return order

    async def transition_status(
        self,
        order_id: UUID,
        from_statuses: Iterable[OrderStatus],
        to: OrderStatus,
        restaurant_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        placed_after: Optional[datetime] = None,
        **extra,
    ) -> bool:
        """
        Move an order to `to` only if its status is one of `from_statuses`.

        Optional scoping by owner and by a lower bound on order_placed_time
        is applied in the same statement.
        """
        stmt = update(Order).where(
            Order.id == order_id,
            Order.status.in_([status.value for status in from_statuses]),
        )
        if restaurant_id is not None:
            stmt = stmt.where(Order.restaurant_id == restaurant_id)
        if user_id is not None:
            stmt = stmt.where(Order.user_id == user_id)
        if placed_after is not None:
            stmt = stmt.where(Order.order_placed_time >= placed_after)

        stmt = stmt.values(status=to.value, updated_at=datetime.utcnow(), **extra)
        result = await self.db.execute(stmt.execution_options(synchronize_session=False))

        applied = result.rowcount == 1
        logger.debug(
            "Order transition",
            order_id=str(order_id),
            to=to.value,
            applied=applied,
        )
        return applied

    async def record_payment_placed(self, order_id: UUID) -> bool:
        """Stamp order_placed_time; anchors the cancellation window and wait times"""
        result = await self.db.execute(
            update(Order)
            .where(Order.id == order_id, Order.order_placed_time.is_(None))
            .values(order_placed_time=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    async def record_completion(self, order_id: UUID, restaurant_id: UUID) -> Optional[UUID]:
        """
        Complete a paid order owned by `restaurant_id`.

        Returns the ordering user's id if this call performed the transition,
        None if the order was not in `paid`. Raises OrderNotFound when the
        order does not belong to the restaurant.
        """
        order = await self.get_order(order_id, restaurant_id=restaurant_id)
        if order.status != OrderStatus.PAID:
            return None

        completed_at = datetime.utcnow()
        time_taken = None
        if order.order_placed_time is not None:
            time_taken = int((completed_at - order.order_placed_time).total_seconds())

        applied = await self.transition_status(
            order_id,
            {OrderStatus.PAID},
            OrderStatus.COMPLETED,
            restaurant_id=restaurant_id,
            order_completed_time=completed_at,
            time_taken=time_taken,
        )
        return order.user_id if applied else None

    async def get_order(
        self,
        order_id: UUID,
        user_id: Optional[UUID] = None,
        restaurant_id: Optional[UUID] = None,
    ) -> Order:
        """Load an order visible to the given actor"""
        query = self._order_query().where(Order.id == order_id)
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
        if restaurant_id is not None:
            query = query.where(Order.restaurant_id == restaurant_id)

        result = await self.db.execute(query)
        order = result.scalar_one_or_none()
        if order is None:
            raise OrderNotFound()
        return order

    async def list_orders(
        self,
        since_days: int,
        user_id: Optional[UUID] = None,
        restaurant_id: Optional[UUID] = None,
    ) -> List[Order]:
        """Orders of one actor created within the last `since_days` days"""
        cutoff = datetime.utcnow() - timedelta(days=since_days)
        query = self._actor_query(user_id, restaurant_id).where(Order.created_at > cutoff)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_pending(
        self,
        statuses: Iterable[OrderStatus],
        user_id: Optional[UUID] = None,
        restaurant_id: Optional[UUID] = None,
    ) -> List[Order]:
        query = self._actor_query(user_id, restaurant_id).where(
            Order.status.in_([status.value for status in statuses])
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def average_wait_time(self, user_id: UUID) -> Optional[int]:
        """Truncated mean of time_taken over the user's completed orders"""
        result = await self.db.execute(
            select(func.avg(Order.time_taken)).where(
                Order.user_id == user_id,
                Order.status == OrderStatus.COMPLETED.value,
                Order.time_taken.is_not(None),
            )
        )
        average = result.scalar()
        return int(average) if average is not None else None

    def _order_query(self):
        return (
            select(Order)
            .options(
                selectinload(Order.items),
                selectinload(Order.restaurant),
                selectinload(Order.user),
                selectinload(Order.payment),
            )
            .execution_options(populate_existing=True)
        )

    def _actor_query(self, user_id: Optional[UUID], restaurant_id: Optional[UUID]):
        if user_id is None and restaurant_id is None:
            raise ValueError("An actor is required to list orders")

        query = self._order_query()
        if user_id is not None:
            query = query.where(Order.user_id == user_id)
        if restaurant_id is not None:
            query = query.where(Order.restaurant_id == restaurant_id)
        return query.order_by(Order.created_at.desc())
