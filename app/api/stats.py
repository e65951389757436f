"""Restaurant statistics API endpoints"""

from datetime import datetime, timezone
from typing import Dict, Iterable, Tuple
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.auth import get_current_restaurant
from app.config import settings
from app.database import get_db
from app.models.order import Order, OrderItem, OrderStatus
from app.schemas.auth import RestaurantIdentity
from app.schemas.stats import ItemSales, StatsResponse

router = APIRouter()

SOLD_STATUSES = [OrderStatus.PAID.value, OrderStatus.COMPLETED.value]


def bucket_by_meal_period(
    timestamps: Iterable[datetime],
    periods: Dict[str, Tuple[int, int]],
    tz: str,
) -> Dict[str, int]:
    """Count naive-UTC timestamps per meal period, using local hours in `tz`"""
    zone = ZoneInfo(tz)
    counts = {name: 0 for name in periods}
    for ts in timestamps:
        hour = ts.replace(tzinfo=timezone.utc).astimezone(zone).hour
        for name, (start, end) in periods.items():
            if start <= hour < end:
                counts[name] += 1
                break
    return counts


@router.get("", response_model=StatsResponse)
async def get_stats(
    current_restaurant: RestaurantIdentity = Depends(get_current_restaurant),
    db: AsyncSession = Depends(get_db),
):
    """Sales summary for the restaurant"""
    sold = (Order.restaurant_id == current_restaurant.id, Order.status.in_(SOLD_STATUSES))
    
    totals = await db.execute(
        select(func.count(Order.id), func.coalesce(func.sum(Order.total), 0)).where(*sold)
    )
    total_orders, total_revenue = totals.one()
    average = total_revenue / total_orders if total_orders else 0.0
    
    item_quantity = func.sum(OrderItem.quantity)
    item_query = (
        select(OrderItem.item_name, item_quantity)
        .join(Order, Order.id == OrderItem.order_id)
        .where(*sold)
        .group_by(OrderItem.item_name)
    )
    top = await db.execute(item_query.order_by(item_quantity.desc()).limit(3))
    bottom = await db.execute(item_query.order_by(item_quantity.asc()).limit(3))
    
    created = await db.execute(select(Order.created_at).where(*sold))
    
    return StatsResponse(
        total_orders=total_orders,
        total_revenue=int(total_revenue),
        average_order_value=float(average),
        top_items=[ItemSales(name=name, quantity=int(qty)) for name, qty in top.all()],
        bottom_items=[ItemSales(name=name, quantity=int(qty)) for name, qty in bottom.all()],
        orders_by_meal_period=bucket_by_meal_period(
            created.scalars().all(),
            settings.meal_periods_map,
            settings.reporting_timezone,
        ),
    )
