"""Restaurant statistics schemas"""

from typing import Dict, List
from pydantic import BaseModel


class ItemSales(BaseModel):
    name: str
    quantity: int


class StatsResponse(BaseModel):
    """Sales summary over paid and completed orders"""
    total_orders: int
    total_revenue: int
    average_order_value: float
    top_items: List[ItemSales]
    bottom_items: List[ItemSales]
    orders_by_meal_period: Dict[str, int]
