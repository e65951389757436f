"""Pydantic schemas for request/response validation"""

from app.schemas.auth import (
    Identity,
    UserIdentity,
    RestaurantIdentity,
)
from app.schemas.order import (
    OrderCreate,
    OrderItemCreate,
    OrderResponse,
    OrderItemResponse,
    OrderListResponse,
    PaymentSessionResponse,
    OrderActionResponse,
)
from app.schemas.notification import NotificationCreate, NotificationResponse
from app.schemas.stats import StatsResponse, ItemSales

__all__ = [
    "Identity",
    "UserIdentity",
    "RestaurantIdentity",
    "OrderCreate",
    "OrderItemCreate",
    "OrderResponse",
    "OrderItemResponse",
    "OrderListResponse",
    "PaymentSessionResponse",
    "OrderActionResponse",
    "NotificationCreate",
    "NotificationResponse",
    "StatsResponse",
    "ItemSales",
]
