"""Order schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class OrderItemCreate(BaseModel):
    """Requested catalog item"""
    id: UUID
    quantity: int = Field(..., gt=0)


class OrderCreate(BaseModel):
    """Create order request"""
    restaurant_id: UUID
    items: List[OrderItemCreate] = Field(..., min_length=1)


class OrderItemResponse(BaseModel):
    """Snapshotted order item"""
    name: str
    price: int
    quantity: int


class OrderResponse(BaseModel):
    """Order response"""
    id: UUID
    restaurant_id: UUID
    restaurant_name: Optional[str]
    user_id: UUID
    user_name: Optional[str]
    items: List[OrderItemResponse]
    total: int
    status: str
    created_at: datetime
    order_placed_time: Optional[datetime]
    order_completed_time: Optional[datetime]
    time_taken: Optional[int]


class OrderListResponse(BaseModel):
    """Order history"""
    orders: List[OrderResponse]
    avg_wait_time: Optional[int] = None


class PaymentSessionResponse(BaseModel):
    """Payment session / status poll response"""
    order_id: UUID
    order_status: str
    payment_status: str  # PENDING, PAID, FAILED
    provider: Optional[str]
    redirect_url: Optional[str]


class OrderActionResponse(BaseModel):
    """Outcome of a complete/cancel request"""
    order_id: UUID
    applied: bool
