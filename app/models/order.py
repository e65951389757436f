"""Order models"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import CheckConstraint, Column, String, DateTime, ForeignKey, Integer
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class OrderStatus(str, enum.Enum):
    """Order lifecycle states"""
    PAYMENT_PENDING = "payment_pending"
    PAID = "paid"
    PAYMENT_FAILED = "payment_failed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset({
    OrderStatus.PAYMENT_FAILED,
    OrderStatus.COMPLETED,
    OrderStatus.CANCELLED,
})


class Order(Base):
    """Orders placed by users against one restaurant"""
    __tablename__ = "orders"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    restaurant_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    
    # Sum of item_price * quantity over the snapshotted items, minor units
    total = Column(Integer, nullable=False)
    
    status = Column(String(50), nullable=False, default=OrderStatus.PAYMENT_PENDING.value)
    
    # Timing
    order_placed_time = Column(DateTime)  # set when payment is confirmed
    order_completed_time = Column(DateTime)
    time_taken = Column(Integer)  # seconds between placed and completed
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    restaurant = relationship("Restaurant", back_populates="orders")
    user = relationship("User", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", order_by="OrderItem.position")
    payment = relationship("Payment", back_populates="order", uselist=False)


class OrderItem(Base):
    """Point-in-time copy of a catalog item within an order"""
    __tablename__ = "order_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    item_name = Column(String(255), nullable=False)
    item_price = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)
    
    # Relationships
    order = relationship("Order", back_populates="items")
