"""Payment session model"""

import enum
import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class PaymentStatus(str, enum.Enum):
    """Last known remote state of a payment session"""
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


class Payment(Base):
    """Provider-side payment session, one per order"""
    __tablename__ = "payments"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"), unique=True, nullable=False)
    
    provider = Column(String(50), nullable=False)  # cashfree, phonepe
    
    # Merchant-side transaction id sent to the provider
    provider_transaction_id = Column(String(64), unique=True, nullable=False)
    # Provider's own reference (Cashfree cf_order_id)
    provider_order_id = Column(String(255))
    # PhonePe pay page URL or Cashfree payment_session_id
    redirect_url = Column(String(1000))
    
    status = Column(String(50), nullable=False, default=PaymentStatus.PENDING.value)
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    order = relationship("Order", back_populates="payment")
