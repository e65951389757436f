"""Restaurant model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.database import Base


class Restaurant(Base):
    """Restaurant account and its payment merchant credentials"""
    __tablename__ = "restaurants"
    
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    username = Column(String(255), unique=True, nullable=False)
    name = Column(String(255), unique=True, nullable=False)
    
    # Payment provider: cashfree, phonepe
    payment_provider = Column(String(50), nullable=False, default="cashfree")
    
    # Merchant credentials (Cashfree app id / PhonePe merchant id, secret or salt key, salt index)
    merchant_id = Column(String(255))
    merchant_secret_key = Column(String(255))
    merchant_key_index = Column(String(20))
    
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    
    # Relationships
    items = relationship("Item", back_populates="restaurant", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="restaurant")
