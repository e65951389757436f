"""Notification model"""

import uuid
from datetime import datetime
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer, Text
from sqlalchemy.dialects.postgresql import UUID

from app.database import Base


class Notification(Base):
    """Notifications sent to users"""
    __tablename__ = "notifications"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    recipient_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"))  # null implies broadcast
    sender_id = Column(UUID(as_uuid=True), ForeignKey("restaurants.id", ondelete="CASCADE"))  # null implies system
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    ttl_minutes = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    expires_at = Column(DateTime, nullable=False, index=True)  # created_at + ttl_minutes
