"""Notification schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, Field


class NotificationCreate(BaseModel):
    """Restaurant broadcast to every user"""
    title: str = Field(..., min_length=1, max_length=255)
    body: str = Field(..., min_length=1)
    ttl_minutes: int = Field(..., gt=0)


class NotificationResponse(BaseModel):
    """Notification response"""
    id: UUID
    title: str
    body: str
    sender_id: Optional[UUID]
    recipient_id: Optional[UUID]
    ttl_minutes: int
    created_at: datetime
    expires_at: datetime

    class Config:
        from_attributes = True
