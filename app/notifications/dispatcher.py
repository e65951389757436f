"""Notification dispatcher"""

from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from app.database import get_db
from app.models.notification import Notification

logger = structlog.get_logger()


class NotificationDispatcher:
    """
    Persists notifications and hands push delivery to the job queue.

    A recipient of None is a broadcast to every user; a sender of None is
    a system notification.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def notify(
        self,
        sender_id: Optional[UUID],
        recipient_id: Optional[UUID],
        title: str,
        body: str,
        ttl_minutes: int,
    ) -> Notification:
        created_at = datetime.utcnow()
        notification = Notification(
            sender_id=sender_id,
            recipient_id=recipient_id,
            title=title,
            body=body,
            ttl_minutes=ttl_minutes,
            created_at=created_at,
            expires_at=created_at + timedelta(minutes=ttl_minutes),
        )
        self.db.add(notification)
        await self.db.commit()

        logger.info(
            "Notification stored",
            notification_id=str(notification.id),
            recipient_id=str(recipient_id) if recipient_id else None,
        )

        self._enqueue_delivery(notification.id)
        return notification

    def _enqueue_delivery(self, notification_id: UUID) -> None:
        from app.jobs.celery_app import celery_app

        celery_app.send_task("deliver_push_notification", args=[str(notification_id)])

    async def list_for_user(self, user_id: UUID) -> List[Notification]:
        """Live notifications addressed to the user or broadcast by a restaurant"""
        result = await self.db.execute(
            select(Notification)
            .where(
                or_(Notification.recipient_id == user_id, Notification.recipient_id.is_(None)),
                Notification.sender_id.is_not(None),
                Notification.expires_at > datetime.utcnow(),
            )
            .order_by(Notification.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_for_restaurant(self, restaurant_id: UUID) -> List[Notification]:
        """Live broadcasts sent by the restaurant"""
        result = await self.db.execute(
            select(Notification)
            .where(
                Notification.sender_id == restaurant_id,
                Notification.recipient_id.is_(None),
                Notification.expires_at > datetime.utcnow(),
            )
            .order_by(Notification.created_at.desc())
        )
        return list(result.scalars().all())

    async def delete_broadcast(self, notification_id: UUID, restaurant_id: UUID) -> bool:
        """Withdraw a broadcast; only its sender may, and only broadcasts qualify"""
        result = await self.db.execute(
            delete(Notification).where(
                Notification.id == notification_id,
                Notification.sender_id == restaurant_id,
                Notification.recipient_id.is_(None),
            )
        )
        await self.db.commit()

        deleted = result.rowcount == 1
        if deleted:
            logger.info(
                "Broadcast deleted",
                notification_id=str(notification_id),
                restaurant_id=str(restaurant_id),
            )
        return deleted

    async def purge_expired(self, now: Optional[datetime] = None) -> int:
        """Delete every notification whose TTL has passed"""
        result = await self.db.execute(
            delete(Notification).where(Notification.expires_at <= (now or datetime.utcnow()))
        )
        await self.db.commit()
        return result.rowcount


async def get_notification_dispatcher(
    db: AsyncSession = Depends(get_db),
) -> NotificationDispatcher:
    return NotificationDispatcher(db)
