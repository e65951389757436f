"""Background job tasks"""

from typing import List
from uuid import UUID
import asyncio
import httpx
import structlog

from app.jobs.celery_app import celery_app
from app.config import settings

logger = structlog.get_logger()


def run_async(coro):
    """Helper to run async functions in sync context"""
    return asyncio.run(coro)


def build_push_messages(tokens: List[str], title: str, body: str, ttl_minutes: int) -> List[dict]:
    """Expo push API message list, one entry per device token"""
    return [
        {
            "to": token,
            "title": title,
            "body": body,
            "ttl": ttl_minutes * 60,
        }
        for token in tokens
    ]


@celery_app.task(
    name="deliver_push_notification",
    autoretry_for=(httpx.HTTPError,),
    retry_backoff=True,
    max_retries=3,
)
def deliver_push_notification(notification_id: str):
    """Push a stored notification to its recipients' devices"""
    logger.info("Delivering push notification", notification_id=notification_id)
    
    async def _deliver():
        from app.database import SessionLocal
        from app.models.notification import Notification
        from app.models.user import User
        from sqlalchemy import select
        
        async with SessionLocal() as db:
            result = await db.execute(
                select(Notification).where(Notification.id == UUID(notification_id))
            )
            notification = result.scalar_one_or_none()
            
            if not notification:
                logger.warning("Notification not found", notification_id=notification_id)
                return
            
            query = select(User.expo_push_token).where(User.expo_push_token.is_not(None))
            if notification.recipient_id is not None:
                query = query.where(User.id == notification.recipient_id)
            
            tokens_result = await db.execute(query)
            tokens = list(tokens_result.scalars().all())
        
        if not tokens:
            return
        
        messages = build_push_messages(
            tokens, notification.title, notification.body, notification.ttl_minutes
        )
        
        async with httpx.AsyncClient(timeout=10.0) as client:
            response = await client.post(settings.expo_push_url, json=messages)
            response.raise_for_status()
        
        logger.info(
            "Push notification delivered",
            notification_id=notification_id,
            device_count=len(tokens),
        )
    
    run_async(_deliver())


@celery_app.task(name="purge_expired_notifications")
def purge_expired_notifications():
    """Delete notifications whose TTL has passed"""
    logger.info("Purging expired notifications")
    
    async def _purge():
        from app.database import SessionLocal
        from app.notifications.dispatcher import NotificationDispatcher
        
        async with SessionLocal() as db:
            deleted = await NotificationDispatcher(db).purge_expired()
            
        logger.info("Purged expired notifications", deleted_count=deleted)
    
    run_async(_purge())
