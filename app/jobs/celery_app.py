"""Celery application configuration"""

from celery import Celery
from app.config import settings

# Create Celery app
celery_app = Celery(
    "kg_orders",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=[
        "app.jobs.tasks",
    ],
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_time_limit=60,
    task_ignore_result=True,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,

    # Separate queues for push delivery and housekeeping
    task_routes={
        "deliver_push_notification": {"queue": "notifications"},
        "purge_expired_notifications": {"queue": "maintenance"},
    },

    beat_schedule={
        "purge-expired-notifications": {
            "task": "purge_expired_notifications",
            "schedule": 86400.0,  # Daily
        },
    },
)
