"""Notification API endpoints"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.auth import get_current_identity, get_current_restaurant
from app.notifications.dispatcher import NotificationDispatcher, get_notification_dispatcher
from app.orders.errors import NotificationNotFound
from app.schemas.auth import Identity, RestaurantIdentity, UserIdentity
from app.schemas.notification import NotificationCreate, NotificationResponse

router = APIRouter()


@router.get("", response_model=List[NotificationResponse])
async def list_notifications(
    identity: Identity = Depends(get_current_identity),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Live notifications: received ones for users, sent broadcasts for restaurants"""
    if isinstance(identity, UserIdentity):
        return await dispatcher.list_for_user(identity.id)
    return await dispatcher.list_for_restaurant(identity.id)


@router.post("", response_model=NotificationResponse, status_code=201)
async def send_broadcast(
    notification_data: NotificationCreate,
    current_restaurant: RestaurantIdentity = Depends(get_current_restaurant),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Broadcast a notification from the restaurant to every user"""
    return await dispatcher.notify(
        sender_id=current_restaurant.id,
        recipient_id=None,
        title=notification_data.title,
        body=notification_data.body,
        ttl_minutes=notification_data.ttl_minutes,
    )


@router.delete("/{notification_id}", status_code=204)
async def delete_broadcast(
    notification_id: UUID,
    current_restaurant: RestaurantIdentity = Depends(get_current_restaurant),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
):
    """Withdraw one of the restaurant's broadcasts"""
    if not await dispatcher.delete_broadcast(notification_id, current_restaurant.id):
        raise NotificationNotFound()
