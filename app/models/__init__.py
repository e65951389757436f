"""Database models"""

from app.models.restaurant import Restaurant
from app.models.user import User
from app.models.menu import Item
from app.models.order import Order, OrderItem, OrderStatus
from app.models.payment import Payment, PaymentStatus
from app.models.notification import Notification

__all__ = [
    "Restaurant",
    "User",
    "Item",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Payment",
    "PaymentStatus",
    "Notification",
]
