"""Merchant credential lookup"""

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.restaurant import Restaurant
from app.orders.errors import RestaurantNotFound

SUPPORTED_PROVIDERS = frozenset({"cashfree", "phonepe"})


@dataclass(frozen=True)
class MerchantCredentials:
    """Restaurant-scoped credentials for signed provider requests"""
    provider: str
    merchant_id: str
    secret_key: str
    key_index: str = "1"

    def __repr__(self) -> str:
        return f"MerchantCredentials(provider={self.provider!r}, merchant_id={self.merchant_id!r})"


async def get_merchant_credentials(db: AsyncSession, restaurant_id: UUID) -> MerchantCredentials:
    """Load a restaurant's merchant credentials, failing if any part is missing"""
    result = await db.execute(select(Restaurant).where(Restaurant.id == restaurant_id))
    restaurant = result.scalar_one_or_none()

    if restaurant is None:
        raise RestaurantNotFound()

    if not restaurant.merchant_id or not restaurant.merchant_secret_key:
        raise RestaurantNotFound("Restaurant has no payment merchant credentials")

    if restaurant.payment_provider not in SUPPORTED_PROVIDERS:
        raise RestaurantNotFound("Restaurant has no supported payment provider")

    return MerchantCredentials(
        provider=restaurant.payment_provider,
        merchant_id=restaurant.merchant_id,
        secret_key=restaurant.merchant_secret_key,
        key_index=restaurant.merchant_key_index or "1",
    )
