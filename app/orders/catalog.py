"""Catalog lookups used at order time"""

from dataclasses import dataclass
from typing import List, Sequence, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.menu import Item
from app.orders.errors import EmptyOrder, InvalidQuantity, ItemNotFound


@dataclass(frozen=True)
class ResolvedItem:
    """Name and price of a catalog item as of order time"""
    item_id: UUID
    name: str
    price: int
    quantity: int

    @property
    def line_total(self) -> int:
        return self.price * self.quantity


async def resolve_items(
    db: AsyncSession,
    restaurant_id: UUID,
    requested: Sequence[Tuple[UUID, int]],
) -> List[ResolvedItem]:
    """
    Resolve (item_id, quantity) pairs against the restaurant's catalog.

    Fails the whole request if any item is missing, belongs to another
    restaurant, or has a non-positive quantity. Rows are share-locked so a
    concurrent delete waits for the surrounding transaction.
    """
    if not requested:
        raise EmptyOrder()

    for item_id, quantity in requested:
        if quantity <= 0:
            raise InvalidQuantity(item_id, quantity)

    item_ids = {item_id for item_id, _ in requested}
    result = await db.execute(
        select(Item)
        .where(Item.id.in_(item_ids), Item.restaurant_id == restaurant_id)
        .with_for_update(read=True)
    )
    catalog = {item.id: item for item in result.scalars().all()}

    resolved = []
    for item_id, quantity in requested:
        item = catalog.get(item_id)
        if item is None:
            raise ItemNotFound(item_id)
        resolved.append(
            ResolvedItem(item_id=item.id, name=item.name, price=item.price, quantity=quantity)
        )

    return resolved
