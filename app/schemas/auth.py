"""Authentication schemas"""

from dataclasses import dataclass
from typing import Union
from uuid import UUID


@dataclass(frozen=True)
class UserIdentity:
    """Authenticated end user"""
    id: UUID


@dataclass(frozen=True)
class RestaurantIdentity:
    """Authenticated restaurant account"""
    id: UUID


Identity = Union[UserIdentity, RestaurantIdentity]
