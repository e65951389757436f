"""Tests for restaurant statistics"""

import pytest
from datetime import datetime
from httpx import AsyncClient

from app.api.stats import bucket_by_meal_period
from app.config import Settings

PERIODS = {"breakfast": (6, 11), "lunch": (11, 16), "snacks": (16, 19), "dinner": (19, 24)}


def test_meal_periods_parsed_from_config():
    settings = Settings(meal_periods="breakfast:6-11, lunch:11-16")

    assert settings.meal_periods_map == {"breakfast": (6, 11), "lunch": (11, 16)}


def test_bucket_by_meal_period_uses_local_time():
    """Naive timestamps are UTC; Asia/Kolkata is UTC+05:30"""
    timestamps = [
        datetime(2024, 6, 1, 3, 0),   # 08:30 local
        datetime(2024, 6, 1, 7, 0),   # 12:30 local
        datetime(2024, 6, 1, 14, 0),  # 19:30 local
        datetime(2024, 6, 1, 20, 0),  # 01:30 local, outside every period
    ]

    counts = bucket_by_meal_period(timestamps, PERIODS, "Asia/Kolkata")

    assert counts == {"breakfast": 1, "lunch": 1, "snacks": 0, "dinner": 1}


def test_bucket_by_meal_period_empty():
    assert bucket_by_meal_period([], PERIODS, "UTC") == {
        "breakfast": 0,
        "lunch": 0,
        "snacks": 0,
        "dinner": 0,
    }


@pytest.mark.asyncio
async def test_stats_summary(client: AsyncClient, lifecycle, paid_order, test_user, test_restaurant, test_menu_items, restaurant_headers):
    burger, fries = test_menu_items
    # Still payment_pending, so not counted
    await lifecycle.place_order(test_user.id, test_restaurant.id, [(fries.id, 5)])

    response = await client.get("/stats", headers=restaurant_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total_orders"] == 1
    assert data["total_revenue"] == 500
    assert data["average_order_value"] == 500.0
    assert data["top_items"] == [
        {"name": "Burger", "quantity": 2},
        {"name": "Fries", "quantity": 1},
    ]
    assert data["bottom_items"][0] == {"name": "Fries", "quantity": 1}
    assert sum(data["orders_by_meal_period"].values()) <= 1


@pytest.mark.asyncio
async def test_stats_empty_restaurant(client: AsyncClient, other_restaurant_headers):
    response = await client.get("/stats", headers=other_restaurant_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total_orders"] == 0
    assert data["total_revenue"] == 0
    assert data["average_order_value"] == 0.0
    assert data["top_items"] == []


@pytest.mark.asyncio
async def test_stats_restaurant_only(client: AsyncClient, user_headers):
    response = await client.get("/stats", headers=user_headers)

    assert response.status_code == 403
