"""Integration tests for the full order flow"""

import pytest
from httpx import AsyncClient
from uuid import UUID, uuid4


@pytest.mark.asyncio
async def test_full_order_flow(client: AsyncClient, fake_providers, dispatcher, test_user, test_restaurant, test_menu_items, user_headers, restaurant_headers):
    """
    Integration test simulating a full order flow:
    1. User orders 2x Burger and 1x Fries
    2. Payment session is opened, then polled until PAID
    3. Restaurant completes the order
    4. User sees the completed order and a notification
    """
    burger, fries = test_menu_items
    user_id = str(test_user.id)

    # Step 1: Place order
    order_response = await client.post(
        "/orders",
        json={
            "restaurant_id": str(test_restaurant.id),
            "items": [
                {"id": str(burger.id), "quantity": 2},
                {"id": str(fries.id), "quantity": 1},
            ],
        },
        headers=user_headers,
    )

    assert order_response.status_code == 201
    order_data = order_response.json()
    assert order_data["total"] == 500
    assert order_data["status"] == "payment_pending"
    assert order_data["restaurant_name"] == "Test Canteen"
    order_id = order_data["id"]

    # Step 2: Open the payment session
    session_response = await client.get(f"/orders/payment/{order_id}", headers=user_headers)
    assert session_response.status_code == 200
    session = session_response.json()
    assert session["payment_status"] == "PENDING"
    assert session["provider"] == "cashfree"
    redirect_url = session["redirect_url"]
    assert redirect_url

    # Polling again reuses the session
    session_response = await client.get(f"/orders/payment/{order_id}", headers=user_headers)
    assert session_response.json()["redirect_url"] == redirect_url
    assert fake_providers.create_calls == 1

    # Step 3: Provider reports payment
    fake_providers.cashfree_status = "PAID"
    verify_response = await client.get(f"/orders/payment/verify/{order_id}", headers=user_headers)
    assert verify_response.status_code == 200
    assert verify_response.json()["payment_status"] == "PAID"
    assert verify_response.json()["order_status"] == "paid"

    # Step 4: Restaurant completes
    complete_response = await client.post(f"/orders/complete/{order_id}", headers=restaurant_headers)
    assert complete_response.status_code == 200
    assert complete_response.json() == {"order_id": order_id, "applied": True}

    # Step 5: User history
    history_response = await client.get("/orders/1", headers=user_headers)
    assert history_response.status_code == 200
    history = history_response.json()
    assert len(history["orders"]) == 1
    completed = history["orders"][0]
    assert completed["status"] == "completed"
    assert completed["time_taken"] is not None
    assert completed["time_taken"] >= 0
    assert history["avg_wait_time"] == completed["time_taken"]

    # Step 6: Notification
    assert dispatcher.sent[0]["recipient_id"] == UUID(user_id)
    notifications_response = await client.get("/notifications", headers=user_headers)
    assert notifications_response.status_code == 200
    notifications = notifications_response.json()
    assert [n["title"] for n in notifications] == ["Order ready"]


@pytest.mark.asyncio
async def test_place_order_requires_token(client: AsyncClient, test_restaurant, test_menu_items):
    response = await client.post(
        "/orders",
        json={
            "restaurant_id": str(test_restaurant.id),
            "items": [{"id": str(test_menu_items[0].id), "quantity": 1}],
        },
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_restaurant_cannot_place_order(client: AsyncClient, test_restaurant, test_menu_items, restaurant_headers):
    response = await client.post(
        "/orders",
        json={
            "restaurant_id": str(test_restaurant.id),
            "items": [{"id": str(test_menu_items[0].id), "quantity": 1}],
        },
        headers=restaurant_headers,
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_token_for_unknown_account_rejected(client: AsyncClient):
    from app.api.auth import create_access_token
    from app.schemas.auth import UserIdentity

    token = create_access_token(UserIdentity(uuid4()))
    response = await client.get("/orders/1", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_zero_quantity_rejected(client: AsyncClient, test_restaurant, test_menu_items, user_headers):
    response = await client.post(
        "/orders",
        json={
            "restaurant_id": str(test_restaurant.id),
            "items": [{"id": str(test_menu_items[0].id), "quantity": 0}],
        },
        headers=user_headers,
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_unknown_item_rejected(client: AsyncClient, test_restaurant, user_headers):
    response = await client.post(
        "/orders",
        json={
            "restaurant_id": str(test_restaurant.id),
            "items": [{"id": str(uuid4()), "quantity": 1}],
        },
        headers=user_headers,
    )

    assert response.status_code == 422
    assert "not found" in response.json()["detail"]


@pytest.mark.asyncio
async def test_unknown_restaurant_returns_404(client: AsyncClient, test_menu_items, user_headers):
    response = await client.post(
        "/orders",
        json={
            "restaurant_id": str(uuid4()),
            "items": [{"id": str(test_menu_items[0].id), "quantity": 1}],
        },
        headers=user_headers,
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unsupported_payment_provider_returns_404(client: AsyncClient, test_db, test_restaurant, test_menu_items, user_headers):
    burger, _ = test_menu_items
    restaurant_id = str(test_restaurant.id)
    test_restaurant.payment_provider = "paypal"
    await test_db.commit()

    response = await client.post(
        "/orders",
        json={"restaurant_id": restaurant_id, "items": [{"id": str(burger.id), "quantity": 1}]},
        headers=user_headers,
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Restaurant has no supported payment provider"


@pytest.mark.asyncio
async def test_other_user_cannot_see_payment(client: AsyncClient, paid_order, other_user_headers):
    response = await client.get(f"/orders/payment/{paid_order.id}", headers=other_user_headers)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_other_restaurant_cannot_complete(client: AsyncClient, paid_order, other_restaurant_headers, restaurant_headers):
    order_id = str(paid_order.id)

    response = await client.post(f"/orders/complete/{order_id}", headers=other_restaurant_headers)
    assert response.status_code == 404

    pending = await client.get("/orders/pending", headers=restaurant_headers)
    assert [o["id"] for o in pending.json()] == [order_id]


@pytest.mark.asyncio
async def test_user_cannot_complete(client: AsyncClient, paid_order, user_headers):
    response = await client.post(f"/orders/complete/{paid_order.id}", headers=user_headers)

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_late_user_cancel_not_applied(client: AsyncClient, paid_order, user_headers):
    """order_placed_time on the fixture is long past the cancellation window"""
    order_id = str(paid_order.id)

    response = await client.post(f"/orders/cancel/{order_id}", headers=user_headers)

    assert response.status_code == 200
    assert response.json() == {"order_id": order_id, "applied": False}


@pytest.mark.asyncio
async def test_restaurant_cancel(client: AsyncClient, dispatcher, paid_order, restaurant_headers):
    order_id = str(paid_order.id)

    response = await client.post(f"/orders/cancel/{order_id}", headers=restaurant_headers)

    assert response.json() == {"order_id": order_id, "applied": True}
    assert dispatcher.sent[0]["title"] == "Order cancelled"


@pytest.mark.asyncio
async def test_verify_before_session_conflicts(client: AsyncClient, test_restaurant, test_menu_items, user_headers):
    order_response = await client.post(
        "/orders",
        json={
            "restaurant_id": str(test_restaurant.id),
            "items": [{"id": str(test_menu_items[0].id), "quantity": 1}],
        },
        headers=user_headers,
    )
    order_id = order_response.json()["id"]

    response = await client.get(f"/orders/payment/verify/{order_id}", headers=user_headers)

    assert response.status_code == 409


@pytest.mark.asyncio
async def test_provider_failure_returns_502(client: AsyncClient, fake_providers, test_restaurant, test_menu_items, user_headers):
    order_response = await client.post(
        "/orders",
        json={
            "restaurant_id": str(test_restaurant.id),
            "items": [{"id": str(test_menu_items[0].id), "quantity": 1}],
        },
        headers=user_headers,
    )
    order_id = order_response.json()["id"]
    await client.get(f"/orders/payment/{order_id}", headers=user_headers)

    fake_providers.cashfree_status = "SOMETHING_NEW"
    response = await client.get(f"/orders/payment/{order_id}", headers=user_headers)
    assert response.status_code == 502

    pending = await client.get("/orders/pending", headers=user_headers)
    assert pending.json()[0]["status"] == "payment_pending"


@pytest.mark.asyncio
async def test_negative_days_rejected(client: AsyncClient, user_headers):
    response = await client.get("/orders/-1", headers=user_headers)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
