"""Test configuration and fixtures"""

import json
from datetime import datetime

import httpx
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import update
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool
from uuid import uuid4

from app.main import app
from app.database import Base, get_db
from app.models.restaurant import Restaurant
from app.models.user import User
from app.models.menu import Item
from app.models.order import Order, OrderStatus
from app.api.auth import create_access_token
from app.notifications.dispatcher import NotificationDispatcher, get_notification_dispatcher
from app.orders.lifecycle import OrderLifecycle
from app.orders.store import OrderStore
from app.payments.gateway import PaymentGateway, get_payment_gateway
from app.schemas.auth import RestaurantIdentity, UserIdentity


# Test database URL (use in-memory SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeProviders:
    """In-process stand-in for the Cashfree and PhonePe HTTP APIs"""

    def __init__(self):
        self.cashfree_status = "ACTIVE"
        self.phonepe_code = "PAYMENT_PENDING"
        self.create_calls = 0
        self.status_calls = 0
        self.requests = []
        self.fail_with = None
        self.timeouts_after_create = 0
        self.cashfree_orders = set()

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            raise self.fail_with

        path = request.url.path

        if request.method == "POST" and path.endswith("/pg/orders"):
            self.create_calls += 1
            body = json.loads(request.content)
            if body["order_id"] in self.cashfree_orders:
                return httpx.Response(409, json={"message": "order with same id is already present"})
            self.cashfree_orders.add(body["order_id"])
            if self.timeouts_after_create:
                self.timeouts_after_create -= 1
                raise httpx.ReadTimeout("timed out", request=request)
            return httpx.Response(200, json={
                "cf_order_id": 2149460581,
                "order_id": body["order_id"],
                "payment_session_id": f"session_{body['order_id']}",
                "order_status": "ACTIVE",
            })

        if request.method == "GET" and "/pg/orders/" in path:
            self.status_calls += 1
            if path.rsplit("/", 1)[-1] not in self.cashfree_orders:
                return httpx.Response(404, json={"message": "order not found"})
            return httpx.Response(200, json={"order_status": self.cashfree_status})

        if request.method == "POST" and path.endswith("/pg/v1/pay"):
            self.create_calls += 1
            return httpx.Response(200, json={
                "success": True,
                "code": "PAYMENT_INITIATED",
                "data": {
                    "instrumentResponse": {
                        "type": "PAY_PAGE",
                        "redirectInfo": {
                            "url": "https://mercury-uat.phonepe.com/transact/pg?token=abc",
                            "method": "GET",
                        },
                    },
                },
            })

        if request.method == "GET" and "/pg/v1/status/" in path:
            self.status_calls += 1
            return httpx.Response(200, json={
                "success": self.phonepe_code == "PAYMENT_SUCCESS",
                "code": self.phonepe_code,
            })

        return httpx.Response(404, json={"message": "not found"})


class RecordingDispatcher(NotificationDispatcher):
    """Dispatcher that stores notifications but records pushes instead of queueing them"""

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.enqueued = []
        self.sent = []
        self.fail = False

    async def notify(self, **notification):
        if self.fail:
            raise RuntimeError("push service unavailable")
        self.sent.append(notification)
        return await super().notify(**notification)

    def _enqueue_delivery(self, notification_id):
        self.enqueued.append(notification_id)


@pytest.fixture
async def test_db():
    """Create test database"""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_restaurant(test_db):
    """Create a restaurant paying through Cashfree"""
    restaurant = Restaurant(
        id=uuid4(),
        username="canteen",
        name="Test Canteen",
        payment_provider="cashfree",
        merchant_id="TEST_APP_ID",
        merchant_secret_key="TEST_SECRET",
    )
    test_db.add(restaurant)
    await test_db.commit()

    return restaurant


@pytest.fixture
async def phonepe_restaurant(test_db):
    """Create a restaurant paying through PhonePe"""
    restaurant = Restaurant(
        id=uuid4(),
        username="dhaba",
        name="Test Dhaba",
        payment_provider="phonepe",
        merchant_id="PGTESTPAYUAT",
        merchant_secret_key="099eb0cd-02cf-4e2a-8aca-3e6c6aff0399",
        merchant_key_index="1",
    )
    test_db.add(restaurant)
    await test_db.commit()

    return restaurant


@pytest.fixture
async def other_restaurant(test_db):
    """Create a second restaurant"""
    restaurant = Restaurant(
        id=uuid4(),
        username="other",
        name="Other Kitchen",
        payment_provider="cashfree",
        merchant_id="OTHER_APP_ID",
        merchant_secret_key="OTHER_SECRET",
    )
    test_db.add(restaurant)
    await test_db.commit()

    return restaurant


@pytest.fixture
async def test_user(test_db):
    """Create a test user"""
    user = User(id=uuid4(), username="student", expo_push_token="ExponentPushToken[abc]")
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def other_user(test_db):
    """Create a second user"""
    user = User(id=uuid4(), username="someone-else")
    test_db.add(user)
    await test_db.commit()

    return user


@pytest.fixture
async def test_menu_items(test_db, test_restaurant):
    """Burger (200) and Fries (100)"""
    items = [
        Item(id=uuid4(), restaurant_id=test_restaurant.id, name="Burger", price=200),
        Item(id=uuid4(), restaurant_id=test_restaurant.id, name="Fries", price=100),
    ]

    for item in items:
        test_db.add(item)

    await test_db.commit()
    return items


@pytest.fixture
async def phonepe_menu_items(test_db, phonepe_restaurant):
    items = [
        Item(id=uuid4(), restaurant_id=phonepe_restaurant.id, name="Thali", price=250),
    ]
    for item in items:
        test_db.add(item)
    await test_db.commit()
    return items


@pytest.fixture
def fake_providers():
    return FakeProviders()


@pytest.fixture
async def gateway(fake_providers):
    """Payment gateway talking to the fake providers"""
    async with httpx.AsyncClient(transport=httpx.MockTransport(fake_providers.handler)) as http:
        yield PaymentGateway(http)


@pytest.fixture
def dispatcher(test_db):
    return RecordingDispatcher(test_db)


@pytest.fixture
def lifecycle(test_db, gateway, dispatcher):
    return OrderLifecycle(test_db, gateway=gateway, dispatcher=dispatcher)


@pytest.fixture
async def paid_order(test_db, lifecycle, test_user, test_restaurant, test_menu_items):
    """An order that went through payment; order_placed_time is a fixed instant"""
    burger, fries = test_menu_items
    order = await lifecycle.place_order(
        test_user.id, test_restaurant.id, [(burger.id, 2), (fries.id, 1)]
    )

    store = OrderStore(test_db)
    await store.transition_status(order.id, {OrderStatus.PAYMENT_PENDING}, OrderStatus.PAID)
    await test_db.execute(
        update(Order)
        .where(Order.id == order.id)
        .values(order_placed_time=datetime(2024, 6, 1, 12, 0, 0))
    )
    await test_db.commit()

    return await store.get_order(order.id)


@pytest.fixture
async def client(test_db, gateway, dispatcher):
    """Create test client with overridden database, gateway and dispatcher"""
    async def override_get_db():
        yield test_db

    async def override_get_payment_gateway():
        yield gateway

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = override_get_payment_gateway
    app.dependency_overrides[get_notification_dispatcher] = lambda: dispatcher

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def user_headers(test_user):
    token = create_access_token(UserIdentity(test_user.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_user_headers(other_user):
    token = create_access_token(UserIdentity(other_user.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def restaurant_headers(test_restaurant):
    token = create_access_token(RestaurantIdentity(test_restaurant.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def other_restaurant_headers(other_restaurant):
    token = create_access_token(RestaurantIdentity(other_restaurant.id))
    return {"Authorization": f"Bearer {token}"}
