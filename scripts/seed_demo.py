#!/usr/bin/env python3
"""
Seed script to create a demo restaurant, user and catalog
"""

import asyncio
import uuid


async def seed_demo_data():
    """Seed demo data for development"""
    from app.database import SessionLocal, engine, Base
    from app.models.restaurant import Restaurant
    from app.models.menu import Item
    from app.models.user import User
    from app.api.auth import create_access_token
    from app.schemas.auth import RestaurantIdentity, UserIdentity

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with SessionLocal() as db:
        # Check if demo restaurant already exists
        from sqlalchemy import select
        result = await db.execute(
            select(Restaurant).where(Restaurant.username == "campus-canteen")
        )
        existing = result.scalar_one_or_none()

        if existing:
            print("Demo data already exists. Skipping...")
            return

        print("Creating demo restaurant...")

        restaurant = Restaurant(
            id=uuid.uuid4(),
            username="campus-canteen",
            name="Campus Canteen",
            payment_provider="phonepe",
            # PhonePe public sandbox credentials
            merchant_id="PGTESTPAYUAT",
            merchant_secret_key="099eb0cd-02cf-4e2a-8aca-3e6c6aff0399",
            merchant_key_index="1",
        )
        db.add(restaurant)
        await db.flush()

        print(f"Created restaurant: {restaurant.name} (ID: {restaurant.id})")

        user = User(
            id=uuid.uuid4(),
            username="demo-student",
        )
        db.add(user)

        # Prices in paise
        menu_data = [
            ("Burger", "Veg patty with cheese", 200),
            ("Fries", "Salted french fries", 100),
            ("Masala Dosa", "With sambar and chutney", 150),
            ("Cold Coffee", None, 120),
        ]

        items = []
        for name, description, price in menu_data:
            item = Item(
                restaurant_id=restaurant.id,
                name=name,
                description=description,
                price=price,
            )
            db.add(item)
            items.append(item)

        await db.commit()

        print(f"""
Demo data created successfully!

Restaurant: {restaurant.name}
  ID: {restaurant.id}
  Token: {create_access_token(RestaurantIdentity(restaurant.id))}

User: {user.username}
  ID: {user.id}
  Token: {create_access_token(UserIdentity(user.id))}

Menu:""")
        for item in items:
            print(f"  {item.id}  {item.name}  {item.price}")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
