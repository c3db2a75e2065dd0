"""
Seed a development database with demo candles and accounts.

Creates a handful of candles, one customer and one admin, then prints a
bearer token for each account so the order endpoints can be exercised
with curl or the frontend.

Run from the backend/ directory:
    python scripts/seed_catalog.py
"""
import asyncio
import os
import sys

# Add backend/ to path so we can import config
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select

from config import settings
from database import async_session, init_db
from db_models import User
from domain.enums import UserRole
from middleware.auth import issue_access_token
from services import catalog_service

DEMO_CANDLES = [
    {"title": "Lavender Dream", "price": 500, "stock": 25, "fragrance": "Lavender", "material": "Soy Wax", "burn_time": "40-50 hours"},
    {"title": "Vanilla Bean Jar", "price": 650, "stock": 10, "fragrance": "Vanilla", "material": "Soy Wax", "burn_time": "50-60 hours"},
    {"title": "Cedar & Smoke", "price": 800, "stock": 5, "fragrance": "Cedarwood", "material": "Beeswax", "burn_time": "60 hours"},
    {"title": "Unscented Pillar", "price": 300, "stock": None, "material": "Paraffin", "burn_time": "30 hours"},
]

DEMO_USERS = [
    {"email": "customer@example.com", "name": "Demo Customer", "phone_number": "9876543210", "role": UserRole.CUSTOMER.value},
    {"email": "admin@example.com", "name": "Shop Admin", "phone_number": "9123456780", "role": UserRole.ADMIN.value},
]


async def seed():
    os.makedirs("data", exist_ok=True)
    await init_db()

    async with async_session() as db:
        existing = await catalog_service.list_products(db, active_only=False)
        if existing:
            print(f"Catalog already has {len(existing)} candle(s); skipping candles")
        else:
            for candle in DEMO_CANDLES:
                candle = dict(candle)
                await catalog_service.create_product(
                    db,
                    title=candle.pop("title"),
                    price=candle.pop("price"),
                    stock=candle.pop("stock"),
                    description="Hand-poured demo candle",
                    **candle,
                )
            print(f"Created {len(DEMO_CANDLES)} candles")

        users = []
        for info in DEMO_USERS:
            q = await db.execute(select(User).where(User.email == info["email"]))
            user = q.scalar_one_or_none()
            if not user:
                user = User(**info)
                db.add(user)
                await db.flush()
            users.append(user)

        await db.commit()

    if not settings.jwt_secret:
        print("\nJWT_SECRET is not set; no tokens issued.")
        return

    for user in users:
        token = issue_access_token(user_id=user.id, email=user.email, role=user.role)
        print(f"\n{user.role.upper()} ({user.email}):")
        print(f"  Authorization: Bearer {token}")


if __name__ == "__main__":
    asyncio.run(seed())
