# scripts/seed.py
import asyncio
import random

from urbanstay.db.base import Base
from urbanstay.db.session import AsyncSessionLocal, engine
from urbanstay.db import models  # noqa: F401  (registers tables)
from urbanstay.db.crud_users import create_user, get_user_by_email
from urbanstay.db.crud_properties import create_property

PASSWORD = "Password@123"
CITIES = ["Delhi", "Mumbai", "Bengaluru", "Pune"]
TYPES = ["apartment", "house", "villa", "plot", "commercial", "pg"]
AMENITIES = ["parking", "gym", "lift", "power-backup", "security", "pool"]


async def _user(db, email, name, role, phone=None):
    user = await get_user_by_email(db, email)
    if not user:
        user = await create_user(db, name=name, email=email, password=PASSWORD, phone=phone, role=role)
    return user


async def seed():
    # create tables (if the app has not started yet)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        await _user(db, "admin@example.com", "Admin", "admin")
        await _user(db, "buyer@example.com", "Buyer", "user", phone="9000000000")

        sellers = []
        for i in range(3):
            sellers.append(
                await _user(db, f"seller{i}@example.com", f"Seller {i}", "seller", phone=f"911100000{i}")
            )

        for i in range(20):
            listing_type = random.choice(["sale", "rent"])
            price = random.randint(50, 500) * (100_000 if listing_type == "sale" else 100)
            await create_property(
                db,
                owner_id=random.choice(sellers).id,
                title=f"Sample listing {i}",
                description="Well connected, close to schools and the metro.",
                listing_type=listing_type,
                property_type=random.choice(TYPES),
                price=price,
                city=random.choice(CITIES),
                locality="Central",
                bedrooms=random.randint(1, 4),
                bathrooms=random.randint(1, 3),
                carpet_area=random.randint(400, 2500),
                furnishing=random.choice(["furnished", "semi-furnished", "unfurnished"]),
                amenities=random.sample(AMENITIES, 3),
                images=[{"url": "https://placehold.co/800x600", "caption": "", "is_primary": True}],
            )
    print(f"Seed complete (password for every account: {PASSWORD})")


if __name__ == "__main__":
    asyncio.run(seed())
