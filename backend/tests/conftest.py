import itertools

import httpx
import pytest
from httpx import ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from urbanstay.core.security import create_token_pair
from urbanstay.db import crud_properties, crud_users
from urbanstay.db import models  # noqa: F401
from urbanstay.db.base import Base
from urbanstay.db.session import enable_sqlite_foreign_keys, get_db

PASSWORD = "Secret@123"


@pytest.fixture
async def session_factory():
    # one shared in-memory database per test
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    from urbanstay.main import app

    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    async with httpx.AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    counter = itertools.count(1)

    async def _make(role="user", name=None, email=None, password=PASSWORD, phone=None):
        n = next(counter)
        async with session_factory() as session:
            return await crud_users.create_user(
                session,
                name=name or f"{role.title()} {n}",
                email=email or f"{role}{n}@example.com",
                password=password,
                phone=phone,
                role=role,
            )

    return _make


@pytest.fixture
def make_property(session_factory):
    async def _make(owner, **overrides):
        data = {
            "title": "Sunny 2BHK near the park",
            "description": "Bright flat with a balcony",
            "listing_type": "sale",
            "property_type": "apartment",
            "price": 5_000_000,
            "city": "Pune",
            "locality": "Baner",
            "bedrooms": 2,
            "bathrooms": 2,
            "carpet_area": 950,
            "amenities": [],
        }
        data.update(overrides)
        async with session_factory() as session:
            return await crud_properties.create_property(session, owner_id=owner.id, **data)

    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        access, _ = create_token_pair(user)
        return {"Authorization": f"Bearer {access}"}

    return _headers
