"""Service test fixtures — async DB, scripted model, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db dependency overridden to use test DB session
    - db_manager patched so the readiness probe sees the test engine
    - app.state.schedule_extractor wraps fake_model with a fixed clock
      (ASGITransport does not run the lifespan)

Design Decisions:
    - SQLite in-memory with StaticPool: every session shares one connection,
      so rows committed by a route are visible to the test session
    - Fixed clock at 2024-01-15 08:50: relative-time assertions are exact
"""

from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.pool import StaticPool
from httpx import ASGITransport, AsyncClient

from app.db.base import Base
from app.infrastructure.database import get_db, DatabaseSessionManager
from app.infrastructure.security import hash_password
from app.models.user import User
from app.services.schedule_extractor import ScheduleExtractor
import app.infrastructure.database as db_module
from app.main import app

from tests.services.fake_model import FakeTextModel

REFERENCE_NOW = datetime(2024, 1, 15, 8, 50)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def fake_model():
    return FakeTextModel()


@pytest.fixture
async def client(test_engine, test_session_factory, fake_model):
    """FastAPI test client with DB and extractor wired to test doubles."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    app.state.schedule_extractor = ScheduleExtractor(
        fake_model, clock=lambda: REFERENCE_NOW,
    )

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager
    del app.state.schedule_extractor


@pytest.fixture
async def registered_user(client):
    """Register an account through the API; returns the AuthResponse JSON."""
    resp = await client.post("/api/v1/auth/register", json={
        "email": "ada@example.com",
        "password": "s3cret-pass",
        "first_name": "Ada",
        "last_name": "Lovelace",
    })
    assert resp.status_code == 201
    return resp.json()


@pytest.fixture
def auth_headers(registered_user):
    return {"Authorization": f"Bearer {registered_user['token']}"}


@pytest.fixture
async def inactive_user(test_db):
    """Deactivated account inserted directly into the DB."""
    user = User(
        email="gone@example.com",
        password_hash=hash_password("s3cret-pass"),
        first_name="Gone",
        last_name="User",
        is_active=False,
    )
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user
