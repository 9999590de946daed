import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("APP_ENV", "test")

import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app import app
from app.api.payments.models import InstallmentPlan, Payment  # noqa: F401
from app.db.main import get_session

ADMIN_HEADERS = {
    "AuthStatus": "AUTHENTICATED",
    "UserId": str(uuid.uuid4()),
    "UserType": "admin",
}
RECEPTIONIST_HEADERS = {**ADMIN_HEADERS, "UserType": "receptionist"}
DOCTOR_HEADERS = {**ADMIN_HEADERS, "UserType": "doctor"}


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_factory):
    async def override_get_session():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=ADMIN_HEADERS,
    ) as client:
        yield client
    app.dependency_overrides.clear()
