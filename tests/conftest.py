"""Shared fixtures: a throwaway SQLite database per test plus seeded actors."""

import os

os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("DATABASE_URL_OVERRIDE", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from getlost.core.permissions import Actor, UserRole
from getlost.core.security import create_user_token
from getlost.database import Base, get_db
from getlost.main import app
from getlost.models import Agency, AvailabilityWindow, Service, User


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'getlost.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def make_window(
    db: AsyncSession,
    service: Service,
    capacity: int = 3,
    start: datetime | None = None,
    end: datetime | None = None,
    remaining: int | None = None,
) -> AvailabilityWindow:
    """Insert a window; by default it covers now with every spot free."""
    now = datetime.now(UTC)
    window = AvailabilityWindow(
        service_id=service.id,
        start_date=start or now - timedelta(days=1),
        end_date=end or now + timedelta(days=1),
        capacity=capacity,
        remaining_spots=capacity if remaining is None else remaining,
    )
    db.add(window)
    await db.commit()
    return window


@pytest_asyncio.fixture
async def seed(db) -> SimpleNamespace:
    """Two agencies with one service each, two customers and a web admin."""
    admin = User(username="root", email="admin@getlost.test", role="webadmin")
    agency_user = User(username="sunrise", email="sunrise@getlost.test", role="agency")
    rival_user = User(username="dunes", email="dunes@getlost.test", role="agency")
    customer = User(username="ayla", email="ayla@getlost.test", role="customer")
    other_customer = User(username="bram", email="bram@getlost.test", role="customer")
    db.add_all([admin, agency_user, rival_user, customer, other_customer])
    await db.flush()

    agency = Agency(user_id=agency_user.id, name="Sunrise Tours")
    rival = Agency(user_id=rival_user.id, name="Dune Riders")
    db.add_all([agency, rival])
    await db.flush()

    service = Service(
        agency_id=agency.id,
        title="Wadi Rum Overnight",
        price=Decimal("149.00"),
        location="Wadi Rum",
        duration=2,
    )
    rival_service = Service(
        agency_id=rival.id,
        title="Sand Dune Safari",
        price=Decimal("89.50"),
        location="Merzouga",
        duration=1,
    )
    db.add_all([service, rival_service])
    await db.commit()

    return SimpleNamespace(
        admin=admin,
        agency_user=agency_user,
        rival_user=rival_user,
        customer=customer,
        other_customer=other_customer,
        agency=agency,
        rival=rival,
        service=service,
        rival_service=rival_service,
        admin_actor=Actor(user_id=admin.id, role=UserRole.WEBADMIN),
        agency_actor=Actor(user_id=agency_user.id, role=UserRole.AGENCY, agency_id=agency.id),
        rival_actor=Actor(user_id=rival_user.id, role=UserRole.AGENCY, agency_id=rival.id),
        customer_actor=Actor(user_id=customer.id, role=UserRole.CUSTOMER),
        other_customer_actor=Actor(user_id=other_customer.id, role=UserRole.CUSTOMER),
    )


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_user_token(user.id, user.role)}"}
