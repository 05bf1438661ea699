"""
Pytest configuration and shared fixtures for the payments API tests.

Provides an in-memory SQLite session, an httpx client bound to the app with
the DB dependency overridden, and sample customers/orders/payments.
"""
from datetime import datetime, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from database import Base, get_db
from tests.fakes import make_payment


# ── Database Fixtures ────────────────────────────────────────────────


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
    import db_models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )

    async with async_session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession):
    """
    httpx client against the app with in-memory database.

    Overrides get_db dependency to use the test DB session. Lifespan is not
    run, so no file database is created.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


# ── Test Data Fixtures ────────────────────────────────────────────────


@pytest.fixture
async def sample_customer(db_session: AsyncSession):
    """A customer with full contact details."""
    from db_models import Customer

    customer = Customer(name="Aman", email="aman@example.com", phone="9999990001")
    db_session.add(customer)
    await db_session.commit()
    await db_session.refresh(customer)
    return customer


@pytest.fixture
async def sample_order(db_session: AsyncSession, sample_customer):
    """Order #5: table 3, ₹450, PENDING."""
    from db_models import Order

    order = Order(
        id=5,
        table_number=3,
        total=450.0,
        status="PENDING",
        customer_id=sample_customer.id,
    )
    db_session.add(order)
    await db_session.commit()
    await db_session.refresh(order)
    return order


@pytest.fixture
async def paid_order(db_session: AsyncSession):
    """An order staff have already marked PAID (no customer attached)."""
    from db_models import Order

    order = Order(table_number=7, total=220.0, status="PAID")
    db_session.add(order)
    await db_session.commit()
    await db_session.refresh(order)
    return order


@pytest.fixture
async def seeded_payments(db_session: AsyncSession, sample_order):
    """120 completed cash payments on order #5, one second apart (oldest first)."""
    start = datetime(2024, 1, 1, 12, 0, 0)
    for i in range(120):
        await make_payment(
            db_session,
            sample_order.id,
            amount=10.0 + i,
            created_at=start + timedelta(seconds=i),
        )
    await db_session.commit()
    return sample_order
