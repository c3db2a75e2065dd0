"""
Pytest configuration and shared fixtures for the Candle Shop tests.

Provides an in-memory SQLite session, an httpx client bound to the app with
the DB and notifier dependencies overridden, account/product factories and
JWT headers.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")

import pytest
from typing import AsyncGenerator

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from database import Base, get_db
from config import settings
from middleware.auth import issue_access_token
from middleware.rate_limit import limiter
from services.notification_service import LoggingEmailSender, OrderNotifier, get_notifier

# ── Test Configuration ───────────────────────────────────────────────
# Set test-only values for settings that would normally come from .env
if not settings.jwt_secret:
    settings.jwt_secret = "test-jwt-secret-for-pytest-only"
settings.admin_auth_enabled = True

ADMIN_EMAIL = "owner@candleshop.test"


# ── Database Fixtures ────────────────────────────────────────────────


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Create an in-memory SQLite database session for each test.

    Uses StaticPool to allow in-memory SQLite with async SQLAlchemy.
    """
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


# ── Notifier Fixtures ────────────────────────────────────────────────


@pytest.fixture
def email_sender() -> LoggingEmailSender:
    return LoggingEmailSender()


@pytest.fixture
async def notifier(email_sender):
    """Recording notifier; pending emails are drained before teardown."""
    n = OrderNotifier(email_sender, admin_email=ADMIN_EMAIL)
    yield n
    await n.drain()


# ── HTTP Client ──────────────────────────────────────────────────────


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    limiter.reset()
    yield
    limiter.reset()


@pytest.fixture(scope="function")
async def client(db_session: AsyncSession, notifier: OrderNotifier):
    """
    httpx client against the FastAPI app with the in-memory database.

    Overrides get_db and get_notifier so routes share the test session and
    the recording notifier.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


# ── Test Data Fixtures ────────────────────────────────────────────────


def auth_headers_for(user) -> dict:
    """Authorization header with a valid JWT for the given user."""
    token = issue_access_token(user_id=user.id, email=user.email, role=user.role)
    return {"Authorization": f"Bearer {token}"}


async def _create_user(db_session, *, email: str, name: str, role: str = "customer"):
    from db_models import User

    user = User(email=email, name=name, phone_number="9876543210", role=role)
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def customer(db_session: AsyncSession):
    return await _create_user(db_session, email="alice@example.com", name="Alice")


@pytest.fixture
async def other_customer(db_session: AsyncSession):
    return await _create_user(db_session, email="bob@example.com", name="Bob")


@pytest.fixture
async def admin(db_session: AsyncSession):
    return await _create_user(db_session, email="admin@example.com", name="Admin", role="admin")


@pytest.fixture
def customer_headers(customer) -> dict:
    return auth_headers_for(customer)


@pytest.fixture
def other_customer_headers(other_customer) -> dict:
    return auth_headers_for(other_customer)


@pytest.fixture
def admin_headers(admin) -> dict:
    return auth_headers_for(admin)


@pytest.fixture
def make_product(db_session: AsyncSession):
    """Factory: await make_product(title=..., price=..., stock=..., active=...)."""
    from services import catalog_service

    async def _make(title: str = "Lavender Dream", price=500, stock=5, active: bool = True, **attributes):
        product = await catalog_service.create_product(
            db_session,
            title=title,
            price=price,
            stock=stock,
            active=active,
            **attributes,
        )
        await db_session.commit()
        await db_session.refresh(product)
        return product

    return _make


@pytest.fixture
def shipping_address() -> dict:
    """Valid camelCase shipping address payload."""
    return {
        "firstName": "Alice",
        "lastName": "Smith",
        "address": "12 Wick Lane",
        "city": "Pune",
        "state": "Maharashtra",
        "zipCode": "411001",
        "phone": "98765 43210",
    }


@pytest.fixture
def stored_address() -> dict:
    """Shipping address as the order service stores it."""
    return {
        "firstName": "Alice",
        "lastName": "Smith",
        "address": "12 Wick Lane",
        "city": "Pune",
        "state": "Maharashtra",
        "zipCode": "411001",
        "phone": "9876543210",
    }
