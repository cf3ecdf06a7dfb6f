"""Pytest configuration and fixtures for the mortgage funnel tests.

The API runs against an in-memory SQLite database (aiosqlite) created
fresh for every test; the wizard runs against an in-memory session store
with an injectable clock.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("DATABASE_URL_SYNC", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("ENABLE_EMAIL_NOTIFICATIONS", "false")
os.environ.setdefault("SUBMISSION_COUNTER_BACKEND", "memory")

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import mortgage_funnel.models  # noqa: F401
from mortgage_funnel.auth.jwt import create_admin_token
from mortgage_funnel.database import Base, get_db
from mortgage_funnel.main import app
from mortgage_funnel.services.rate_limit import SubmissionLimiter, get_submission_limiter
from mortgage_funnel.wizard.store import MemorySessionStore


# ── Wizard fixtures ──────────────────────────────────────────────

class FakeClock:
    """Settable clock returning epoch seconds."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float = 0, *, minutes: float = 0, ms: float = 0) -> None:
        self.now += seconds + minutes * 60 + ms / 1000


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemorySessionStore:
    return MemorySessionStore()


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker:
    return async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def limiter() -> SubmissionLimiter:
    return SubmissionLimiter(limit=5, backend="memory")


@pytest_asyncio.fixture
async def client(session_factory, limiter) -> AsyncGenerator[AsyncClient, None]:
    """Test client with the database and submission limiter overridden."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_submission_limiter] = lambda: limiter

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


# ── Auth Fixtures ────────────────────────────────────────────────

@pytest.fixture
def admin_token() -> str:
    return create_admin_token("mortgage-admin")


@pytest.fixture
def auth_headers(admin_token: str) -> dict:
    return {"Authorization": f"Bearer {admin_token}"}


# ── Test Data Fixtures ───────────────────────────────────────────

CONTACT = {
    "fullName": "Jane Doe",
    "email": "jane@example.com",
    "phoneNumber": "+971501234567",
    "contactMethod": "email",
    "bestTimeToCall": "morning",
}


@pytest.fixture
def purchase_payload() -> dict:
    return {
        "loanType": "new-purchase",
        "isUAEResident": True,
        "residencyStatus": "uae-resident",
        "propertyStatus": "looking",
        "propertyType": "villa",
        "budgetRange": "2m-5m",
        "downPayment": "20-25-percent",
        "monthlyIncome": "30k-50k",
        "employmentStatus": "uae-resident-employee",
        **CONTACT,
    }


@pytest.fixture
def refinance_payload() -> dict:
    return {
        "loanType": "refinance",
        "isUAEResident": False,
        "residencyStatus": "non-resident",
        "refinanceReason": "lower-rate",
        "currentRate": "above-4",
        "remainingBalance": "500k-1m",
        "propertyValue": "2m-5m",
        "monthlyIncome": "15k-30k",
        **CONTACT,
    }


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "api: API endpoint tests")
    config.addinivalue_line("markers", "auth: Authentication tests")
