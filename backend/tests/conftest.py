"""Shared test fixtures."""

import os
import tempfile

# Settings are read at import time: point the app at a throwaway SQLite file first.
_TMP_DIR = tempfile.mkdtemp(prefix="finboard-tests-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR}/test.db"
os.environ["LEMONSQUEEZY_WEBHOOK_SECRET"] = "test-webhook-secret"
os.environ["LEMONSQUEEZY_STORE_ID"] = "1234"
os.environ["LEMONSQUEEZY_VARIANT_ID"] = "5678"
os.environ["APP_PUBLIC_URL"] = "https://finboard.test"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from finboard.core.database import async_session_factory, engine  # noqa: E402
from finboard.core.security import get_current_user  # noqa: E402
from finboard.main import app  # noqa: E402
from finboard.models import Base, User  # noqa: E402


@pytest.fixture
async def database():
    """Fresh schema for each test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def db_session(database):
    async with async_session_factory() as session:
        yield session


async def _create_user(subject: str, email: str) -> User:
    async with async_session_factory() as session:
        user = User(auth_subject=subject, email=email, full_name=email.split("@")[0].title())
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user


@pytest.fixture
async def user(database) -> User:
    return await _create_user("user_alice", "alice@example.com")


@pytest.fixture
async def other_user(database) -> User:
    return await _create_user("user_bob", "bob@example.com")


@pytest.fixture
def act_as():
    """Switch the authenticated user for subsequent requests."""

    def _act_as(user: User) -> None:
        app.dependency_overrides[get_current_user] = lambda: user

    yield _act_as
    app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
async def anon_client(database):
    """Async test client for the FastAPI app, without any auth override."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def client(user, act_as):
    """Async test client authenticated as ``user``."""
    act_as(user)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
