"""Pytest configuration for all tests."""

from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from dfood.core.config import Settings
from dfood.domain.services import AuthService
from dfood.infrastructure.auth import InMemoryRevocationStore, JWTService
from dfood.infrastructure.persistence.database import Base
from dfood.infrastructure.persistence.repositories import UserRepository

# HS256 keys shorter than 32 bytes make PyJWT warn
TEST_SECRET = "dfood-test-secret-key-0123456789abcdef"


class FrozenClock:
    """Clock that only moves when a test moves it."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def revocation_store() -> InMemoryRevocationStore:
    return InMemoryRevocationStore()


@pytest.fixture
def secret_key() -> str:
    return TEST_SECRET


@pytest.fixture
def jwt_service(
    secret_key: str, clock: FrozenClock, revocation_store: InMemoryRevocationStore
) -> JWTService:
    """JWT service with a fixed secret, a frozen clock and its own revocation set."""
    return JWTService(
        secret_key=secret_key,
        revocation_store=revocation_store,
        clock=clock,
        access_token_lifetime=timedelta(minutes=15),
        refresh_token_lifetime=timedelta(days=7),
    )


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    from dfood.infrastructure.persistence import models  # noqa: F401

    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def user_repo(db_session: AsyncSession) -> UserRepository:
    return UserRepository(db_session)


@pytest.fixture
def auth_service(
    db_session: AsyncSession, user_repo: UserRepository, jwt_service: JWTService
) -> AuthService:
    return AuthService(session=db_session, user_repo=user_repo, jwt_service=jwt_service)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="testing",
        secret_key=TEST_SECRET,
        database_url="sqlite+aiosqlite:///:memory:",
        revocation_sweep_interval_seconds=0,
        rate_limit_enabled=False,
    )


@pytest.fixture
def app(test_settings: Settings, jwt_service: JWTService, db_session: AsyncSession) -> FastAPI:
    """Application wired to the test session and the frozen-clock JWT service."""
    from dfood.infrastructure.api.app import create_app
    from dfood.infrastructure.persistence.database import get_db_session

    application = create_app(settings=test_settings, jwt_service=jwt_service)
    application.dependency_overrides[get_db_session] = lambda: db_session
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database dependency."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
