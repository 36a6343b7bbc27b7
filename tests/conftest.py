"""Test configuration and fixtures for FitCoach API."""

import uuid
from collections.abc import AsyncGenerator, Callable
from datetime import date, timedelta
from typing import Any
from unittest.mock import patch

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.config.database import Base, get_db
from src.core.redis import _memory_store
from src.core.security import create_access_token
from src.core.timeutils import local_today
from src.domains.users.models import User, UserRole
from src.domains.workouts.models import day_of_week_for
from src.main import create_app

# Test database URL - use SQLite in-memory for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for tests."""
    return "asyncio"


@pytest.fixture(autouse=True)
def redis_unavailable():
    """Rate limiting runs on the in-memory fallback in tests."""
    _memory_store.clear()
    with patch("src.core.redis.get_redis", return_value=None):
        yield
    _memory_store.clear()


@pytest.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
    )

    # Import all models to register them
    from src.domains import models  # noqa: F401

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture(scope="function")
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture(scope="function")
async def client(test_engine, db_session) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with database session override."""
    app = create_app()

    # Override the database dependency
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()


# =============================================================================
# Users
# =============================================================================


async def _create_user(
    db_session: AsyncSession,
    name: str,
    role: UserRole,
    trainer_id: uuid.UUID | None = None,
) -> User:
    user_id = uuid.uuid4()
    user = User(
        id=user_id,
        email=f"{role.value}-{user_id}@example.com",
        name=name,
        role=role,
        trainer_id=trainer_id,
        is_active=True,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def trainer(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Tina Trainer", UserRole.TRAINER)


@pytest.fixture
async def other_trainer(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Oscar Trainer", UserRole.TRAINER)


@pytest.fixture
async def admin(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Ada Admin", UserRole.ADMIN)


@pytest.fixture
async def client_user(db_session: AsyncSession) -> User:
    """A client with no trainer yet."""
    return await _create_user(db_session, "Carla Client", UserRole.CLIENT)


@pytest.fixture
async def other_client(db_session: AsyncSession) -> User:
    return await _create_user(db_session, "Bruno Client", UserRole.CLIENT)


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Build bearer headers for a user."""

    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(user.id, role=user.role.value)
        return {"Authorization": f"Bearer {token}"}

    return _headers


# =============================================================================
# Plans
# =============================================================================


@pytest.fixture
def recent_training_days() -> list[date]:
    """Yesterday and the two days before it.

    Distinct weekdays, none of them today, so today is always a rest day in
    plans built from these dates.
    """
    today = local_today()
    return [today - timedelta(days=n) for n in (1, 2, 3)]


@pytest.fixture
def plan_payload() -> Callable[..., dict[str, Any]]:
    """Build a camelCase plan body like the web client sends."""

    def _payload(
        client_id: uuid.UUID,
        days: list[int] | None = None,
        frequency: int | None = None,
        start: date | None = None,
        end: date | None = None,
        name: str = "Hypertrophy block",
    ) -> dict[str, Any]:
        days = days if days is not None else [1, 3, 5]
        start = start or local_today() - timedelta(days=14)
        end = end or start + timedelta(days=60)
        return {
            "client": str(client_id),
            "name": name,
            "frequency": frequency if frequency is not None else len(days),
            "startDate": start.isoformat(),
            "endDate": end.isoformat(),
            "weeklyPlan": [
                {
                    "dayOfWeek": day,
                    "exercises": [
                        {"name": "Squat", "sets": 4, "reps": "8-10", "order": 1},
                        {"name": "Bench Press", "sets": 3, "reps": 10, "order": 2},
                    ],
                }
                for day in days
            ],
        }

    return _payload


@pytest.fixture
def recent_plan_payload(
    plan_payload: Callable[..., dict[str, Any]],
    recent_training_days: list[date],
) -> Callable[[uuid.UUID], dict[str, Any]]:
    """Plan body whose sessions fall on yesterday and the two days before."""

    def _payload(client_id: uuid.UUID, **kwargs) -> dict[str, Any]:
        return plan_payload(
            client_id,
            days=[day_of_week_for(d) for d in recent_training_days],
            **kwargs,
        )

    return _payload
