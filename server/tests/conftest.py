"""Test configuration and fixtures."""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from studio.core.clock import FixedClock
from studio.core.config import settings
from studio.core.database import Base
from studio.core.dependencies import get_clock, get_db
from studio.models import (  # noqa: F401 - registers all tables
    Booking,
    ClassDefinition,
    Instructor,
    ScheduledClass,
    ScheduledClassStatus,
    WaitingListEntry,
)

# Test database URL (in-memory SQLite for speed)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Monday noon; every time-dependent test is pinned to this instant
NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)

MEMBER_ID = "member-1"
OTHER_MEMBER_ID = "member-2"
ADMIN_ID = "admin-1"


def make_token(user_id: str, roles: tuple[str, ...] = (), secret: Optional[str] = None) -> str:
    """Sign a bearer token the API accepts."""
    payload = {
        "sub": user_id,
        "email": f"{user_id}@example.com",
        "roles": list(roles),
        "exp": int((datetime.now(timezone.utc) + timedelta(hours=1)).timestamp()),
    }
    return jwt.encode(payload, secret or settings.bearer_token_secret, algorithm="HS256")


def auth_headers(user_id: str, roles: tuple[str, ...] = ()) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, roles)}"}


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create a test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    async_session = async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


@pytest.fixture
def clock():
    """Clock frozen at NOW."""
    return FixedClock(NOW)


@pytest_asyncio.fixture(scope="function")
async def test_app(test_session, clock):
    """Create a test FastAPI application."""
    from fastapi import FastAPI
    from fastapi.exceptions import RequestValidationError

    from studio.core.exceptions import (
        ProblemDetailsException,
        generic_exception_handler,
        problem_details_handler,
        request_validation_handler,
    )
    from studio.routers import admin, bookings, health, metrics, scheduled_classes, waiting_list

    # Simplified app without lifespan, workers or tracing
    app = FastAPI(title="Studio Booking API (Test)", version="1.0.0-test")

    app.add_exception_handler(ProblemDetailsException, problem_details_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, generic_exception_handler)

    app.include_router(health.router)
    app.include_router(scheduled_classes.router)
    app.include_router(bookings.router)
    app.include_router(waiting_list.router)
    app.include_router(admin.router)
    app.include_router(metrics.router)

    async def override_get_db():
        yield test_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock

    yield app

    app.dependency_overrides.clear()


@pytest_asyncio.fixture(scope="function")
async def test_client(test_app):
    """Create a test HTTP client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def member_headers():
    return auth_headers(MEMBER_ID)


@pytest.fixture
def other_member_headers():
    return auth_headers(OTHER_MEMBER_ID)


@pytest.fixture
def admin_headers():
    return auth_headers(ADMIN_ID, roles=("admin",))


@pytest_asyncio.fixture
async def yoga(test_session):
    """A class definition with an instructor."""
    definition = ClassDefinition(name="Yoga", color="#10B981", duration_minutes=60)
    instructor = Instructor(full_name="Anna Kowalska", email="anna@example.com")
    test_session.add_all([definition, instructor])
    await test_session.commit()
    return definition, instructor


@pytest.fixture
def schedule_class(test_session, yoga):
    """Factory persisting a scheduled class, optionally pre-filled with bookings."""

    async def _schedule(
        start_time: datetime = NOW + timedelta(days=1),
        duration: timedelta = timedelta(hours=1),
        capacity: Optional[int] = 10,
        status: ScheduledClassStatus = ScheduledClassStatus.SCHEDULED,
        booked_by: tuple[str, ...] = (),
        waiting: tuple[str, ...] = (),
        with_instructor: bool = True,
    ) -> ScheduledClass:
        definition, instructor = yoga
        scheduled_class = ScheduledClass(
            class_id=definition.id,
            instructor_id=instructor.id if with_instructor else None,
            start_time=start_time,
            end_time=start_time + duration,
            capacity=capacity,
            status=status.value,
        )
        test_session.add(scheduled_class)
        await test_session.flush()

        for user_id in booked_by:
            test_session.add(
                Booking(user_id=user_id, scheduled_class_id=scheduled_class.id, created_at=NOW)
            )
        for user_id in waiting:
            test_session.add(
                WaitingListEntry(user_id=user_id, scheduled_class_id=scheduled_class.id, created_at=NOW)
            )

        await test_session.commit()
        return scheduled_class

    return _schedule


@pytest.fixture
def fill_users():
    """Distinct user ids for filling up a class."""
    return lambda count, prefix="filler": tuple(f"{prefix}-{i}" for i in range(count))
