"""Concurrency tests for booking operations against a shared database file."""

import asyncio
from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from studio.core.clock import FixedClock
from studio.core.database import Base
from studio.core.exceptions import AlreadyBookedError, ClassFullError
from studio.models import Booking, ClassDefinition, ScheduledClass, ScheduledClassStatus
from studio.services.booking_service import BookingService

from ..conftest import NOW

pytestmark = pytest.mark.concurrency


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    """Every request gets its own connection to the same database file."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'studio.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


async def create_class(session_factory, capacity, booked_by=()):
    async with session_factory() as session:
        definition = ClassDefinition(name="Spinning", color="#EF4444", duration_minutes=45)
        session.add(definition)
        await session.flush()
        scheduled_class = ScheduledClass(
            class_id=definition.id,
            start_time=NOW + timedelta(days=1),
            end_time=NOW + timedelta(days=1, minutes=45),
            capacity=capacity,
            status=ScheduledClassStatus.SCHEDULED.value,
        )
        session.add(scheduled_class)
        await session.flush()
        for user_id in booked_by:
            session.add(Booking(user_id=user_id, scheduled_class_id=scheduled_class.id, created_at=NOW))
        await session.commit()
        return scheduled_class.id


async def book(session_factory, user_id, scheduled_class_id):
    async with session_factory() as session:
        return await BookingService(session, FixedClock(NOW)).create_booking(user_id, scheduled_class_id)


async def bookings_in(session_factory, scheduled_class_id) -> int:
    async with session_factory() as session:
        return await session.scalar(
            select(func.count(Booking.id)).where(Booking.scheduled_class_id == scheduled_class_id)
        )


@pytest.mark.asyncio
async def test_last_spot_goes_to_exactly_one_member(session_factory):
    """Two members race for the last spot: one booking, one ClassFullError."""
    class_id = await create_class(session_factory, capacity=10, booked_by=[f"early-{i}" for i in range(9)])

    results = await asyncio.gather(
        book(session_factory, "member-a", class_id),
        book(session_factory, "member-b", class_id),
        return_exceptions=True,
    )

    successes = [r for r in results if isinstance(r, Booking)]
    failures = [r for r in results if isinstance(r, ClassFullError)]
    assert len(successes) == 1
    assert len(failures) == 1
    assert await bookings_in(session_factory, class_id) == 10


@pytest.mark.asyncio
async def test_many_concurrent_requests_never_overbook(session_factory):
    class_id = await create_class(session_factory, capacity=5)

    results = await asyncio.gather(
        *(book(session_factory, f"member-{i}", class_id) for i in range(20)),
        return_exceptions=True,
    )

    successes = [r for r in results if isinstance(r, Booking)]
    unexpected = [r for r in results if not isinstance(r, (Booking, ClassFullError))]
    assert unexpected == []
    assert len(successes) == 5
    assert await bookings_in(session_factory, class_id) == 5


@pytest.mark.asyncio
async def test_same_member_double_submit_books_once(session_factory):
    class_id = await create_class(session_factory, capacity=None)

    results = await asyncio.gather(
        *(book(session_factory, "member-a", class_id) for _ in range(3)),
        return_exceptions=True,
    )

    assert sum(isinstance(r, Booking) for r in results) == 1
    assert all(isinstance(r, (Booking, AlreadyBookedError)) for r in results)
    assert await bookings_in(session_factory, class_id) == 1
