"""Waiting list service for joining full classes."""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import Clock, system_clock
from ..core.exceptions import (
    AlreadyBookedError,
    AlreadyOnWaitingListError,
    BookingError,
    BookingErrorCode,
    ClassNotFoundError,
    ClassNotFullError,
    PersistenceError,
)
from ..core.observability import metrics_collector
from ..domain.eligibility import is_full
from ..models.booking import Booking
from ..models.scheduled_class import ScheduledClass, ScheduledClassStatus
from ..models.waiting_list import WaitingListEntry

logger = logging.getLogger(__name__)


class WaitingListService:
    """Service for waiting list operations."""

    def __init__(self, db: AsyncSession, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    async def create_waiting_list_entry(self, user_id: str, scheduled_class_id: UUID) -> WaitingListEntry:
        """
        Put the user on the waiting list of a full class.

        Checks run in a fixed order: the class exists, it is scheduled, the user
        has not booked it, it is full, the user is not already waiting. Classes
        with unlimited capacity are never full, so they always reject.

        Raises:
            ClassNotFoundError: If the class does not exist
            ClassNotFullError: If the class is not scheduled or still has spots
            AlreadyBookedError: If the user already booked the class
            AlreadyOnWaitingListError: If the user is already waiting
            PersistenceError: If the database fails
        """
        context = {"user_id": user_id, "scheduled_class_id": str(scheduled_class_id)}

        try:
            entry = await self._insert_entry(user_id, scheduled_class_id)
            await self.db.commit()
        except BookingError as e:
            await self.db.rollback()
            raise self._reject(e, **context)
        except IntegrityError as e:
            await self.db.rollback()
            raise self._reject(AlreadyOnWaitingListError(str(scheduled_class_id)), **context) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Waiting list entry creation failed", extra=context, exc_info=True)
            raise PersistenceError("adding to the waiting list") from e

        await self.db.refresh(entry)
        metrics_collector.record_waiting_list_entry_created()
        logger.info(
            "Waiting list entry created successfully",
            extra={"waiting_list_entry_id": str(entry.id), **context}
        )
        return entry

    def _reject(self, error: BookingError, **context) -> BookingError:
        logger.warning(
            "Waiting list operation rejected",
            extra={"operation": "create_waiting_list_entry", "code": error.code.value, **context}
        )
        metrics_collector.record_rejection("create_waiting_list_entry", error.code.value)
        return error

    async def _insert_entry(self, user_id: str, scheduled_class_id: UUID) -> WaitingListEntry:
        class_id = str(scheduled_class_id)
        scheduled_class = await self.db.get(ScheduledClass, scheduled_class_id)
        if scheduled_class is None:
            raise ClassNotFoundError(class_id, code=BookingErrorCode.NOT_FOUND)

        if scheduled_class.status != ScheduledClassStatus.SCHEDULED:
            raise ClassNotFullError(class_id, "Class is not available for waiting list")

        booking = await self.db.scalar(
            select(Booking.id).where(
                Booking.user_id == user_id,
                Booking.scheduled_class_id == scheduled_class_id
            )
        )
        if booking is not None:
            raise AlreadyBookedError(class_id, detail="You already have a booking for this class")

        bookings_count = await self.db.scalar(
            select(func.count(Booking.id)).where(Booking.scheduled_class_id == scheduled_class_id)
        )
        if not is_full(bookings_count or 0, scheduled_class.capacity):
            raise ClassNotFullError(class_id, "Class is not full, you can book it directly")

        existing = await self.db.scalar(
            select(WaitingListEntry.id).where(
                WaitingListEntry.user_id == user_id,
                WaitingListEntry.scheduled_class_id == scheduled_class_id
            )
        )
        if existing is not None:
            raise AlreadyOnWaitingListError(class_id)

        entry = WaitingListEntry(
            user_id=user_id,
            scheduled_class_id=scheduled_class_id,
            created_at=self.clock.now(),
        )
        self.db.add(entry)
        await self.db.flush()
        return entry

    async def get_user_waiting_list_entries(self, user_id: str) -> List[WaitingListEntry]:
        """List the user's waiting list entries, oldest first."""
        stmt = (
            select(WaitingListEntry)
            .where(WaitingListEntry.user_id == user_id)
            .order_by(WaitingListEntry.created_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def count_waiting(self, scheduled_class_id: UUID) -> int:
        """Number of users waiting for a class."""
        count = await self.db.scalar(
            select(func.count(WaitingListEntry.id))
            .where(WaitingListEntry.scheduled_class_id == scheduled_class_id)
        )
        return count or 0
