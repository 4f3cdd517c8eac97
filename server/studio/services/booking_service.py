"""Booking service for the booking lifecycle operations."""

import logging
from datetime import timedelta
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import DateTime, String, Uuid, delete, func, insert, literal, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.clock import Clock, ensure_utc, system_clock
from ..core.config import settings
from ..core.exceptions import (
    AlreadyBookedError,
    BookingError,
    BookingNotFoundError,
    BookingNotOwnedError,
    ClassFullError,
    ClassNotAvailableError,
    ClassNotFoundError,
    PersistenceError,
    TooLateToCancelError,
)
from ..core.observability import metrics_collector
from ..domain.eligibility import cancellation_deadline, is_cancellable
from ..models.booking import Booking
from ..models.scheduled_class import ScheduledClass, ScheduledClassStatus
from ..schemas.booking import BookingStatusFilter
from .waiting_list_service import WaitingListService

logger = logging.getLogger(__name__)


class BookingService:
    """Service for booking-related operations."""

    def __init__(self, db: AsyncSession, clock: Clock = system_clock):
        self.db = db
        self.clock = clock
        self.waiting_list_service = WaitingListService(db, clock)
        self.cancellation_window = timedelta(hours=settings.cancellation_window_hours)

    def _reject(self, operation: str, error: BookingError, **context) -> BookingError:
        """Log and count a rule violation before it is raised."""
        logger.warning(
            "Booking operation rejected",
            extra={"operation": operation, "code": error.code.value, **context}
        )
        metrics_collector.record_rejection(operation, error.code.value)
        return error

    async def create_booking(self, user_id: str, scheduled_class_id: UUID) -> Booking:
        """
        Book a spot in a scheduled class.

        The class row is locked and the insert only happens while the number of
        bookings is below capacity, in a single statement. Two concurrent
        requests for the last spot therefore yield one booking and one
        ClassFullError.

        Args:
            user_id: Subject of the member's access token
            scheduled_class_id: Class to book

        Returns:
            Created booking with its scheduled class, class definition and instructor

        Raises:
            ClassNotFoundError: If the class does not exist
            ClassNotAvailableError: If the class is cancelled or completed
            AlreadyBookedError: If the user already booked the class
            ClassFullError: If no spots remain
            PersistenceError: If the database fails
        """
        now = self.clock.now()
        context = {"user_id": user_id, "scheduled_class_id": str(scheduled_class_id)}

        try:
            booking_id = await self._insert_booking(user_id, scheduled_class_id, now)
            await self.db.commit()
        except BookingError as e:
            await self.db.rollback()
            raise self._reject("create_booking", e, **context)
        except IntegrityError as e:
            await self.db.rollback()
            raise self._reject(
                "create_booking", AlreadyBookedError(str(scheduled_class_id)), **context
            ) from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Booking creation failed", extra=context, exc_info=True)
            raise PersistenceError("creating the booking") from e

        booking = await self.get_booking_by_id(booking_id)
        metrics_collector.record_booking_created()
        logger.info(
            "Booking created successfully",
            extra={"booking_id": str(booking_id), **context}
        )
        return booking

    async def _insert_booking(self, user_id: str, scheduled_class_id: UUID, now) -> UUID:
        stmt = select(ScheduledClass).where(ScheduledClass.id == scheduled_class_id).with_for_update()
        result = await self.db.execute(stmt)
        scheduled_class = result.scalar_one_or_none()

        if scheduled_class is None:
            raise ClassNotFoundError(str(scheduled_class_id))

        if scheduled_class.status != ScheduledClassStatus.SCHEDULED:
            raise ClassNotAvailableError(
                str(scheduled_class_id), ScheduledClassStatus(scheduled_class.status).value
            )

        if await self.find_user_booking(user_id, scheduled_class_id) is not None:
            raise AlreadyBookedError(str(scheduled_class_id))

        bookings_count = (
            select(func.count(Booking.id))
            .where(Booking.scheduled_class_id == scheduled_class_id)
            .correlate(None)
            .scalar_subquery()
        )
        capacity = (
            select(ScheduledClass.capacity)
            .where(ScheduledClass.id == scheduled_class_id)
            .correlate(None)
            .scalar_subquery()
        )

        booking_id = uuid4()
        # Capacity check and insert in one statement
        stmt = insert(Booking).from_select(
            ["id", "user_id", "scheduled_class_id", "created_at"],
            select(
                literal(booking_id, Uuid),
                literal(user_id, String(128)),
                literal(scheduled_class_id, Uuid),
                literal(now, DateTime(timezone=True)),
            ).where(or_(capacity.is_(None), bookings_count < capacity))
        )
        result = await self.db.execute(stmt)

        if result.rowcount == 0:
            raise ClassFullError(str(scheduled_class_id), scheduled_class.capacity)

        return booking_id

    async def delete_booking(self, user_id: str, booking_id: UUID) -> None:
        """
        Cancel a booking owned by the user.

        Raises:
            BookingNotFoundError: If the booking does not exist or was deleted concurrently
            BookingNotOwnedError: If the booking belongs to someone else
            TooLateToCancelError: If the cancellation window has closed
            PersistenceError: If the database fails
        """
        now = self.clock.now()
        context = {"user_id": user_id, "booking_id": str(booking_id)}

        try:
            scheduled_class_id = await self._delete_booking(user_id, booking_id, now)
            waiting = await self.waiting_list_service.count_waiting(scheduled_class_id)
            await self.db.commit()
        except BookingError as e:
            await self.db.rollback()
            raise self._reject("delete_booking", e, **context)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Booking cancellation failed", extra=context, exc_info=True)
            raise PersistenceError("cancelling the booking") from e

        metrics_collector.record_booking_cancelled()
        logger.info(
            "Booking cancelled successfully",
            extra={"scheduled_class_id": str(scheduled_class_id), **context}
        )

        if waiting:
            # Promotion is not automatic; the freed spot is reported only.
            metrics_collector.record_vacancy_opened()
            logger.info(
                "Vacancy opened in class with waiting list",
                extra={"scheduled_class_id": str(scheduled_class_id), "waiting_list_count": waiting}
            )

    async def _delete_booking(self, user_id: str, booking_id: UUID, now) -> UUID:
        stmt = (
            select(Booking)
            .options(selectinload(Booking.scheduled_class))
            .where(Booking.id == booking_id)
        )
        result = await self.db.execute(stmt)
        booking = result.scalar_one_or_none()

        if booking is None:
            raise BookingNotFoundError(str(booking_id))

        if booking.user_id != user_id:
            raise BookingNotOwnedError(str(booking_id))

        start_time = booking.scheduled_class.start_time
        if not is_cancellable(start_time, now, True, self.cancellation_window):
            raise TooLateToCancelError(
                str(booking_id),
                cancellation_deadline(start_time, self.cancellation_window),
                settings.cancellation_window_hours,
            )

        scheduled_class_id = booking.scheduled_class_id
        result = await self.db.execute(
            delete(Booking)
            .where(Booking.id == booking_id, Booking.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise BookingNotFoundError(str(booking_id))

        return scheduled_class_id

    async def get_user_bookings(
        self,
        user_id: str,
        status: Optional[BookingStatusFilter] = None,
    ) -> list[Booking]:
        """
        List a member's bookings, latest class first.

        UPCOMING keeps classes starting now or later, PAST those that already started.
        """
        stmt = (
            self._booking_query()
            .join(Booking.scheduled_class)
            .where(Booking.user_id == user_id)
            .order_by(ScheduledClass.start_time.desc())
        )

        if status is not None:
            now = ensure_utc(self.clock.now())
            if status == BookingStatusFilter.UPCOMING:
                stmt = stmt.where(ScheduledClass.start_time >= now)
            else:
                stmt = stmt.where(ScheduledClass.start_time < now)

        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def get_booking_by_id(self, booking_id: UUID) -> Booking | None:
        """Get booking by ID with its class details loaded."""
        stmt = self._booking_query().where(Booking.id == booking_id).execution_options(populate_existing=True)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def find_user_booking(self, user_id: str, scheduled_class_id: UUID) -> Booking | None:
        stmt = select(Booking).where(
            Booking.user_id == user_id,
            Booking.scheduled_class_id == scheduled_class_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    def _booking_query(self):
        return select(Booking).options(
            selectinload(Booking.scheduled_class).selectinload(ScheduledClass.class_definition),
            selectinload(Booking.scheduled_class).selectinload(ScheduledClass.instructor),
        )
