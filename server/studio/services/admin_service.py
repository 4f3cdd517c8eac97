"""Admin service computing dashboard KPIs."""

import logging
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import Clock, ensure_utc, system_clock
from ..core.exceptions import PersistenceError
from ..domain.calendar import day_bounds
from ..models.booking import Booking
from ..models.class_definition import ClassDefinition
from ..models.scheduled_class import ScheduledClass, ScheduledClassStatus
from ..models.waiting_list import WaitingListEntry
from ..schemas.admin import AdminDashboardDto, PopularClassDto

logger = logging.getLogger(__name__)

POPULAR_CLASSES_LIMIT = 5


class AdminService:
    """Service for staff dashboard aggregates."""

    def __init__(self, db: AsyncSession, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    async def get_dashboard_kpis(self, now: datetime | None = None) -> AdminDashboardDto:
        """
        Compute the dashboard KPIs.

        - today_occupancy_rate: bookings over capacity for today's scheduled
          classes that have a capacity, rounded to two decimals
        - total_waiting_list_count: entries for classes that have not started
        - most_popular_classes: top class names by booking count
        """
        now = now or self.clock.now()
        try:
            occupancy = await self._today_occupancy_rate(now)
            waiting = await self._upcoming_waiting_list_count(now)
            popular = await self._most_popular_classes()
        except SQLAlchemyError as e:
            logger.error("Dashboard KPI aggregation failed", exc_info=True)
            raise PersistenceError("computing dashboard KPIs") from e

        return AdminDashboardDto(
            today_occupancy_rate=occupancy,
            total_waiting_list_count=waiting,
            most_popular_classes=popular,
        )

    async def _today_occupancy_rate(self, now: datetime) -> float:
        day_start, day_end = day_bounds(now)
        bookings_per_class = (
            select(
                ScheduledClass.id.label("scheduled_class_id"),
                ScheduledClass.capacity.label("capacity"),
                func.count(Booking.id).label("bookings_count"),
            )
            .outerjoin(Booking, Booking.scheduled_class_id == ScheduledClass.id)
            .where(
                ScheduledClass.start_time >= day_start,
                ScheduledClass.start_time < day_end,
                ScheduledClass.status == ScheduledClassStatus.SCHEDULED.value,
                ScheduledClass.capacity.is_not(None),
            )
            .group_by(ScheduledClass.id, ScheduledClass.capacity)
            .subquery()
        )
        row = (
            await self.db.execute(
                select(
                    func.coalesce(func.sum(bookings_per_class.c.bookings_count), 0),
                    func.coalesce(func.sum(bookings_per_class.c.capacity), 0),
                )
            )
        ).one()
        booked, capacity = int(row[0]), int(row[1])
        if capacity == 0:
            return 0.0
        return round(booked / capacity, 2)

    async def _upcoming_waiting_list_count(self, now: datetime) -> int:
        count = await self.db.scalar(
            select(func.count(WaitingListEntry.id))
            .join(ScheduledClass, ScheduledClass.id == WaitingListEntry.scheduled_class_id)
            .where(ScheduledClass.start_time > ensure_utc(now))
        )
        return count or 0

    async def _most_popular_classes(self) -> list[PopularClassDto]:
        booking_count = func.count(Booking.id).label("booking_count")
        stmt = (
            select(ClassDefinition.name, booking_count)
            .join(ScheduledClass, ScheduledClass.class_id == ClassDefinition.id)
            .join(Booking, Booking.scheduled_class_id == ScheduledClass.id)
            .group_by(ClassDefinition.id, ClassDefinition.name)
            .order_by(booking_count.desc(), ClassDefinition.name)
            .limit(POPULAR_CLASSES_LIMIT)
        )
        result = await self.db.execute(stmt)
        return [PopularClassDto(name=name, booking_count=count) for name, count in result.all()]
