"""
Schedule query orchestration for the weekly class view.

Owns the week cursor, fetches the week's classes and the member's upcoming
bookings concurrently, projects them into view models and dispatches
booking actions followed by a re-fetch.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import List, Optional
from uuid import UUID

from ..core.clock import Clock, system_clock
from ..core.config import settings
from ..domain.calendar import shift_week, week_end, week_start
from ..domain.projector import project_schedule
from ..schemas.booking import BookingDto, BookingStatusFilter
from ..schemas.view_models import ScheduleViewModel
from ..schemas.waiting_list import WaitingListEntryDto
from .api_client import StudioApiClient
from .errors import AuthenticationRequiredError, StudioClientError
from .notices import LoggingNotifier, Notifier, failure_reason

logger = logging.getLogger(__name__)


class FetchState(str, Enum):
    """State of the most recent fetch cycle."""
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class ScheduleOrchestrator:
    """State holder for the weekly schedule view."""

    def __init__(
        self,
        api: StudioApiClient,
        notifier: Optional[Notifier] = None,
        clock: Clock = system_clock,
        tz_name: Optional[str] = None,
    ):
        self.api = api
        self.notifier = notifier or LoggingNotifier()
        self.clock = clock
        self.tz_name = tz_name or settings.week_timezone
        self.cancellation_window = timedelta(hours=settings.cancellation_window_hours)

        self.current_week_start: datetime = week_start(clock.now(), self.tz_name)
        self.scheduled_classes: List[ScheduleViewModel] = []
        self.state = FetchState.IDLE
        self.error: Optional[Exception] = None
        self.selected_class: Optional[ScheduleViewModel] = None
        self._generation = 0

    @property
    def current_week_end(self) -> datetime:
        return week_end(self.current_week_start, self.tz_name)

    @property
    def is_loading(self) -> bool:
        return self.state is FetchState.LOADING

    async def _fetch_upcoming_bookings(self) -> List[BookingDto]:
        # Classes are public; an anonymous member simply has no bookings.
        try:
            return await self.api.list_my_bookings(BookingStatusFilter.UPCOMING)
        except AuthenticationRequiredError:
            return []

    async def refetch(self) -> List[ScheduleViewModel]:
        """
        Fetch and project the current week.

        Only the latest requested fetch may update state; a response for a
        week the member already navigated away from is dropped. Failures
        move the orchestrator to ERROR and are not raised, a retry is an
        explicit call.
        """
        self._generation += 1
        generation = self._generation
        start, end = self.current_week_start, self.current_week_end

        self.state = FetchState.LOADING
        self.error = None

        try:
            classes, bookings = await asyncio.gather(
                self.api.list_scheduled_classes(start, end),
                self._fetch_upcoming_bookings(),
            )
        except StudioClientError as e:
            if generation == self._generation:
                self.state = FetchState.ERROR
                self.error = e
                logger.warning(
                    "Schedule fetch failed",
                    extra={"week_start": start.isoformat(), "error": str(e)}
                )
            return self.scheduled_classes

        if generation != self._generation:
            logger.debug("Dropping stale schedule response", extra={"week_start": start.isoformat()})
            return self.scheduled_classes

        self.scheduled_classes = project_schedule(
            classes, bookings, self.clock.now(), window=self.cancellation_window
        )
        self.state = FetchState.SUCCESS
        return self.scheduled_classes

    async def next_week(self) -> List[ScheduleViewModel]:
        self.current_week_start = shift_week(self.current_week_start, 1, self.tz_name)
        return await self.refetch()

    async def previous_week(self) -> List[ScheduleViewModel]:
        self.current_week_start = shift_week(self.current_week_start, -1, self.tz_name)
        return await self.refetch()

    def select_class(self, class_item: Optional[ScheduleViewModel]) -> None:
        """Track the class shown in the details dialog (None closes it)."""
        self.selected_class = class_item

    async def book_class(self, scheduled_class_id: UUID) -> BookingDto:
        try:
            booking = await self.api.create_booking(scheduled_class_id)
        except StudioClientError as e:
            self.notifier.error("Booking failed", failure_reason(e, "Could not book the class."))
            raise

        self.notifier.success("Booking confirmed", "You have been signed up for the class.")
        await self.refetch()
        return booking

    async def cancel_booking(self, booking_id: UUID) -> None:
        try:
            await self.api.delete_booking(booking_id)
        except StudioClientError as e:
            self.notifier.error("Cancellation failed", failure_reason(e, "Could not cancel the booking."))
            raise

        self.notifier.success("Booking cancelled", "Your booking has been cancelled.")
        await self.refetch()

    async def join_waiting_list(self, scheduled_class_id: UUID) -> WaitingListEntryDto:
        try:
            entry = await self.api.create_waiting_list_entry(scheduled_class_id)
        except StudioClientError as e:
            self.notifier.error(
                "Joining the waiting list failed",
                failure_reason(e, "Could not join the waiting list."),
            )
            raise

        self.notifier.success("Added to waiting list", "We will let you know if a spot opens up.")
        await self.refetch()
        return entry
