"""My-bookings orchestration with optimistic cancellation."""

import logging
from datetime import timedelta
from typing import List, Optional, Set
from uuid import UUID

from ..core.clock import Clock, system_clock
from ..core.config import settings
from ..domain.projector import project_bookings
from ..schemas.booking import BookingStatusFilter
from ..schemas.view_models import BookingViewModel
from .api_client import StudioApiClient
from .errors import StudioClientError
from .notices import LoggingNotifier, Notifier, failure_reason
from .schedule import FetchState

logger = logging.getLogger(__name__)


class MyBookingsOrchestrator:
    """
    State holder for the member's upcoming and past bookings.

    Cancelling removes the booking from ``upcoming_bookings`` right away and
    records it in ``pending_cancellations`` until the server answers. The
    list is re-fetched either way, which restores the booking if the
    cancellation failed.
    """

    def __init__(
        self,
        api: StudioApiClient,
        notifier: Optional[Notifier] = None,
        clock: Clock = system_clock,
    ):
        self.api = api
        self.notifier = notifier or LoggingNotifier()
        self.clock = clock
        self.cancellation_window = timedelta(hours=settings.cancellation_window_hours)

        self.upcoming_bookings: List[BookingViewModel] = []
        self.historical_bookings: List[BookingViewModel] = []
        self.state = FetchState.IDLE
        self.error: Optional[Exception] = None
        self.booking_to_cancel_id: Optional[UUID] = None
        self.pending_cancellations: Set[UUID] = set()

    async def fetch_bookings(self, status: BookingStatusFilter) -> List[BookingViewModel]:
        self.state = FetchState.LOADING
        self.error = None

        try:
            bookings = await self.api.list_my_bookings(status)
        except StudioClientError as e:
            self.state = FetchState.ERROR
            self.error = e
            logger.warning("Bookings fetch failed", extra={"status": status.value, "error": str(e)})
            return []

        view_models = project_bookings(bookings, self.clock.now(), self.cancellation_window)
        if status is BookingStatusFilter.UPCOMING:
            self.upcoming_bookings = view_models
        else:
            self.historical_bookings = view_models

        self.state = FetchState.SUCCESS
        return view_models

    def open_cancel_dialog(self, booking_id: UUID) -> None:
        self.booking_to_cancel_id = booking_id

    def close_cancel_dialog(self) -> None:
        self.booking_to_cancel_id = None

    async def cancel_booking(self) -> None:
        """Cancel the booking selected in the dialog, optimistically."""
        booking_id = self.booking_to_cancel_id
        if booking_id is None:
            return

        previous = self.upcoming_bookings
        self.pending_cancellations.add(booking_id)
        self.upcoming_bookings = [b for b in self.upcoming_bookings if b.id != booking_id]
        self.close_cancel_dialog()

        try:
            await self.api.delete_booking(booking_id)
        except StudioClientError as e:
            self.pending_cancellations.discard(booking_id)
            self.upcoming_bookings = previous
            self.notifier.error("Cancellation failed", failure_reason(e, "Could not cancel the booking."))
            await self.fetch_bookings(BookingStatusFilter.UPCOMING)
            raise

        self.pending_cancellations.discard(booking_id)
        self.notifier.success("Booking cancelled", "Your booking has been cancelled.")
        await self.fetch_bookings(BookingStatusFilter.UPCOMING)
