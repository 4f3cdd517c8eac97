"""
Projection of raw schedule data into view models.

Each projection pass receives a single ``now`` and a single bookings
snapshot, so all flags in one result are mutually consistent.
"""

from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from ..core.clock import ensure_utc
from ..schemas.booking import BookingDto
from ..schemas.scheduled_class import ScheduledClassDto
from ..schemas.view_models import BookingViewModel, ScheduleViewModel
from ..schemas.waiting_list import WaitingListEntryDto
from .calendar import format_date_pl, format_time_range
from .eligibility import (
    CANCELLATION_WINDOW,
    UserStatus,
    has_started,
    is_bookable,
    is_cancellable,
    is_full,
    is_historical,
    is_waitlistable,
)


def _user_status(booking: Optional[BookingDto], entry: Optional[WaitingListEntryDto]) -> UserStatus:
    if booking is not None:
        return UserStatus.BOOKED
    if entry is not None:
        return UserStatus.WAITING_LIST
    return UserStatus.AVAILABLE


def _can_cancel(status: UserStatus, start_time: datetime, now: datetime, window: timedelta) -> bool:
    if status is UserStatus.BOOKED:
        return is_cancellable(start_time, now, True, window)
    if status is UserStatus.WAITING_LIST or status is UserStatus.AVAILABLE:
        return False
    raise ValueError(f"Unhandled user status: {status!r}")


def project_schedule(
    classes: Sequence[ScheduledClassDto],
    bookings: Iterable[BookingDto],
    now: datetime,
    waiting_list_entries: Optional[Iterable[WaitingListEntryDto]] = None,
    window: timedelta = CANCELLATION_WINDOW,
) -> List[ScheduleViewModel]:
    """
    Merge scheduled classes with the user's bookings into schedule view models.

    Args:
        classes: Classes in display order
        bookings: The acting user's bookings
        now: The instant every flag is evaluated against
        waiting_list_entries: The user's waiting list entries, if known
        window: Cancellation window

    Returns:
        One view model per class, in input order
    """
    now = ensure_utc(now)
    booking_by_class: Dict = {b.scheduled_class.id: b for b in bookings}
    entry_by_class: Dict = {e.scheduled_class_id: e for e in waiting_list_entries or ()}

    view_models = []
    for scheduled_class in classes:
        booking = booking_by_class.get(scheduled_class.id)
        entry = None if booking is not None else entry_by_class.get(scheduled_class.id)
        status = _user_status(booking, entry)
        full = is_full(scheduled_class.bookings_count, scheduled_class.capacity)
        started = has_started(scheduled_class.start_time, now)

        view_models.append(
            ScheduleViewModel(
                **scheduled_class.model_dump(),
                user_status=status,
                booking_id=booking.id if booking is not None else None,
                waiting_list_entry_id=entry.id if entry is not None else None,
                is_full=full,
                has_started=started,
                is_bookable=is_bookable(full, started, status),
                is_cancellable=_can_cancel(status, scheduled_class.start_time, now, window),
                is_waitlistable=is_waitlistable(full, started, status),
            )
        )
    return view_models


def project_booking(
    booking: BookingDto,
    now: datetime,
    window: timedelta = CANCELLATION_WINDOW,
) -> BookingViewModel:
    """Flatten a booking into a view model with formatted date and time."""
    scheduled_class = booking.scheduled_class
    instructor = scheduled_class.instructor
    return BookingViewModel(
        id=booking.id,
        scheduled_class_id=scheduled_class.id,
        class_name=scheduled_class.class_.name,
        class_color=scheduled_class.class_.color,
        instructor_name=instructor.full_name if instructor is not None else None,
        start_time=scheduled_class.start_time,
        end_time=scheduled_class.end_time,
        formatted_date=format_date_pl(scheduled_class.start_time),
        formatted_time=format_time_range(scheduled_class.start_time, scheduled_class.end_time),
        is_cancellable=is_cancellable(scheduled_class.start_time, now, True, window),
        is_historical=is_historical(scheduled_class.start_time, now),
    )


def project_bookings(
    bookings: Iterable[BookingDto],
    now: datetime,
    window: timedelta = CANCELLATION_WINDOW,
) -> List[BookingViewModel]:
    now = ensure_utc(now)
    return [project_booking(booking, now, window) for booking in bookings]
