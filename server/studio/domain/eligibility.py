"""
Time and eligibility rules for the booking lifecycle.

Every function is pure: the current time is always passed in, so one
projection pass or one service call evaluates all of its flags against the
same instant. Naive datetimes are taken to be UTC.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from ..core.clock import ensure_utc

CANCELLATION_WINDOW = timedelta(hours=8)


class UserStatus(str, Enum):
    """The acting user's relationship to a scheduled class."""
    BOOKED = "BOOKED"
    WAITING_LIST = "WAITING_LIST"
    AVAILABLE = "AVAILABLE"


def is_full(bookings_count: int, capacity: Optional[int]) -> bool:
    """A class is full once its bookings reach capacity; unlimited classes never fill."""
    return capacity is not None and bookings_count >= capacity


def has_started(start_time: datetime, now: datetime) -> bool:
    """A class starting exactly now has not started yet."""
    return ensure_utc(now) > ensure_utc(start_time)


def is_historical(start_time: datetime, now: datetime) -> bool:
    return ensure_utc(start_time) < ensure_utc(now)


def cancellation_deadline(start_time: datetime, window: timedelta = CANCELLATION_WINDOW) -> datetime:
    return ensure_utc(start_time) - window


def is_cancellable(
    start_time: datetime,
    now: datetime,
    has_record: bool,
    window: timedelta = CANCELLATION_WINDOW,
) -> bool:
    """
    Check whether a booking may still be cancelled.

    The deadline itself is already too late: cancellation requires
    ``now < start_time - window``.
    """
    return has_record and ensure_utc(now) < cancellation_deadline(start_time, window)


def is_bookable(full: bool, started: bool, user_status: UserStatus) -> bool:
    return not full and not started and user_status is UserStatus.AVAILABLE


def is_waitlistable(full: bool, started: bool, user_status: UserStatus) -> bool:
    return full and not started and user_status is UserStatus.AVAILABLE
