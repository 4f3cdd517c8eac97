"""Derived, display-ready view models (never persisted)."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from ..domain.eligibility import UserStatus
from .common import UtcDatetime
from .scheduled_class import ScheduledClassDto


class ScheduleViewModel(ScheduledClassDto):
    """A scheduled class with the acting user's status and action flags."""

    user_status: UserStatus = Field(..., description="User's relationship to the class")
    booking_id: Optional[UUID] = Field(None, description="User's booking, if booked")
    waiting_list_entry_id: Optional[UUID] = Field(None, description="User's waiting list entry, if any")
    is_full: bool
    has_started: bool
    is_bookable: bool
    is_cancellable: bool
    is_waitlistable: bool


class BookingViewModel(BaseModel):
    """A booking flattened for the my-bookings view."""

    id: UUID
    scheduled_class_id: UUID
    class_name: str
    class_color: str
    instructor_name: Optional[str] = None
    start_time: UtcDatetime
    end_time: UtcDatetime
    formatted_date: str = Field(..., description='e.g. "20 stycznia 2024"')
    formatted_time: str = Field(..., description='e.g. "15:00 - 16:00"')
    is_cancellable: bool
    is_historical: bool
