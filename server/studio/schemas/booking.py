"""Booking-related Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from .common import UtcDatetime


class BookingStatusFilter(str, Enum):
    """Filter for a member's bookings relative to now."""
    UPCOMING = "UPCOMING"
    PAST = "PAST"


class CreateBookingCommand(BaseModel):
    """Request schema for booking a scheduled class."""

    scheduled_class_id: UUID = Field(..., description="Scheduled class to book")


class BookedClassSummaryDto(BaseModel):
    """Class definition details nested in a booking."""

    id: UUID = Field(..., description="Class definition ID")
    name: str = Field(..., description="Class name")
    color: str = Field(..., description="Display color (hex)")


class BookedInstructorDto(BaseModel):
    """Instructor details nested in a booking."""

    full_name: str = Field(..., description="Instructor full name")


class BookedScheduledClassDto(BaseModel):
    """Scheduled class details nested in a booking."""

    id: UUID = Field(..., description="Scheduled class ID")
    start_time: UtcDatetime = Field(..., description="Class start (ISO 8601)")
    end_time: UtcDatetime = Field(..., description="Class end (ISO 8601)")
    class_: BookedClassSummaryDto = Field(..., alias="class", description="Class definition")
    instructor: Optional[BookedInstructorDto] = Field(None, description="Instructor, if assigned")

    model_config = {"populate_by_name": True}


class BookingDto(BaseModel):
    """Booking response schema."""

    id: UUID = Field(..., description="Unique booking ID")
    created_at: UtcDatetime = Field(..., description="Booking creation time (ISO 8601)")
    scheduled_class: BookedScheduledClassDto = Field(..., description="Booked class")
