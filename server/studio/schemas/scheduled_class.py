"""Scheduled class Pydantic schemas."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from ..models.scheduled_class import ScheduledClassStatus
from .common import UtcDatetime


class ClassSummaryDto(BaseModel):
    """Class definition details shown next to a scheduled class."""

    id: UUID = Field(..., description="Class definition ID")
    name: str = Field(..., description="Class name")
    color: str = Field(..., description="Display color (hex)")
    duration_minutes: Optional[int] = Field(None, description="Nominal duration in minutes")


class InstructorSummaryDto(BaseModel):
    """Instructor details shown next to a scheduled class."""

    id: Optional[UUID] = Field(None, description="Instructor ID")
    full_name: str = Field(..., description="Instructor full name")


class ScheduledClassDto(BaseModel):
    """Scheduled class with its class definition, instructor and occupancy."""

    id: UUID = Field(..., description="Scheduled class ID")
    start_time: UtcDatetime = Field(..., description="Class start (ISO 8601)")
    end_time: UtcDatetime = Field(..., description="Class end (ISO 8601)")
    capacity: Optional[int] = Field(None, ge=1, description="Maximum bookings, null for unlimited")
    status: ScheduledClassStatus = Field(..., description="Scheduling status")
    class_: ClassSummaryDto = Field(..., alias="class", description="Class definition")
    instructor: Optional[InstructorSummaryDto] = Field(None, description="Instructor, if assigned")
    bookings_count: int = Field(0, ge=0, description="Current number of bookings")

    model_config = {"populate_by_name": True}


class GetScheduledClassesQuery(BaseModel):
    """Query parameters for listing scheduled classes."""

    start_time: Optional[datetime] = Field(None, description="Only classes starting at or after this time")
    end_time: Optional[datetime] = Field(None, description="Only classes starting at or before this time")


class CreateScheduledClassCommand(BaseModel):
    """Command for scheduling a class (staff operation)."""

    class_id: UUID = Field(..., description="Class definition to schedule")
    instructor_id: Optional[UUID] = Field(None, description="Instructor leading the class")
    start_time: datetime = Field(..., description="Class start (ISO 8601)")
    end_time: datetime = Field(..., description="Class end (ISO 8601)")
    capacity: Optional[int] = Field(None, ge=1, description="Maximum bookings, null for unlimited")

    @model_validator(mode="after")
    def check_time_range(self) -> "CreateScheduledClassCommand":
        if self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class UpdateScheduledClassCommand(BaseModel):
    """Command for rescheduling or cancelling a class (staff operation)."""

    instructor_id: Optional[UUID] = Field(None, description="Instructor leading the class")
    status: Optional[ScheduledClassStatus] = Field(None, description="New status")
    capacity: Optional[int] = Field(None, ge=1, description="Maximum bookings, null for unlimited")
    start_time: Optional[datetime] = Field(None, description="New start (ISO 8601)")
    end_time: Optional[datetime] = Field(None, description="New end (ISO 8601)")

    @model_validator(mode="after")
    def check_required_fields_not_null(self) -> "UpdateScheduledClassCommand":
        # instructor_id and capacity may be cleared; these columns may not
        for name in ("status", "start_time", "end_time"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


class CreateClassDefinitionCommand(BaseModel):
    """Command for adding a class definition to the catalog."""

    name: str = Field(..., min_length=1, max_length=255, description="Class name")
    description: Optional[str] = Field(None, description="Class description")
    color: str = Field("#6366F1", pattern=r"^#[0-9A-Fa-f]{6}$", description="Display color (hex)")
    duration_minutes: int = Field(60, ge=1, le=600, description="Nominal duration in minutes")


class CreateInstructorCommand(BaseModel):
    """Command for adding an instructor."""

    full_name: str = Field(..., min_length=1, max_length=255, description="Instructor full name")
    email: Optional[str] = Field(None, max_length=255, description="Contact e-mail")
