"""In-memory stand-ins for the studio API used by orchestrator tests."""

import asyncio
from datetime import datetime, timedelta
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from studio.client.errors import ApiError, AuthenticationRequiredError
from studio.models.scheduled_class import ScheduledClassStatus
from studio.schemas.booking import (
    BookedClassSummaryDto,
    BookedInstructorDto,
    BookedScheduledClassDto,
    BookingDto,
    BookingStatusFilter,
)
from studio.schemas.scheduled_class import ClassSummaryDto, InstructorSummaryDto, ScheduledClassDto
from studio.schemas.waiting_list import WaitingListEntryDto


def class_dto(start: datetime, capacity: Optional[int] = 10, bookings_count: int = 0) -> ScheduledClassDto:
    return ScheduledClassDto(
        id=uuid4(),
        start_time=start,
        end_time=start + timedelta(hours=1),
        capacity=capacity,
        status=ScheduledClassStatus.SCHEDULED,
        class_=ClassSummaryDto(id=uuid4(), name="Yoga", color="#10B981", duration_minutes=60),
        instructor=InstructorSummaryDto(id=uuid4(), full_name="Anna Kowalska"),
        bookings_count=bookings_count,
    )


def booking_dto(dto: ScheduledClassDto, created_at: Optional[datetime] = None) -> BookingDto:
    return BookingDto(
        id=uuid4(),
        created_at=created_at or dto.start_time - timedelta(days=1),
        scheduled_class=BookedScheduledClassDto(
            id=dto.id,
            start_time=dto.start_time,
            end_time=dto.end_time,
            class_=BookedClassSummaryDto(id=dto.class_.id, name=dto.class_.name, color=dto.class_.color),
            instructor=BookedInstructorDto(full_name="Anna Kowalska"),
        ),
    )


class FakeStudioApi:
    """Serves canned classes and bookings; failures are injected per method."""

    def __init__(self, classes=(), bookings=()):
        self.classes: List[ScheduledClassDto] = list(classes)
        self.bookings: List[BookingDto] = list(bookings)
        self.anonymous = False
        self.failures: Dict[str, Exception] = {}
        self.gates: Dict[datetime, asyncio.Event] = {}
        self.calls: List[tuple] = []

    def _maybe_fail(self, method: str) -> None:
        error = self.failures.get(method)
        if error is not None:
            raise error

    async def list_scheduled_classes(self, start_time=None, end_time=None):
        self.calls.append(("list_scheduled_classes", start_time, end_time))
        gate = self.gates.get(start_time)
        if gate is not None:
            await gate.wait()
        self._maybe_fail("list_scheduled_classes")
        return [
            c for c in self.classes
            if (start_time is None or c.start_time >= start_time)
            and (end_time is None or c.start_time <= end_time)
        ]

    async def list_my_bookings(self, status: Optional[BookingStatusFilter] = None):
        self.calls.append(("list_my_bookings", status))
        if self.anonymous:
            raise AuthenticationRequiredError(401, detail="Authentication required")
        self._maybe_fail("list_my_bookings")
        return list(self.bookings)

    async def create_booking(self, scheduled_class_id: UUID):
        self.calls.append(("create_booking", scheduled_class_id))
        self._maybe_fail("create_booking")
        dto = next(c for c in self.classes if c.id == scheduled_class_id)
        booking = booking_dto(dto)
        self.bookings.append(booking)
        return booking

    async def delete_booking(self, booking_id: UUID):
        self.calls.append(("delete_booking", booking_id))
        self._maybe_fail("delete_booking")
        self.bookings = [b for b in self.bookings if b.id != booking_id]

    async def create_waiting_list_entry(self, scheduled_class_id: UUID):
        self.calls.append(("create_waiting_list_entry", scheduled_class_id))
        self._maybe_fail("create_waiting_list_entry")
        return WaitingListEntryDto(id=uuid4(), created_at=datetime.now(), scheduled_class_id=scheduled_class_id)

    def count(self, method: str) -> int:
        return sum(1 for call in self.calls if call[0] == method)


class RecordingNotifier:
    def __init__(self):
        self.notices: List[tuple] = []

    def success(self, title: str, description: str) -> None:
        self.notices.append(("success", title, description))

    def error(self, title: str, description: str) -> None:
        self.notices.append(("error", title, description))


def api_error(code: str, detail: Optional[str] = None, status_code: int = 400) -> ApiError:
    return ApiError(status_code, detail=detail, code=code, problem={"code": code})
