"""Unit tests for the schedule and booking view-model projection."""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

from studio.domain.eligibility import UserStatus
from studio.domain.projector import project_booking, project_bookings, project_schedule
from studio.models.scheduled_class import ScheduledClassStatus
from studio.schemas.booking import (
    BookedClassSummaryDto,
    BookedInstructorDto,
    BookedScheduledClassDto,
    BookingDto,
)
from studio.schemas.scheduled_class import ClassSummaryDto, InstructorSummaryDto, ScheduledClassDto
from studio.schemas.waiting_list import WaitingListEntryDto

START = datetime(2024, 1, 20, 14, 0, tzinfo=timezone.utc)


def scheduled_class(capacity=10, bookings_count=0, start=START):
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


def booking_for(dto: ScheduledClassDto, instructor: bool = True) -> BookingDto:
    return BookingDto(
        id=uuid4(),
        created_at=START - timedelta(days=2),
        scheduled_class=BookedScheduledClassDto(
            id=dto.id,
            start_time=dto.start_time,
            end_time=dto.end_time,
            class_=BookedClassSummaryDto(id=dto.class_.id, name=dto.class_.name, color=dto.class_.color),
            instructor=BookedInstructorDto(full_name="Anna Kowalska") if instructor else None,
        ),
    )


class TestProjectSchedule:
    def test_class_with_open_spots_is_bookable(self):
        [vm] = project_schedule([scheduled_class(10, 5)], [], START - timedelta(hours=2))

        assert vm.is_full is False
        assert vm.has_started is False
        assert vm.user_status is UserStatus.AVAILABLE
        assert vm.is_bookable is True
        assert vm.is_waitlistable is False
        assert vm.is_cancellable is False

    def test_full_class_is_waitlistable(self):
        [vm] = project_schedule([scheduled_class(10, 10)], [], START - timedelta(hours=2))

        assert vm.is_full is True
        assert vm.is_bookable is False
        assert vm.is_waitlistable is True

    def test_matching_booking_marks_class_booked(self):
        dto = scheduled_class(10, 3)
        booking = booking_for(dto)

        [vm] = project_schedule([dto], [booking], START - timedelta(days=1))

        assert vm.user_status is UserStatus.BOOKED
        assert vm.booking_id == booking.id
        assert vm.is_bookable is False
        assert vm.is_waitlistable is False
        assert vm.is_cancellable is True

    def test_booked_class_inside_window_is_not_cancellable(self):
        dto = scheduled_class()
        [vm] = project_schedule([dto], [booking_for(dto)], START - timedelta(hours=8))

        assert vm.user_status is UserStatus.BOOKED
        assert vm.is_cancellable is False

    def test_started_class_is_neither_bookable_nor_waitlistable(self):
        [open_vm, full_vm] = project_schedule(
            [scheduled_class(10, 1), scheduled_class(1, 1)], [], START + timedelta(minutes=1)
        )

        assert open_vm.has_started and not open_vm.is_bookable
        assert full_vm.has_started and not full_vm.is_waitlistable

    def test_unlimited_class_is_never_full(self):
        [vm] = project_schedule([scheduled_class(None, 500)], [], START - timedelta(days=1))

        assert vm.is_full is False
        assert vm.is_bookable is True

    def test_order_is_preserved(self):
        classes = [scheduled_class(start=START + timedelta(hours=h)) for h in (3, 1, 2)]

        result = project_schedule(classes, [], START - timedelta(days=1))

        assert [vm.id for vm in result] == [c.id for c in classes]

    def test_waiting_list_entries_populate_waiting_status(self):
        dto = scheduled_class(2, 2)
        entry = WaitingListEntryDto(id=uuid4(), created_at=START - timedelta(days=1), scheduled_class_id=dto.id)

        [vm] = project_schedule([dto], [], START - timedelta(days=1), waiting_list_entries=[entry])

        assert vm.user_status is UserStatus.WAITING_LIST
        assert vm.waiting_list_entry_id == entry.id
        assert vm.is_waitlistable is False
        assert vm.is_cancellable is False

    def test_booking_takes_precedence_over_waiting_list_entry(self):
        dto = scheduled_class(2, 2)
        booking = booking_for(dto)
        entry = WaitingListEntryDto(id=uuid4(), created_at=START, scheduled_class_id=dto.id)

        [vm] = project_schedule([dto], [booking], START - timedelta(days=1), waiting_list_entries=[entry])

        assert vm.user_status is UserStatus.BOOKED
        assert vm.waiting_list_entry_id is None

    def test_view_model_keeps_class_fields(self):
        dto = scheduled_class(12, 4)
        [vm] = project_schedule([dto], [], START - timedelta(days=1))

        dumped = vm.model_dump(mode="json", by_alias=True)
        assert dumped["class"]["name"] == "Yoga"
        assert dumped["bookings_count"] == 4
        assert dumped["user_status"] == "AVAILABLE"


class TestProjectBooking:
    def test_formats_date_and_time_in_display_zone(self):
        vm = project_booking(booking_for(scheduled_class()), START - timedelta(days=1))

        assert vm.class_name == "Yoga"
        assert vm.instructor_name == "Anna Kowalska"
        assert vm.formatted_date == "20 stycznia 2024"
        assert vm.formatted_time == "15:00 - 16:00"

    def test_cancellable_more_than_eight_hours_ahead(self):
        vm = project_booking(booking_for(scheduled_class()), datetime(2024, 1, 20, 5, 59, tzinfo=timezone.utc))

        assert vm.is_cancellable is True
        assert vm.is_historical is False

    def test_not_cancellable_six_hours_ahead(self):
        vm = project_booking(booking_for(scheduled_class()), datetime(2024, 1, 20, 13, 30, tzinfo=timezone.utc))

        assert vm.is_cancellable is False
        assert vm.is_historical is False

    def test_class_starting_now_is_not_historical(self):
        vm = project_booking(booking_for(scheduled_class()), START)

        assert vm.is_historical is False

    def test_past_class_is_historical(self):
        vm = project_booking(booking_for(scheduled_class()), START + timedelta(hours=2))

        assert vm.is_historical is True
        assert vm.is_cancellable is False

    def test_missing_instructor(self):
        vm = project_booking(booking_for(scheduled_class(), instructor=False), START)

        assert vm.instructor_name is None

    def test_project_bookings_keeps_order(self):
        bookings = [booking_for(scheduled_class(start=START + timedelta(days=d))) for d in (2, 0, 1)]

        result = project_bookings(bookings, START - timedelta(days=1))

        assert [vm.id for vm in result] == [b.id for b in bookings]
