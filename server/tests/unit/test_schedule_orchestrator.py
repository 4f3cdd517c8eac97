"""Unit tests for the weekly schedule orchestrator."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from studio.client.errors import ApiConnectionError, ApiError
from studio.client.schedule import FetchState, ScheduleOrchestrator
from studio.core.clock import FixedClock
from studio.domain.eligibility import UserStatus

from ..conftest import NOW
from ..fakes import FakeStudioApi, RecordingNotifier, api_error, booking_dto, class_dto

WEEK_START = datetime(2024, 1, 15, tzinfo=timezone.utc)


@pytest.fixture
def notifier():
    return RecordingNotifier()


def orchestrator_for(api, notifier=None):
    return ScheduleOrchestrator(api, notifier=notifier, clock=FixedClock(NOW), tz_name="UTC")


def test_starts_on_current_week():
    orchestrator = orchestrator_for(FakeStudioApi())

    assert orchestrator.current_week_start == WEEK_START
    assert orchestrator.current_week_end == datetime(2024, 1, 21, 23, 59, 59, 999000, tzinfo=timezone.utc)
    assert orchestrator.state is FetchState.IDLE
    assert orchestrator.scheduled_classes == []


@pytest.mark.asyncio
async def test_refetch_projects_week_with_bookings():
    booked = class_dto(NOW + timedelta(days=1), bookings_count=1)
    full = class_dto(NOW + timedelta(days=2), capacity=2, bookings_count=2)
    next_week = class_dto(NOW + timedelta(days=8))
    api = FakeStudioApi(classes=[booked, full, next_week], bookings=[booking_dto(booked)])
    orchestrator = orchestrator_for(api)

    classes = await orchestrator.refetch()

    assert orchestrator.state is FetchState.SUCCESS
    assert [c.id for c in classes] == [booked.id, full.id]
    assert classes[0].user_status is UserStatus.BOOKED
    assert classes[0].is_cancellable is True
    assert classes[1].is_waitlistable is True
    assert ("list_scheduled_classes", WEEK_START, orchestrator.current_week_end) in api.calls
    assert api.count("list_my_bookings") == 1


@pytest.mark.asyncio
async def test_anonymous_member_sees_classes_without_bookings():
    api = FakeStudioApi(classes=[class_dto(NOW + timedelta(days=1))])
    api.anonymous = True
    orchestrator = orchestrator_for(api)

    classes = await orchestrator.refetch()

    assert orchestrator.state is FetchState.SUCCESS
    assert classes[0].user_status is UserStatus.AVAILABLE
    assert classes[0].is_bookable is True


@pytest.mark.asyncio
async def test_fetch_failure_moves_to_error_without_raising():
    api = FakeStudioApi(classes=[class_dto(NOW + timedelta(days=1))])
    orchestrator = orchestrator_for(api)
    await orchestrator.refetch()
    api.failures["list_scheduled_classes"] = ApiConnectionError("connection refused")

    classes = await orchestrator.refetch()

    assert orchestrator.state is FetchState.ERROR
    assert isinstance(orchestrator.error, ApiConnectionError)
    assert len(classes) == 1

    del api.failures["list_scheduled_classes"]
    await orchestrator.refetch()
    assert orchestrator.state is FetchState.SUCCESS
    assert orchestrator.error is None


@pytest.mark.asyncio
async def test_week_navigation_refetches():
    api = FakeStudioApi()
    orchestrator = orchestrator_for(api)

    await orchestrator.next_week()
    assert orchestrator.current_week_start == WEEK_START + timedelta(days=7)

    await orchestrator.previous_week()
    await orchestrator.previous_week()
    assert orchestrator.current_week_start == WEEK_START - timedelta(days=7)
    assert api.count("list_scheduled_classes") == 3


@pytest.mark.asyncio
async def test_next_week_crosses_end_of_summer_time():
    # Warsaw leaves summer time on 2025-10-26
    clock = FixedClock(datetime(2025, 10, 22, 12, tzinfo=timezone.utc))
    orchestrator = ScheduleOrchestrator(FakeStudioApi(), clock=clock, tz_name="Europe/Warsaw")
    assert orchestrator.current_week_start == datetime(2025, 10, 19, 22, tzinfo=timezone.utc)

    await orchestrator.next_week()
    assert orchestrator.current_week_start == datetime(2025, 10, 26, 23, tzinfo=timezone.utc)
    assert orchestrator.current_week_end == datetime(2025, 11, 2, 22, 59, 59, 999000, tzinfo=timezone.utc)

    await orchestrator.next_week()
    assert orchestrator.current_week_start == datetime(2025, 11, 2, 23, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_previous_week_crosses_start_of_summer_time():
    # Warsaw enters summer time on 2026-03-29
    clock = FixedClock(datetime(2026, 4, 1, 12, tzinfo=timezone.utc))
    orchestrator = ScheduleOrchestrator(FakeStudioApi(), clock=clock, tz_name="Europe/Warsaw")
    assert orchestrator.current_week_start == datetime(2026, 3, 29, 22, tzinfo=timezone.utc)

    await orchestrator.previous_week()
    assert orchestrator.current_week_start == datetime(2026, 3, 22, 23, tzinfo=timezone.utc)

    await orchestrator.next_week()
    assert orchestrator.current_week_start == datetime(2026, 3, 29, 22, tzinfo=timezone.utc)


@pytest.mark.asyncio
async def test_stale_week_response_is_dropped():
    this_week = class_dto(NOW + timedelta(days=1))
    following_week = class_dto(NOW + timedelta(days=8))
    api = FakeStudioApi(classes=[this_week, following_week])
    gate = asyncio.Event()
    api.gates[WEEK_START] = gate
    orchestrator = orchestrator_for(api)

    slow = asyncio.create_task(orchestrator.refetch())
    await asyncio.sleep(0)
    await orchestrator.next_week()
    gate.set()
    await slow

    assert orchestrator.current_week_start == WEEK_START + timedelta(days=7)
    assert [c.id for c in orchestrator.scheduled_classes] == [following_week.id]
    assert orchestrator.state is FetchState.SUCCESS


@pytest.mark.asyncio
async def test_select_class_tracks_details_dialog():
    api = FakeStudioApi(classes=[class_dto(NOW + timedelta(days=1))])
    orchestrator = orchestrator_for(api)
    [item] = await orchestrator.refetch()

    orchestrator.select_class(item)
    assert orchestrator.selected_class is item

    orchestrator.select_class(None)
    assert orchestrator.selected_class is None


@pytest.mark.asyncio
async def test_book_class_notifies_and_refetches(notifier):
    dto = class_dto(NOW + timedelta(days=1))
    api = FakeStudioApi(classes=[dto])
    orchestrator = orchestrator_for(api, notifier)

    booking = await orchestrator.book_class(dto.id)

    assert booking.scheduled_class.id == dto.id
    assert notifier.notices[0][:2] == ("success", "Booking confirmed")
    assert orchestrator.scheduled_classes[0].user_status is UserStatus.BOOKED
    assert orchestrator.scheduled_classes[0].booking_id == booking.id


@pytest.mark.asyncio
async def test_book_class_failure_uses_server_reason(notifier):
    dto = class_dto(NOW + timedelta(days=1), capacity=1, bookings_count=1)
    api = FakeStudioApi(classes=[dto])
    api.failures["create_booking"] = api_error("class_full", detail="This class is fully booked.")
    orchestrator = orchestrator_for(api, notifier)

    with pytest.raises(ApiError) as exc_info:
        await orchestrator.book_class(dto.id)

    assert exc_info.value.code == "class_full"
    assert notifier.notices == [("error", "Booking failed", "This class is fully booked.")]
    assert api.count("list_scheduled_classes") == 0


@pytest.mark.asyncio
async def test_cancel_failure_falls_back_to_generic_reason(notifier):
    api = FakeStudioApi()
    api.failures["delete_booking"] = ApiConnectionError()
    orchestrator = orchestrator_for(api, notifier)
    dto = class_dto(NOW + timedelta(days=1))

    with pytest.raises(ApiConnectionError):
        await orchestrator.cancel_booking(booking_dto(dto).id)

    assert notifier.notices == [("error", "Cancellation failed", "Could not cancel the booking.")]


@pytest.mark.asyncio
async def test_cancel_booking_refetches(notifier):
    dto = class_dto(NOW + timedelta(days=2))
    booking = booking_dto(dto)
    api = FakeStudioApi(classes=[dto], bookings=[booking])
    orchestrator = orchestrator_for(api, notifier)

    await orchestrator.cancel_booking(booking.id)

    assert notifier.notices[0][:2] == ("success", "Booking cancelled")
    assert orchestrator.scheduled_classes[0].user_status is UserStatus.AVAILABLE


@pytest.mark.asyncio
async def test_join_waiting_list(notifier):
    dto = class_dto(NOW + timedelta(days=1), capacity=1, bookings_count=1)
    api = FakeStudioApi(classes=[dto])
    orchestrator = orchestrator_for(api, notifier)

    entry = await orchestrator.join_waiting_list(dto.id)

    assert entry.scheduled_class_id == dto.id
    assert notifier.notices[0][:2] == ("success", "Added to waiting list")
    assert api.count("list_scheduled_classes") == 1


@pytest.mark.asyncio
async def test_join_waiting_list_failure(notifier):
    dto = class_dto(NOW + timedelta(days=1))
    api = FakeStudioApi(classes=[dto])
    api.failures["create_waiting_list_entry"] = api_error("class_not_full")
    orchestrator = orchestrator_for(api, notifier)

    with pytest.raises(ApiError):
        await orchestrator.join_waiting_list(dto.id)

    assert notifier.notices == [
        ("error", "Joining the waiting list failed", "Could not join the waiting list.")
    ]
