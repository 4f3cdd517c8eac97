"""Bookings router for member booking operations."""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Query, Response
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import Clock
from ..core.dependencies import ClockDependency, CurrentUser, DatabaseSession, RequiredAuth
from ..schemas.booking import (
    BookedClassSummaryDto,
    BookedInstructorDto,
    BookedScheduledClassDto,
    BookingDto,
    BookingStatusFilter,
    CreateBookingCommand,
)
from ..services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bookings", tags=["bookings"])

STATUS_QUERY = Query(None, description="UPCOMING or PAST; all bookings when omitted")


def _convert_booking_to_schema(booking_model) -> BookingDto:
    """Convert booking model to schema."""
    scheduled_class = booking_model.scheduled_class
    class_definition = scheduled_class.class_definition
    instructor = scheduled_class.instructor
    return BookingDto(
        id=booking_model.id,
        created_at=booking_model.created_at,
        scheduled_class=BookedScheduledClassDto(
            id=scheduled_class.id,
            start_time=scheduled_class.start_time,
            end_time=scheduled_class.end_time,
            class_=BookedClassSummaryDto(
                id=class_definition.id,
                name=class_definition.name,
                color=class_definition.color,
            ),
            instructor=(
                BookedInstructorDto(full_name=instructor.full_name)
                if instructor is not None else None
            ),
        ),
    )


@router.post("", response_model=BookingDto, status_code=201)
async def create_booking(
    command: CreateBookingCommand,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    """
    Book a spot in a scheduled class.

    Capacity is enforced atomically; losing a race for the last spot yields
    400 with code ``class_full``.
    """
    booking = await BookingService(db, clock).create_booking(user.user_id, command.scheduled_class_id)

    return JSONResponse(
        status_code=201,
        content=_convert_booking_to_schema(booking).model_dump(mode="json", by_alias=True),
    )


@router.get("/my", response_model=List[BookingDto])
async def list_my_bookings(
    status: Optional[BookingStatusFilter] = STATUS_QUERY,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    """List the caller's bookings, latest class first."""
    bookings = await BookingService(db, clock).get_user_bookings(user.user_id, status)

    logger.debug(
        "User bookings listed",
        extra={"user_id": user.user_id, "status": status.value if status else None, "count": len(bookings)}
    )

    return JSONResponse(
        status_code=200,
        content=[_convert_booking_to_schema(b).model_dump(mode="json", by_alias=True) for b in bookings],
    )


@router.delete("/{booking_id}", status_code=204, response_class=Response)
async def delete_booking(
    booking_id: UUID,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession,
    clock: Clock = ClockDependency,
) -> Response:
    """Cancel one of the caller's bookings while the cancellation window is open."""
    await BookingService(db, clock).delete_booking(user.user_id, booking_id)
    return Response(status_code=204)
