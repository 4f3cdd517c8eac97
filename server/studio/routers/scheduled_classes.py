"""Scheduled classes router for the public schedule and staff scheduling."""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.dependencies import AdminAuth, CurrentUser, DatabaseSession
from ..schemas.scheduled_class import (
    ClassSummaryDto,
    CreateScheduledClassCommand,
    InstructorSummaryDto,
    ScheduledClassDto,
    UpdateScheduledClassCommand,
)
from ..services.scheduled_class_service import ScheduledClassService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/scheduled-classes", tags=["scheduled-classes"])

START_TIME_QUERY = Query(None, description="Only classes starting at or after this time")
END_TIME_QUERY = Query(None, description="Only classes starting at or before this time")


def _convert_scheduled_class_to_schema(scheduled_class_model, bookings_count: int) -> ScheduledClassDto:
    """Convert scheduled class model and its bookings count to schema."""
    class_definition = scheduled_class_model.class_definition
    instructor = scheduled_class_model.instructor
    return ScheduledClassDto(
        id=scheduled_class_model.id,
        start_time=scheduled_class_model.start_time,
        end_time=scheduled_class_model.end_time,
        capacity=scheduled_class_model.capacity,
        status=scheduled_class_model.status,
        class_=ClassSummaryDto(
            id=class_definition.id,
            name=class_definition.name,
            color=class_definition.color,
            duration_minutes=class_definition.duration_minutes,
        ),
        instructor=(
            InstructorSummaryDto(id=instructor.id, full_name=instructor.full_name)
            if instructor is not None else None
        ),
        bookings_count=bookings_count,
    )


@router.get("", response_model=List[ScheduledClassDto])
async def list_scheduled_classes(
    start_time: Optional[datetime] = START_TIME_QUERY,
    end_time: Optional[datetime] = END_TIME_QUERY,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """
    List scheduled classes in a time window with their current bookings count.

    Public endpoint; no authentication required.
    """
    service = ScheduledClassService(db)
    rows = await service.list_scheduled_classes(start_time=start_time, end_time=end_time)

    logger.debug(
        "Scheduled classes listed",
        extra={
            "start_time": start_time.isoformat() if start_time else None,
            "end_time": end_time.isoformat() if end_time else None,
            "count": len(rows),
        }
    )

    return JSONResponse(
        status_code=200,
        content=[
            _convert_scheduled_class_to_schema(model, count).model_dump(mode="json", by_alias=True)
            for model, count in rows
        ],
    )


@router.post("", response_model=ScheduledClassDto, status_code=201)
async def create_scheduled_class(
    command: CreateScheduledClassCommand,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Schedule a class (staff only)."""
    service = ScheduledClassService(db)
    model, count = await service.create_scheduled_class(command)

    logger.info(
        "Scheduled class created via API",
        extra={"scheduled_class_id": str(model.id), "admin_user_id": user.user_id}
    )

    return JSONResponse(
        status_code=201,
        content=_convert_scheduled_class_to_schema(model, count).model_dump(mode="json", by_alias=True),
    )


@router.patch("/{scheduled_class_id}", response_model=ScheduledClassDto)
async def update_scheduled_class(
    scheduled_class_id: UUID,
    command: UpdateScheduledClassCommand,
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """Reschedule, cancel or resize a class (staff only)."""
    service = ScheduledClassService(db)
    model, count = await service.update_scheduled_class(scheduled_class_id, command)

    logger.info(
        "Scheduled class updated via API",
        extra={"scheduled_class_id": str(scheduled_class_id), "admin_user_id": user.user_id}
    )

    return JSONResponse(
        status_code=200,
        content=_convert_scheduled_class_to_schema(model, count).model_dump(mode="json", by_alias=True),
    )
