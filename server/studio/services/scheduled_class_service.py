"""Scheduled class service for the public schedule and staff scheduling."""

import logging
from datetime import datetime
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..core.clock import ensure_utc
from ..core.exceptions import NotFoundError, ValidationError
from ..models.booking import Booking
from ..models.class_definition import ClassDefinition
from ..models.instructor import Instructor
from ..models.scheduled_class import ScheduledClass, ScheduledClassStatus
from ..schemas.scheduled_class import (
    CreateClassDefinitionCommand,
    CreateInstructorCommand,
    CreateScheduledClassCommand,
    UpdateScheduledClassCommand,
)

logger = logging.getLogger(__name__)

ScheduledClassWithCount = Tuple[ScheduledClass, int]


class ScheduledClassService:
    """Service for scheduled class operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    def _with_bookings_count(self):
        return (
            select(ScheduledClass, func.count(Booking.id).label("bookings_count"))
            .outerjoin(Booking, Booking.scheduled_class_id == ScheduledClass.id)
            .options(
                selectinload(ScheduledClass.class_definition),
                selectinload(ScheduledClass.instructor),
            )
            .group_by(ScheduledClass.id)
        )

    async def list_scheduled_classes(
        self,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[ScheduledClassWithCount]:
        """
        List classes starting inside the window (both ends inclusive).

        Args:
            start_time: Earliest start time, if any
            end_time: Latest start time, if any

        Returns:
            (scheduled class, bookings count) pairs ordered by start time
        """
        stmt = self._with_bookings_count()

        if start_time is not None:
            stmt = stmt.where(ScheduledClass.start_time >= ensure_utc(start_time))
        if end_time is not None:
            stmt = stmt.where(ScheduledClass.start_time <= ensure_utc(end_time))

        stmt = stmt.order_by(ScheduledClass.start_time, ScheduledClass.id)
        result = await self.db.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]

    async def get_scheduled_class_with_count(self, scheduled_class_id: UUID) -> ScheduledClassWithCount:
        stmt = (
            self._with_bookings_count()
            .where(ScheduledClass.id == scheduled_class_id)
            .execution_options(populate_existing=True)
        )
        row = (await self.db.execute(stmt)).first()
        if row is None:
            logger.warning(
                "Scheduled class not found",
                extra={"scheduled_class_id": str(scheduled_class_id)}
            )
            raise NotFoundError(resource_type="scheduled_class", resource_id=str(scheduled_class_id))
        return row[0], row[1]

    async def create_scheduled_class(self, command: CreateScheduledClassCommand) -> ScheduledClassWithCount:
        """
        Schedule a class.

        Raises:
            NotFoundError: If the class definition or instructor does not exist
            ValidationError: If the class does not end after it starts
        """
        await self._ensure_exists(ClassDefinition, command.class_id, "class")
        if command.instructor_id is not None:
            await self._ensure_exists(Instructor, command.instructor_id, "instructor")
        self._validate_time_range(command.start_time, command.end_time)

        scheduled_class = ScheduledClass(
            class_id=command.class_id,
            instructor_id=command.instructor_id,
            start_time=ensure_utc(command.start_time),
            end_time=ensure_utc(command.end_time),
            capacity=command.capacity,
            status=ScheduledClassStatus.SCHEDULED.value,
        )
        self.db.add(scheduled_class)
        await self.db.commit()

        logger.info(
            "Scheduled class created successfully",
            extra={
                "scheduled_class_id": str(scheduled_class.id),
                "class_id": str(command.class_id),
                "start_time": scheduled_class.start_time.isoformat(),
                "capacity": command.capacity,
            }
        )
        return await self.get_scheduled_class_with_count(scheduled_class.id)

    async def update_scheduled_class(
        self,
        scheduled_class_id: UUID,
        command: UpdateScheduledClassCommand,
    ) -> ScheduledClassWithCount:
        """
        Reschedule, re-staff, resize or change the status of a class.

        Only the fields present in the command are changed.
        """
        scheduled_class = await self.db.get(ScheduledClass, scheduled_class_id)
        if scheduled_class is None:
            raise NotFoundError(resource_type="scheduled_class", resource_id=str(scheduled_class_id))

        changes = command.model_dump(exclude_unset=True)
        if changes.get("instructor_id") is not None:
            await self._ensure_exists(Instructor, changes["instructor_id"], "instructor")

        start_time = ensure_utc(changes.get("start_time") or scheduled_class.start_time)
        end_time = ensure_utc(changes.get("end_time") or scheduled_class.end_time)
        self._validate_time_range(start_time, end_time)

        for name, value in changes.items():
            if name in ("start_time", "end_time") and value is not None:
                value = ensure_utc(value)
            elif name == "status" and value is not None:
                value = ScheduledClassStatus(value).value
            setattr(scheduled_class, name, value)

        await self.db.commit()

        logger.info(
            "Scheduled class updated successfully",
            extra={"scheduled_class_id": str(scheduled_class_id), "fields": sorted(changes)}
        )
        return await self.get_scheduled_class_with_count(scheduled_class_id)

    async def complete_finished_classes(self, now: datetime, batch_size: int = 100) -> int:
        """
        Mark scheduled classes that have ended as completed.

        Returns:
            Number of classes completed
        """
        stmt = (
            select(ScheduledClass)
            .where(
                ScheduledClass.status == ScheduledClassStatus.SCHEDULED.value,
                ScheduledClass.end_time <= ensure_utc(now),
            )
            .order_by(ScheduledClass.end_time)
            .limit(batch_size)
        )
        result = await self.db.execute(stmt)
        finished = list(result.scalars())

        for scheduled_class in finished:
            scheduled_class.status = ScheduledClassStatus.COMPLETED.value

        if finished:
            await self.db.commit()
            logger.info("Completed finished classes", extra={"count": len(finished)})

        return len(finished)

    async def create_class_definition(self, command: CreateClassDefinitionCommand) -> ClassDefinition:
        class_definition = ClassDefinition(**command.model_dump())
        self.db.add(class_definition)
        await self.db.commit()
        await self.db.refresh(class_definition)

        logger.info(
            "Class definition created successfully",
            extra={"class_id": str(class_definition.id), "name": class_definition.name}
        )
        return class_definition

    async def create_instructor(self, command: CreateInstructorCommand) -> Instructor:
        instructor = Instructor(**command.model_dump())
        self.db.add(instructor)
        await self.db.commit()
        await self.db.refresh(instructor)

        logger.info(
            "Instructor created successfully",
            extra={"instructor_id": str(instructor.id), "full_name": instructor.full_name}
        )
        return instructor

    async def _ensure_exists(self, model, entity_id: UUID, resource_type: str) -> None:
        if await self.db.get(model, entity_id) is None:
            logger.warning(
                "Referenced entity not found",
                extra={"resource_type": resource_type, "resource_id": str(entity_id)}
            )
            raise NotFoundError(resource_type=resource_type, resource_id=str(entity_id))

    @staticmethod
    def _validate_time_range(start_time: datetime, end_time: datetime) -> None:
        if ensure_utc(end_time) <= ensure_utc(start_time):
            raise ValidationError(
                detail="Class must end after it starts",
                violations=[{"path": "end_time", "message": "end_time must be after start_time"}],
            )
