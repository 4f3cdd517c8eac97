"""Scheduled class model definition."""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .booking import Booking
    from .class_definition import ClassDefinition
    from .instructor import Instructor
    from .waiting_list import WaitingListEntry


class ScheduledClassStatus(str, Enum):
    """Scheduled class status enumeration."""
    SCHEDULED = "scheduled"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class ScheduledClass(Base):
    """One concrete, time-boxed occurrence of a class definition."""

    __tablename__ = "scheduled_classes"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Foreign keys
    class_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("classes.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    instructor_id: Mapped[UUID | None] = mapped_column(
        Uuid,
        ForeignKey("instructors.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )

    # Schedule details
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # NULL means unlimited
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    status: Mapped[ScheduledClassStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ScheduledClassStatus.SCHEDULED.value,
        index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_scheduled_class_end_after_start"),
        CheckConstraint("capacity IS NULL OR capacity > 0", name="ck_scheduled_class_capacity_positive"),
        CheckConstraint(
            "status IN ('scheduled', 'cancelled', 'completed')",
            name="ck_scheduled_class_status_valid"
        ),
    )

    # Relationships
    class_definition: Mapped["ClassDefinition"] = relationship("ClassDefinition", back_populates="scheduled_classes")
    instructor: Mapped["Instructor | None"] = relationship("Instructor", back_populates="scheduled_classes")
    bookings: Mapped[list["Booking"]] = relationship(
        "Booking",
        back_populates="scheduled_class",
        cascade="all, delete-orphan"
    )
    waiting_list_entries: Mapped[list["WaitingListEntry"]] = relationship(
        "WaitingListEntry",
        back_populates="scheduled_class",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return (
            f"<ScheduledClass(id={self.id}, class_id={self.class_id}, "
            f"start_time={self.start_time}, capacity={self.capacity}, status={self.status})>"
        )
