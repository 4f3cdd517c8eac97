"""Class definition model."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, Integer, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .scheduled_class import ScheduledClass


class ClassDefinition(Base):
    """A kind of class the studio offers, e.g. "Yoga for beginners"."""

    __tablename__ = "classes"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#6366F1")
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=60)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("length(name) > 0", name="ck_class_name_not_empty"),
        CheckConstraint("duration_minutes > 0", name="ck_class_duration_positive"),
    )

    scheduled_classes: Mapped[list["ScheduledClass"]] = relationship(
        "ScheduledClass",
        back_populates="class_definition",
        cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<ClassDefinition(id={self.id}, name='{self.name}', duration={self.duration_minutes})>"
