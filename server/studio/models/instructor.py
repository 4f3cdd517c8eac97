"""Instructor model."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .scheduled_class import ScheduledClass


class Instructor(Base):
    """Instructor who leads scheduled classes."""

    __tablename__ = "instructors"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint("length(full_name) > 0", name="ck_instructor_full_name_not_empty"),
    )

    scheduled_classes: Mapped[list["ScheduledClass"]] = relationship(
        "ScheduledClass",
        back_populates="instructor"
    )

    def __repr__(self) -> str:
        return f"<Instructor(id={self.id}, full_name='{self.full_name}')>"
