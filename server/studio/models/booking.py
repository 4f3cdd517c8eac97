"""Booking model definition."""

from datetime import datetime
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.database import Base

if TYPE_CHECKING:
    from .scheduled_class import ScheduledClass


class Booking(Base):
    """Booking entity representing a confirmed spot in a scheduled class."""

    __tablename__ = "bookings"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Owner (subject of the member's access token)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)

    # Foreign key to scheduled class
    scheduled_class_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("scheduled_classes.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    # Constraints
    __table_args__ = (
        CheckConstraint("length(user_id) > 0", name="ck_booking_user_id_not_empty"),
        UniqueConstraint("user_id", "scheduled_class_id", name="uq_booking_user_scheduled_class"),
    )

    # Relationships
    scheduled_class: Mapped["ScheduledClass"] = relationship("ScheduledClass", back_populates="bookings")

    def __repr__(self) -> str:
        return (
            f"<Booking(id={self.id}, user_id='{self.user_id}', "
            f"scheduled_class_id={self.scheduled_class_id}, created_at={self.created_at})>"
        )
