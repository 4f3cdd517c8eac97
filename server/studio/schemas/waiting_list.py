"""Waiting list Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel, Field

from .common import UtcDatetime


class CreateWaitingListEntryCommand(BaseModel):
    """Request schema for joining a class waiting list."""

    scheduled_class_id: UUID = Field(..., description="Scheduled class to wait for")


class WaitingListEntryDto(BaseModel):
    """Waiting list entry response schema."""

    id: UUID = Field(..., description="Unique waiting list entry ID")
    created_at: UtcDatetime = Field(..., description="Entry creation time (ISO 8601)")
    scheduled_class_id: UUID = Field(..., description="Associated scheduled class ID")

    model_config = {"from_attributes": True}
