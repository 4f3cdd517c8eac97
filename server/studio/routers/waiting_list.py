"""Waiting list router."""

import logging
from typing import List

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import Clock
from ..core.dependencies import ClockDependency, CurrentUser, DatabaseSession, RequiredAuth
from ..schemas.waiting_list import CreateWaitingListEntryCommand, WaitingListEntryDto
from ..services.waiting_list_service import WaitingListService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/waiting-list-entries", tags=["waiting-list"])


@router.post("", response_model=WaitingListEntryDto, status_code=201)
async def create_waiting_list_entry(
    command: CreateWaitingListEntryCommand,
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    """Join the waiting list of a full class."""
    entry = await WaitingListService(db, clock).create_waiting_list_entry(
        user.user_id, command.scheduled_class_id
    )

    return JSONResponse(
        status_code=201,
        content=WaitingListEntryDto.model_validate(entry).model_dump(mode="json"),
    )


@router.get("/my", response_model=List[WaitingListEntryDto])
async def list_my_waiting_list_entries(
    user: CurrentUser = RequiredAuth,
    db: AsyncSession = DatabaseSession,
) -> JSONResponse:
    """List the caller's waiting list entries."""
    entries = await WaitingListService(db).get_user_waiting_list_entries(user.user_id)

    return JSONResponse(
        status_code=200,
        content=[WaitingListEntryDto.model_validate(e).model_dump(mode="json") for e in entries],
    )
