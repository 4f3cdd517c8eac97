"""Admin router for the staff dashboard."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import Clock
from ..core.dependencies import AdminAuth, ClockDependency, CurrentUser, DatabaseSession
from ..schemas.admin import AdminDashboardDto
from ..services.admin_service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/dashboard", response_model=AdminDashboardDto)
async def get_dashboard(
    user: CurrentUser = AdminAuth,
    db: AsyncSession = DatabaseSession,
    clock: Clock = ClockDependency,
) -> JSONResponse:
    """Return occupancy, waiting list and popularity KPIs."""
    dashboard = await AdminService(db, clock).get_dashboard_kpis()

    logger.info("Admin dashboard retrieved", extra={"admin_user_id": user.user_id})

    return JSONResponse(status_code=200, content=dashboard.model_dump(mode="json"))
