"""FastAPI routers package."""

from .admin import router as admin_router
from .bookings import router as bookings_router
from .health import router as health_router
from .metrics import router as metrics_router
from .scheduled_classes import router as scheduled_classes_router
from .waiting_list import router as waiting_list_router

__all__ = [
    "admin_router",
    "bookings_router",
    "health_router",
    "metrics_router",
    "scheduled_classes_router",
    "waiting_list_router",
]
