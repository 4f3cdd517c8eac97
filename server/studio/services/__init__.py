"""Service layer package."""

from .admin_service import AdminService
from .booking_service import BookingService
from .scheduled_class_service import ScheduledClassService
from .waiting_list_service import WaitingListService

__all__ = [
    "AdminService",
    "BookingService",
    "ScheduledClassService",
    "WaitingListService",
]
