"""Async client and view orchestration for the studio booking API."""

from .api_client import StudioApiClient
from .errors import ApiConnectionError, ApiError, AuthenticationRequiredError, StudioClientError
from .my_bookings import MyBookingsOrchestrator
from .notices import LoggingNotifier, Notifier
from .schedule import FetchState, ScheduleOrchestrator

__all__ = [
    "ApiConnectionError",
    "ApiError",
    "AuthenticationRequiredError",
    "FetchState",
    "LoggingNotifier",
    "MyBookingsOrchestrator",
    "Notifier",
    "ScheduleOrchestrator",
    "StudioApiClient",
    "StudioClientError",
]
