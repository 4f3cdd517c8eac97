"""Async HTTP client for the studio booking API."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, TypeVar
from uuid import UUID

import httpx
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..core.clock import ensure_utc
from ..core.config import settings
from ..schemas.admin import AdminDashboardDto
from ..schemas.booking import BookingDto, BookingStatusFilter
from ..schemas.scheduled_class import ScheduledClassDto
from ..schemas.waiting_list import WaitingListEntryDto
from .errors import ApiConnectionError, ApiError, AuthenticationRequiredError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_scheduled_classes = TypeAdapter(list[ScheduledClassDto])
_bookings = TypeAdapter(list[BookingDto])
_waiting_list_entries = TypeAdapter(list[WaitingListEntryDto])


class StudioApiClient:
    """HTTP client for the studio booking API."""

    def __init__(
        self,
        base_url: str | None = None,
        token: str | None = None,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.token = token
        self.http = http or httpx.AsyncClient(
            base_url=base_url or settings.api_base_url,
            timeout=httpx.Timeout(connect=5.0, read=15.0, write=5.0, pool=5.0),
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "StudioApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"

        try:
            response = await self.http.request(method, path, params=params, json=json, headers=headers)
        except httpx.TimeoutException as exc:
            raise ApiConnectionError(f"Request to {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise ApiConnectionError(f"Request to {path} failed: {exc}") from exc

        if response.status_code >= 400:
            raise self._error_from_response(response)
        return response

    @staticmethod
    def _error_from_response(response: httpx.Response) -> ApiError:
        try:
            problem = response.json()
        except ValueError:
            problem = {}
        if not isinstance(problem, dict):
            problem = {}

        error_cls = AuthenticationRequiredError if response.status_code == 401 else ApiError
        error = error_cls(
            status_code=response.status_code,
            detail=problem.get("detail") or problem.get("message"),
            code=problem.get("code"),
            problem=problem,
        )
        logger.debug(
            "API request failed",
            extra={"status_code": response.status_code, "code": error.code, "path": response.request.url.path}
        )
        return error

    @staticmethod
    def _parse(adapter: TypeAdapter[T], response: httpx.Response) -> T:
        try:
            return adapter.validate_python(response.json())
        except (ValueError, PydanticValidationError) as exc:
            raise ApiError(response.status_code, detail="Malformed response from server") from exc

    async def list_scheduled_classes(
        self,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> list[ScheduledClassDto]:
        params = {}
        if start_time is not None:
            params["start_time"] = ensure_utc(start_time).isoformat()
        if end_time is not None:
            params["end_time"] = ensure_utc(end_time).isoformat()
        response = await self._request("GET", "/api/scheduled-classes", params=params)
        return self._parse(_scheduled_classes, response)

    async def list_my_bookings(self, status: Optional[BookingStatusFilter] = None) -> list[BookingDto]:
        params = {"status": status.value} if status is not None else None
        response = await self._request("GET", "/api/bookings/my", params=params)
        return self._parse(_bookings, response)

    async def create_booking(self, scheduled_class_id: UUID) -> BookingDto:
        response = await self._request(
            "POST", "/api/bookings", json={"scheduled_class_id": str(scheduled_class_id)}
        )
        return self._parse(TypeAdapter(BookingDto), response)

    async def delete_booking(self, booking_id: UUID) -> None:
        await self._request("DELETE", f"/api/bookings/{booking_id}")

    async def create_waiting_list_entry(self, scheduled_class_id: UUID) -> WaitingListEntryDto:
        response = await self._request(
            "POST", "/api/waiting-list-entries", json={"scheduled_class_id": str(scheduled_class_id)}
        )
        return self._parse(TypeAdapter(WaitingListEntryDto), response)

    async def list_my_waiting_list_entries(self) -> list[WaitingListEntryDto]:
        response = await self._request("GET", "/api/waiting-list-entries/my")
        return self._parse(_waiting_list_entries, response)

    async def get_dashboard(self) -> AdminDashboardDto:
        response = await self._request("GET", "/api/admin/dashboard")
        return self._parse(TypeAdapter(AdminDashboardDto), response)
