"""Errors raised by the studio API client."""

from typing import Any, Dict, Optional


class StudioClientError(Exception):
    """Base error for studio API client failures."""


class ApiConnectionError(StudioClientError):
    """Raised when the API cannot be reached or times out."""


class ApiError(StudioClientError):
    """Raised when the API answers with an error status."""

    def __init__(
        self,
        status_code: int,
        detail: Optional[str] = None,
        code: Optional[str] = None,
        problem: Optional[Dict[str, Any]] = None,
    ):
        self.status_code = status_code
        self.detail = detail
        self.code = code
        self.problem = problem or {}
        super().__init__(detail or f"API request failed with status {status_code}")


class AuthenticationRequiredError(ApiError):
    """Raised when the API rejects the request as unauthenticated (401)."""
