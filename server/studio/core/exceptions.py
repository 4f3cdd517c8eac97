"""Custom exceptions following RFC 9457 Problem Details for HTTP APIs."""

import logging
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ProblemDetailsException(HTTPException):
    """
    Base exception class following RFC 9457 Problem Details for HTTP APIs.

    https://tools.ietf.org/rfc/rfc9457.txt
    """

    def __init__(
        self,
        status_code: int,
        title: str,
        detail: Optional[str] = None,
        type_uri: Optional[str] = None,
        instance: Optional[str] = None,
        extensions: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize Problem Details exception.

        Args:
            status_code: HTTP status code
            title: Short, human-readable summary of the problem type
            detail: Human-readable explanation specific to this occurrence
            type_uri: URI reference that identifies the problem type
            instance: URI reference that identifies the specific occurrence
            extensions: Additional problem-specific information
            headers: HTTP headers to include in response
        """
        self.status_code = status_code
        self.title = title
        self.type_uri = type_uri or f"about:blank#{status_code}"
        self.instance = instance
        self.extensions = extensions or {}

        self.problem_details = {
            "type": self.type_uri,
            "title": self.title,
            "status": self.status_code,
        }

        if detail:
            self.problem_details["detail"] = detail

        if self.instance:
            self.problem_details["instance"] = self.instance

        self.problem_details.update(self.extensions)

        super().__init__(
            status_code=status_code,
            detail=detail,
            headers=headers
        )


class ValidationError(ProblemDetailsException):
    """Exception for request validation errors."""

    def __init__(
        self,
        detail: str = "The request data failed validation",
        violations: Optional[List[Dict[str, str]]] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if violations:
            extensions["violations"] = violations

        super().__init__(
            status_code=400,
            title="Validation Error",
            detail=detail,
            type_uri="https://example.com/problems/validation-error",
            instance=instance,
            extensions=extensions,
        )


class AuthenticationError(ProblemDetailsException):
    """Exception for authentication errors."""

    def __init__(
        self,
        detail: str = "Authentication credentials are required",
        instance: Optional[str] = None,
    ):
        super().__init__(
            status_code=401,
            title="Authentication Required",
            detail=detail,
            type_uri="https://example.com/problems/authentication-required",
            instance=instance,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(ProblemDetailsException):
    """Exception for authorization errors."""

    def __init__(
        self,
        detail: str = "Insufficient permissions to access this resource",
        required_permissions: Optional[list] = None,
        instance: Optional[str] = None,
    ):
        extensions = {}
        if required_permissions:
            extensions["required_permissions"] = required_permissions

        super().__init__(
            status_code=403,
            title="Access Forbidden",
            detail=detail,
            type_uri="https://example.com/problems/access-forbidden",
            instance=instance,
            extensions=extensions,
        )


class NotFoundError(ProblemDetailsException):
    """Exception for resource not found errors."""

    def __init__(
        self,
        resource_type: str = "resource",
        resource_id: Optional[str] = None,
        detail: Optional[str] = None,
        instance: Optional[str] = None,
    ):
        if not detail:
            detail = f"The requested {resource_type}"
            if resource_id:
                detail += f" with ID '{resource_id}'"
            detail += " could not be found"

        extensions = {
            "resource_type": resource_type,
        }
        if resource_id:
            extensions["resource_id"] = resource_id

        super().__init__(
            status_code=404,
            title="Resource Not Found",
            detail=detail,
            type_uri="https://example.com/problems/resource-not-found",
            instance=instance,
            extensions=extensions,
        )


# Booking lifecycle exceptions

class BookingErrorCode(str, Enum):
    """Machine-readable codes for booking lifecycle failures."""
    CLASS_NOT_FOUND = "class_not_found"
    CLASS_NOT_AVAILABLE = "class_not_available"
    CLASS_FULL = "class_full"
    ALREADY_BOOKED = "already_booked"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    TOO_LATE_TO_CANCEL = "too_late_to_cancel"
    CLASS_NOT_FULL = "class_not_full"
    ALREADY_ON_WAITING_LIST = "already_on_waiting_list"
    DB_ERROR = "db_error"


class BookingError(ProblemDetailsException):
    """Base class for booking and waiting-list rule violations."""

    def __init__(
        self,
        code: BookingErrorCode,
        status_code: int,
        title: str,
        detail: str,
        extensions: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        super().__init__(
            status_code=status_code,
            title=title,
            detail=detail,
            type_uri=f"https://example.com/problems/{code.value.replace('_', '-')}",
            extensions={"code": code.value, **(extensions or {})},
        )


class ClassNotFoundError(BookingError):
    """The scheduled class does not exist."""

    def __init__(self, scheduled_class_id: str, code: BookingErrorCode = BookingErrorCode.CLASS_NOT_FOUND):
        super().__init__(
            code=code,
            status_code=404,
            title="Scheduled Class Not Found",
            detail=f"Scheduled class with ID {scheduled_class_id} not found",
            extensions={"resource_type": "scheduled_class", "resource_id": scheduled_class_id},
        )


class ClassNotAvailableError(BookingError):
    """The scheduled class is cancelled or already completed."""

    def __init__(self, scheduled_class_id: str, status: str):
        super().__init__(
            code=BookingErrorCode.CLASS_NOT_AVAILABLE,
            status_code=400,
            title="Class Not Available",
            detail="Class is not available for booking",
            extensions={"scheduled_class_id": scheduled_class_id, "class_status": status},
        )


class ClassFullError(BookingError):
    """No spots are left in the scheduled class."""

    def __init__(self, scheduled_class_id: str, capacity: Optional[int]):
        super().__init__(
            code=BookingErrorCode.CLASS_FULL,
            status_code=400,
            title="Class Full",
            detail="This class is fully booked. No available spots remaining.",
            extensions={"scheduled_class_id": scheduled_class_id, "capacity": capacity},
        )


class AlreadyBookedError(BookingError):
    """The user already holds a booking for the class."""

    def __init__(self, scheduled_class_id: str, detail: str = "You have already booked this class"):
        super().__init__(
            code=BookingErrorCode.ALREADY_BOOKED,
            status_code=400,
            title="Already Booked",
            detail=detail,
            extensions={"scheduled_class_id": scheduled_class_id},
        )


class BookingNotFoundError(BookingError):
    """The booking does not exist (or was deleted concurrently)."""

    def __init__(self, booking_id: str):
        super().__init__(
            code=BookingErrorCode.NOT_FOUND,
            status_code=404,
            title="Booking Not Found",
            detail=f"Booking with ID {booking_id} not found",
            extensions={"resource_type": "booking", "resource_id": booking_id},
        )


class BookingNotOwnedError(BookingError):
    """The booking belongs to a different user."""

    def __init__(self, booking_id: str):
        super().__init__(
            code=BookingErrorCode.UNAUTHORIZED,
            status_code=403,
            title="Access Forbidden",
            detail="You are not authorized to cancel this booking",
            extensions={"booking_id": booking_id},
        )


class TooLateToCancelError(BookingError):
    """The cancellation window for the booking has closed."""

    def __init__(self, booking_id: str, deadline: datetime, window_hours: int):
        super().__init__(
            code=BookingErrorCode.TOO_LATE_TO_CANCEL,
            status_code=400,
            title="Too Late To Cancel",
            detail=f"Bookings can only be cancelled more than {window_hours} hours before the class starts",
            extensions={"booking_id": booking_id, "cancellation_deadline": deadline.isoformat()},
        )


class ClassNotFullError(BookingError):
    """Waiting list rejected: the class is not scheduled or still has spots."""

    def __init__(self, scheduled_class_id: str, detail: str):
        super().__init__(
            code=BookingErrorCode.CLASS_NOT_FULL,
            status_code=400,
            title="Class Not Full",
            detail=detail,
            extensions={"scheduled_class_id": scheduled_class_id},
        )


class AlreadyOnWaitingListError(BookingError):
    """The user already holds a waiting-list entry for the class."""

    def __init__(self, scheduled_class_id: str):
        super().__init__(
            code=BookingErrorCode.ALREADY_ON_WAITING_LIST,
            status_code=400,
            title="Already On Waiting List",
            detail="You are already on the waiting list for this class",
            extensions={"scheduled_class_id": scheduled_class_id},
        )


class PersistenceError(BookingError):
    """The data store failed while performing a lifecycle operation."""

    def __init__(self, operation: str):
        super().__init__(
            code=BookingErrorCode.DB_ERROR,
            status_code=500,
            title="Internal Server Error",
            detail=f"A database error occurred while {operation}",
            extensions={
                "error_id": str(uuid.uuid4()),
                "timestamp": datetime.now(timezone.utc).isoformat(),
            },
        )


async def problem_details_handler(request: Request, exc: ProblemDetailsException) -> JSONResponse:
    """
    Exception handler for Problem Details exceptions.

    Args:
        request: FastAPI request object
        exc: Problem Details exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.problem_details,
        headers=exc.headers,
        media_type="application/problem+json",
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as a 400 problem with violations."""
    violations = [
        {
            "path": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg", "Invalid value"),
        }
        for error in exc.errors()
    ]
    problem = ValidationError(detail="Invalid request", violations=violations, instance=str(request.url.path))
    return await problem_details_handler(request, problem)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Generic exception handler that converts unhandled exceptions to Problem Details format.

    Args:
        request: FastAPI request object
        exc: Unhandled exception

    Returns:
        JSONResponse: Problem Details formatted response
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception",
        extra={"error_id": error_id, "path": request.url.path, "error": str(exc)},
        exc_info=exc,
    )

    problem_details = {
        "type": "https://example.com/problems/internal-server-error",
        "title": "Internal Server Error",
        "status": 500,
        "detail": "An unexpected error occurred while processing the request",
        "instance": str(request.url),
        "error_id": error_id,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    return JSONResponse(
        status_code=500,
        content=problem_details,
        media_type="application/problem+json",
    )
