"""FastAPI dependencies for database sessions, authentication, and the clock."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional

import jwt
from fastapi import Depends, Header
from jwt import PyJWTError
from sqlalchemy.ext.asyncio import AsyncSession

from .clock import Clock, system_clock
from .config import settings
from .database import get_async_session
from .exceptions import AuthenticationError, AuthorizationError

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class CurrentUser:
    """Identity extracted from a validated bearer token."""

    user_id: str
    email: Optional[str] = None
    roles: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Database dependency that provides async database sessions.

    Yields:
        AsyncSession: Database session
    """
    async for session in get_async_session():
        yield session


def get_clock() -> Clock:
    """Clock dependency; overridden in tests to freeze time."""
    return system_clock


def decode_access_token(token: str) -> CurrentUser:
    """
    Validate a HS256 bearer token and return the identity it carries.

    Raises:
        AuthenticationError: If the token is invalid, expired or has no subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=["HS256"]
        )
    except PyJWTError as e:
        raise AuthenticationError(detail=f"Token validation failed: {str(e)}") from e

    user_id = payload.get("sub")
    if user_id is None:
        raise AuthenticationError(detail="Invalid token payload")

    exp = payload.get("exp")
    if exp and datetime.now(timezone.utc).timestamp() > exp:
        raise AuthenticationError(detail="Token has expired")

    return CurrentUser(
        user_id=str(user_id),
        email=payload.get("email"),
        roles=tuple(payload.get("roles", [])),
    )


async def get_current_user(
    authorization: Optional[str] = Header(None, alias="Authorization")
) -> CurrentUser:
    """
    Authentication dependency that validates Bearer tokens.

    Args:
        authorization: Authorization header with Bearer token

    Returns:
        CurrentUser: User information from validated token

    Raises:
        AuthenticationError: If token is invalid or missing
    """
    if not authorization:
        raise AuthenticationError(detail="Authentication required. Please provide a valid JWT token.")

    try:
        scheme, token = authorization.split()
    except ValueError as e:
        raise AuthenticationError(detail="Invalid authorization header format") from e

    if scheme.lower() != "bearer":
        raise AuthenticationError(detail="Invalid authentication scheme")

    return decode_access_token(token)


async def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Authorization dependency for staff-only endpoints."""
    if not user.is_admin:
        raise AuthorizationError(required_permissions=[ADMIN_ROLE])
    return user


RequiredAuth = Depends(get_current_user)
AdminAuth = Depends(require_admin)
DatabaseSession = Depends(get_db)
ClockDependency = Depends(get_clock)
