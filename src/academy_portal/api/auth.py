"""API authentication dependencies."""

import logging
from datetime import timedelta
from typing import Annotated

from fastapi import Depends, Header

from academy_portal.config import get_settings
from academy_portal.db.client import DatabaseClient
from academy_portal.models.identity import AuthContext
from academy_portal.services.admin_sessions import AdminGate, LoginRateLimiter

logger = logging.getLogger(__name__)

_db_client: DatabaseClient | None = None
_rate_limiter: LoginRateLimiter | None = None


def get_db_client() -> DatabaseClient:
    """Get or create database client instance."""
    global _db_client
    if _db_client is None:
        _db_client = DatabaseClient()
    return _db_client


def get_rate_limiter() -> LoginRateLimiter:
    """Get or create the process-wide login rate limiter."""
    global _rate_limiter
    if _rate_limiter is None:
        settings = get_settings()
        _rate_limiter = LoginRateLimiter(
            max_attempts=settings.login_max_attempts,
            lockout_seconds=settings.login_lockout_seconds,
        )
    return _rate_limiter


def get_admin_gate(
    db: Annotated[DatabaseClient, Depends(get_db_client)],
    rate_limiter: Annotated[LoginRateLimiter, Depends(get_rate_limiter)],
) -> AdminGate:
    """Build the admin gate over the current database client."""
    settings = get_settings()
    return AdminGate(
        db=db,
        rate_limiter=rate_limiter,
        session_ttl=timedelta(minutes=settings.admin_session_ttl_minutes),
    )


async def get_admin_context(
    gate: Annotated[AdminGate, Depends(get_admin_gate)],
    x_admin_token: Annotated[str | None, Header()] = None,
) -> AuthContext:
    """Validate the X-Admin-Token header.

    Args:
        gate: The admin gate
        x_admin_token: Session token from the X-Admin-Token header

    Returns:
        AuthContext for the admin

    Raises:
        AuthError: If the token is missing, unknown or expired
    """
    auth = await gate.authenticate(x_admin_token)
    logger.debug(f"Auth context for admin={auth.admin.username}")
    return auth


# Type aliases for dependency injection
Admin = Annotated[AuthContext, Depends(get_admin_context)]
Gate = Annotated[AdminGate, Depends(get_admin_gate)]
