"""UC Investment Academy portal - applications, learner accounts and events."""

__version__ = "0.1.0"

from academy_portal.exceptions import (
    AuthError,
    ConflictError,
    DownstreamError,
    DuplicateRsvpError,
    IdentityError,
    NotFoundError,
    PortalError,
    ProfileWriteError,
    ValidationError,
)

__all__ = [
    "__version__",
    "AuthError",
    "ConflictError",
    "DownstreamError",
    "DuplicateRsvpError",
    "IdentityError",
    "NotFoundError",
    "PortalError",
    "ProfileWriteError",
    "ValidationError",
]
