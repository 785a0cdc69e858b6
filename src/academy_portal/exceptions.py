"""Custom exceptions for the academy portal.

Every exception carries the HTTP status it maps to, so handlers in
``academy_portal.main`` can render ``{"error": message}`` without knowing
which workflow raised it.
"""


class PortalError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ValidationError(PortalError):
    """Raised when a request is missing required fields."""

    status_code = 400


class AuthError(PortalError):
    """Raised when the admin token is missing, unknown or expired."""

    status_code = 401

    def __init__(self, message: str = "Unauthorized") -> None:
        super().__init__(message)


class NotFoundError(PortalError):
    """Raised when an application, profile or event does not exist."""

    status_code = 404


class ConflictError(PortalError):
    """Raised when a record with the same natural key already exists."""

    status_code = 409


class DuplicateRsvpError(ConflictError):
    """Raised when an attendee email already has an RSVP for the event."""

    def __init__(self, event_id: str, email: str) -> None:
        self.event_id = event_id
        self.email = email
        super().__init__("You have already registered for this event")


class RateLimitedError(PortalError):
    """Raised when login attempts exceed the lockout threshold."""

    status_code = 429

    def __init__(self, retry_after: int) -> None:
        self.retry_after = retry_after
        super().__init__("Too many login attempts. Try again later.")


class DownstreamError(PortalError):
    """Raised when the data store or email provider fails."""

    status_code = 500


class IdentityError(DownstreamError):
    """Raised when resolving, creating or updating an auth identity fails."""


class ProfileWriteError(DownstreamError):
    """Raised when the profile upsert fails."""
