"""Pydantic models for the academy portal - the contracts."""

from academy_portal.models.application import (
    ACADEMIC_FIELDS,
    Application,
    ApplicationCreate,
    ApplicationStatus,
    ListApplicationsRequest,
    RevocationResult,
    RevokeRequest,
    UpdateStatusRequest,
    UpdateStatusResponse,
)
from academy_portal.models.content import (
    ContentUpdates,
    InternshipCreate,
    UpdateContentRequest,
    WebsiteContent,
)
from academy_portal.models.email import (
    AdminInvite,
    ApplicationConfirmation,
    ApprovalEmail,
    DeliveryResult,
    DenialEmail,
    EmailKind,
    EmailTemplate,
    PasswordSetup,
    RsvpConfirmation,
)
from academy_portal.models.event import (
    Attendee,
    CalendarEvent,
    CalendarEventCreate,
    CalendarEventUpdate,
    IcsAttendee,
    IcsRequest,
    Rsvp,
    RsvpCreate,
    RsvpResult,
    RsvpStats,
    RsvpStatus,
    RsvpStatusUpdate,
)
from academy_portal.models.identity import (
    AdminSession,
    AdminUser,
    AuthContext,
    LoginRequest,
    LoginResponse,
    UserIdentity,
)
from academy_portal.models.profile import (
    Credentials,
    Profile,
    ResendCredentialsRequest,
)

__all__ = [
    "ACADEMIC_FIELDS",
    "AdminInvite",
    "AdminSession",
    "AdminUser",
    "Application",
    "ApplicationConfirmation",
    "ApplicationCreate",
    "ApplicationStatus",
    "ApprovalEmail",
    "Attendee",
    "AuthContext",
    "CalendarEvent",
    "CalendarEventCreate",
    "CalendarEventUpdate",
    "ContentUpdates",
    "Credentials",
    "DeliveryResult",
    "DenialEmail",
    "EmailKind",
    "EmailTemplate",
    "IcsAttendee",
    "IcsRequest",
    "InternshipCreate",
    "ListApplicationsRequest",
    "LoginRequest",
    "LoginResponse",
    "PasswordSetup",
    "Profile",
    "ResendCredentialsRequest",
    "RevocationResult",
    "RevokeRequest",
    "Rsvp",
    "RsvpConfirmation",
    "RsvpCreate",
    "RsvpResult",
    "RsvpStats",
    "RsvpStatus",
    "RsvpStatusUpdate",
    "UpdateContentRequest",
    "UpdateStatusRequest",
    "UpdateStatusResponse",
    "UserIdentity",
    "WebsiteContent",
]
