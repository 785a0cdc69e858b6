"""FastAPI routes for the academy portal.

Paths keep the names the front-end already calls (``update-application-
status`` and friends). Admin operations authenticate either with the
``adminToken`` body field or the ``X-Admin-Token`` header.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, Request, Response

from academy_portal import __version__
from academy_portal.api.auth import Admin, Gate, get_db_client
from academy_portal.config import get_settings
from academy_portal.db.client import DatabaseClient
from academy_portal.models.application import (
    Application,
    ApplicationCreate,
    ListApplicationsRequest,
    RevokeRequest,
    UpdateStatusRequest,
    UpdateStatusResponse,
)
from academy_portal.models.content import (
    InternshipCreate,
    UpdateContentRequest,
    WebsiteContent,
)
from academy_portal.models.event import (
    CalendarEventCreate,
    CalendarEventUpdate,
    IcsRequest,
    Rsvp,
    RsvpCreate,
    RsvpResult,
    RsvpStats,
    RsvpStatusUpdate,
)
from academy_portal.models.identity import LoginRequest, LoginResponse
from academy_portal.models.profile import ResendCredentialsRequest
from academy_portal.services.applications import ApplicationService
from academy_portal.services.calendar import CalendarService
from academy_portal.services.content import ContentService
from academy_portal.services.notifier import NotificationPort, build_email_sender
from academy_portal.services.rsvp import RsvpService

logger = logging.getLogger(__name__)

router = APIRouter()

# Dependency injection
_notifier: NotificationPort | None = None


def get_notifier() -> NotificationPort:
    """Get or create the email notification port."""
    global _notifier
    if _notifier is None:
        _notifier = NotificationPort(build_email_sender())
    return _notifier


def get_application_service(
    db: Annotated[DatabaseClient, Depends(get_db_client)],
    notifier: Annotated[NotificationPort, Depends(get_notifier)],
) -> ApplicationService:
    return ApplicationService(db, notifier)


def get_rsvp_service(
    db: Annotated[DatabaseClient, Depends(get_db_client)],
    notifier: Annotated[NotificationPort, Depends(get_notifier)],
) -> RsvpService:
    return RsvpService(db, notifier)


def get_calendar_service(
    db: Annotated[DatabaseClient, Depends(get_db_client)],
) -> CalendarService:
    return CalendarService(db)


def get_content_service(
    db: Annotated[DatabaseClient, Depends(get_db_client)],
) -> ContentService:
    return ContentService(db)


Applications = Annotated[ApplicationService, Depends(get_application_service)]
Rsvps = Annotated[RsvpService, Depends(get_rsvp_service)]
Calendar = Annotated[CalendarService, Depends(get_calendar_service)]
Content = Annotated[ContentService, Depends(get_content_service)]


# -------------------------------------------------------------------------
# Health
# -------------------------------------------------------------------------


@router.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": __version__,
    }


@router.get("/health/db")
async def health_db(
    db: Annotated[DatabaseClient, Depends(get_db_client)],
) -> dict:
    """Database connectivity check."""
    return await db.health_check()


# -------------------------------------------------------------------------
# Admin sessions
# -------------------------------------------------------------------------


@router.post("/admin-login", response_model=LoginResponse)
async def admin_login(
    body: LoginRequest,
    request: Request,
    gate: Gate,
) -> LoginResponse:
    """Exchange admin credentials for a session token."""
    client_ip = (
        request.headers.get("x-forwarded-for")
        or request.headers.get("x-real-ip")
        or (request.client.host if request.client else "unknown")
    )
    return await gate.login(body.username, body.password, client_ip=client_ip)


@router.post("/admin-logout")
async def admin_logout(
    auth: Admin,
    gate: Gate,
    x_admin_token: Annotated[str | None, Header()] = None,
) -> dict:
    """Revoke the presented session token."""
    await gate.logout(x_admin_token)
    logger.info(f"Admin {auth.admin.username} logged out")
    return {"success": True}


# -------------------------------------------------------------------------
# Applications
# -------------------------------------------------------------------------


@router.post("/submit-application", response_model=Application)
async def submit_application(
    body: ApplicationCreate,
    applications: Applications,
) -> Application:
    """Public application form submission."""
    return await applications.submit(body)


@router.post("/get-admin-applications")
async def get_admin_applications(
    body: ListApplicationsRequest,
    auth: Admin,
    applications: Applications,
) -> dict:
    """List the most recent applications, optionally by status."""
    settings = get_settings()
    rows = await applications.list_applications(
        status=body.status,
        limit=settings.applications_page_size,
    )
    return {"applications": [row.model_dump(mode="json") for row in rows]}


@router.post(
    "/update-application-status",
    response_model=UpdateStatusResponse,
    response_model_exclude_none=True,
)
async def update_application_status(
    body: UpdateStatusRequest,
    gate: Gate,
    applications: Applications,
    x_admin_token: Annotated[str | None, Header()] = None,
) -> UpdateStatusResponse:
    """Approve (provisioning a login) or reject an application."""
    auth = await gate.authenticate(body.admin_token or x_admin_token)
    return await applications.update_status(body, reviewed_by=auth.admin.id)


@router.post("/revoke-application-access")
async def revoke_application_access(
    body: RevokeRequest,
    gate: Gate,
    applications: Applications,
    x_admin_token: Annotated[str | None, Header()] = None,
) -> dict:
    """Delete an applicant's profile, identity and application."""
    auth = await gate.authenticate(body.admin_token or x_admin_token)
    logger.info(
        f"Admin {auth.admin.username} revoking application {body.application_id}"
    )
    result = await applications.revoke(body.application_id, body.email)
    return {
        "success": True,
        "message": "Access revoked and application deleted successfully",
        **result.model_dump(by_alias=True),
    }


@router.post("/resend-user-credentials")
async def resend_user_credentials(
    body: ResendCredentialsRequest,
    gate: Gate,
    applications: Applications,
    x_admin_token: Annotated[str | None, Header()] = None,
) -> dict:
    """Email a learner their temporary credentials again."""
    await gate.authenticate(body.admin_token or x_admin_token)
    await applications.resend_credentials(body.user_id)
    return {"success": True, "message": "Credentials email sent successfully"}


# -------------------------------------------------------------------------
# Calendar events
# -------------------------------------------------------------------------


@router.post("/create-calendar-event")
async def create_calendar_event(
    body: CalendarEventCreate,
    auth: Admin,
    calendar: Calendar,
) -> dict[str, Any]:
    """Create a calendar event and return the stored row."""
    return await calendar.create_event(body, created_by=auth.admin.id)


@router.post("/update-calendar-event")
async def update_calendar_event(
    body: CalendarEventUpdate,
    auth: Admin,
    calendar: Calendar,
) -> dict[str, Any]:
    """Update a calendar event and return the stored row."""
    return await calendar.update_event(body)


@router.post("/generate-ics-file")
async def generate_ics_file(
    body: IcsRequest,
    calendar: Calendar,
) -> Response:
    """Download an event as an .ics file."""
    filename, content = await calendar.generate_ics(body.event_id, body.user_info)
    return Response(
        content=content,
        media_type="text/calendar; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# -------------------------------------------------------------------------
# RSVPs
# -------------------------------------------------------------------------


@router.post("/create-rsvp", response_model=RsvpResult)
async def create_rsvp(
    body: RsvpCreate,
    rsvps: Rsvps,
) -> RsvpResult:
    """Register for an event; the response says confirmed or waitlisted."""
    return await rsvps.create_rsvp(body.event_id, body)


@router.get("/calendar-events/{event_id}/rsvps", response_model=list[Rsvp])
async def list_event_rsvps(
    event_id: str,
    auth: Admin,
    rsvps: Rsvps,
) -> list[Rsvp]:
    return await rsvps.list_rsvps(event_id)


@router.get("/calendar-events/{event_id}/rsvps/stats", response_model=RsvpStats)
async def event_rsvp_stats(
    event_id: str,
    auth: Admin,
    rsvps: Rsvps,
) -> RsvpStats:
    return await rsvps.stats(event_id)


@router.get("/calendar-events/{event_id}/rsvps/export")
async def export_event_rsvps(
    event_id: str,
    auth: Admin,
    rsvps: Rsvps,
) -> Response:
    """Download an event's RSVPs as CSV."""
    content = await rsvps.export_csv(event_id)
    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="event-rsvps-{event_id}.csv"'
        },
    )


@router.patch("/rsvps/{rsvp_id}", response_model=Rsvp)
async def update_rsvp(
    rsvp_id: str,
    body: RsvpStatusUpdate,
    auth: Admin,
    rsvps: Rsvps,
) -> Rsvp:
    return await rsvps.update_status(rsvp_id, body.status)


@router.delete("/rsvps/{rsvp_id}")
async def delete_rsvp(
    rsvp_id: str,
    auth: Admin,
    rsvps: Rsvps,
) -> dict:
    await rsvps.delete(rsvp_id)
    return {"success": True}


# -------------------------------------------------------------------------
# Internships and website content
# -------------------------------------------------------------------------


@router.post("/create-internship")
async def create_internship(
    body: InternshipCreate,
    auth: Admin,
    content: Content,
) -> dict:
    """Post an internship."""
    internship = await content.create_internship(body, created_by=auth.admin.id)
    return {"data": internship}


@router.get("/website-content", response_model=list[WebsiteContent])
async def list_website_content(content: Content) -> list[WebsiteContent]:
    """Public website sections."""
    return await content.list_sections()


@router.post("/update-website-content")
async def update_website_content(
    body: UpdateContentRequest,
    auth: Admin,
    content: Content,
) -> dict:
    """Update or create a website section."""
    section = await content.update_section(
        body.section_id,
        body.updates,
        updated_by=auth.admin.id,
    )
    return {"success": True, "data": section.model_dump(mode="json")}
