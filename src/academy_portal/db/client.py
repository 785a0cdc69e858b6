"""Supabase database client for portal persistence."""

import logging
import time
from datetime import UTC, datetime
from typing import Any

from supabase import create_client, Client

from academy_portal.config import get_settings
from academy_portal.models.application import Application, ApplicationStatus
from academy_portal.models.content import WebsiteContent
from academy_portal.models.event import CalendarEvent, Rsvp, RsvpStatus
from academy_portal.models.identity import AdminSession, AdminUser, UserIdentity
from academy_portal.models.profile import Profile

logger = logging.getLogger(__name__)

# Page size when scanning auth users for an email match
IDENTITY_PAGE_SIZE = 1000


class DatabaseClient:
    """Client for Supabase table and auth-admin operations.

    Uses the service-role key, so row level security is bypassed; callers
    are responsible for gating admin-only operations.
    """

    def __init__(self) -> None:
        settings = get_settings()
        self.client: Client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    # -------------------------------------------------------------------------
    # Applications
    # -------------------------------------------------------------------------

    async def get_application(self, application_id: str) -> Application | None:
        """Get an application by ID.

        Args:
            application_id: The application ID

        Returns:
            The application, or None if not found
        """
        result = (
            self.client.table("applications")
            .select("*")
            .eq("id", application_id)
            .execute()
        )
        if result.data:
            return Application(**result.data[0])
        return None

    async def find_application_by_email(self, email: str) -> Application | None:
        """Find an existing application submitted with this email."""
        result = (
            self.client.table("applications")
            .select("*")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if result.data:
            return Application(**result.data[0])
        return None

    async def list_applications(
        self,
        status: ApplicationStatus | None = None,
        limit: int = 10,
    ) -> list[Application]:
        """List applications, newest submission first.

        Args:
            status: Optional status filter
            limit: Maximum rows to return

        Returns:
            List of applications
        """
        query = (
            self.client.table("applications")
            .select("*")
            .order("submitted_at", desc=True)
        )
        if status:
            query = query.eq("status", status.value)
        result = query.limit(limit).execute()
        return [Application(**row) for row in result.data]

    async def create_application(self, data: dict[str, Any]) -> Application:
        """Insert a new application row."""
        result = self.client.table("applications").insert(data).execute()
        application = Application(**result.data[0])
        logger.debug(f"Created application {application.id}")
        return application

    async def update_application(
        self,
        application_id: str,
        data: dict[str, Any],
    ) -> None:
        """Update fields on an application."""
        self.client.table("applications").update(data).eq(
            "id", application_id
        ).execute()
        logger.debug(f"Updated application {application_id}: {sorted(data)}")

    async def delete_application(self, application_id: str) -> bool:
        """Delete an application.

        Returns:
            True if a row was deleted, False if none matched
        """
        result = (
            self.client.table("applications")
            .delete()
            .eq("id", application_id)
            .execute()
        )
        return len(result.data) > 0

    # -------------------------------------------------------------------------
    # Auth identities
    # -------------------------------------------------------------------------

    async def find_identity_by_email(self, email: str) -> UserIdentity | None:
        """Find an auth identity by email (case-insensitive)."""
        wanted = email.lower()
        page = 1
        while True:
            users = self.client.auth.admin.list_users(
                page=page,
                per_page=IDENTITY_PAGE_SIZE,
            )
            for user in users:
                if user.email and user.email.lower() == wanted:
                    return UserIdentity(id=str(user.id), email=user.email)
            if len(users) < IDENTITY_PAGE_SIZE:
                return None
            page += 1

    async def create_identity(self, email: str, password: str) -> UserIdentity:
        """Create a confirmed auth identity with a password."""
        response = self.client.auth.admin.create_user({
            "email": email,
            "password": password,
            "email_confirm": True,
        })
        return UserIdentity(id=str(response.user.id), email=response.user.email)

    async def update_identity_password(self, identity_id: str, password: str) -> None:
        """Reset the password on an existing auth identity."""
        self.client.auth.admin.update_user_by_id(identity_id, {"password": password})

    async def delete_identity(self, identity_id: str) -> None:
        """Delete an auth identity."""
        self.client.auth.admin.delete_user(identity_id)

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    async def get_profile(self, user_id: str) -> Profile | None:
        """Get the profile attached to an identity."""
        result = (
            self.client.table("profiles")
            .select("*")
            .eq("user_id", user_id)
            .execute()
        )
        if result.data:
            return Profile(**result.data[0])
        return None

    async def get_profile_by_email(self, email: str) -> Profile | None:
        """Get a profile by its email."""
        result = (
            self.client.table("profiles")
            .select("*")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if result.data:
            return Profile(**result.data[0])
        return None

    async def insert_profile(self, data: dict[str, Any]) -> Profile:
        """Insert a new profile row."""
        result = self.client.table("profiles").insert(data).execute()
        return Profile(**result.data[0])

    async def update_profile(self, user_id: str, data: dict[str, Any]) -> Profile | None:
        """Update a profile keyed by identity ID."""
        result = (
            self.client.table("profiles")
            .update(data)
            .eq("user_id", user_id)
            .execute()
        )
        if result.data:
            return Profile(**result.data[0])
        return None

    async def delete_profile(self, user_id: str) -> bool:
        """Delete the profile attached to an identity."""
        result = (
            self.client.table("profiles")
            .delete()
            .eq("user_id", user_id)
            .execute()
        )
        return len(result.data) > 0

    # -------------------------------------------------------------------------
    # Calendar events
    # -------------------------------------------------------------------------

    async def get_calendar_event(self, event_id: str) -> CalendarEvent | None:
        """Get a calendar event by ID."""
        result = (
            self.client.table("calendar_events")
            .select("*")
            .eq("id", event_id)
            .execute()
        )
        if result.data:
            return CalendarEvent(**result.data[0])
        return None

    async def create_calendar_event(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert a calendar event and return the stored row."""
        result = self.client.table("calendar_events").insert(data).execute()
        return result.data[0]

    async def update_calendar_event(
        self,
        event_id: str,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Update a calendar event and return the stored row."""
        result = (
            self.client.table("calendar_events")
            .update(data)
            .eq("id", event_id)
            .execute()
        )
        if result.data:
            return result.data[0]
        return None

    # -------------------------------------------------------------------------
    # RSVPs
    # -------------------------------------------------------------------------

    async def find_rsvp(self, event_id: str, email: str) -> Rsvp | None:
        """Find an attendee's RSVP for an event."""
        result = (
            self.client.table("event_rsvps")
            .select("*")
            .eq("event_id", event_id)
            .eq("user_email", email)
            .limit(1)
            .execute()
        )
        if result.data:
            return Rsvp(**result.data[0])
        return None

    async def count_rsvps(self, event_id: str, status: RsvpStatus) -> int:
        """Count RSVPs for an event in the given status."""
        result = (
            self.client.table("event_rsvps")
            .select("id", count="exact")
            .eq("event_id", event_id)
            .eq("status", status.value)
            .execute()
        )
        if result.count is not None:
            return result.count
        return len(result.data)

    async def create_rsvp(self, data: dict[str, Any]) -> Rsvp:
        """Insert an RSVP row."""
        result = self.client.table("event_rsvps").insert(data).execute()
        return Rsvp(**result.data[0])

    async def list_rsvps(self, event_id: str) -> list[Rsvp]:
        """List RSVPs for an event, newest first."""
        result = (
            self.client.table("event_rsvps")
            .select("*")
            .eq("event_id", event_id)
            .order("created_at", desc=True)
            .execute()
        )
        return [Rsvp(**row) for row in result.data]

    async def update_rsvp_status(self, rsvp_id: str, status: RsvpStatus) -> Rsvp | None:
        """Change an RSVP's status."""
        result = (
            self.client.table("event_rsvps")
            .update({"status": status.value})
            .eq("id", rsvp_id)
            .execute()
        )
        if result.data:
            return Rsvp(**result.data[0])
        return None

    async def delete_rsvp(self, rsvp_id: str) -> bool:
        """Delete an RSVP."""
        result = self.client.table("event_rsvps").delete().eq("id", rsvp_id).execute()
        return len(result.data) > 0

    # -------------------------------------------------------------------------
    # Internships
    # -------------------------------------------------------------------------

    async def create_internship(self, data: dict[str, Any]) -> dict[str, Any]:
        """Insert an internship posting."""
        result = self.client.table("uc_internships").insert(data).execute()
        return result.data[0]

    # -------------------------------------------------------------------------
    # Website content
    # -------------------------------------------------------------------------

    async def list_website_content(self) -> list[WebsiteContent]:
        """List all website sections."""
        result = (
            self.client.table("website_content")
            .select("*")
            .order("section_id")
            .execute()
        )
        return [WebsiteContent(**row) for row in result.data]

    async def update_website_content(
        self,
        section_id: str,
        data: dict[str, Any],
    ) -> WebsiteContent | None:
        """Update a section. Returns None when the section does not exist."""
        result = (
            self.client.table("website_content")
            .update(data)
            .eq("section_id", section_id)
            .execute()
        )
        if result.data:
            return WebsiteContent(**result.data[0])
        return None

    async def insert_website_content(self, data: dict[str, Any]) -> WebsiteContent:
        """Insert a new section."""
        result = self.client.table("website_content").insert(data).execute()
        return WebsiteContent(**result.data[0])

    # -------------------------------------------------------------------------
    # Admins and sessions
    # -------------------------------------------------------------------------

    async def get_admin_by_username(self, username: str) -> AdminUser | None:
        """Look up an admin user, including the password hash."""
        result = (
            self.client.table("admin_users")
            .select("*")
            .eq("username", username)
            .execute()
        )
        if result.data:
            return AdminUser(**result.data[0])
        return None

    async def get_admin_by_id(self, admin_id: str) -> AdminUser | None:
        """Look up an admin user by ID."""
        result = (
            self.client.table("admin_users")
            .select("*")
            .eq("id", admin_id)
            .execute()
        )
        if result.data:
            return AdminUser(**result.data[0])
        return None

    async def create_admin_session(self, session: AdminSession) -> None:
        """Persist an issued admin session."""
        self.client.table("admin_sessions").insert(
            session.model_dump(mode="json", exclude_none=True)
        ).execute()

    async def get_admin_session(self, token_hash: str) -> AdminSession | None:
        """Look up a session by token digest."""
        result = (
            self.client.table("admin_sessions")
            .select("*")
            .eq("token_hash", token_hash)
            .execute()
        )
        if result.data:
            return AdminSession(**result.data[0])
        return None

    async def delete_admin_session(self, token_hash: str) -> None:
        """Revoke a session."""
        self.client.table("admin_sessions").delete().eq(
            "token_hash", token_hash
        ).execute()

    async def delete_expired_admin_sessions(self) -> None:
        """Remove sessions past their expiry."""
        self.client.table("admin_sessions").delete().lt(
            "expires_at", datetime.now(UTC).isoformat()
        ).execute()

    # -------------------------------------------------------------------------
    # Health Check
    # -------------------------------------------------------------------------

    async def health_check(self) -> dict[str, Any]:
        """Check database connectivity and return health status.

        Returns:
            Dict with:
                - healthy: bool - whether the database is reachable
                - latency_ms: float - query latency in milliseconds
                - error: str | None - error message if unhealthy
        """
        start = time.perf_counter()
        try:
            self.client.table("applications").select("id").limit(1).execute()
            latency_ms = (time.perf_counter() - start) * 1000

            return {
                "healthy": True,
                "latency_ms": round(latency_ms, 2),
                "error": None,
            }
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            logger.error(f"Database health check failed: {e}")

            return {
                "healthy": False,
                "latency_ms": round(latency_ms, 2),
                "error": str(e),
            }
