"""Global test configuration for the academy portal."""

import os
from datetime import datetime, UTC
from typing import Any
from uuid import uuid4

import pytest

from academy_portal.models.application import Application, ApplicationStatus
from academy_portal.models.content import WebsiteContent
from academy_portal.models.email import DeliveryResult, EmailTemplate
from academy_portal.models.event import CalendarEvent, Rsvp, RsvpStatus
from academy_portal.models.identity import AdminSession, AdminUser, UserIdentity
from academy_portal.models.profile import Profile
from academy_portal.services.notifier import EmailSender, NotificationPort


@pytest.fixture(autouse=True, scope="session")
def _set_test_env_vars():
    """Set dummy environment variables for Settings validation.

    This ensures tests don't require a real .env file or exported env vars.
    Only sets values that aren't already present, so real env vars take
    precedence (useful for integration tests).
    """
    defaults = {
        "SUPABASE_URL": "https://test.supabase.co",
        "SUPABASE_SERVICE_ROLE_KEY": "test-service-role-key",
    }
    originals = {}
    for key, value in defaults.items():
        if key not in os.environ:
            os.environ[key] = value
            originals[key] = None
        else:
            originals[key] = os.environ[key]

    # Clear the lru_cache on get_settings so it picks up the new env vars
    from academy_portal.config import get_settings
    get_settings.cache_clear()

    yield

    # Restore original env state
    for key, original in originals.items():
        if original is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original
    get_settings.cache_clear()


class FakeDatabase:
    """In-memory stand-in for DatabaseClient.

    Method names listed in ``fail_on`` raise RuntimeError when called, to
    simulate a downstream outage at a particular step.
    """

    def __init__(self) -> None:
        self.applications: dict[str, dict[str, Any]] = {}
        self.identities: dict[str, UserIdentity] = {}
        self.passwords: dict[str, str] = {}
        self.profiles: dict[str, dict[str, Any]] = {}
        self.events: dict[str, dict[str, Any]] = {}
        self.rsvps: dict[str, dict[str, Any]] = {}
        self.internships: list[dict[str, Any]] = []
        self.content: dict[str, dict[str, Any]] = {}
        self.admins: dict[str, AdminUser] = {}
        self.sessions: dict[str, AdminSession] = {}
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            raise RuntimeError(f"{name} unavailable")

    # Applications

    def add_application(self, **fields) -> Application:
        row = {"id": str(uuid4()), "status": "pending", **fields}
        self.applications[row["id"]] = row
        return Application(**row)

    async def get_application(self, application_id):
        self._call("get_application")
        row = self.applications.get(application_id)
        return Application(**row) if row else None

    async def find_application_by_email(self, email):
        self._call("find_application_by_email")
        for row in self.applications.values():
            if row.get("email") == email:
                return Application(**row)
        return None

    async def list_applications(self, status=None, limit=10):
        self._call("list_applications")
        rows = [
            row for row in self.applications.values()
            if status is None or row.get("status") == status.value
        ]
        return [Application(**row) for row in rows[:limit]]

    async def create_application(self, data):
        self._call("create_application")
        row = {"id": str(uuid4()), **data}
        self.applications[row["id"]] = row
        return Application(**row)

    async def update_application(self, application_id, data):
        self._call("update_application")
        row = self.applications.get(application_id)
        if row is None:
            return None
        row.update(data)
        return Application(**row)

    async def delete_application(self, application_id):
        self._call("delete_application")
        return self.applications.pop(application_id, None) is not None

    # Identities

    async def find_identity_by_email(self, email):
        self._call("find_identity_by_email")
        for identity in self.identities.values():
            if identity.email and identity.email.lower() == email.lower():
                return identity
        return None

    async def create_identity(self, email, password):
        self._call("create_identity")
        identity = UserIdentity(id=str(uuid4()), email=email)
        self.identities[identity.id] = identity
        self.passwords[identity.id] = password
        return identity

    async def update_identity_password(self, identity_id, password):
        self._call("update_identity_password")
        self.passwords[identity_id] = password

    async def delete_identity(self, identity_id):
        self._call("delete_identity")
        self.identities.pop(identity_id, None)
        self.passwords.pop(identity_id, None)

    # Profiles

    async def get_profile(self, user_id):
        self._call("get_profile")
        row = self.profiles.get(user_id)
        return Profile(**row) if row else None

    async def get_profile_by_email(self, email):
        self._call("get_profile_by_email")
        for row in self.profiles.values():
            if row.get("email") == email:
                return Profile(**row)
        return None

    async def insert_profile(self, data):
        self._call("insert_profile")
        self.profiles[data["user_id"]] = dict(data)
        return Profile(**data)

    async def update_profile(self, user_id, data):
        self._call("update_profile")
        row = self.profiles.get(user_id)
        if row is None:
            return None
        row.update(data)
        return Profile(**row)

    async def delete_profile(self, user_id):
        self._call("delete_profile")
        return self.profiles.pop(user_id, None) is not None

    # Calendar events

    def add_event(self, **fields) -> CalendarEvent:
        row = {
            "id": str(uuid4()),
            "title": "Market Outlook",
            "event_date": "2025-03-01",
            **fields,
        }
        self.events[row["id"]] = row
        return CalendarEvent(**row)

    async def get_calendar_event(self, event_id):
        self._call("get_calendar_event")
        row = self.events.get(event_id)
        return CalendarEvent(**row) if row else None

    async def create_calendar_event(self, data):
        self._call("create_calendar_event")
        row = {"id": str(uuid4()), **data}
        self.events[row["id"]] = row
        return dict(row)

    async def update_calendar_event(self, event_id, data):
        self._call("update_calendar_event")
        row = self.events.get(event_id)
        if row is None:
            return None
        row.update(data)
        return dict(row)

    # RSVPs

    async def find_rsvp(self, event_id, email):
        self._call("find_rsvp")
        for row in self.rsvps.values():
            if row["event_id"] == event_id and row["user_email"] == email:
                return Rsvp(**row)
        return None

    async def count_rsvps(self, event_id, status):
        self._call("count_rsvps")
        return sum(
            1 for row in self.rsvps.values()
            if row["event_id"] == event_id and row["status"] == status.value
        )

    async def create_rsvp(self, data):
        self._call("create_rsvp")
        row = {"id": str(uuid4()), "created_at": datetime.now(UTC), **data}
        self.rsvps[row["id"]] = row
        return Rsvp(**row)

    async def list_rsvps(self, event_id):
        self._call("list_rsvps")
        return [Rsvp(**row) for row in self.rsvps.values() if row["event_id"] == event_id]

    async def update_rsvp_status(self, rsvp_id, status):
        self._call("update_rsvp_status")
        row = self.rsvps.get(rsvp_id)
        if row is None:
            return None
        row["status"] = status.value
        return Rsvp(**row)

    async def delete_rsvp(self, rsvp_id):
        self._call("delete_rsvp")
        return self.rsvps.pop(rsvp_id, None) is not None

    # Internships and content

    async def create_internship(self, data):
        self._call("create_internship")
        row = {"id": str(uuid4()), **data}
        self.internships.append(row)
        return row

    async def list_website_content(self):
        self._call("list_website_content")
        return [WebsiteContent(**row) for row in self.content.values()]

    async def update_website_content(self, section_id, data):
        self._call("update_website_content")
        row = self.content.get(section_id)
        if row is None:
            return None
        row.update(data)
        return WebsiteContent(**row)

    async def insert_website_content(self, data):
        self._call("insert_website_content")
        row = {"id": str(uuid4()), **data}
        self.content[data["section_id"]] = row
        return WebsiteContent(**row)

    # Admins and sessions

    async def get_admin_by_username(self, username):
        self._call("get_admin_by_username")
        for admin in self.admins.values():
            if admin.username == username:
                return admin
        return None

    async def get_admin_by_id(self, admin_id):
        self._call("get_admin_by_id")
        return self.admins.get(admin_id)

    async def create_admin_session(self, session):
        self._call("create_admin_session")
        self.sessions[session.token_hash] = session

    async def get_admin_session(self, token_hash):
        self._call("get_admin_session")
        return self.sessions.get(token_hash)

    async def delete_admin_session(self, token_hash):
        self._call("delete_admin_session")
        self.sessions.pop(token_hash, None)

    async def delete_expired_admin_sessions(self):
        self._call("delete_expired_admin_sessions")
        now = datetime.now(UTC)
        self.sessions = {
            key: session for key, session in self.sessions.items()
            if session.expires_at > now
        }

    async def health_check(self):
        return {"healthy": True, "latency_ms": 0.1, "error": None}


class RecordingEmailSender(EmailSender):
    """EmailSender that keeps every template instead of sending it."""

    def __init__(self, succeed: bool = True) -> None:
        self.succeed = succeed
        self.sent: list[tuple[EmailTemplate, str]] = []

    async def send(self, template, recipient) -> DeliveryResult:
        self.sent.append((template, recipient))
        return self._make_result(
            template,
            recipient,
            success=self.succeed,
            error_message=None if self.succeed else "mailbox unavailable",
        )


class RaisingEmailSender(EmailSender):
    """EmailSender whose provider blows up."""

    async def send(self, template, recipient) -> DeliveryResult:
        raise RuntimeError("provider down")


@pytest.fixture
def db():
    return FakeDatabase()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def notifier(email_sender):
    return NotificationPort(email_sender)


@pytest.fixture
def jane_application(db):
    return db.add_application(
        first_name="Jane",
        last_name="Doe",
        email="jane@ucla.edu",
        uc_campus="UCLA",
        major="Finance",
        status=ApplicationStatus.PENDING.value,
    )
