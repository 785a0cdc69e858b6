"""Services for the academy portal."""

from academy_portal.services.admin_sessions import AdminGate, LoginRateLimiter
from academy_portal.services.applications import ApplicationService
from academy_portal.services.calendar import CalendarService
from academy_portal.services.content import ContentService
from academy_portal.services.notifier import (
    EmailSender,
    LoggingEmailSender,
    NotificationPort,
    ResendEmailSender,
)
from academy_portal.services.provisioning import AccountProvisioner
from academy_portal.services.rsvp import RsvpService

__all__ = [
    "AccountProvisioner",
    "AdminGate",
    "ApplicationService",
    "CalendarService",
    "ContentService",
    "EmailSender",
    "LoggingEmailSender",
    "LoginRateLimiter",
    "NotificationPort",
    "ResendEmailSender",
    "RsvpService",
]
