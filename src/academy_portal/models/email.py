"""Email models.

Each kind of outbound email is a typed template. Templates carry only the
data they need and know how to render their own subject and HTML body;
delivery is handled by an ``EmailSender``.
"""

from datetime import datetime, UTC
from enum import Enum
from html import escape
from typing import Annotated, Literal, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

ACADEMY_NAME = "UC Investment Academy"
CONTACT_ADDRESS = "uc.investment.academy@gmail.com"


class EmailKind(str, Enum):
    """Kinds of email the portal sends."""

    APPROVAL = "approval"
    DENIAL = "denial"
    RSVP_CONFIRMATION = "rsvp_confirmation"
    ADMIN_INVITE = "admin_invite"
    PASSWORD_SETUP = "password_setup"
    APPLICATION_CONFIRMATION = "application_confirmation"


def _wrap(heading: str, *paragraphs: str) -> str:
    body = "".join(f"<p>{p}</p>" for p in paragraphs)
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f"<h1>{ACADEMY_NAME}</h1><h2>{heading}</h2>{body}"
        f'<p>Questions? Contact <a href="mailto:{CONTACT_ADDRESS}">{CONTACT_ADDRESS}</a>.</p>'
        "</div>"
    )


class ApprovalEmail(BaseModel):
    """Application approved, with temporary login credentials."""

    kind: Literal[EmailKind.APPROVAL] = EmailKind.APPROVAL
    first_name: str
    last_name: str
    temp_username: str
    temp_password: str

    def subject(self) -> str:
        return f"Welcome to {ACADEMY_NAME} - Application Approved!"

    def html(self) -> str:
        return _wrap(
            f"Congratulations, {escape(self.first_name)}!",
            "Your application has been approved. Use these credentials to access "
            "your student dashboard:",
            f"<strong>Username:</strong> <code>{escape(self.temp_username)}</code><br>"
            f"<strong>Password:</strong> <code>{escape(self.temp_password)}</code>",
            "<strong>Important:</strong> Please change your password after your "
            "first login.",
        )


class DenialEmail(BaseModel):
    """Application not accepted."""

    kind: Literal[EmailKind.DENIAL] = EmailKind.DENIAL
    first_name: str
    last_name: str
    reason: str | None = None

    def subject(self) -> str:
        return f"{ACADEMY_NAME} - Application Update"

    def html(self) -> str:
        paragraphs = [
            "Thank you for your interest. After careful review we are unable to "
            "offer you a place at this time.",
        ]
        if self.reason:
            paragraphs.append(f"<strong>Reviewer comment:</strong> {escape(self.reason)}")
        return _wrap(f"Dear {escape(self.first_name)},", *paragraphs)


class RsvpConfirmation(BaseModel):
    """RSVP received, either confirmed or on the waitlist."""

    kind: Literal[EmailKind.RSVP_CONFIRMATION] = EmailKind.RSVP_CONFIRMATION
    attendee_name: str
    event_title: str
    event_date: str
    event_time: str | None = None
    location: str | None = None
    status: Literal["confirmed", "waitlisted"]

    def subject(self) -> str:
        if self.status == "waitlisted":
            return f"Waitlisted: {self.event_title}"
        return f"RSVP Confirmed: {self.event_title}"

    def html(self) -> str:
        when = self.event_date if not self.event_time else f"{self.event_date} {self.event_time}"
        if self.status == "waitlisted":
            lead = "The event is at capacity, so you have been added to the waitlist."
        else:
            lead = "Your spot is confirmed."
        return _wrap(
            f"Hi {escape(self.attendee_name)},",
            lead,
            f"<strong>{escape(self.event_title)}</strong><br>{escape(when)}"
            f"<br>{escape(self.location or 'TBD')}",
        )


class AdminInvite(BaseModel):
    """Invitation for a new administrator."""

    kind: Literal[EmailKind.ADMIN_INVITE] = EmailKind.ADMIN_INVITE
    full_name: str
    username: str
    invite_url: str

    def subject(self) -> str:
        return f"You're invited to administer {ACADEMY_NAME}"

    def html(self) -> str:
        return _wrap(
            f"Hi {escape(self.full_name)},",
            f"An admin account has been created for you with username "
            f"<code>{escape(self.username)}</code>.",
            f'<a href="{escape(self.invite_url)}">Accept the invitation</a>',
        )


class PasswordSetup(BaseModel):
    """Link to choose a password."""

    kind: Literal[EmailKind.PASSWORD_SETUP] = EmailKind.PASSWORD_SETUP
    first_name: str
    setup_url: str

    def subject(self) -> str:
        return f"{ACADEMY_NAME} - Set up your password"

    def html(self) -> str:
        return _wrap(
            f"Hi {escape(self.first_name)},",
            f'<a href="{escape(self.setup_url)}">Choose your password</a>',
            "This link expires in 24 hours.",
        )


class ApplicationConfirmation(BaseModel):
    """Submission received."""

    kind: Literal[EmailKind.APPLICATION_CONFIRMATION] = EmailKind.APPLICATION_CONFIRMATION
    first_name: str
    last_name: str

    def subject(self) -> str:
        return f"{ACADEMY_NAME} - Application Received"

    def html(self) -> str:
        return _wrap(
            f"Thank you, {escape(self.first_name)}!",
            "We have received your application and will be in touch once it has "
            "been reviewed.",
        )


EmailTemplate = Annotated[
    Union[
        ApprovalEmail,
        DenialEmail,
        RsvpConfirmation,
        AdminInvite,
        PasswordSetup,
        ApplicationConfirmation,
    ],
    Field(discriminator="kind"),
]


class DeliveryResult(BaseModel):
    """Result of an email send attempt."""

    id: UUID = Field(default_factory=uuid4)
    kind: EmailKind
    recipient: str
    success: bool
    sent_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    error_message: str | None = None
    external_id: str | None = None  # Message ID from the email provider
