"""Calendar event and RSVP models."""

from datetime import date, datetime, time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class RsvpStatus(str, Enum):
    """Registration state of an RSVP."""

    CONFIRMED = "confirmed"
    WAITLISTED = "waitlisted"
    CANCELLED = "cancelled"


class CalendarEvent(BaseModel):
    """Persisted calendar event."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    event_date: date
    event_time: time | None = None
    event_type: str | None = None
    description: str | None = None
    location: str | None = None
    signup_url: str | None = None
    speakers: list[str] | None = None
    status: str | None = None
    event_capacity: int | None = None  # None = unlimited
    allow_waitlist: bool = False
    created_by: str | None = None


class CalendarEventCreate(BaseModel):
    """Admin request to create an event."""

    model_config = ConfigDict(extra="allow")

    title: str
    event_date: date
    event_time: time | None = None
    event_type: str | None = None
    description: str | None = None
    location: str | None = None
    signup_url: str | None = None
    speakers: list[str] | None = None
    status: str | None = None
    event_capacity: int | None = None
    allow_waitlist: bool | None = None


class CalendarEventUpdate(BaseModel):
    """Admin request to update an event. Unset fields are left alone."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    title: str | None = None
    event_date: date | None = None
    event_time: time | None = None
    event_type: str | None = None
    description: str | None = None
    location: str | None = None
    signup_url: str | None = None
    speakers: list[str] | None = None
    status: str | None = None
    event_capacity: int | None = None
    allow_waitlist: bool | None = None


class Attendee(BaseModel):
    """Person registering for an event."""

    user_name: str
    user_email: str
    user_phone: str | None = None
    notes: str | None = None


class RsvpCreate(Attendee):
    """Public RSVP submission."""

    model_config = ConfigDict(populate_by_name=True)

    event_id: str = Field(alias="eventId")


class Rsvp(BaseModel):
    """Persisted RSVP row."""

    model_config = ConfigDict(extra="allow")

    id: str
    event_id: str
    user_name: str
    user_email: str
    user_phone: str | None = None
    status: RsvpStatus
    notes: str | None = None
    rsvp_date: datetime | None = None
    created_at: datetime | None = None


class RsvpResult(BaseModel):
    """Outcome of an RSVP submission."""

    rsvp: Rsvp
    status: RsvpStatus


class RsvpStatusUpdate(BaseModel):
    """Admin change of an RSVP's status."""

    status: RsvpStatus


class RsvpStats(BaseModel):
    """Per-event RSVP counts."""

    total: int = 0
    confirmed: int = 0
    waitlisted: int = 0
    cancelled: int = 0


class IcsAttendee(BaseModel):
    """Registrant details embedded in an ICS export."""

    name: str
    email: str


class IcsRequest(BaseModel):
    """Request for a calendar file."""

    event_id: str | None = None
    user_info: IcsAttendee | None = None
