"""Calendar events and ICS export."""

import logging
import re
from datetime import datetime, time, timedelta, UTC
from typing import Any

from academy_portal.db.client import DatabaseClient
from academy_portal.exceptions import NotFoundError, ValidationError
from academy_portal.models.event import (
    CalendarEvent,
    CalendarEventCreate,
    CalendarEventUpdate,
    IcsAttendee,
)

logger = logging.getLogger(__name__)

ICS_PRODID = "-//UC Investment Academy//Event Calendar//EN"
ICS_UID_DOMAIN = "ucinvestmentacademy.com"
ICS_ORGANIZER = "ORGANIZER;CN=UC Investment Academy:MAILTO:uc.investment.academy@gmail.com"
DEFAULT_START = time(12, 0)
DEFAULT_DURATION = timedelta(hours=2)

# (trigger, description) for each reminder alarm
REMINDERS = [
    ("-PT24H", "Event reminder - 24 hours"),
    ("-PT1H", "Event reminder - 1 hour"),
    ("-PT15M", "Event starting soon"),
]


def _format_ics_datetime(value: datetime) -> str:
    return value.astimezone(UTC).strftime("%Y%m%dT%H%M%SZ")


def _escape_text(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )


def build_ics(
    event: CalendarEvent,
    attendee: IcsAttendee | None = None,
    now: datetime | None = None,
) -> str:
    """Render a single-event VCALENDAR.

    Event date and time are taken as UTC. Events without a time start at
    noon; every event lasts two hours.
    """
    now = now or datetime.now(UTC)
    start = datetime.combine(event.event_date, event.event_time or DEFAULT_START, tzinfo=UTC)
    end = start + DEFAULT_DURATION

    description = event.description or ""
    if attendee:
        description += f"\n\nRegistered as: {attendee.name}"
    if event.speakers:
        description += f"\n\nSpeakers: {', '.join(event.speakers)}"

    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{ICS_PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
        "BEGIN:VEVENT",
        f"UID:{event.id}@{ICS_UID_DOMAIN}",
        f"DTSTART:{_format_ics_datetime(start)}",
        f"DTEND:{_format_ics_datetime(end)}",
        f"DTSTAMP:{_format_ics_datetime(now)}",
        f"SUMMARY:{_escape_text(event.title)}",
        f"DESCRIPTION:{_escape_text(description)}",
        f"LOCATION:{_escape_text(event.location or 'TBD')}",
        ICS_ORGANIZER,
        "STATUS:CONFIRMED",
        "TRANSP:OPAQUE",
        "SEQUENCE:0",
        "CLASS:PUBLIC",
    ]
    if attendee:
        lines.append(
            f"ATTENDEE;CN={attendee.name};ROLE=REQ-PARTICIPANT;PARTSTAT=ACCEPTED;"
            f"RSVP=TRUE:MAILTO:{attendee.email}"
        )
    for trigger, label in REMINDERS:
        lines.extend([
            "BEGIN:VALARM",
            f"TRIGGER:{trigger}",
            f"DESCRIPTION:{label}",
            "ACTION:DISPLAY",
            "END:VALARM",
        ])
    lines.extend(["END:VEVENT", "END:VCALENDAR"])
    return "\r\n".join(lines) + "\r\n"


def ics_filename(event: CalendarEvent) -> str:
    """Download name, e.g. ``market_outlook_2025_2025-03-01.ics``."""
    slug = re.sub(r"[^a-z0-9]", "_", event.title, flags=re.IGNORECASE).lower()
    return f"{slug}_{event.event_date.isoformat()}.ics"


class CalendarService:
    """Admin management of calendar events."""

    def __init__(self, db: DatabaseClient) -> None:
        self.db = db

    async def create_event(
        self,
        data: CalendarEventCreate,
        created_by: str | None = None,
    ) -> dict[str, Any]:
        row = data.model_dump(mode="json", exclude_none=True)
        if created_by:
            row["created_by"] = created_by
        event = await self.db.create_calendar_event(row)
        logger.info(f"Calendar event created successfully: {event.get('id')}")
        return event

    async def update_event(self, data: CalendarEventUpdate) -> dict[str, Any]:
        """Update the fields present in the request.

        Raises:
            ValidationError: If the event ID or every field is missing
            NotFoundError: If no event has the ID
        """
        if not data.id:
            raise ValidationError("Event ID is required")

        changes = data.model_dump(mode="json", exclude_unset=True, exclude={"id"})
        if not changes:
            raise ValidationError("No fields to update")

        changes["updated_at"] = datetime.now(UTC).isoformat()
        event = await self.db.update_calendar_event(data.id, changes)
        if not event:
            raise NotFoundError("Event not found")
        logger.info(f"Calendar event updated successfully: {data.id}")
        return event

    async def generate_ics(
        self,
        event_id: str | None,
        attendee: IcsAttendee | None = None,
    ) -> tuple[str, str]:
        """Build the calendar file for an event.

        Returns:
            Tuple of (filename, ICS content)
        """
        if not event_id:
            raise ValidationError("Event ID is required")

        event = await self.db.get_calendar_event(event_id)
        if not event:
            raise NotFoundError("Event not found")

        return ics_filename(event), build_ics(event, attendee)
