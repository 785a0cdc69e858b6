"""Event RSVP service with capacity and waitlist handling."""

import csv
import io
import logging

from postgrest.exceptions import APIError

from academy_portal.db.client import DatabaseClient
from academy_portal.exceptions import (
    DuplicateRsvpError,
    NotFoundError,
    ValidationError,
)
from academy_portal.models.email import RsvpConfirmation
from academy_portal.models.event import (
    Attendee,
    CalendarEvent,
    Rsvp,
    RsvpResult,
    RsvpStats,
    RsvpStatus,
)
from academy_portal.services.notifier import NotificationPort

logger = logging.getLogger(__name__)

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"

CSV_HEADERS = ["Name", "Email", "Phone", "Status", "RSVP Date", "Notes"]


def decide_rsvp_status(event: CalendarEvent, confirmed_count: int) -> RsvpStatus:
    """Pick the status for a new RSVP.

    Waitlisted only when the event has a capacity, it is reached and the
    event allows a waitlist. A full event without a waitlist still confirms;
    turning the attendee away is left to the caller.
    """
    at_capacity = (
        event.event_capacity is not None
        and confirmed_count >= event.event_capacity
    )
    if at_capacity and event.allow_waitlist:
        return RsvpStatus.WAITLISTED
    return RsvpStatus.CONFIRMED


class RsvpService:
    """Registers attendees for calendar events."""

    def __init__(self, db: DatabaseClient, notifier: NotificationPort) -> None:
        self.db = db
        self.notifier = notifier

    async def create_rsvp(self, event_id: str, attendee: Attendee) -> RsvpResult:
        """Register an attendee for an event.

        The capacity check reads the confirmed count and then inserts, with
        no lock in between; two concurrent registrations at the boundary can
        both be confirmed.

        Args:
            event_id: The event to register for
            attendee: Who is registering

        Returns:
            RsvpResult with the stored RSVP and its status

        Raises:
            ValidationError: If name or email is blank
            DuplicateRsvpError: If the email is already registered
            NotFoundError: If the event does not exist
        """
        if not attendee.user_name.strip() or not attendee.user_email.strip():
            raise ValidationError("Name and email are required")

        if await self.db.find_rsvp(event_id, attendee.user_email):
            raise DuplicateRsvpError(event_id, attendee.user_email)

        event = await self.db.get_calendar_event(event_id)
        if not event:
            raise NotFoundError("Event not found")

        confirmed_count = await self.db.count_rsvps(event_id, RsvpStatus.CONFIRMED)
        status = decide_rsvp_status(event, confirmed_count)

        try:
            rsvp = await self.db.create_rsvp({
                "event_id": event_id,
                **attendee.model_dump(include=set(Attendee.model_fields), exclude_none=True),
                "status": status.value,
            })
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise DuplicateRsvpError(event_id, attendee.user_email) from e
            raise

        logger.info(
            f"RSVP {rsvp.id} for event {event_id}: {status.value} "
            f"({confirmed_count}/{event.event_capacity or 'unlimited'} confirmed before)"
        )

        await self.notifier.notify(
            RsvpConfirmation(
                attendee_name=attendee.user_name,
                event_title=event.title,
                event_date=event.event_date.isoformat(),
                event_time=event.event_time.strftime("%H:%M") if event.event_time else None,
                location=event.location,
                status=status.value,
            ),
            attendee.user_email,
        )

        return RsvpResult(rsvp=rsvp, status=status)

    async def list_rsvps(self, event_id: str) -> list[Rsvp]:
        return await self.db.list_rsvps(event_id)

    async def update_status(self, rsvp_id: str, status: RsvpStatus) -> Rsvp:
        """Change an RSVP's status (e.g. promote from the waitlist)."""
        rsvp = await self.db.update_rsvp_status(rsvp_id, status)
        if not rsvp:
            raise NotFoundError("RSVP not found")
        logger.info(f"RSVP {rsvp_id} set to {status.value}")
        return rsvp

    async def delete(self, rsvp_id: str) -> None:
        if not await self.db.delete_rsvp(rsvp_id):
            raise NotFoundError("RSVP not found")
        logger.info(f"RSVP {rsvp_id} deleted")

    async def stats(self, event_id: str) -> RsvpStats:
        """Count RSVPs per status for an event."""
        rsvps = await self.db.list_rsvps(event_id)
        return RsvpStats(
            total=len(rsvps),
            confirmed=sum(1 for r in rsvps if r.status == RsvpStatus.CONFIRMED),
            waitlisted=sum(1 for r in rsvps if r.status == RsvpStatus.WAITLISTED),
            cancelled=sum(1 for r in rsvps if r.status == RsvpStatus.CANCELLED),
        )

    async def export_csv(self, event_id: str) -> str:
        """Render an event's RSVPs as CSV."""
        rsvps = await self.db.list_rsvps(event_id)
        return rsvps_to_csv(rsvps)


def rsvps_to_csv(rsvps: list[Rsvp]) -> str:
    """Render RSVPs with every field quoted."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for rsvp in rsvps:
        registered = rsvp.rsvp_date or rsvp.created_at
        writer.writerow([
            rsvp.user_name,
            rsvp.user_email,
            rsvp.user_phone or "",
            rsvp.status.value,
            registered.date().isoformat() if registered else "",
            rsvp.notes or "",
        ])
    return buffer.getvalue()
