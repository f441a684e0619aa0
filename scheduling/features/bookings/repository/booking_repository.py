"""
Persistence helpers for bookings, seats and their integrations.
"""

import json
from collections.abc import Sequence

from scheduling.db.helpers import execute_query, fetch_all, fetch_one
from scheduling.features.bookings.domain import (
    Attendee,
    Booking,
    BookingReference,
    Credential,
    EventTypeInfo,
    Person,
    SeatReference,
    WorkflowReminder,
)
from scheduling.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class BookingRepository:
    """Queries backing seat cancellation."""

    @staticmethod
    async def find_by_uid_for_seat_cancellation(uid: str) -> Booking | None:
        row = await fetch_one(
            """
            SELECT id, uid, user_id, event_type_id, title, start_time, end_time,
                   sms_reminder_number
            FROM bookings
            WHERE uid = %s
            """,
            (uid,),
        )
        if not row:
            return None

        booking_id = row["id"]
        attendees = await fetch_all(
            "SELECT id, email, name, time_zone, locale FROM attendees WHERE booking_id = %s",
            (booking_id,),
        )
        seats = await fetch_all(
            "SELECT reference_uid, attendee_id FROM booking_seats WHERE booking_id = %s",
            (booking_id,),
        )
        references = await fetch_all(
            """
            SELECT id, type, uid, credential_id, external_calendar_id, meeting_id, meeting_url
            FROM booking_references
            WHERE booking_id = %s AND deleted IS NOT TRUE
            """,
            (booking_id,),
        )
        reminders = await fetch_all(
            "SELECT id, seat_reference_id FROM workflow_reminders WHERE booking_uid = %s",
            (uid,),
        )

        return Booking(
            id=booking_id,
            uid=row["uid"],
            user_id=row["user_id"],
            event_type_id=row["event_type_id"],
            title=row["title"],
            start_time=row["start_time"],
            end_time=row["end_time"],
            sms_reminder_number=row.get("sms_reminder_number"),
            attendees=[Attendee(**a) for a in attendees],
            seats_references=[SeatReference(**s) for s in seats],
            references=[BookingReference(**r) for r in references],
            workflow_reminders=[WorkflowReminder(**r) for r in reminders],
        )

    @staticmethod
    async def find_organizer(user_id: int) -> Person | None:
        row = await fetch_one(
            "SELECT name, email, time_zone, locale FROM users WHERE id = %s", (user_id,)
        )
        if not row:
            return None
        return Person(
            name=row["name"] or row["email"],
            email=row["email"],
            time_zone=row["time_zone"] or "UTC",
            locale=row["locale"] or "en",
        )

    @staticmethod
    async def find_event_type_info(event_type_id: int | None) -> EventTypeInfo:
        if event_type_id is None:
            return EventTypeInfo()
        row = await fetch_one(
            """
            SELECT title AS event_title, description AS event_description,
                   price, currency, length
            FROM event_types
            WHERE id = %s
            """,
            (event_type_id,),
        )
        return EventTypeInfo(**row) if row else EventTypeInfo()

    @staticmethod
    async def find_event_type_team_id(event_type_id: int | None) -> int | None:
        if event_type_id is None:
            return None
        row = await fetch_one("SELECT team_id FROM event_types WHERE id = %s", (event_type_id,))
        return row["team_id"] if row else None

    @staticmethod
    async def find_credential(credential_id: int) -> Credential | None:
        row = await fetch_one(
            "SELECT id, type, key, user_id FROM credentials WHERE id = %s AND invalid IS NOT TRUE",
            (credential_id,),
        )
        if not row:
            return None
        key = row["key"]
        if isinstance(key, str):
            key = json.loads(key)
        return Credential(id=row["id"], type=row["type"], key=key or {}, user_id=row["user_id"])

    @staticmethod
    async def delete_seat(reference_uid: str) -> int:
        return await execute_query(
            "DELETE FROM booking_seats WHERE reference_uid = %s", (reference_uid,)
        )

    @staticmethod
    async def delete_attendee(attendee_id: int) -> int:
        return await execute_query("DELETE FROM attendees WHERE id = %s", (attendee_id,))

    @staticmethod
    async def delete_workflow_reminders(reminders: Sequence[WorkflowReminder]) -> int:
        if not reminders:
            return 0
        deleted = await execute_query(
            "DELETE FROM workflow_reminders WHERE id = ANY(%s)", ([r.id for r in reminders],)
        )
        logger.debug("Workflow reminders deleted", count=deleted)
        return deleted
