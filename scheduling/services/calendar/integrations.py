"""
Resolve calendar and video integrations from stored credentials.
"""

from typing import Any

from scheduling.features.bookings.domain import BookingReference, CalendarEvent, Credential
from scheduling.infrastructure.observability.logging import get_logger

from .google_client import GoogleCalendarService

logger = get_logger(__name__)

CALENDAR_ADAPTERS = {
    "google_calendar": GoogleCalendarService,
}

# Video rooms are not attendee-scoped, so an update only echoes the room
VIDEO_TYPES = {"daily_video", "google_video"}


def get_calendar(credential: Credential) -> GoogleCalendarService | None:
    adapter = CALENDAR_ADAPTERS.get(credential.type)
    if adapter is None:
        logger.warning("No calendar adapter for credential", credential_type=credential.type)
        return None

    access_token = credential.key.get("access_token")
    if not access_token:
        logger.warning("Calendar credential has no access token", credential_id=credential.id)
        return None
    return adapter(access_token)


async def update_calendar_event(
    calendar: GoogleCalendarService,
    uid: str,
    event: CalendarEvent,
    external_calendar_id: str | None,
) -> dict:
    try:
        return await calendar.update_event(uid, event, external_calendar_id)
    finally:
        await calendar.close()


async def update_meeting(
    credential: Credential, event: CalendarEvent, reference: BookingReference
) -> dict[str, Any] | None:
    if credential.type not in VIDEO_TYPES:
        logger.warning("No video adapter for credential", credential_type=credential.type)
        return None

    logger.debug(
        "Video meeting unchanged by attendee update",
        booking_uid=event.uid,
        meeting_id=reference.meeting_id,
    )
    return {
        "type": credential.type,
        "id": reference.meeting_id,
        "url": reference.meeting_url,
    }
