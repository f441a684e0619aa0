from datetime import UTC, datetime

import httpx
import pytest

from scheduling.features.bookings.domain import BookingReference, CalendarEvent, Credential, Person
from scheduling.services.calendar.google_client import GoogleCalendarError, GoogleCalendarService
from scheduling.services.calendar.integrations import get_calendar, update_meeting


def _event() -> CalendarEvent:
    return CalendarEvent(
        type="Workshop",
        title="Workshop",
        start_time=datetime(2024, 6, 3, 15, 0, tzinfo=UTC),
        end_time=datetime(2024, 6, 3, 16, 0, tzinfo=UTC),
        organizer=Person(name="Org", email="org@example.com"),
        attendees=[Person(name="Ben", email="ben@example.com")],
        uid="booking-uid",
        booking_id=1,
    )


def test_get_calendar_requires_known_type_and_token():
    assert get_calendar(Credential(id=1, type="office365_calendar", key={"access_token": "t"})) is None
    assert get_calendar(Credential(id=1, type="google_calendar", key={})) is None
    assert isinstance(
        get_calendar(Credential(id=1, type="google_calendar", key={"access_token": "t"})),
        GoogleCalendarService,
    )


@pytest.mark.asyncio
async def test_update_event_patches_attendees():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = request.content
        return httpx.Response(200, json={"id": "gcal-1"})

    service = GoogleCalendarService("token", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    result = await service.update_event("gcal-1", _event(), "team@group.calendar.google.com")
    await service.close()

    assert result == {"id": "gcal-1"}
    assert seen["method"] == "PATCH"
    assert "/calendars/team@group.calendar.google.com/events/gcal-1" in seen["path"]
    assert b"ben@example.com" in seen["body"]


@pytest.mark.asyncio
async def test_update_event_error_raises():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": {"code": 404, "message": "Not Found"}})

    service = GoogleCalendarService("token", client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    with pytest.raises(GoogleCalendarError) as exc_info:
        await service.update_event("gcal-1", _event())
    await service.close()

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_video_update_echoes_room():
    result = await update_meeting(
        Credential(id=6, type="daily_video", key={}),
        _event(),
        BookingReference(id=2, type="daily_video", uid="room-1", meeting_id="m1", meeting_url="https://video/m1"),
    )

    assert result == {"type": "daily_video", "id": "m1", "url": "https://video/m1"}
