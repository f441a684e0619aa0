"""
Domain models for bookings and their seats.

CalendarEvent is the provider-neutral shape of a booking that calendar,
video and webhook integrations consume.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

BOOKING_CANCELLED = "BOOKING_CANCELLED"


@dataclass(slots=True)
class Attendee:
    id: int
    email: str
    name: str
    time_zone: str = "UTC"
    locale: str | None = None


@dataclass(slots=True)
class SeatReference:
    reference_uid: str
    attendee_id: int


@dataclass(slots=True)
class BookingReference:
    """Link between a booking and an external calendar event or meeting."""

    id: int
    type: str  # e.g. "google_calendar", "daily_video"
    uid: str
    credential_id: int | None = None
    external_calendar_id: str | None = None
    meeting_id: str | None = None
    meeting_url: str | None = None


@dataclass(slots=True)
class Credential:
    id: int
    type: str
    key: dict[str, Any]
    user_id: int | None = None


@dataclass(slots=True)
class WorkflowReminder:
    id: int
    seat_reference_id: str | None = None


@dataclass(slots=True)
class Booking:
    id: int
    uid: str
    user_id: int | None
    event_type_id: int | None
    title: str
    start_time: datetime
    end_time: datetime
    attendees: list[Attendee] = field(default_factory=list)
    seats_references: list[SeatReference] = field(default_factory=list)
    references: list[BookingReference] = field(default_factory=list)
    workflow_reminders: list[WorkflowReminder] = field(default_factory=list)
    sms_reminder_number: str | None = None


@dataclass(slots=True)
class Person:
    name: str
    email: str
    time_zone: str = "UTC"
    locale: str = "en"

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "email": self.email,
            "timeZone": self.time_zone,
            "language": {"locale": self.locale},
        }


@dataclass(slots=True)
class CalendarEvent:
    type: str
    title: str
    start_time: datetime
    end_time: datetime
    organizer: Person
    attendees: list[Person]
    uid: str
    booking_id: int
    description: str | None = None
    location: str | None = None

    def without_attendee(self, email: str) -> "CalendarEvent":
        return replace(self, attendees=[a for a in self.attendees if a.email != email])

    def to_payload(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "title": self.title,
            "description": self.description,
            "location": self.location,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
            "organizer": self.organizer.to_payload(),
            "attendees": [a.to_payload() for a in self.attendees],
            "uid": self.uid,
            "bookingId": self.booking_id,
        }


@dataclass(slots=True)
class EventTypeInfo:
    event_title: str | None = None
    event_description: str | None = None
    price: int | None = None
    currency: str | None = None
    length: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return {
            "eventTitle": self.event_title,
            "eventDescription": self.event_description,
            "price": self.price,
            "currency": self.currency,
            "length": self.length,
        }
