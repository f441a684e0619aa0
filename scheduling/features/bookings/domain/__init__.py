from .models import (  # noqa: F401
    BOOKING_CANCELLED,
    Attendee,
    Booking,
    BookingReference,
    CalendarEvent,
    Credential,
    EventTypeInfo,
    Person,
    SeatReference,
    WorkflowReminder,
)
