"""
Booking seat routes.

Attendees cancel their own seat from the link in their confirmation
email, so the route is keyed by booking and seat UIDs rather than a session.
"""

from fastapi import APIRouter, HTTPException, status

from scheduling.features.bookings.domain import BOOKING_CANCELLED, CalendarEvent, Person
from scheduling.features.bookings.repository import BookingRepository, WebhookRepository
from scheduling.features.bookings.services.cancel_attendee_seat import (
    SeatCancellationError,
    cancel_attendee_seat,
)
from scheduling.infrastructure.observability.logging import get_logger
from scheduling.models.api.booking_request import CancelSeatRequest
from scheduling.models.api.booking_response import CancelSeatResponse

router = APIRouter(prefix="/bookings", tags=["bookings"])
logger = get_logger(__name__)


@router.post("/{booking_uid}/seats/cancel", response_model=CancelSeatResponse)
async def cancel_seat(booking_uid: str, request: CancelSeatRequest):
    """
    Cancel one seat of a seated booking.

    Raises:
        404: Booking or organizer not found
        400: Seat not part of the booking, or booking without organizer
        409: Booking has a single attendee and must be cancelled as a whole
    """
    booking = await BookingRepository.find_by_uid_for_seat_cancellation(booking_uid)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")

    organizer = await BookingRepository.find_organizer(booking.user_id) if booking.user_id else None
    event_type_info = await BookingRepository.find_event_type_info(booking.event_type_id)

    evt = CalendarEvent(
        type=event_type_info.event_title or booking.title,
        title=booking.title,
        start_time=booking.start_time,
        end_time=booking.end_time,
        organizer=organizer or Person(name="", email=""),
        attendees=[
            Person(name=a.name, email=a.email, time_zone=a.time_zone, locale=a.locale or "en")
            for a in booking.attendees
        ],
        uid=booking.uid,
        booking_id=booking.id,
        description=event_type_info.event_description,
    )

    webhooks = await WebhookRepository.find_subscribers(
        user_id=booking.user_id,
        event_type_id=booking.event_type_id,
        team_id=await BookingRepository.find_event_type_team_id(booking.event_type_id),
        trigger_event=BOOKING_CANCELLED,
    )

    try:
        result = await cancel_attendee_seat(
            booking,
            request.seat_reference_uid,
            webhooks=webhooks,
            evt=evt,
            event_type_info=event_type_info,
        )
    except SeatCancellationError as e:
        logger.warning("Seat cancellation rejected", booking_uid=booking_uid, reason=str(e))
        raise HTTPException(status_code=e.status_code, detail=str(e)) from e

    if result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Booking has a single attendee; cancel the booking instead",
        )

    return CancelSeatResponse(success=True, message="Seat cancelled")
