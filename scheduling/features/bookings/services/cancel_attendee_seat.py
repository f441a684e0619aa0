"""
Cancel one attendee's seat on a seated booking.

The seat and attendee rows are removed first; calendar and video
references, the attendee email and subscriber webhooks follow. Integration
and webhook failures are logged and never undo the cancellation.
"""

import asyncio
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from scheduling.features.bookings.domain import (
    BOOKING_CANCELLED,
    Booking,
    CalendarEvent,
    EventTypeInfo,
    Person,
)
from scheduling.features.bookings.repository import BookingRepository
from scheduling.infrastructure.observability.logging import get_logger, safe_stringify
from scheduling.services.calendar.integrations import (
    get_calendar,
    update_calendar_event,
    update_meeting,
)
from scheduling.services.email import send_cancelled_seat_email
from scheduling.services.i18n import get_translation
from scheduling.services.webhooks import WebhookSubscriber, send_payload

logger = get_logger(__name__)


class SeatCancellationError(Exception):
    """Request cannot cancel the seat; maps to an HTTP client error."""

    def __init__(self, message: str, status_code: int = 400, booking_uid: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.booking_uid = booking_uid


async def _update_integrations(booking: Booking, updates: list) -> None:
    if not updates:
        return
    results = await asyncio.gather(*updates, return_exceptions=True)
    for result in results:
        if isinstance(result, Exception):
            logger.warning(
                "Integration update failed after seat cancellation",
                booking_id=booking.id,
                booking_uid=booking.uid,
                error=safe_stringify(result),
            )


async def _deliver_webhook(
    webhook: WebhookSubscriber, payload: dict[str, Any], created_at: str, evt: CalendarEvent
) -> None:
    try:
        await send_payload(webhook.secret, BOOKING_CANCELLED, created_at, webhook, payload)
    except Exception as e:
        logger.error(
            "Error executing webhook",
            trigger_event=BOOKING_CANCELLED,
            subscriber_url=webhook.subscriber_url,
            booking_id=evt.booking_id,
            booking_uid=evt.uid,
            error=safe_stringify(e),
        )


async def cancel_attendee_seat(
    booking: Booking,
    seat_reference_uid: str,
    *,
    webhooks: list[WebhookSubscriber],
    evt: CalendarEvent,
    event_type_info: EventTypeInfo,
) -> dict[str, bool] | None:
    """
    Remove a single seat from a booking.

    Returns:
        {"success": True} once cancelled, None when the booking has fewer than
        two attendees and the whole booking should be cancelled instead

    Raises:
        SeatCancellationError: booking has no organizer or the seat is unknown
    """
    if len(booking.attendees) < 2:
        return None

    if not booking.user_id:
        raise SeatCancellationError("User not found", booking_uid=booking.uid)

    seat_reference = next(
        (s for s in booking.seats_references if s.reference_uid == seat_reference_uid), None
    )
    if not seat_reference:
        raise SeatCancellationError("User not a part of this booking", booking_uid=booking.uid)

    await asyncio.gather(
        BookingRepository.delete_seat(seat_reference_uid),
        BookingRepository.delete_attendee(seat_reference.attendee_id),
    )
    logger.info(
        "Seat cancelled",
        booking_id=booking.id,
        seat_reference_uid=seat_reference_uid,
        attendee_id=seat_reference.attendee_id,
    )

    attendee = next((a for a in booking.attendees if a.id == seat_reference.attendee_id), None)

    if attendee:
        updated_evt = evt.without_attendee(attendee.email)
        integrations_to_update = []

        for reference in booking.references:
            if not reference.credential_id:
                continue
            credential = await BookingRepository.find_credential(reference.credential_id)
            if not credential:
                continue

            if "_video" in reference.type:
                integrations_to_update.append(update_meeting(credential, updated_evt, reference))
            if "_calendar" in reference.type:
                calendar = get_calendar(credential)
                if calendar:
                    integrations_to_update.append(
                        update_calendar_event(
                            calendar, reference.uid, updated_evt, reference.external_calendar_id
                        )
                    )

        await _update_integrations(booking, integrations_to_update)

        t_attendee = await get_translation(attendee.locale)
        await send_cancelled_seat_email(
            language=t_attendee, to=attendee.email, title=evt.title, start_time=evt.start_time
        )

    cancelled_attendees = (
        [
            Person(
                name=attendee.name,
                email=attendee.email,
                time_zone=attendee.time_zone,
                locale=attendee.locale or "en",
            )
        ]
        if attendee
        else []
    )
    payload = {
        **replace(evt, attendees=cancelled_attendees).to_payload(),
        **event_type_info.to_payload(),
        "status": "CANCELLED",
        "smsReminderNumber": booking.sms_reminder_number,
    }
    created_at = datetime.now(UTC).isoformat()
    await asyncio.gather(*(_deliver_webhook(w, payload, created_at, evt) for w in webhooks))

    reminders = [
        r for r in booking.workflow_reminders if r.seat_reference_id == seat_reference_uid
    ]
    await BookingRepository.delete_workflow_reminders(reminders)

    return {"success": True}
