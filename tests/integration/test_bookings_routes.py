from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from scheduling.features.bookings.api import router as booking_routes
from scheduling.features.bookings.domain import (
    Attendee,
    Booking,
    EventTypeInfo,
    Person,
    SeatReference,
)
from scheduling.features.bookings.services.cancel_attendee_seat import SeatCancellationError

MODULE = "scheduling.features.bookings.api.router"


def _booking() -> Booking:
    return Booking(
        id=1,
        uid="booking-uid",
        user_id=7,
        event_type_id=3,
        title="Workshop",
        start_time=datetime(2024, 6, 3, 15, 0, tzinfo=UTC),
        end_time=datetime(2024, 6, 3, 16, 0, tzinfo=UTC),
        attendees=[
            Attendee(id=11, email="ann@example.com", name="Ann"),
            Attendee(id=12, email="ben@example.com", name="Ben"),
        ],
        seats_references=[SeatReference(reference_uid="seat-a", attendee_id=11)],
    )


@pytest.fixture
def client():
    app = FastAPI()
    app.include_router(booking_routes.router)
    return TestClient(app)


@pytest.fixture
def repos(monkeypatch):
    patched = {
        "BookingRepository.find_by_uid_for_seat_cancellation": AsyncMock(return_value=_booking()),
        "BookingRepository.find_organizer": AsyncMock(return_value=Person(name="Org", email="org@example.com")),
        "BookingRepository.find_event_type_info": AsyncMock(return_value=EventTypeInfo(event_title="Workshop")),
        "BookingRepository.find_event_type_team_id": AsyncMock(return_value=None),
        "WebhookRepository.find_subscribers": AsyncMock(return_value=[]),
        "cancel_attendee_seat": AsyncMock(return_value={"success": True}),
    }
    for name, mock in patched.items():
        monkeypatch.setattr(f"{MODULE}.{name}", mock)
    return patched


def test_cancel_seat(client, repos):
    response = client.post("/bookings/booking-uid/seats/cancel", json={"seat_reference_uid": "seat-a"})

    assert response.status_code == 200
    assert response.json()["success"] is True
    args, kwargs = repos["cancel_attendee_seat"].await_args
    assert args[1] == "seat-a"
    evt = kwargs["evt"]
    assert [a.email for a in evt.attendees] == ["ann@example.com", "ben@example.com"]
    assert evt.organizer.email == "org@example.com"


def test_unknown_booking_returns_404(client, repos):
    repos["BookingRepository.find_by_uid_for_seat_cancellation"].return_value = None

    response = client.post("/bookings/missing/seats/cancel", json={"seat_reference_uid": "seat-a"})

    assert response.status_code == 404


def test_rejected_seat_maps_to_status(client, repos):
    repos["cancel_attendee_seat"].side_effect = SeatCancellationError("User not a part of this booking")

    response = client.post("/bookings/booking-uid/seats/cancel", json={"seat_reference_uid": "seat-z"})

    assert response.status_code == 400
    assert response.json()["detail"] == "User not a part of this booking"


def test_single_attendee_booking_returns_conflict(client, repos):
    repos["cancel_attendee_seat"].return_value = None

    response = client.post("/bookings/booking-uid/seats/cancel", json={"seat_reference_uid": "seat-a"})

    assert response.status_code == 409
