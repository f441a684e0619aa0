"""
Service layer for bookings.
"""

from .cancel_attendee_seat import SeatCancellationError, cancel_attendee_seat

__all__ = ["SeatCancellationError", "cancel_attendee_seat"]
