"""
Bookings feature package.

Seat-level operations on seated bookings and the side effects that
follow them (calendar sync, attendee email, subscriber webhooks).
"""
