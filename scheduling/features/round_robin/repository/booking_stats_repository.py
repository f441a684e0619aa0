"""
Read-only queries feeding the round-robin ranking.
"""

from collections.abc import Sequence
from datetime import datetime

from scheduling.db.helpers import fetch_all
from scheduling.features.round_robin.domain import BookingRecord
from scheduling.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class BookingStatsRepository:
    """Thin wrappers over the bookings table for fairness statistics."""

    @staticmethod
    async def fetch_bookings_in_interval(
        event_type_id: int,
        user_ids: Sequence[int],
        start: datetime,
        end: datetime,
    ) -> list[BookingRecord]:
        """Non-cancelled bookings of an event type created inside [start, end)."""
        if not user_ids:
            return []

        rows = await fetch_all(
            """
            SELECT user_id, created_at
            FROM bookings
            WHERE event_type_id = %s
              AND user_id = ANY(%s)
              AND status NOT IN ('cancelled', 'rejected')
              AND created_at >= %s
              AND created_at < %s
            ORDER BY created_at
            """,
            (event_type_id, list(user_ids), start, end),
        )

        logger.debug(
            "Fetched round-robin bookings",
            event_type_id=event_type_id,
            user_count=len(user_ids),
            booking_count=len(rows),
        )
        return [BookingRecord(user_id=row["user_id"], created_at=row["created_at"]) for row in rows]
