"""
Lucky user ranking - orders round-robin hosts by how much they are owed.

Weighted event types rank by booking shortfall against each host's
weighted share of the interval's bookings; unweighted ones simply prefer
the host with the fewest bookings. Priority breaks ties.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from scheduling.features.round_robin.domain import (
    DEFAULT_PRIORITY,
    DEFAULT_WEIGHT,
    AvailableUser,
    BookingRecord,
    Host,
    LuckyUserRanking,
    PerUserData,
    RoundRobinEventType,
)
from scheduling.features.round_robin.repository import BookingStatsRepository
from scheduling.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def get_interval_bounds(interval: str, now: datetime) -> tuple[datetime, datetime]:
    """Start (inclusive) and end (exclusive) of the current reset interval."""
    day_start = now.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
    if interval == "DAY":
        return day_start, day_start + timedelta(days=1)

    month_start = day_start.replace(day=1)
    if month_start.month == 12:
        next_month = month_start.replace(year=month_start.year + 1, month=1)
    else:
        next_month = month_start.replace(month=month_start.month + 1)
    return month_start, next_month


def _calibration_for_host(
    host: Host, hosts: Sequence[Host], bookings: Sequence[BookingRecord], interval_start: datetime
) -> float:
    """
    Hosts that joined mid-interval start from the average bookings the
    existing hosts had at the time, so they are not flooded to catch up.
    """
    calibration = float(host.weight_adjustment or 0)
    if host.created_at <= interval_start:
        return calibration

    existing = [
        h for h in hosts if h.user.id != host.user.id and h.created_at <= host.created_at
    ]
    if not existing:
        return calibration

    existing_ids = {h.user.id for h in existing}
    bookings_before = sum(
        1 for b in bookings if b.user_id in existing_ids and b.created_at < host.created_at
    )
    return calibration + bookings_before / len(existing)


def compute_per_user_data(
    available_users: Sequence[AvailableUser],
    hosts: Sequence[Host],
    bookings: Sequence[BookingRecord],
    *,
    weights_enabled: bool,
    interval_start: datetime,
) -> PerUserData:
    counts = Counter(b.user_id for b in bookings)
    bookings_count = {user.id: counts.get(user.id, 0) for user in available_users}

    if not weights_enabled:
        return PerUserData(bookings_count=bookings_count)

    hosts_by_user = {host.user.id: host for host in hosts}
    weights = {
        user.id: float(user.weight if user.weight is not None else DEFAULT_WEIGHT)
        for user in available_users
    }
    calibrations = {
        user.id: (
            _calibration_for_host(hosts_by_user[user.id], hosts, bookings, interval_start)
            if user.id in hosts_by_user
            else 0.0
        )
        for user in available_users
    }

    total_weight = sum(weights.values())
    adjusted = {uid: bookings_count[uid] + calibrations[uid] for uid in bookings_count}
    total_adjusted = sum(adjusted.values())

    booking_shortfalls = {}
    for uid, weight in weights.items():
        share = weight / total_weight if total_weight else 0.0
        booking_shortfalls[uid] = total_adjusted * share - adjusted[uid]

    return PerUserData(
        bookings_count=bookings_count,
        weights=weights,
        calibrations=calibrations,
        booking_shortfalls=booking_shortfalls,
    )


def order_users(
    available_users: Sequence[AvailableUser], per_user_data: PerUserData, *, weights_enabled: bool
) -> list[AvailableUser]:
    def priority(user: AvailableUser) -> int:
        return user.priority if user.priority is not None else DEFAULT_PRIORITY

    if weights_enabled and per_user_data.booking_shortfalls is not None:
        shortfalls = per_user_data.booking_shortfalls
        return sorted(available_users, key=lambda u: (-shortfalls[u.id], -priority(u), u.id))

    counts = per_user_data.bookings_count
    return sorted(available_users, key=lambda u: (counts[u.id], -priority(u), u.id))


async def get_ordered_list_of_lucky_users(
    available_users: Sequence[AvailableUser],
    event_type: RoundRobinEventType,
    all_rr_hosts: Sequence[Host],
    *,
    now: datetime | None = None,
) -> LuckyUserRanking:
    """
    Rank the available users of a round-robin event type.

    Args:
        available_users: Users that can take the booking
        event_type: The round-robin event type
        all_rr_hosts: Every round-robin host of the event type, used for calibration
        now: Reference time for the reset interval (defaults to current UTC time)

    Returns:
        LuckyUserRanking with users ordered best candidate first
    """
    now = now or datetime.now(UTC)
    start, end = get_interval_bounds(event_type.rr_reset_interval, now)

    bookings = await BookingStatsRepository.fetch_bookings_in_interval(
        event_type.id, [host.user.id for host in all_rr_hosts], start, end
    )

    per_user_data = compute_per_user_data(
        available_users,
        all_rr_hosts,
        bookings,
        weights_enabled=event_type.is_rr_weights_enabled,
        interval_start=start,
    )
    users = order_users(
        available_users, per_user_data, weights_enabled=event_type.is_rr_weights_enabled
    )

    logger.debug(
        "Lucky users ranked",
        event_type_id=event_type.id,
        weights_enabled=event_type.is_rr_weights_enabled,
        ordered_user_ids=[u.id for u in users],
    )
    return LuckyUserRanking(users=users, per_user_data=per_user_data)
