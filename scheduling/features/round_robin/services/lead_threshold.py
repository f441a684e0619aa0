"""
Filter round-robin hosts by lead threshold.

A host whose bookings ran too far ahead of its fair share is disqualified
from the next assignment. With weights enabled the tolerance is split
across hosts by weight; without weights the spread between the least
and most booked hosts is bounded.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from typing import TypeVar

from scheduling.features.round_robin.domain import (
    AvailableUser,
    Host,
    PerUserData,
    RoundRobinEventType,
)
from scheduling.infrastructure.observability.logging import get_logger

from . import lucky_user

logger = get_logger(__name__)

HostT = TypeVar("HostT", bound=Host)

ERROR_CODES = {
    "MAX_LEAD_THRESHOLD_FALSY": "Max lead threshold should be null or > 1, not 0.",
    "WEIGHTED_DATA_MISSING": "Calibrations, weights, or booking shortfalls are null",
}


class LeadThresholdError(Exception):
    """Raised when the filter is called with data it cannot honour."""

    def __init__(self, code: str, event_type_id: int | None = None):
        super().__init__(ERROR_CODES[code])
        self.code = code
        self.event_type_id = event_type_id


def _filter_with_weights(per_user_data: PerUserData, max_lead_threshold: int) -> set[int]:
    allowed_user_ids = set()
    total_weight = sum(per_user_data.weights.values())

    for user_id in per_user_data.bookings_count:
        shortfall = per_user_data.booking_shortfalls[user_id]
        weight = per_user_data.weights[user_id]
        # all weights zero: no share to compare against, keep the host
        allowed_lead = max_lead_threshold * (weight / total_weight) if total_weight else math.inf

        # a negative shortfall means the host is over-booked
        if -shortfall > allowed_lead:
            logger.debug(
                "Host filtered out by weighted lead threshold",
                user_id=user_id,
                shortfall=shortfall,
                allowed_lead=allowed_lead,
                weight=weight,
            )
        else:
            allowed_user_ids.add(user_id)

    return allowed_user_ids


def _filter_without_weights(per_user_data: PerUserData, max_lead_threshold: int) -> set[int]:
    allowed_user_ids = set()
    counts = per_user_data.bookings_count
    if not counts:
        return allowed_user_ids

    min_bookings = min(counts.values())
    max_bookings = max(counts.values())

    for user_id, bookings_count in counts.items():
        if bookings_count <= min_bookings + max_lead_threshold:
            allowed_user_ids.add(user_id)
        else:
            logger.debug(
                "Host filtered out by lead threshold",
                user_id=user_id,
                bookings_count=bookings_count,
                min_bookings=min_bookings,
                max_bookings=max_bookings,
                max_lead_threshold=max_lead_threshold,
            )

    return allowed_user_ids


async def filter_hosts_by_lead_threshold(
    hosts: Sequence[HostT],
    max_lead_threshold: int | None,
    event_type: RoundRobinEventType,
) -> list[HostT]:
    """
    Disqualify hosts that have exceeded the maximum lead.

    The threshold is consumed by this call: callers must recompute it
    rather than reuse the same value for another assignment attempt.

    Args:
        hosts: Round-robin hosts of the event type
        max_lead_threshold: Allowed booking lead, None disables the filter
        event_type: The event type being assigned

    Returns:
        The hosts that survived, in input order

    Raises:
        LeadThresholdError: threshold is 0, or weighted ranking data is missing
    """
    if max_lead_threshold is None:
        return list(hosts)

    if max_lead_threshold == 0:
        raise LeadThresholdError("MAX_LEAD_THRESHOLD_FALSY", event_type_id=event_type.id)

    if not hosts:
        return []

    available_users = [
        AvailableUser(
            id=host.user.id,
            email=host.user.email,
            weight=host.weight,
            priority=host.priority,
        )
        for host in hosts
    ]
    ranking = await lucky_user.get_ordered_list_of_lucky_users(
        available_users, event_type, all_rr_hosts=hosts
    )
    per_user_data = ranking.per_user_data

    if event_type.is_rr_weights_enabled:
        if (
            per_user_data.calibrations is None
            or per_user_data.weights is None
            or per_user_data.booking_shortfalls is None
        ):
            logger.error(
                "Weighted ranking returned incomplete data",
                event_type_id=event_type.id,
            )
            raise LeadThresholdError("WEIGHTED_DATA_MISSING", event_type_id=event_type.id)
        allowed_user_ids = _filter_with_weights(per_user_data, max_lead_threshold)
    else:
        allowed_user_ids = _filter_without_weights(per_user_data, max_lead_threshold)

    return [host for host in hosts if host.user.id in allowed_user_ids]
