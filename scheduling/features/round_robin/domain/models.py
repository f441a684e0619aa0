"""
Domain models for round-robin host assignment.

Hosts are built per request from team membership; the ranking data is
computed fresh for every assignment and never persisted.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

DEFAULT_WEIGHT = 100
DEFAULT_PRIORITY = 2


@dataclass(slots=True)
class HostUser:
    id: int
    email: str
    username: str | None = None
    name: str | None = None


@dataclass(slots=True)
class Host:
    """A candidate assignee for a round-robin event."""

    user: HostUser
    is_fixed: bool
    created_at: datetime
    priority: int | None = None
    weight: int | None = None
    weight_adjustment: int | None = None


@dataclass(slots=True)
class RoundRobinEventType:
    id: int
    is_rr_weights_enabled: bool
    team_id: int | None = None
    team_parent_id: int | None = None
    rr_reset_interval: Literal["MONTH", "DAY"] = "MONTH"


@dataclass(slots=True)
class AvailableUser:
    """A host's user as seen by the ranking, with its round-robin settings."""

    id: int
    email: str
    weight: int | None = None
    priority: int | None = None


@dataclass(slots=True)
class BookingRecord:
    user_id: int
    created_at: datetime


@dataclass(slots=True)
class PerUserData:
    """
    Ranking statistics keyed by user id.

    weights, calibrations and booking_shortfalls are only populated when
    round-robin weights are enabled. A negative shortfall means the host
    has more bookings than its fair share.
    """

    bookings_count: dict[int, int]
    weights: dict[int, float] | None = None
    calibrations: dict[int, float] | None = None
    booking_shortfalls: dict[int, float] | None = None


@dataclass(slots=True)
class LuckyUserRanking:
    users: list[AvailableUser]
    per_user_data: PerUserData = field(default_factory=lambda: PerUserData(bookings_count={}))
