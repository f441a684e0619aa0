from .models import (  # noqa: F401
    DEFAULT_PRIORITY,
    DEFAULT_WEIGHT,
    AvailableUser,
    BookingRecord,
    Host,
    HostUser,
    LuckyUserRanking,
    PerUserData,
    RoundRobinEventType,
)
