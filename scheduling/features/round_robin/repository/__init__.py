from .booking_stats_repository import BookingStatsRepository  # noqa: F401
