from .booking_repository import BookingRepository  # noqa: F401
from .webhook_repository import WebhookRepository  # noqa: F401
