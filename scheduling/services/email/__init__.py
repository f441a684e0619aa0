"""
Outbound email senders.
"""

from .email_service import (
    EmailServiceError,
    send_admin_organization_notification,
    send_cancelled_seat_email,
    send_email,
    send_organization_creation_email,
    send_team_invite_email,
)

__all__ = [
    "EmailServiceError",
    "send_admin_organization_notification",
    "send_cancelled_seat_email",
    "send_email",
    "send_organization_creation_email",
    "send_team_invite_email",
]
