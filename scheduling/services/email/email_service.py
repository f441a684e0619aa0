"""
Transactional email delivery through Resend.

Every sender renders an HTML template, then hands it to send_email().
Outside development a missing API key is an error; in development the
message is logged and dropped.
"""

import asyncio
from datetime import datetime

import resend

from scheduling.config import settings
from scheduling.infrastructure.observability.logging import get_logger
from scheduling.services.i18n import Translator

from . import templates

logger = get_logger(__name__)


class EmailServiceError(Exception):
    """Raised when an email could not be handed to the provider."""

    def __init__(self, message: str, recipients: list[str] | None = None):
        super().__init__(message)
        self.recipients = recipients or []


async def send_email(
    to: str | list[str],
    subject: str,
    html: str,
    from_address: str | None = None,
) -> dict | None:
    """
    Send an HTML email.

    Args:
        to: Recipient email(s)
        subject: Subject line
        html: Rendered HTML body
        from_address: Optional sender override

    Returns:
        Provider response, or None when delivery is disabled in development

    Raises:
        EmailServiceError: provider not configured or rejected the message
    """
    recipients = [to] if isinstance(to, str) else list(to)

    if not settings.RESEND_API_KEY:
        if settings.environment == "development":
            logger.warning("Email delivery disabled, dropping message", to=recipients, subject=subject)
            return None
        raise EmailServiceError("Email service not configured", recipients=recipients)

    resend.api_key = settings.RESEND_API_KEY
    params = {
        "from": from_address or settings.EMAIL_FROM_ADDRESS,
        "to": recipients,
        "subject": subject,
        "html": html,
    }

    try:
        # resend's client is synchronous
        response = await asyncio.to_thread(resend.Emails.send, params)
    except Exception as e:
        logger.error("Email send failed", to=recipients, subject=subject, error=str(e))
        raise EmailServiceError(f"Failed to send email: {e}", recipients=recipients) from e

    logger.info("Email sent", to=recipients, subject=subject)
    return response


async def send_organization_creation_email(
    *,
    language: Translator,
    from_name: str,
    to: str,
    owner_new_username: str | None,
    owner_old_username: str,
    org_domain: str,
    org_name: str,
    prev_link: str,
    new_link: str,
) -> dict | None:
    html = templates.organization_created_template(
        language,
        org_name=org_name,
        org_domain=org_domain,
        prev_link=prev_link,
        new_link=new_link,
        owner_old_username=owner_old_username,
        owner_new_username=owner_new_username,
    )
    sender_address = settings.EMAIL_FROM_ADDRESS.rsplit("<", 1)[-1].rstrip(">")
    return await send_email(
        to=to,
        subject=language("email_organization_created_subject", org_name=org_name),
        html=html,
        from_address=f"{from_name} <{sender_address}>",
    )


async def send_admin_organization_notification(
    *,
    instance_admins: list[str],
    org_slug: str,
    owner_email: str,
    webapp_ip_address: str,
    t: Translator,
) -> dict | None:
    html = templates.admin_organization_notification_template(
        t, org_slug=org_slug, owner_email=owner_email, webapp_ip_address=webapp_ip_address
    )
    return await send_email(
        to=instance_admins,
        subject=t("email_admin_org_subject", org_slug=org_slug),
        html=html,
    )


async def send_team_invite_email(
    *,
    language: Translator,
    to: str,
    inviter_name: str,
    team_name: str,
    join_link: str,
) -> dict | None:
    html = templates.team_invite_template(
        language, inviter_name=inviter_name, team_name=team_name, join_link=join_link
    )
    return await send_email(
        to=to,
        subject=language("email_team_invite_subject", inviter_name=inviter_name, team_name=team_name),
        html=html,
    )


async def send_cancelled_seat_email(
    *, language: Translator, to: str, title: str, start_time: datetime
) -> dict | None:
    start = start_time.strftime("%Y-%m-%d %H:%M %Z").strip()
    html = templates.cancelled_seat_template(language, title=title, start_time=start)
    return await send_email(
        to=to,
        subject=language("email_cancelled_seat_subject", title=title),
        html=html,
    )
