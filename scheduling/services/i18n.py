"""
Minimal server-side translations for outbound emails.
Unknown locales and missing keys fall back to English.
"""

from scheduling.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_LOCALE = "en"

TRANSLATIONS: dict[str, dict[str, str]] = {
    "en": {
        "email_organization_created_subject": "Your organization {org_name} has been created",
        "email_organization_created_body": (
            "Your organization {org_name} is ready at {org_domain}. "
            "Your public page moved from {prev_link} to {new_link}."
        ),
        "email_organization_created_username_changed": (
            "Your username changed from {old_username} to {new_username}."
        ),
        "email_admin_org_subject": "Action required: configure DNS for {org_slug}",
        "email_admin_org_body": (
            "The organization {org_slug} was created by {owner_email} but its subdomain "
            "could not be configured automatically. Point it at {webapp_ip_address}."
        ),
        "email_team_invite_subject": "{inviter_name} invited you to join {team_name}",
        "email_team_invite_body": "You have been invited to join {team_name}.",
        "email_team_invite_accept": "Accept invitation",
        "email_cancelled_seat_subject": "Your seat at {title} has been cancelled",
        "email_cancelled_seat_body": "Your seat at {title} on {start_time} was cancelled.",
        "the_system": "The system",
    },
    "es": {
        "email_organization_created_subject": "Tu organización {org_name} ha sido creada",
        "email_team_invite_subject": "{inviter_name} te invitó a unirte a {team_name}",
        "email_team_invite_accept": "Aceptar invitación",
        "email_cancelled_seat_subject": "Tu lugar en {title} ha sido cancelado",
        "the_system": "El sistema",
    },
}


class Translator:
    """Callable that renders a message key for one locale."""

    def __init__(self, locale: str):
        self.locale = locale if locale in TRANSLATIONS else DEFAULT_LOCALE

    def __call__(self, key: str, **params) -> str:
        template = TRANSLATIONS[self.locale].get(key) or TRANSLATIONS[DEFAULT_LOCALE].get(key)
        if template is None:
            logger.warning("Missing translation key", key=key, locale=self.locale)
            return key
        return template.format(**params)


async def get_translation(locale: str | None) -> Translator:
    return Translator(locale or DEFAULT_LOCALE)
