"""
Inviting people into an organization on behalf of the system.

Used by flows that have already authorized the action (e.g. a paid
onboarding), so the inviter's own role is never checked here.
"""

import asyncio
import secrets
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import urlencode

from scheduling.config import settings
from scheduling.features.organizations.domain import (
    InvitedMember,
    MembershipRole,
    Organization,
)
from scheduling.features.organizations.repository import (
    MembershipRepository,
    OrganizationRepository,
    ProfileRepository,
    UserRepository,
    VerificationTokenRepository,
)
from scheduling.infrastructure.observability.logging import get_logger
from scheduling.services.email import send_team_invite_email
from scheduling.services.i18n import Translator, get_translation
from scheduling.utils.slugify import slugify

logger = get_logger(__name__)


@dataclass(slots=True)
class InviteResult:
    invited: list[str]
    skipped: list[str]


def _email_domain(email: str) -> str:
    return email.rsplit("@", 1)[-1].lower()


def _signup_link(token: str) -> str:
    query = urlencode({"token": token, "callbackUrl": "/getting-started"})
    return f"{settings.WEBAPP_URL}/signup?{query}"


def _teams_link() -> str:
    return f"{settings.WEBAPP_URL}/teams"


async def invite_members_with_no_inviter_permission_check(
    *,
    team_id: int,
    organization: Organization,
    invitations: Sequence[InvitedMember],
    language: str,
    inviter_name: str | None = None,
) -> InviteResult:
    """
    Add invitations to the organization, skipping anyone already a member.

    Existing users get a membership; unknown emails get a placeholder account
    and a signup token. Emails on the organization's auto-accept domain join
    directly without having to accept.
    """
    # Deduplicate by lowercased email, keep first occurrence
    unique: dict[str, InvitedMember] = {}
    for invitation in invitations:
        unique.setdefault(invitation.email.lower(), invitation)
    if not unique:
        return InviteResult(invited=[], skipped=[])

    auto_accept_domain = await OrganizationRepository.find_auto_accept_email(organization.id)
    existing_users = {
        row["email"].lower(): row for row in await UserRepository.find_by_emails(list(unique))
    }
    member_ids = await MembershipRepository.find_member_user_ids(
        team_id, [row["id"] for row in existing_users.values()]
    )

    translator = await get_translation(language)
    inviter = inviter_name or translator("the_system")
    team_name = organization.name

    invited: list[str] = []
    skipped: list[str] = []
    emails = []

    for email in unique:
        auto_accept = bool(auto_accept_domain) and _email_domain(email) == auto_accept_domain.lower()
        user = existing_users.get(email)

        if user and user["id"] in member_ids:
            skipped.append(email)
            continue

        if user:
            created = await MembershipRepository.create(
                user_id=user["id"],
                team_id=team_id,
                role=MembershipRole.MEMBER,
                accepted=auto_accept,
            )
            if not created:
                skipped.append(email)
                continue
            if auto_accept:
                await UserRepository.set_organization_id(user["id"], organization.id)
                await ProfileRepository.create_if_missing(
                    user_id=user["id"],
                    organization_id=organization.id,
                    username=user["username"] or slugify(email.split("@")[0]),
                )
            join_link = _teams_link()
        else:
            username = slugify(email.split("@")[0]) if auto_accept else None
            user_id = await UserRepository.create_invited_user(
                email=email,
                invited_to=team_id,
                organization_id=organization.id if auto_accept else None,
                username=username,
            )
            await MembershipRepository.create(
                user_id=user_id,
                team_id=team_id,
                role=MembershipRole.MEMBER,
                accepted=auto_accept,
            )
            if auto_accept:
                await ProfileRepository.create_if_missing(
                    user_id=user_id, organization_id=organization.id, username=username
                )
            token = secrets.token_hex(32)
            await VerificationTokenRepository.create(identifier=email, token=token, team_id=team_id)
            join_link = _signup_link(token)

        invited.append(email)
        emails.append(
            _send_invite(translator, to=email, inviter=inviter, team_name=team_name, join_link=join_link)
        )

    results = await asyncio.gather(*emails, return_exceptions=True)
    for email, result in zip(invited, results):
        if isinstance(result, Exception):
            logger.error("Invite email failed", team_id=team_id, email=email, error=str(result))

    logger.info(
        "Organization members invited",
        team_id=team_id,
        invited_count=len(invited),
        skipped_count=len(skipped),
    )
    return InviteResult(invited=invited, skipped=skipped)


async def _send_invite(
    translator: Translator, *, to: str, inviter: str, team_name: str, join_link: str
) -> None:
    await send_team_invite_email(
        language=translator,
        to=to,
        inviter_name=inviter,
        team_name=team_name,
        join_link=join_link,
    )
