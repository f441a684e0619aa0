"""
Checks and provisioning shared by every path that creates an organization.
"""

from scheduling.config import settings
from scheduling.features.organizations.domain import OrgOwner, SlugConflictType
from scheduling.features.organizations.repository import (
    MembershipRepository,
    OrganizationRepository,
    UserRepository,
)
from scheduling.infrastructure.observability.logging import get_logger
from scheduling.services.email import send_admin_organization_notification
from scheduling.services.i18n import Translator

from .org_domains import create_domain

logger = get_logger(__name__)


class OrganizationCreationError(Exception):
    """The organization cannot be created with the requested slug or owner."""

    def __init__(self, code: str, slug: str | None = None, status_code: int = 400):
        super().__init__(code)
        self.code = code
        self.slug = slug
        self.status_code = status_code


async def find_user_to_be_org_owner(email: str) -> OrgOwner | None:
    return await UserRepository.find_user_to_be_org_owner(email)


async def get_slug_conflict_type(slug: str, org_owner: OrgOwner) -> SlugConflictType:
    team = await OrganizationRepository.find_regular_team_by_slug(slug)
    if not team:
        return SlugConflictType.NO_CONFLICT
    if await MembershipRepository.is_member(team["id"], org_owner.id):
        return SlugConflictType.TEAM_USER_IS_MEMBER_OF_EXISTS
    return SlugConflictType.TEAM_USER_IS_NOT_MEMBER_OF_EXISTS


async def assert_can_create_org(
    *,
    slug: str,
    is_platform: bool,
    org_owner: OrgOwner,
    error_on_user_already_part_of_org: bool = True,
    restrict_based_on_minimum_published_teams: bool = True,
) -> SlugConflictType:
    """
    Raises OrganizationCreationError when the organization can't be created.

    Returns:
        The slug conflict type. TEAM_USER_IS_MEMBER_OF_EXISTS means the owner's
        own team holds the slug and will give it up once migrated.
    """
    if await OrganizationRepository.exists_with_slug(slug):
        raise OrganizationCreationError("organization_url_taken", slug=slug)

    slug_conflict_type = await get_slug_conflict_type(slug, org_owner)
    if (
        not is_platform
        and slug_conflict_type == SlugConflictType.TEAM_USER_IS_NOT_MEMBER_OF_EXISTS
    ):
        raise OrganizationCreationError("organization_url_taken", slug=slug)

    if error_on_user_already_part_of_org and org_owner.organization_id:
        raise OrganizationCreationError("user_belongs_to_org", slug=slug)

    if restrict_based_on_minimum_published_teams and not is_platform:
        published = await MembershipRepository.count_owned_published_teams(org_owner.id)
        if published < settings.ORG_MINIMUM_PUBLISHED_TEAMS_SELF_SERVE:
            raise OrganizationCreationError("you_need_to_have_minimum_published_teams", slug=slug)

    return slug_conflict_type


async def setup_domain(
    *,
    slug: str,
    is_platform: bool,
    org_owner_email: str,
    org_owner_translation: Translator,
) -> bool:
    """
    Provision the organization subdomain. Safe to call when it already exists.

    When the domain can't be configured automatically, instance admins are
    asked to set up DNS by hand.
    """
    is_organization_configured = True if is_platform else await create_domain(slug)

    if not is_organization_configured:
        instance_admins = await UserRepository.find_instance_admin_emails()
        if instance_admins:
            await send_admin_organization_notification(
                instance_admins=instance_admins,
                org_slug=slug,
                owner_email=org_owner_email,
                webapp_ip_address=settings.WEBAPP_IP_ADDRESS or "",
                t=org_owner_translation,
            )
        else:
            logger.warning(
                "Organization subdomain not configured and no administrators to notify",
                slug=slug,
            )

    return is_organization_configured
