"""
Turns a paid organization onboarding into a live organization.

Called from the payment webhook, which may deliver the same event several
times or retry after a partial failure. Every step is therefore safe to
re-run: the organization is looked up before it is created, existing
members and teams are skipped, and the deferred slug is only set once.
"""

from scheduling.features.organizations.domain import (
    InvitedMember,
    Organization,
    OrganizationData,
    OrganizationOnboarding,
    OrgOwner,
    SlugConflictType,
    TeamData,
    invited_members_adapter,
    teams_adapter,
)
from scheduling.features.organizations.repository import (
    AvailabilityRepository,
    OrganizationOnboardingRepository,
    OrganizationRepository,
)
from scheduling.infrastructure.observability.logging import get_logger, safe_stringify
from scheduling.services.availability import DEFAULT_SCHEDULE, get_availability_from_schedule
from scheduling.services.email import send_organization_creation_email
from scheduling.services.i18n import get_translation

from .create_teams import create_teams_for_organization
from .invite_members import invite_members_with_no_inviter_permission_check
from .org_creation_utils import assert_can_create_org, find_user_to_be_org_owner, setup_domain
from .org_domains import get_org_full_origin

logger = get_logger(__name__)


class OrganizationOnboardingError(Exception):
    """Raised when an onboarding can't be turned into an organization."""

    def __init__(self, message: str, onboarding_id: int, recoverable: bool = True):
        super().__init__(message)
        self.onboarding_id = onboarding_id
        self.recoverable = recoverable


async def _create_organization_with_owner(
    *, owner: OrgOwner, organization_onboarding_id: int, org_data: OrganizationData
) -> Organization:
    org_owner_translation = await get_translation(owner.locale or "en")

    if org_data.id:
        organization = await OrganizationRepository.find_by_id(org_data.id)
    else:
        organization = await OrganizationRepository.find_by_slug(org_data.slug)

    if organization:
        logger.debug(
            "Reusing existing organization",
            slug=org_data.slug,
            organization_id=organization.id,
        )
        return organization

    slug_conflict_type = await assert_can_create_org(
        slug=org_data.slug,
        is_platform=org_data.is_platform,
        org_owner=owner,
        error_on_user_already_part_of_org=False,
        # Already enforced when the onboarding was started
        restrict_based_on_minimum_published_teams=False,
    )

    # The owner's own team holds the slug until it is migrated below
    can_set_slug = slug_conflict_type != SlugConflictType.TEAM_USER_IS_MEMBER_OF_EXISTS

    logger.debug(
        "Creating organization",
        owner_email=owner.email,
        slug=org_data.slug,
        can_set_slug=can_set_slug,
    )

    try:
        non_org_username = owner.username or ""
        organization, owner_profile = await OrganizationRepository.create_with_existing_user_as_owner(
            org_data=org_data,
            slug=org_data.slug if can_set_slug else None,
            owner_id=owner.id,
            owner_email=owner.email,
            non_org_username=non_org_username,
        )

        if not org_data.is_platform:
            await send_organization_creation_email(
                language=org_owner_translation,
                from_name=f"{organization.name}'s admin",
                to=owner.email,
                owner_new_username=owner_profile.username,
                owner_old_username=non_org_username,
                org_domain=get_org_full_origin(org_data.slug, protocol=False),
                org_name=organization.name,
                prev_link=f"{get_org_full_origin('', protocol=True)}/{non_org_username}",
                new_link=f"{get_org_full_origin(org_data.slug, protocol=True)}/{owner_profile.username}",
            )

        availability = get_availability_from_schedule(DEFAULT_SCHEDULE)
        await AvailabilityRepository.create_many(owner.id, availability)
    except Exception as e:
        logger.error(
            f"RecoverableError: Error creating organization for owner {owner.email}.",
            error=safe_stringify(e),
        )
        raise

    # Later attempts find the organization through the onboarding row
    await OrganizationOnboardingRepository.set_organization_id(
        organization_onboarding_id, organization.id
    )
    return organization


async def _invite_members(invited_members: list[InvitedMember], organization: Organization) -> None:
    if not invited_members:
        return

    logger.debug(
        "Inviting members to organization",
        organization_id=organization.id,
        count=len(invited_members),
    )
    await invite_members_with_no_inviter_permission_check(
        team_id=organization.id,
        organization=organization,
        invitations=invited_members,
        language="en",
        inviter_name=None,
    )


async def _create_or_move_teams(
    teams: list[TeamData], owner: OrgOwner, organization: Organization
) -> None:
    if not teams:
        return

    teams_to_create = [team.name for team in teams if not team.is_being_migrated]
    teams_to_move = [team for team in teams if team.is_being_migrated]

    logger.debug(
        "Creating and moving teams for organization",
        organization_id=organization.id,
        create=teams_to_create,
        move=[team.slug for team in teams_to_move],
    )
    await create_teams_for_organization(
        owner=owner,
        organization=organization,
        team_names=teams_to_create,
        move_teams=teams_to_move,
    )


async def create_organization_from_onboarding(
    organization_onboarding: OrganizationOnboarding,
    payment_subscription_id: str,
) -> tuple[Organization, OrgOwner]:
    """
    Create (or finish creating) the organization described by an onboarding.

    Args:
        organization_onboarding: The onboarding row, freshly loaded
        payment_subscription_id: Subscription id from the payment provider

    Returns:
        (organization, owner)

    Raises:
        OrganizationOnboardingError: owner account doesn't exist
        OrganizationCreationError: slug or owner rejected
        pydantic.ValidationError: malformed invited_members or teams
    """
    owner = await find_user_to_be_org_owner(organization_onboarding.org_owner_email)
    if not owner:
        raise OrganizationOnboardingError(
            f"Owner not found with email: {organization_onboarding.org_owner_email}",
            onboarding_id=organization_onboarding.id,
            recoverable=False,
        )
    org_owner_translation = await get_translation(owner.locale or "en")

    # Domain first: an organization whose subdomain can't be served is unusable
    await setup_domain(
        slug=organization_onboarding.slug,
        is_platform=organization_onboarding.is_platform,
        org_owner_email=organization_onboarding.org_owner_email,
        org_owner_translation=org_owner_translation,
    )

    organization = await _create_organization_with_owner(
        owner=owner,
        organization_onboarding_id=organization_onboarding.id,
        org_data=OrganizationData(
            id=organization_onboarding.organization_id,
            name=organization_onboarding.name,
            slug=organization_onboarding.slug,
            is_organization_configured=True,
            is_organization_admin_reviewed=True,
            auto_accept_email=organization_onboarding.org_owner_email.split("@")[1],
            seats=organization_onboarding.seats,
            price_per_seat=organization_onboarding.price_per_seat,
            is_platform=organization_onboarding.is_platform,
            logo_url=organization_onboarding.logo,
            bio=organization_onboarding.bio,
            payment_subscription_id=payment_subscription_id,
            billing_period=organization_onboarding.billing_period,
        ),
    )

    invited_members = invited_members_adapter.validate_python(organization_onboarding.invited_members)
    teams = teams_adapter.validate_python(organization_onboarding.teams)

    await _invite_members(invited_members, organization)
    await _create_or_move_teams(teams, owner, organization)

    # Migrated teams have released the slug by now
    if not organization.slug:
        await OrganizationRepository.set_slug(organization.id, organization_onboarding.slug)
        organization.slug = organization_onboarding.slug

    logger.info(
        "Organization onboarding finalized",
        onboarding_id=organization_onboarding.id,
        organization_id=organization.id,
        owner_id=owner.id,
    )
    return organization, owner
