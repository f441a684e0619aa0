"""
Sub-teams of an organization: creating new ones and moving existing teams in.
"""

from collections.abc import Sequence

from scheduling.features.organizations.domain import (
    MembershipRole,
    Organization,
    OrgOwner,
    TeamData,
)
from scheduling.features.organizations.repository import (
    MembershipRepository,
    TeamRepository,
)
from scheduling.infrastructure.observability.logging import get_logger
from scheduling.utils.slugify import slugify

from .org_domains import get_org_full_origin

logger = get_logger(__name__)

MANAGER_ROLES = {MembershipRole.OWNER, MembershipRole.ADMIN}


class TeamCreationError(Exception):
    def __init__(self, message: str, organization_id: int, user_id: int | None = None):
        super().__init__(message)
        self.organization_id = organization_id
        self.user_id = user_id


async def create_teams_for_organization(
    *,
    owner: OrgOwner,
    organization: Organization,
    team_names: Sequence[str],
    move_teams: Sequence[TeamData],
) -> dict:
    """
    Create the named teams under the organization and move migrating teams in.

    Re-running is harmless: names whose slug already exists in the
    organization are skipped, as are teams already parented by it.

    Returns:
        {"created": [team ids], "moved": [team ids]}
    """
    role = await MembershipRepository.get_role(organization.id, owner.id)
    if role not in MANAGER_ROLES:
        raise TeamCreationError(
            "Only organization owners and admins can create teams",
            organization_id=organization.id,
            user_id=owner.id,
        )

    created = await _create_new_teams(owner, organization, team_names)
    moved = []
    for team in move_teams:
        if not team.is_being_migrated:
            continue
        if await _move_team(owner, organization, team):
            moved.append(team.id)

    logger.info(
        "Organization teams set up",
        organization_id=organization.id,
        created_count=len(created),
        moved_count=len(moved),
    )
    return {"created": created, "moved": moved}


async def _create_new_teams(
    owner: OrgOwner, organization: Organization, team_names: Sequence[str]
) -> list[int]:
    by_slug: dict[str, str] = {}
    for name in team_names:
        slug = slugify(name)
        if slug:
            by_slug.setdefault(slug, name.strip())
    if not by_slug:
        return []

    existing = await TeamRepository.find_existing_slugs(organization.id, list(by_slug))
    created = []
    for slug, name in by_slug.items():
        if slug in existing:
            logger.debug("Team already exists in organization", organization_id=organization.id, slug=slug)
            continue
        team_id = await TeamRepository.create_with_owner(
            name=name, slug=slug, parent_id=organization.id, owner_id=owner.id
        )
        created.append(team_id)
    return created


async def _move_team(owner: OrgOwner, organization: Organization, team_data: TeamData) -> bool:
    team = await TeamRepository.find_by_id(team_data.id)
    if not team:
        logger.warning("Team to move not found", team_id=team_data.id)
        return False
    if team["parent_id"] == organization.id:
        logger.debug("Team already in organization", team_id=team["id"])
        return False
    if team["parent_id"] is not None or team["is_organization"]:
        logger.warning("Team belongs to another organization", team_id=team["id"])
        return False

    role = await MembershipRepository.get_role(team["id"], owner.id)
    if role not in MANAGER_ROLES:
        raise TeamCreationError(
            f"Owner cannot move team {team['id']} they don't manage",
            organization_id=organization.id,
            user_id=owner.id,
        )

    old_slug = team["slug"]
    new_slug = slugify(team_data.slug or old_slug or team["name"])
    org_slug = organization.slug or organization.metadata.get("requestedSlug")
    added = await TeamRepository.move_to_organization(
        team_id=team["id"],
        organization_id=organization.id,
        new_slug=new_slug,
        old_slug=old_slug,
        to_url=f"{get_org_full_origin(org_slug)}/{new_slug}",
    )
    logger.info(
        "Team moved into organization",
        team_id=team["id"],
        organization_id=organization.id,
        members_added=added,
    )
    return True
