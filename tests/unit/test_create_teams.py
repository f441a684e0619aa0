from unittest.mock import AsyncMock

import pytest

from scheduling.features.organizations.domain import (
    MembershipRole,
    Organization,
    OrgOwner,
    TeamData,
)
from scheduling.features.organizations.services.create_teams import (
    TeamCreationError,
    create_teams_for_organization,
)

MODULE = "scheduling.features.organizations.services.create_teams"


@pytest.fixture
def repos(monkeypatch):
    patched = {
        "MembershipRepository.get_role": AsyncMock(return_value=MembershipRole.OWNER),
        "TeamRepository.find_existing_slugs": AsyncMock(return_value={"sales"}),
        "TeamRepository.create_with_owner": AsyncMock(return_value=101),
        "TeamRepository.find_by_id": AsyncMock(
            return_value={
                "id": 55,
                "name": "Acme Support",
                "slug": "acme-support",
                "parent_id": None,
                "is_organization": False,
            }
        ),
        "TeamRepository.move_to_organization": AsyncMock(return_value=3),
    }
    for name, mock in patched.items():
        monkeypatch.setattr(f"{MODULE}.{name}", mock)
    monkeypatch.setattr("scheduling.config.settings.WEBAPP_URL", "https://app.example.com")
    monkeypatch.setattr("scheduling.config.settings.ORGANIZATIONS_DOMAIN", None)
    return patched


def _owner() -> OrgOwner:
    return OrgOwner(id=7, email="owner@acme.com")


def _organization() -> Organization:
    return Organization(id=10, name="Acme", slug="acme")


@pytest.mark.asyncio
async def test_creates_only_missing_teams(repos):
    result = await create_teams_for_organization(
        owner=_owner(),
        organization=_organization(),
        team_names=["Sales", "Marketing Team", "  "],
        move_teams=[],
    )

    assert result == {"created": [101], "moved": []}
    repos["TeamRepository.find_existing_slugs"].assert_awaited_once_with(10, ["sales", "marketing-team"])
    repos["TeamRepository.create_with_owner"].assert_awaited_once_with(
        name="Marketing Team", slug="marketing-team", parent_id=10, owner_id=7
    )


@pytest.mark.asyncio
async def test_moves_team_with_redirect(repos):
    result = await create_teams_for_organization(
        owner=_owner(),
        organization=_organization(),
        team_names=[],
        move_teams=[TeamData(id=55, name="Acme Support", is_being_migrated=True, slug="support")],
    )

    assert result["moved"] == [55]
    repos["TeamRepository.move_to_organization"].assert_awaited_once_with(
        team_id=55,
        organization_id=10,
        new_slug="support",
        old_slug="acme-support",
        to_url="https://acme.example.com/support",
    )


@pytest.mark.asyncio
async def test_team_already_in_organization_is_skipped(repos):
    repos["TeamRepository.find_by_id"].return_value = {
        "id": 55,
        "name": "Support",
        "slug": "support",
        "parent_id": 10,
        "is_organization": False,
    }

    result = await create_teams_for_organization(
        owner=_owner(),
        organization=_organization(),
        team_names=[],
        move_teams=[TeamData(id=55, name="Support", is_being_migrated=True, slug="support")],
    )

    assert result["moved"] == []
    repos["TeamRepository.move_to_organization"].assert_not_awaited()


@pytest.mark.asyncio
async def test_member_role_cannot_create_teams(repos):
    repos["MembershipRepository.get_role"].return_value = MembershipRole.MEMBER

    with pytest.raises(TeamCreationError):
        await create_teams_for_organization(
            owner=_owner(), organization=_organization(), team_names=["Sales"], move_teams=[]
        )

    repos["TeamRepository.create_with_owner"].assert_not_awaited()


@pytest.mark.asyncio
async def test_moving_unmanaged_team_fails(repos):
    repos["MembershipRepository.get_role"].side_effect = [MembershipRole.OWNER, MembershipRole.MEMBER]

    with pytest.raises(TeamCreationError) as exc_info:
        await create_teams_for_organization(
            owner=_owner(),
            organization=_organization(),
            team_names=[],
            move_teams=[TeamData(id=55, name="Acme Support", is_being_migrated=True, slug="support")],
        )

    assert exc_info.value.organization_id == 10
    assert exc_info.value.user_id == 7
    repos["TeamRepository.move_to_organization"].assert_not_awaited()
