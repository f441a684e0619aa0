from unittest.mock import AsyncMock

import pytest
from pydantic import ValidationError

from scheduling.features.organizations.domain import (
    Organization,
    OrganizationOnboarding,
    OrgOwner,
    OwnerProfile,
    SlugConflictType,
)
from scheduling.features.organizations.services.onboarding_finalizer import (
    OrganizationOnboardingError,
    create_organization_from_onboarding,
)

MODULE = "scheduling.features.organizations.services.onboarding_finalizer"


def _onboarding(**overrides) -> OrganizationOnboarding:
    values = {
        "id": 1,
        "organization_id": None,
        "name": "Acme",
        "slug": "acme",
        "org_owner_email": "owner@acme.com",
        "seats": 10,
        "price_per_seat": 15.0,
        "billing_period": "MONTHLY",
        "invited_members": [{"email": "alice@acme.com"}, {"email": "bob@other.com", "name": "Bob"}],
        "teams": [
            {"id": -1, "name": "Sales", "isBeingMigrated": False, "slug": "sales"},
            {"id": 55, "name": "Acme", "isBeingMigrated": True, "slug": "acme"},
        ],
    }
    values.update(overrides)
    return OrganizationOnboarding(**values)


def _owner() -> OrgOwner:
    return OrgOwner(id=7, email="owner@acme.com", username="owner", locale="en")


@pytest.fixture
def mocks(monkeypatch):
    """Patch every collaborator of the finalizer and return the mocks by name."""
    created_org = Organization(id=10, name="Acme", slug="acme")
    patched = {
        "find_user_to_be_org_owner": AsyncMock(return_value=_owner()),
        "setup_domain": AsyncMock(return_value=True),
        "assert_can_create_org": AsyncMock(return_value=SlugConflictType.NO_CONFLICT),
        "send_organization_creation_email": AsyncMock(),
        "invite_members_with_no_inviter_permission_check": AsyncMock(),
        "create_teams_for_organization": AsyncMock(),
        "OrganizationRepository.find_by_id": AsyncMock(return_value=None),
        "OrganizationRepository.find_by_slug": AsyncMock(return_value=None),
        "OrganizationRepository.create_with_existing_user_as_owner": AsyncMock(
            return_value=(
                created_org,
                OwnerProfile(user_id=7, organization_id=10, username="owner"),
            )
        ),
        "OrganizationRepository.set_slug": AsyncMock(),
        "OrganizationOnboardingRepository.set_organization_id": AsyncMock(),
        "AvailabilityRepository.create_many": AsyncMock(),
    }
    for name, mock in patched.items():
        monkeypatch.setattr(f"{MODULE}.{name}", mock)
    return patched


@pytest.mark.asyncio
async def test_creates_organization_on_first_run(mocks):
    organization, owner = await create_organization_from_onboarding(_onboarding(), "sub_123")

    assert organization.id == 10
    assert owner.id == 7
    mocks["setup_domain"].assert_awaited_once()
    assert mocks["setup_domain"].await_args.kwargs["slug"] == "acme"

    create_kwargs = mocks["OrganizationRepository.create_with_existing_user_as_owner"].await_args.kwargs
    assert create_kwargs["slug"] == "acme"
    assert create_kwargs["owner_id"] == 7
    assert create_kwargs["org_data"].auto_accept_email == "acme.com"
    assert create_kwargs["org_data"].payment_subscription_id == "sub_123"

    assert_kwargs = mocks["assert_can_create_org"].await_args.kwargs
    assert assert_kwargs["error_on_user_already_part_of_org"] is False
    assert assert_kwargs["restrict_based_on_minimum_published_teams"] is False

    mocks["send_organization_creation_email"].assert_awaited_once()
    email_kwargs = mocks["send_organization_creation_email"].await_args.kwargs
    assert email_kwargs["to"] == "owner@acme.com"
    assert email_kwargs["from_name"] == "Acme's admin"

    owner_id, availability = mocks["AvailabilityRepository.create_many"].await_args.args
    assert owner_id == 7
    assert availability[0].days == [1, 2, 3, 4, 5]

    mocks["OrganizationOnboardingRepository.set_organization_id"].assert_awaited_once_with(1, 10)
    mocks["OrganizationRepository.set_slug"].assert_not_awaited()

    invite_kwargs = mocks["invite_members_with_no_inviter_permission_check"].await_args.kwargs
    assert [m.email for m in invite_kwargs["invitations"]] == ["alice@acme.com", "bob@other.com"]
    assert invite_kwargs["team_id"] == 10

    teams_kwargs = mocks["create_teams_for_organization"].await_args.kwargs
    assert teams_kwargs["team_names"] == ["Sales"]
    assert [t.id for t in teams_kwargs["move_teams"]] == [55]


@pytest.mark.asyncio
async def test_second_run_reuses_existing_organization(mocks):
    existing = Organization(id=10, name="Acme", slug="acme")
    mocks["OrganizationRepository.find_by_id"].return_value = existing

    organization, _ = await create_organization_from_onboarding(
        _onboarding(organization_id=10), "sub_123"
    )

    assert organization is existing
    mocks["OrganizationRepository.find_by_id"].assert_awaited_once_with(10)
    mocks["assert_can_create_org"].assert_not_awaited()
    mocks["OrganizationRepository.create_with_existing_user_as_owner"].assert_not_awaited()
    mocks["send_organization_creation_email"].assert_not_awaited()
    mocks["AvailabilityRepository.create_many"].assert_not_awaited()
    mocks["OrganizationOnboardingRepository.set_organization_id"].assert_not_awaited()


@pytest.mark.asyncio
async def test_reuses_organization_found_by_slug(mocks):
    mocks["OrganizationRepository.find_by_slug"].return_value = Organization(
        id=10, name="Acme", slug="acme"
    )

    await create_organization_from_onboarding(_onboarding(), "sub_123")

    mocks["OrganizationRepository.find_by_slug"].assert_awaited_once_with("acme")
    mocks["OrganizationRepository.create_with_existing_user_as_owner"].assert_not_awaited()


@pytest.mark.asyncio
async def test_deferred_slug_is_set_after_teams_move(mocks):
    calls = []
    mocks["assert_can_create_org"].return_value = SlugConflictType.TEAM_USER_IS_MEMBER_OF_EXISTS
    mocks["OrganizationRepository.create_with_existing_user_as_owner"].return_value = (
        Organization(id=10, name="Acme", slug=None, metadata={"requestedSlug": "acme"}),
        OwnerProfile(user_id=7, organization_id=10, username="owner"),
    )
    mocks["create_teams_for_organization"].side_effect = lambda **kwargs: calls.append("teams")
    mocks["OrganizationRepository.set_slug"].side_effect = lambda *args: calls.append("slug")

    organization, _ = await create_organization_from_onboarding(_onboarding(), "sub_123")

    create_kwargs = mocks["OrganizationRepository.create_with_existing_user_as_owner"].await_args.kwargs
    assert create_kwargs["slug"] is None
    mocks["OrganizationRepository.set_slug"].assert_awaited_once_with(10, "acme")
    assert calls == ["teams", "slug"]
    assert organization.slug == "acme"


@pytest.mark.asyncio
async def test_platform_organization_skips_creation_email(mocks):
    await create_organization_from_onboarding(_onboarding(is_platform=True), "sub_123")

    mocks["send_organization_creation_email"].assert_not_awaited()
    assert mocks["setup_domain"].await_args.kwargs["is_platform"] is True


@pytest.mark.asyncio
async def test_missing_owner_is_fatal(mocks):
    mocks["find_user_to_be_org_owner"].return_value = None

    with pytest.raises(OrganizationOnboardingError) as exc_info:
        await create_organization_from_onboarding(_onboarding(), "sub_123")

    assert exc_info.value.recoverable is False
    assert exc_info.value.onboarding_id == 1
    mocks["setup_domain"].assert_not_awaited()


@pytest.mark.asyncio
async def test_creation_failure_is_reraised_unchanged(mocks):
    error = RuntimeError("insert failed")
    mocks["OrganizationRepository.create_with_existing_user_as_owner"].side_effect = error

    with pytest.raises(RuntimeError) as exc_info:
        await create_organization_from_onboarding(_onboarding(), "sub_123")

    assert exc_info.value is error
    mocks["OrganizationOnboardingRepository.set_organization_id"].assert_not_awaited()
    mocks["invite_members_with_no_inviter_permission_check"].assert_not_awaited()


@pytest.mark.asyncio
async def test_invalid_invited_members_fail_validation(mocks):
    with pytest.raises(ValidationError):
        await create_organization_from_onboarding(
            _onboarding(invited_members=[{"email": "not-an-email"}]), "sub_123"
        )

    mocks["invite_members_with_no_inviter_permission_check"].assert_not_awaited()


@pytest.mark.asyncio
async def test_empty_members_and_teams_skip_side_effects(mocks):
    await create_organization_from_onboarding(_onboarding(invited_members=[], teams=[]), "sub_123")

    mocks["invite_members_with_no_inviter_permission_check"].assert_not_awaited()
    mocks["create_teams_for_organization"].assert_not_awaited()
