from unittest.mock import AsyncMock

import pytest

from scheduling.features.organizations.domain import InvitedMember, MembershipRole, Organization
from scheduling.features.organizations.services.invite_members import (
    invite_members_with_no_inviter_permission_check,
)

MODULE = "scheduling.features.organizations.services.invite_members"


@pytest.fixture
def repos(monkeypatch):
    patched = {
        "OrganizationRepository.find_auto_accept_email": AsyncMock(return_value="acme.com"),
        "UserRepository.find_by_emails": AsyncMock(
            return_value=[
                {"id": 3, "email": "alice@acme.com", "username": "alice", "locale": "en", "organization_id": 10},
                {"id": 4, "email": "bob@other.com", "username": "bob", "locale": "en", "organization_id": None},
            ]
        ),
        "MembershipRepository.find_member_user_ids": AsyncMock(return_value={3}),
        "MembershipRepository.create": AsyncMock(return_value=True),
        "UserRepository.set_organization_id": AsyncMock(),
        "UserRepository.create_invited_user": AsyncMock(return_value=9),
        "ProfileRepository.create_if_missing": AsyncMock(),
        "VerificationTokenRepository.create": AsyncMock(),
        "send_team_invite_email": AsyncMock(),
    }
    for name, mock in patched.items():
        monkeypatch.setattr(f"{MODULE}.{name}", mock)
    return patched


def _organization() -> Organization:
    return Organization(id=10, name="Acme", slug="acme")


@pytest.mark.asyncio
async def test_existing_members_are_skipped(repos):
    result = await invite_members_with_no_inviter_permission_check(
        team_id=10,
        organization=_organization(),
        invitations=[
            InvitedMember(email="alice@acme.com"),
            InvitedMember(email="bob@other.com"),
            InvitedMember(email="bob@other.com"),
            InvitedMember(email="carol@acme.com"),
        ],
        language="en",
    )

    assert result.skipped == ["alice@acme.com"]
    assert result.invited == ["bob@other.com", "carol@acme.com"]
    created_for = [c.kwargs["user_id"] for c in repos["MembershipRepository.create"].await_args_list]
    assert created_for == [4, 9]
    assert repos["send_team_invite_email"].await_count == 2


@pytest.mark.asyncio
async def test_existing_user_outside_auto_accept_domain_stays_pending(repos):
    await invite_members_with_no_inviter_permission_check(
        team_id=10,
        organization=_organization(),
        invitations=[InvitedMember(email="bob@other.com")],
        language="en",
    )

    repos["MembershipRepository.create"].assert_awaited_once_with(
        user_id=4, team_id=10, role=MembershipRole.MEMBER, accepted=False
    )
    repos["UserRepository.set_organization_id"].assert_not_awaited()
    email_kwargs = repos["send_team_invite_email"].await_args.kwargs
    assert email_kwargs["join_link"].endswith("/teams")
    assert email_kwargs["inviter_name"] == "The system"


@pytest.mark.asyncio
async def test_new_user_on_auto_accept_domain_joins_directly(repos):
    await invite_members_with_no_inviter_permission_check(
        team_id=10,
        organization=_organization(),
        invitations=[InvitedMember(email="carol@acme.com")],
        language="en",
    )

    repos["UserRepository.create_invited_user"].assert_awaited_once_with(
        email="carol@acme.com", invited_to=10, organization_id=10, username="carol"
    )
    repos["MembershipRepository.create"].assert_awaited_once_with(
        user_id=9, team_id=10, role=MembershipRole.MEMBER, accepted=True
    )
    repos["ProfileRepository.create_if_missing"].assert_awaited_once_with(
        user_id=9, organization_id=10, username="carol"
    )
    token_kwargs = repos["VerificationTokenRepository.create"].await_args.kwargs
    assert token_kwargs["identifier"] == "carol@acme.com"
    assert len(token_kwargs["token"]) == 64
    join_link = repos["send_team_invite_email"].await_args.kwargs["join_link"]
    assert f"token={token_kwargs['token']}" in join_link


@pytest.mark.asyncio
async def test_email_failure_does_not_abort_invites(repos):
    repos["send_team_invite_email"].side_effect = RuntimeError("provider down")

    result = await invite_members_with_no_inviter_permission_check(
        team_id=10,
        organization=_organization(),
        invitations=[InvitedMember(email="bob@other.com")],
        language="en",
    )

    assert result.invited == ["bob@other.com"]


@pytest.mark.asyncio
async def test_no_invitations_is_a_no_op(repos):
    result = await invite_members_with_no_inviter_permission_check(
        team_id=10, organization=_organization(), invitations=[], language="en"
    )

    assert result.invited == []
    repos["UserRepository.find_by_emails"].assert_not_awaited()
