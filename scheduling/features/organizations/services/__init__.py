"""
Service layer for organization onboarding.
"""

from .create_teams import TeamCreationError, create_teams_for_organization
from .invite_members import InviteResult, invite_members_with_no_inviter_permission_check
from .onboarding_finalizer import OrganizationOnboardingError, create_organization_from_onboarding
from .org_creation_utils import (
    OrganizationCreationError,
    assert_can_create_org,
    find_user_to_be_org_owner,
    setup_domain,
)
from .org_domains import DomainProvisioningError, create_domain, get_org_full_origin

__all__ = [
    "DomainProvisioningError",
    "InviteResult",
    "OrganizationCreationError",
    "OrganizationOnboardingError",
    "TeamCreationError",
    "assert_can_create_org",
    "create_domain",
    "create_organization_from_onboarding",
    "create_teams_for_organization",
    "find_user_to_be_org_owner",
    "get_org_full_origin",
    "invite_members_with_no_inviter_permission_check",
    "setup_domain",
]
