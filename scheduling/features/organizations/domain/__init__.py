from .models import (  # noqa: F401
    BillingPeriod,
    InvitedMember,
    MembershipRole,
    Organization,
    OrganizationData,
    OrganizationOnboarding,
    OrgOwner,
    OwnerProfile,
    SlugConflictType,
    TeamData,
    invited_members_adapter,
    teams_adapter,
)
