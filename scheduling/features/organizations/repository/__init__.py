from .onboarding_repository import OrganizationOnboardingRepository  # noqa: F401
from .organization_repository import OrganizationRepository  # noqa: F401
from .team_repository import (  # noqa: F401
    AvailabilityRepository,
    MembershipRepository,
    ProfileRepository,
    TeamRepository,
    VerificationTokenRepository,
)
from .user_repository import UserRepository  # noqa: F401
