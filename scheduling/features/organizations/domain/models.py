"""
Domain models for organization onboarding.

Entities loaded from the database are plain dataclasses. The invited
members and teams payloads are stored as JSON on the onboarding row and
validated with pydantic before use.
"""

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, TypeAdapter


class MembershipRole(StrEnum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


class SlugConflictType(StrEnum):
    NO_CONFLICT = "noConflict"
    TEAM_USER_IS_MEMBER_OF_EXISTS = "teamUserIsMemberOfExists"
    TEAM_USER_IS_NOT_MEMBER_OF_EXISTS = "teamUserIsNotMemberOfExists"


BillingPeriod = Literal["MONTHLY", "ANNUALLY"]


@dataclass(slots=True)
class OrgOwner:
    id: int
    email: str
    username: str | None = None
    name: str | None = None
    locale: str | None = None
    completed_onboarding: bool = False
    email_verified: bool = False
    organization_id: int | None = None


@dataclass(slots=True)
class Organization:
    id: int
    name: str
    slug: str | None
    is_platform: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class OwnerProfile:
    user_id: int
    organization_id: int
    username: str


@dataclass(slots=True)
class OrganizationOnboarding:
    """A pending organization purchase, read again on every payment webhook."""

    id: int
    organization_id: int | None
    name: str
    slug: str
    org_owner_email: str
    seats: int | None = None
    price_per_seat: float | None = None
    billing_period: BillingPeriod = "MONTHLY"
    invited_members: Any = field(default_factory=list)
    teams: Any = field(default_factory=list)
    is_platform: bool = False
    logo: str | None = None
    bio: str | None = None
    stripe_customer_id: str | None = None
    stripe_subscription_id: str | None = None
    is_complete: bool = False


@dataclass(slots=True)
class OrganizationData:
    id: int | None
    name: str
    slug: str
    is_organization_configured: bool
    is_organization_admin_reviewed: bool
    auto_accept_email: str
    seats: int | None
    price_per_seat: float | None
    is_platform: bool
    logo_url: str | None
    bio: str | None
    payment_subscription_id: str
    billing_period: BillingPeriod | None = None


class InvitedMember(BaseModel):
    email: EmailStr
    name: str | None = None


class TeamData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    is_being_migrated: bool = Field(alias="isBeingMigrated")
    slug: str


invited_members_adapter = TypeAdapter(list[InvitedMember])
teams_adapter = TypeAdapter(list[TeamData])
