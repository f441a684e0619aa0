"""
Persistence for organization_onboarding rows.
"""

from scheduling.db.helpers import execute_query, fetch_one
from scheduling.features.organizations.domain import OrganizationOnboarding
from scheduling.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class OrganizationOnboardingRepository:
    SELECT_COLUMNS = """
        id, organization_id, name, slug, org_owner_email, seats, price_per_seat,
        billing_period, invited_members, teams, is_platform, logo, bio,
        stripe_customer_id, stripe_subscription_id, is_complete
    """

    @classmethod
    async def find_by_id(cls, onboarding_id: int) -> OrganizationOnboarding | None:
        row = await fetch_one(
            f"SELECT {cls.SELECT_COLUMNS} FROM organization_onboarding WHERE id = %s",
            (onboarding_id,),
        )
        if not row:
            return None
        return OrganizationOnboarding(
            id=row["id"],
            organization_id=row["organization_id"],
            name=row["name"],
            slug=row["slug"],
            org_owner_email=row["org_owner_email"],
            seats=row["seats"],
            price_per_seat=row["price_per_seat"],
            billing_period=row["billing_period"] or "MONTHLY",
            invited_members=row["invited_members"] or [],
            teams=row["teams"] or [],
            is_platform=bool(row["is_platform"]),
            logo=row["logo"],
            bio=row["bio"],
            stripe_customer_id=row["stripe_customer_id"],
            stripe_subscription_id=row["stripe_subscription_id"],
            is_complete=bool(row["is_complete"]),
        )

    @staticmethod
    async def set_organization_id(onboarding_id: int, organization_id: int) -> None:
        await execute_query(
            """
            UPDATE organization_onboarding
            SET organization_id = %s, updated_at = NOW()
            WHERE id = %s
            """,
            (organization_id, onboarding_id),
        )
        logger.debug(
            "Onboarding linked to organization",
            onboarding_id=onboarding_id,
            organization_id=organization_id,
        )

    @staticmethod
    async def mark_as_complete(onboarding_id: int, subscription_id: str | None = None) -> None:
        await execute_query(
            """
            UPDATE organization_onboarding
            SET is_complete = true,
                stripe_subscription_id = COALESCE(%s, stripe_subscription_id),
                updated_at = NOW()
            WHERE id = %s
            """,
            (subscription_id, onboarding_id),
        )
        logger.info("Onboarding marked complete", onboarding_id=onboarding_id)
