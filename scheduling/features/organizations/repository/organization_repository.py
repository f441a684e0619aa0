"""
Persistence for organizations (teams flagged is_organization).
"""

import json

from psycopg.types.json import Jsonb

from scheduling.db.helpers import execute_query, fetch_one, fetch_val
from scheduling.db.pool import get_db_transaction
from scheduling.features.organizations.domain import (
    MembershipRole,
    Organization,
    OrganizationData,
    OwnerProfile,
)
from scheduling.infrastructure.observability.logging import get_logger
from scheduling.utils.slugify import slugify

logger = get_logger(__name__)


def _row_to_organization(row: dict | None) -> Organization | None:
    if not row:
        return None
    metadata = row.get("metadata") or {}
    if isinstance(metadata, str):
        metadata = json.loads(metadata)
    return Organization(
        id=row["id"],
        name=row["name"],
        slug=row["slug"],
        is_platform=bool(row.get("is_platform")),
        metadata=metadata,
    )


class OrganizationRepository:
    SELECT_COLUMNS = "id, name, slug, is_platform, metadata"

    @classmethod
    async def find_by_id(cls, organization_id: int) -> Organization | None:
        row = await fetch_one(
            f"SELECT {cls.SELECT_COLUMNS} FROM teams WHERE id = %s AND is_organization = true",
            (organization_id,),
        )
        return _row_to_organization(row)

    @classmethod
    async def find_by_slug(cls, slug: str) -> Organization | None:
        """Match the live slug or a slug still waiting in metadata.requestedSlug."""
        row = await fetch_one(
            f"""
            SELECT {cls.SELECT_COLUMNS}
            FROM teams
            WHERE is_organization = true
              AND parent_id IS NULL
              AND (slug = %s OR (slug IS NULL AND metadata->>'requestedSlug' = %s))
            ORDER BY id
            LIMIT 1
            """,
            (slug, slug),
        )
        return _row_to_organization(row)

    @staticmethod
    async def find_auto_accept_email(organization_id: int) -> str | None:
        return await fetch_val(
            "SELECT org_auto_accept_email FROM organization_settings WHERE organization_id = %s",
            (organization_id,),
        )

    @staticmethod
    async def create_with_existing_user_as_owner(
        *,
        org_data: OrganizationData,
        slug: str | None,
        owner_id: int,
        owner_email: str,
        non_org_username: str,
    ) -> tuple[Organization, OwnerProfile]:
        """
        Create the organization, its settings, the owner's membership and
        profile in one transaction.
        """
        metadata = {
            "requestedSlug": org_data.slug if slug is None else None,
            "subscriptionId": org_data.payment_subscription_id,
            "orgSeats": org_data.seats,
            "orgPricePerSeat": org_data.price_per_seat,
            "billingPeriod": org_data.billing_period,
            "isPlatform": org_data.is_platform,
        }
        username = slugify(non_org_username or owner_email.split("@")[0])

        async with await get_db_transaction() as conn:
            row = await fetch_one(
                """
                INSERT INTO teams (name, slug, is_organization, is_platform, logo_url, bio, metadata)
                VALUES (%s, %s, true, %s, %s, %s, %s)
                RETURNING id, name, slug, is_platform, metadata
                """,
                (
                    org_data.name,
                    slug,
                    org_data.is_platform,
                    org_data.logo_url,
                    org_data.bio,
                    Jsonb(metadata),
                ),
                connection=conn,
            )
            organization = _row_to_organization(row)

            await conn.execute(
                """
                INSERT INTO organization_settings (
                    organization_id, is_organization_configured,
                    is_admin_reviewed, is_organization_verified, org_auto_accept_email
                ) VALUES (%s, %s, %s, true, %s)
                """,
                (
                    organization.id,
                    org_data.is_organization_configured,
                    org_data.is_organization_admin_reviewed,
                    org_data.auto_accept_email,
                ),
            )
            await conn.execute(
                """
                INSERT INTO memberships (user_id, team_id, role, accepted)
                VALUES (%s, %s, %s, true)
                ON CONFLICT (user_id, team_id) DO UPDATE SET role = EXCLUDED.role, accepted = true
                """,
                (owner_id, organization.id, MembershipRole.OWNER.value),
            )
            await conn.execute(
                """
                INSERT INTO profiles (user_id, organization_id, username)
                VALUES (%s, %s, %s)
                ON CONFLICT (user_id, organization_id) DO NOTHING
                """,
                (owner_id, organization.id, username),
            )
            await conn.execute(
                "UPDATE users SET organization_id = %s WHERE id = %s",
                (organization.id, owner_id),
            )

        logger.info(
            "Organization created",
            organization_id=organization.id,
            slug=slug,
            owner_id=owner_id,
        )
        return organization, OwnerProfile(
            user_id=owner_id, organization_id=organization.id, username=username
        )

    @staticmethod
    async def set_slug(organization_id: int, slug: str) -> None:
        await execute_query(
            """
            UPDATE teams
            SET slug = %s,
                metadata = COALESCE(metadata, '{}'::jsonb) - 'requestedSlug'
            WHERE id = %s
            """,
            (slug, organization_id),
        )
        logger.info("Organization slug set", organization_id=organization_id, slug=slug)

    @staticmethod
    async def find_regular_team_by_slug(slug: str) -> dict | None:
        return await fetch_one(
            """
            SELECT id, name, slug
            FROM teams
            WHERE slug = %s AND parent_id IS NULL AND is_organization = false
            """,
            (slug,),
        )

    @staticmethod
    async def exists_with_slug(slug: str) -> bool:
        count = await fetch_val(
            "SELECT COUNT(*) FROM teams WHERE slug = %s AND is_organization = true",
            (slug,),
        )
        return bool(count)
