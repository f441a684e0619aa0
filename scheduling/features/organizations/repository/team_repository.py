"""
Teams, memberships and profiles inside an organization.
"""

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from psycopg.types.json import Jsonb

from scheduling.db.helpers import (
    execute_query,
    execute_transaction,
    fetch_all,
    fetch_one,
    fetch_val,
)
from scheduling.db.pool import get_db_transaction
from scheduling.features.organizations.domain import MembershipRole
from scheduling.infrastructure.observability.logging import get_logger
from scheduling.services.availability import AvailabilityRange

logger = get_logger(__name__)


class MembershipRepository:
    @staticmethod
    async def find_member_user_ids(team_id: int, user_ids: Sequence[int]) -> set[int]:
        if not user_ids:
            return set()
        rows = await fetch_all(
            "SELECT user_id FROM memberships WHERE team_id = %s AND user_id = ANY(%s)",
            (team_id, list(user_ids)),
        )
        return {row["user_id"] for row in rows}

    @staticmethod
    async def get_role(team_id: int, user_id: int) -> MembershipRole | None:
        role = await fetch_val(
            "SELECT role FROM memberships WHERE team_id = %s AND user_id = %s AND accepted = true",
            (team_id, user_id),
        )
        return MembershipRole(role) if role else None

    @staticmethod
    async def is_member(team_id: int, user_id: int) -> bool:
        count = await fetch_val(
            "SELECT COUNT(*) FROM memberships WHERE team_id = %s AND user_id = %s",
            (team_id, user_id),
        )
        return bool(count)

    @staticmethod
    async def count_owned_published_teams(user_id: int) -> int:
        return await fetch_val(
            """
            SELECT COUNT(*)
            FROM memberships m
            JOIN teams t ON t.id = m.team_id
            WHERE m.user_id = %s
              AND m.role = 'OWNER'
              AND t.is_organization = false
              AND t.parent_id IS NULL
              AND t.slug IS NOT NULL
            """,
            (user_id,),
        ) or 0

    @staticmethod
    async def create(
        *, user_id: int, team_id: int, role: MembershipRole, accepted: bool
    ) -> bool:
        """Returns False when the membership already existed."""
        created = await execute_query(
            """
            INSERT INTO memberships (user_id, team_id, role, accepted)
            VALUES (%s, %s, %s, %s)
            ON CONFLICT (user_id, team_id) DO NOTHING
            """,
            (user_id, team_id, role.value, accepted),
        )
        return created > 0


class ProfileRepository:
    @staticmethod
    async def create_if_missing(*, user_id: int, organization_id: int, username: str) -> None:
        await execute_query(
            """
            INSERT INTO profiles (user_id, organization_id, username)
            VALUES (%s, %s, %s)
            ON CONFLICT (user_id, organization_id) DO NOTHING
            """,
            (user_id, organization_id, username),
        )


class TeamRepository:
    @staticmethod
    async def find_by_id(team_id: int) -> dict | None:
        return await fetch_one(
            "SELECT id, name, slug, parent_id, is_organization FROM teams WHERE id = %s",
            (team_id,),
        )

    @staticmethod
    async def find_existing_slugs(parent_id: int, slugs: Sequence[str]) -> set[str]:
        if not slugs:
            return set()
        rows = await fetch_all(
            "SELECT slug FROM teams WHERE parent_id = %s AND slug = ANY(%s)",
            (parent_id, list(slugs)),
        )
        return {row["slug"] for row in rows}

    @staticmethod
    async def create_with_owner(*, name: str, slug: str, parent_id: int, owner_id: int) -> int:
        async with await get_db_transaction() as conn:
            row = await fetch_one(
                """
                INSERT INTO teams (name, slug, parent_id, is_organization, metadata)
                VALUES (%s, %s, %s, false, %s)
                RETURNING id
                """,
                (name, slug, parent_id, Jsonb({})),
                connection=conn,
            )
            await conn.execute(
                """
                INSERT INTO memberships (user_id, team_id, role, accepted)
                VALUES (%s, %s, %s, true)
                ON CONFLICT (user_id, team_id) DO NOTHING
                """,
                (owner_id, row["id"], MembershipRole.OWNER.value),
            )
        logger.info("Team created", team_id=row["id"], parent_id=parent_id, slug=slug)
        return row["id"]

    @staticmethod
    async def move_to_organization(
        *, team_id: int, organization_id: int, new_slug: str, old_slug: str | None, to_url: str
    ) -> int:
        """
        Re-parent a team under the organization and bring its members along.

        Returns:
            Number of members newly added to the organization
        """
        async with await get_db_transaction() as conn:
            await conn.execute(
                "UPDATE teams SET parent_id = %s, slug = %s WHERE id = %s",
                (organization_id, new_slug, team_id),
            )
            cursor = await conn.execute(
                """
                INSERT INTO memberships (user_id, team_id, role, accepted)
                SELECT m.user_id, %s, 'MEMBER', true
                FROM memberships m
                WHERE m.team_id = %s AND m.accepted = true
                ON CONFLICT (user_id, team_id) DO NOTHING
                """,
                (organization_id, team_id),
            )
            added = cursor.rowcount
            await conn.execute(
                """
                INSERT INTO profiles (user_id, organization_id, username)
                SELECT u.id, %s, COALESCE(u.username, split_part(u.email, '@', 1))
                FROM memberships m
                JOIN users u ON u.id = m.user_id
                WHERE m.team_id = %s AND m.accepted = true
                ON CONFLICT (user_id, organization_id) DO NOTHING
                """,
                (organization_id, team_id),
            )
            if old_slug:
                await conn.execute(
                    """
                    INSERT INTO temp_org_redirects (from_slug, from_org_id, type, to_url, enabled)
                    VALUES (%s, 0, 'Team', %s, true)
                    ON CONFLICT (from_slug, from_org_id, type) DO UPDATE SET to_url = EXCLUDED.to_url
                    """,
                    (old_slug, to_url),
                )
        return added


class AvailabilityRepository:
    @staticmethod
    async def create_many(user_id: int, availability: Sequence[AvailabilityRange]) -> None:
        if not availability:
            return
        await execute_transaction(
            [
                (
                    "INSERT INTO availability (user_id, days, start_time, end_time) VALUES (%s, %s, %s, %s)",
                    (user_id, item.days, item.start_time, item.end_time),
                )
                for item in availability
            ]
        )


class VerificationTokenRepository:
    TOKEN_TTL = timedelta(days=30)

    @classmethod
    async def create(cls, *, identifier: str, token: str, team_id: int) -> None:
        await execute_query(
            """
            INSERT INTO verification_tokens (identifier, token, expires, team_id)
            VALUES (%s, %s, %s, %s)
            """,
            (identifier, token, datetime.now(UTC) + cls.TOKEN_TTL, team_id),
        )
