"""
User lookups and writes used while setting up an organization.
"""

from collections.abc import Sequence

from scheduling.db.helpers import execute_query, fetch_all, fetch_one
from scheduling.features.organizations.domain import OrgOwner


class UserRepository:
    @staticmethod
    async def find_user_to_be_org_owner(email: str) -> OrgOwner | None:
        row = await fetch_one(
            """
            SELECT id, email, username, name, locale, completed_onboarding,
                   email_verified IS NOT NULL AS email_verified, organization_id
            FROM users
            WHERE lower(email) = lower(%s)
            """,
            (email,),
        )
        if not row:
            return None
        return OrgOwner(
            id=row["id"],
            email=row["email"],
            username=row["username"],
            name=row["name"],
            locale=row["locale"],
            completed_onboarding=bool(row["completed_onboarding"]),
            email_verified=bool(row["email_verified"]),
            organization_id=row["organization_id"],
        )

    @staticmethod
    async def find_instance_admin_emails() -> list[str]:
        rows = await fetch_all("SELECT email FROM users WHERE role = 'ADMIN'")
        return [row["email"] for row in rows]

    @staticmethod
    async def find_by_emails(emails: Sequence[str]) -> list[dict]:
        if not emails:
            return []
        return await fetch_all(
            """
            SELECT id, email, username, locale, organization_id
            FROM users
            WHERE lower(email) = ANY(%s)
            """,
            ([e.lower() for e in emails],),
        )

    @staticmethod
    async def create_invited_user(
        *, email: str, invited_to: int, organization_id: int | None, username: str | None
    ) -> int:
        """Create a placeholder account for an invitee; returns the existing id if it raced."""
        row = await fetch_one(
            """
            INSERT INTO users (email, username, invited_to, organization_id, locale)
            VALUES (lower(%s), %s, %s, %s, 'en')
            ON CONFLICT (email) DO UPDATE SET email = EXCLUDED.email
            RETURNING id
            """,
            (email, username, invited_to, organization_id),
        )
        return row["id"]

    @staticmethod
    async def set_organization_id(user_id: int, organization_id: int) -> None:
        await execute_query(
            "UPDATE users SET organization_id = %s WHERE id = %s AND organization_id IS NULL",
            (organization_id, user_id),
        )
