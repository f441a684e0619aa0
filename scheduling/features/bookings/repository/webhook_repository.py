"""
Webhook subscriptions lookup.
"""

from scheduling.db.helpers import fetch_all
from scheduling.services.webhooks import WebhookSubscriber


class WebhookRepository:
    @staticmethod
    async def find_subscribers(
        *,
        user_id: int | None,
        event_type_id: int | None,
        team_id: int | None,
        trigger_event: str,
    ) -> list[WebhookSubscriber]:
        """Active webhooks of the organizer, the event type or its team listening to a trigger."""
        rows = await fetch_all(
            """
            SELECT id, subscriber_url, payload_template, app_id, secret
            FROM webhooks
            WHERE active = true
              AND %s = ANY(event_triggers)
              AND (
                    (user_id IS NOT NULL AND user_id = %s)
                 OR (event_type_id IS NOT NULL AND event_type_id = %s)
                 OR (team_id IS NOT NULL AND team_id = %s)
              )
            """,
            (trigger_event, user_id, event_type_id, team_id),
        )
        return [
            WebhookSubscriber(
                id=str(row["id"]),
                subscriber_url=row["subscriber_url"],
                payload_template=row["payload_template"],
                app_id=row["app_id"],
                secret=row["secret"],
            )
            for row in rows
        ]
