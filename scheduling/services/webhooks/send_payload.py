"""
Webhook payload delivery.

Payloads are signed with HMAC-SHA256 over the exact request body so
subscribers can verify the sender.
"""

import hashlib
import hmac
import json
import re
from dataclasses import dataclass
from typing import Any

import httpx

from scheduling.config import settings
from scheduling.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Cal-Signature-256"
NO_SECRET = "no-secret-provided"
_TEMPLATE_VARIABLE = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")


@dataclass(slots=True)
class WebhookSubscriber:
    id: str
    subscriber_url: str
    payload_template: str | None = None
    app_id: str | None = None
    secret: str | None = None


class WebhookDeliveryError(Exception):
    """Subscriber rejected the payload or could not be reached."""

    def __init__(self, message: str, subscriber_url: str, status_code: int | None = None):
        super().__init__(message)
        self.subscriber_url = subscriber_url
        self.status_code = status_code


def _lookup(data: dict[str, Any], path: str) -> Any:
    value: Any = data
    for part in path.split("."):
        if not isinstance(value, dict) or part not in value:
            return None
        value = value[part]
    return value


def apply_template(template: str, data: dict[str, Any]) -> str:
    """Substitute {{dotted.keys}} with values from data; unknown keys render empty."""

    def render(match: re.Match) -> str:
        value = _lookup(data, match.group(1))
        if value is None:
            return ""
        if isinstance(value, (dict, list)):
            return json.dumps(value, default=str)
        return str(value)

    return _TEMPLATE_VARIABLE.sub(render, template)


def sign_body(secret: str | None, body: str) -> str:
    if not secret:
        return NO_SECRET
    return hmac.new(secret.encode(), body.encode(), hashlib.sha256).hexdigest()


def build_body(
    trigger_event: str, created_at: str, webhook: WebhookSubscriber, data: dict[str, Any]
) -> tuple[str, str]:
    """Returns (body, content_type)."""
    if webhook.payload_template:
        rendered = apply_template(
            webhook.payload_template,
            {"triggerEvent": trigger_event, "createdAt": created_at, **data},
        )
        try:
            json.loads(rendered)
            return rendered, "application/json"
        except ValueError:
            return rendered, "application/x-www-form-urlencoded"

    body = json.dumps(
        {"triggerEvent": trigger_event, "createdAt": created_at, "payload": data}, default=str
    )
    return body, "application/json"


async def send_payload(
    secret: str | None,
    trigger_event: str,
    created_at: str,
    webhook: WebhookSubscriber,
    data: dict[str, Any],
    *,
    client: httpx.AsyncClient | None = None,
) -> dict[str, Any]:
    """
    POST a payload to one subscriber.

    Raises:
        WebhookDeliveryError: non-2xx response or transport failure
    """
    body, content_type = build_body(trigger_event, created_at, webhook, data)
    headers = {
        "Content-Type": content_type,
        SIGNATURE_HEADER: sign_body(secret, body),
    }

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT)
    try:
        response = await client.post(webhook.subscriber_url, content=body, headers=headers)
    except httpx.RequestError as e:
        raise WebhookDeliveryError(
            f"Webhook request failed: {e}", subscriber_url=webhook.subscriber_url
        ) from e
    finally:
        if owns_client:
            await client.aclose()

    if not response.is_success:
        raise WebhookDeliveryError(
            f"Webhook rejected with HTTP {response.status_code}",
            subscriber_url=webhook.subscriber_url,
            status_code=response.status_code,
        )

    logger.debug(
        "Webhook delivered",
        webhook_id=webhook.id,
        trigger_event=trigger_event,
        status_code=response.status_code,
    )
    return {"ok": True, "status": response.status_code, "message": response.text}
