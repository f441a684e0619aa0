from .send_payload import (  # noqa: F401
    WebhookDeliveryError,
    WebhookSubscriber,
    send_payload,
)
