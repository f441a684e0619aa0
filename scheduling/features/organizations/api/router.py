"""
Stripe webhook for organization purchases.

Stripe redelivers an event until it gets a 2xx, so any failure while
finalizing the onboarding is answered with a 500 and retried later.
"""

import json

import stripe
from fastapi import APIRouter, Header, HTTPException, Request, status

from scheduling.config import settings
from scheduling.features.organizations.repository import OrganizationOnboardingRepository
from scheduling.features.organizations.services.onboarding_finalizer import (
    create_organization_from_onboarding,
)
from scheduling.infrastructure.observability.logging import get_logger, safe_stringify

router = APIRouter(prefix="/api/stripe", tags=["stripe"])
logger = get_logger(__name__)

CHECKOUT_SESSION_COMPLETED = "checkout.session.completed"


def _verify_signature(payload: bytes, signature: str | None) -> None:
    if not settings.STRIPE_WEBHOOK_SECRET:
        logger.error("Stripe webhook secret not configured")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Stripe webhook not configured",
        )
    if not signature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing signature")

    try:
        stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
    except ValueError as e:
        logger.warning("Invalid Stripe payload", error=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid payload") from e
    except stripe.SignatureVerificationError as e:
        logger.warning("Invalid Stripe signature", error=str(e))
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature") from e


@router.post("/webhook")
async def stripe_webhook(request: Request, stripe_signature: str | None = Header(default=None)):
    """
    Handle Stripe events.

    Only checkout.session.completed carrying an organizationOnboardingId is
    acted on; everything else is acknowledged and ignored.
    """
    payload = await request.body()
    _verify_signature(payload, stripe_signature)
    # Verified; read it as plain dicts
    event = json.loads(payload)

    event_type = event["type"]
    if event_type != CHECKOUT_SESSION_COMPLETED:
        logger.debug("Ignoring Stripe event", event_type=event_type)
        return {"received": True, "handled": False}

    session = event["data"]["object"]
    metadata = session.get("metadata") or {}
    onboarding_id = metadata.get("organizationOnboardingId")
    if not onboarding_id:
        logger.debug("Checkout session is not an organization purchase", session_id=session.get("id"))
        return {"received": True, "handled": False}

    onboarding = await OrganizationOnboardingRepository.find_by_id(int(onboarding_id))
    if not onboarding:
        logger.error("Organization onboarding not found", onboarding_id=onboarding_id)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Onboarding not found")

    if onboarding.is_complete:
        logger.info("Onboarding already complete", onboarding_id=onboarding.id)
        return {"received": True, "handled": False}

    subscription_id = session.get("subscription") or onboarding.stripe_subscription_id or ""

    try:
        organization, _ = await create_organization_from_onboarding(onboarding, subscription_id)
        await OrganizationOnboardingRepository.mark_as_complete(onboarding.id, subscription_id or None)
    except Exception as e:
        logger.error(
            "Organization onboarding failed",
            onboarding_id=onboarding.id,
            recoverable=getattr(e, "recoverable", True),
            error=safe_stringify(e),
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to finalize organization onboarding",
        ) from e

    logger.info(
        "Organization onboarding completed",
        onboarding_id=onboarding.id,
        organization_id=organization.id,
    )
    return {"received": True, "handled": True, "organization_id": organization.id}
