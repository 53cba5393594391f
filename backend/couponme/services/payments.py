import logging
from datetime import datetime, timezone
from typing import Any, cast

import stripe
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.core import metrics
from couponme.core.config import settings
from couponme.core.errors import BadGateway, BadRequest, InvalidSignature, ServiceUnavailable
from couponme.models.user import User
from couponme.models.webhook import PaymentWebhookEvent

stripe = cast(Any, stripe)

logger = logging.getLogger(__name__)

_PLACEHOLDER_SUFFIX = "_placeholder"


def _looks_configured(value: str | None) -> bool:
    cleaned = (value or "").strip()
    if not cleaned:
        return False
    return not cleaned.endswith(_PLACEHOLDER_SUFFIX)


def is_stripe_configured() -> bool:
    return _looks_configured(settings.stripe_secret_key)


def is_stripe_webhook_configured() -> bool:
    return _looks_configured(settings.stripe_webhook_secret)


def init_stripe() -> None:
    stripe.api_key = (settings.stripe_secret_key or "").strip()


def _checkout_urls() -> tuple[str, str]:
    base = settings.frontend_origin.rstrip("/")
    return (
        f"{base}/membership/success?session_id={{CHECKOUT_SESSION_ID}}",
        f"{base}/membership/cancel",
    )


def _membership_session_kwargs(user: User) -> dict[str, Any]:
    success_url, cancel_url = _checkout_urls()
    metadata = {"userId": str(user.id), "type": "membership"}
    return {
        "mode": "payment",
        "payment_method_types": ["card"],
        "customer_email": user.email,
        "client_reference_id": str(user.id),
        "line_items": [
            {
                "price_data": {
                    "currency": settings.membership_currency,
                    "product_data": {
                        "name": settings.membership_product_name,
                        "description": settings.membership_product_description,
                    },
                    "unit_amount": settings.membership_price_cents,
                },
                "quantity": 1,
            }
        ],
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
    }


def event_field(obj: Any, key: str) -> Any:
    if obj is None:
        return None
    getter = getattr(obj, "get", None)
    if callable(getter):
        return getter(key)
    return getattr(obj, key, None)


def create_membership_checkout(user: User) -> dict[str, str]:
    """Open a hosted checkout session for one membership purchase."""
    if not is_stripe_configured():
        metrics.record_payment_failure()
        raise ServiceUnavailable("Payment service not configured")
    init_stripe()
    try:
        session_obj = stripe.checkout.Session.create(**_membership_session_kwargs(user))
    except Exception as exc:
        metrics.record_payment_failure()
        logger.exception("checkout_session_failed", extra={"user_id": str(user.id)})
        raise BadGateway("Failed to create checkout session") from exc

    session_id = event_field(session_obj, "id")
    checkout_url = event_field(session_obj, "url")
    if not session_id or not checkout_url:
        metrics.record_payment_failure()
        raise BadGateway("Checkout session missing url")
    logger.info("checkout_session_created", extra={"user_id": str(user.id), "session_id": str(session_id)})
    return {"session_id": str(session_id), "url": str(checkout_url)}


def construct_event(payload: bytes, sig_header: str | None) -> Any:
    secret = (settings.stripe_webhook_secret or "").strip()
    if not _looks_configured(secret):
        raise ServiceUnavailable("Webhook secret not configured")
    if not sig_header:
        raise InvalidSignature("Missing signature")
    init_stripe()
    try:
        return stripe.Webhook.construct_event(payload, sig_header, secret)
    except Exception as exc:  # the SDK raises both ValueError and SignatureVerificationError
        logger.warning("webhook_signature_rejected")
        raise InvalidSignature("Invalid signature") from exc


def _event_id(event: Any) -> str:
    event_id = str(event_field(event, "id") or "").strip()
    if not event_id:
        raise BadRequest("Missing event id")
    return event_id


def _event_type(event: Any) -> str | None:
    return str(event_field(event, "type") or "").strip() or None


def event_object(event: Any) -> Any:
    return event_field(event_field(event, "data"), "object")


def _payload_summary(event: Any) -> dict[str, Any]:
    summary: dict[str, Any] = {"id": event_field(event, "id"), "type": event_field(event, "type")}
    obj = event_object(event)
    if obj is not None:
        obj_summary = {
            key: event_field(obj, key)
            for key in ("id", "client_reference_id", "payment_status", "amount_total", "currency")
            if event_field(obj, key) is not None
        }
        if obj_summary:
            summary["object"] = obj_summary
    return summary


async def record_webhook_event(session: AsyncSession, event: Any) -> PaymentWebhookEvent:
    """Insert the ledger row for ``event`` or bump the attempt count of an existing one."""
    event_id = _event_id(event)
    event_type = _event_type(event)
    summary = _payload_summary(event)
    now = datetime.now(timezone.utc)

    record = PaymentWebhookEvent(
        event_id=event_id,
        event_type=event_type,
        attempts=1,
        last_attempt_at=now,
        payload=summary,
    )
    session.add(record)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
    else:
        await session.refresh(record)
        return record

    result = await session.execute(select(PaymentWebhookEvent).where(PaymentWebhookEvent.event_id == event_id))
    existing = result.scalar_one()
    existing.attempts = int(existing.attempts or 0) + 1
    existing.last_attempt_at = now
    existing.event_type = event_type or existing.event_type
    session.add(existing)
    await session.commit()
    await session.refresh(existing)
    return existing


async def mark_webhook_processed(session: AsyncSession, record: PaymentWebhookEvent) -> None:
    record.processed_at = datetime.now(timezone.utc)
    record.last_error = None
    session.add(record)
    await session.commit()


async def mark_webhook_failed(session: AsyncSession, record: PaymentWebhookEvent, error: str) -> None:
    record.last_error = error[:2000]
    session.add(record)
    await session.commit()
