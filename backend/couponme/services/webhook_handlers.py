from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import Any

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.core import metrics
from couponme.core.errors import BadRequest
from couponme.models.webhook import PaymentWebhookEvent
from couponme.services import membership as membership_service
from couponme.services import payments

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"
ACKNOWLEDGED_ONLY = {"payment_intent.succeeded", "payment_intent.payment_failed"}


def _checkout_user_id(session_obj: Any) -> str | None:
    metadata = payments.event_field(session_obj, "metadata")
    user_id = payments.event_field(metadata, "userId") if metadata is not None else None
    return str(user_id or payments.event_field(session_obj, "client_reference_id") or "").strip() or None


async def _handle_checkout_completed(session: AsyncSession, event: Any, now: datetime | None) -> None:
    session_obj = payments.event_object(event)
    raw_user_id = _checkout_user_id(session_obj)
    if not raw_user_id:
        logger.warning("webhook_missing_user", extra={"event_id": payments.event_field(event, "id")})
        raise BadRequest("Missing user id")
    try:
        user_id = uuid.UUID(raw_user_id)
    except ValueError:
        logger.warning("webhook_unknown_user", extra={"user_id": raw_user_id})
        raise BadRequest("User not found")

    user = await membership_service.activate_membership(session, user_id, now=now)
    if user is None:
        logger.warning("webhook_unknown_user", extra={"user_id": raw_user_id})
        raise BadRequest("User not found")


async def process_event(session: AsyncSession, event: Any, now: datetime | None = None) -> None:
    event_type = payments.event_field(event, "type")
    if event_type == CHECKOUT_COMPLETED:
        await _handle_checkout_completed(session, event, now)
        return
    if event_type == "payment_intent.payment_failed":
        metrics.record_payment_failure()
    level = logging.INFO if event_type in ACKNOWLEDGED_ONLY else logging.DEBUG
    logger.log(level, "webhook_ignored", extra={"event_type": event_type})


async def _record_failure(session: AsyncSession, record_id: uuid.UUID, error: str) -> None:
    await session.rollback()
    record = await session.get(PaymentWebhookEvent, record_id)
    if record is not None:
        await payments.mark_webhook_failed(session, record, error)


async def handle_payment_webhook(
    session: AsyncSession, payload: bytes, sig_header: str | None, now: datetime | None = None
) -> dict[str, Any]:
    """Verify, record and apply one provider notification.

    A redelivered event that was already processed is acknowledged without
    touching any state.
    """
    event = payments.construct_event(payload, sig_header)
    metrics.record_webhook_received()
    record = await payments.record_webhook_event(session, event)
    event_type = record.event_type
    if record.processed_at is not None:
        logger.info("webhook_duplicate", extra={"event_id": record.event_id, "event_type": event_type})
        return {"received": True, "type": event_type, "duplicate": True}

    record_id = record.id
    try:
        await process_event(session, event, now=now)
    except HTTPException as exc:
        await _record_failure(session, record_id, str(exc.detail))
        raise
    except Exception as exc:
        await _record_failure(session, record_id, str(exc) or type(exc).__name__)
        raise

    record = await session.get(PaymentWebhookEvent, record_id)
    if record is not None:
        await payments.mark_webhook_processed(session, record)
    return {"received": True, "type": event_type, "duplicate": False}
