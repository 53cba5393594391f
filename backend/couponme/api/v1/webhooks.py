from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.db.session import get_session
from couponme.schemas.payment import WebhookAck
from couponme.services import webhook_handlers

router = APIRouter(prefix="/webhooks", tags=["payments"])


@router.post("/payment", response_model=WebhookAck)
@router.post("/stripe", response_model=WebhookAck, include_in_schema=False)
async def payment_webhook(
    request: Request,
    stripe_signature: str | None = Header(default=None),
    session: AsyncSession = Depends(get_session),
) -> WebhookAck:
    payload = await request.body()
    result = await webhook_handlers.handle_payment_webhook(session, payload, stripe_signature)
    return WebhookAck(**result)
