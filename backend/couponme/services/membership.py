import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from couponme.core import metrics
from couponme.core.config import settings
from couponme.models.user import User

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def membership_expiry_from(now: datetime) -> datetime:
    return now + timedelta(days=settings.membership_duration_days)


async def activate_membership(session: AsyncSession, user_id: uuid.UUID, now: datetime | None = None) -> User | None:
    """Start a fresh membership period for ``user_id``.

    The expiry is overwritten rather than extended. Returns ``None`` when the
    user does not exist.
    """
    user = await session.get(User, user_id)
    if user is None:
        return None
    user.membership_expiry = membership_expiry_from(now or _utcnow())
    session.add(user)
    await session.commit()
    await session.refresh(user)
    metrics.record_membership_activated()
    logger.info(
        "membership_activated",
        extra={"user_id": str(user.id), "membership_expiry": user.membership_expiry.isoformat()},
    )
    return user
