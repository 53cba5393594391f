import logging
import uuid

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.core.errors import BadRequest, NotFound
from couponme.models.coupon import Coupon
from couponme.models.user import User, UserRole
from couponme.schemas.user import UserAdminRead, UserAdminUpdate

logger = logging.getLogger(__name__)


def _admin_read(user: User, coupon_count: int) -> UserAdminRead:
    return UserAdminRead.model_validate(user).model_copy(update={"coupon_count": coupon_count})


async def list_users(session: AsyncSession, role: UserRole | None = None) -> list[UserAdminRead]:
    coupon_counts = (
        select(Coupon.business_id, func.count(Coupon.id).label("coupon_count"))
        .group_by(Coupon.business_id)
        .subquery()
    )
    query = (
        select(User, func.coalesce(coupon_counts.c.coupon_count, 0))
        .outerjoin(coupon_counts, coupon_counts.c.business_id == User.id)
        .order_by(User.created_at.desc())
    )
    if role is not None:
        query = query.where(User.role == role)
    rows = (await session.execute(query)).all()
    return [_admin_read(user, int(count)) for user, count in rows]


async def _coupon_count(session: AsyncSession, user_id: uuid.UUID) -> int:
    result = await session.execute(select(func.count(Coupon.id)).where(Coupon.business_id == user_id))
    return int(result.scalar_one())


async def get_user(session: AsyncSession, user_id: uuid.UUID) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def update_user(session: AsyncSession, user_id: uuid.UUID, payload: UserAdminUpdate) -> UserAdminRead:
    user = await get_user(session, user_id)
    data = payload.model_dump(exclude_unset=True)
    if data.get("name") is not None:
        user.name = data["name"].strip()
    if data.get("role") is not None:
        user.role = data["role"]
    if "membership_expiry" in data:
        # An explicit null ends the membership.
        user.membership_expiry = data["membership_expiry"]
    session.add(user)
    await session.commit()
    await session.refresh(user)
    logger.info("user_updated", extra={"user_id": str(user.id), "fields": sorted(data)})
    return _admin_read(user, await _coupon_count(session, user.id))


async def delete_user(session: AsyncSession, user_id: uuid.UUID, actor: User) -> None:
    user = await get_user(session, user_id)
    if user.id == actor.id:
        raise BadRequest("Cannot delete your own account")
    await session.delete(user)
    await session.commit()
    logger.info("user_deleted", extra={"user_id": str(user_id), "actor_id": str(actor.id)})
