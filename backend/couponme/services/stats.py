from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.models.coupon import Coupon, CouponStatus
from couponme.models.user import User, UserRole


async def _count(session: AsyncSession, model, *criteria) -> int:  # type: ignore[no-untyped-def]
    result = await session.execute(select(func.count()).select_from(model).where(*criteria))
    return int(result.scalar_one() or 0)


async def dashboard_stats(session: AsyncSession, now: datetime | None = None) -> dict[str, int]:
    """Platform totals, computed fresh on every call."""
    now = now or datetime.now(timezone.utc)
    return {
        "total_coupons": await _count(session, Coupon),
        "pending_coupons": await _count(session, Coupon, Coupon.status == CouponStatus.PENDING),
        "approved_coupons": await _count(session, Coupon, Coupon.status == CouponStatus.APPROVED),
        "rejected_coupons": await _count(session, Coupon, Coupon.status == CouponStatus.REJECTED),
        "total_users": await _count(session, User, User.role == UserRole.USER),
        "total_businesses": await _count(session, User, User.role == UserRole.BUSINESS),
        "total_admins": await _count(session, User, User.role == UserRole.ADMIN),
        "active_members": await _count(
            session, User, User.membership_expiry.is_not(None), User.membership_expiry >= now
        ),
    }
