import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.core import metrics
from couponme.core.errors import BadRequest, Forbidden, NotFound
from couponme.models.category import Category
from couponme.models.coupon import Coupon, CouponStatus
from couponme.models.user import User, UserRole, is_member
from couponme.schemas.coupon import CouponCreate, CouponRead, CouponUpdate

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = {"image_path"}


@dataclass(frozen=True)
class CouponFilters:
    category_id: uuid.UUID | None = None
    category_slug: str | None = None
    status: CouponStatus | None = None
    business_id: uuid.UUID | None = None
    limit: int | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_list_query(filters: CouponFilters, now: datetime | None = None) -> Select:
    """Translate list filters into a query.

    Without a status or business filter only approved, unexpired coupons are
    listed. An explicit APPROVED status keeps the expiry cut-off. Without a
    limit every matching row is returned.
    """
    now = now or _utcnow()
    query = select(Coupon)
    if filters.status is None and filters.business_id is None:
        query = query.where(Coupon.status == CouponStatus.APPROVED, Coupon.expiration_date >= now)
    else:
        if filters.status is not None:
            query = query.where(Coupon.status == filters.status)
            if filters.status == CouponStatus.APPROVED:
                query = query.where(Coupon.expiration_date >= now)
        if filters.business_id is not None:
            query = query.where(Coupon.business_id == filters.business_id)

    # A slug takes precedence over a category id.
    if filters.category_slug:
        query = query.join(Category, Coupon.category_id == Category.id).where(Category.slug == filters.category_slug)
    elif filters.category_id is not None:
        query = query.where(Coupon.category_id == filters.category_id)

    query = query.order_by(Coupon.created_at.desc())
    if filters.limit:
        query = query.limit(filters.limit)
    return query


async def list_coupons(session: AsyncSession, filters: CouponFilters, now: datetime | None = None) -> list[Coupon]:
    result = await session.execute(build_list_query(filters, now))
    return list(result.scalars())


async def list_pending_coupons(session: AsyncSession) -> list[Coupon]:
    result = await session.execute(
        select(Coupon).where(Coupon.status == CouponStatus.PENDING).order_by(Coupon.created_at.asc())
    )
    return list(result.scalars())


async def get_coupon(session: AsyncSession, coupon_id: uuid.UUID) -> Coupon:
    coupon = await session.get(Coupon, coupon_id)
    if coupon is None:
        raise NotFound("Coupon not found")
    return coupon


async def _reload(session: AsyncSession, coupon_id: uuid.UUID) -> Coupon:
    result = await session.execute(
        select(Coupon).where(Coupon.id == coupon_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _require_category(session: AsyncSession, category_id: uuid.UUID) -> None:
    if await session.get(Category, category_id) is None:
        raise BadRequest("Category not found")


def _ensure_can_modify(coupon: Coupon, actor: User) -> None:
    if actor.role != UserRole.ADMIN and coupon.business_id != actor.id:
        raise Forbidden("Not allowed to modify this coupon")


async def create_coupon(session: AsyncSession, payload: CouponCreate, business: User) -> Coupon:
    await _require_category(session, payload.category_id)
    coupon = Coupon(
        title=payload.title,
        description=payload.description,
        code=payload.code,
        discount_percentage=payload.discount_percentage,
        expiration_date=payload.expiration_date,
        image_path=payload.image_path,
        category_id=payload.category_id,
        business_id=business.id,
        status=CouponStatus.PENDING,
    )
    session.add(coupon)
    await session.commit()
    metrics.record_coupon_created()
    logger.info("coupon_created", extra={"coupon_id": str(coupon.id), "business_id": str(business.id)})
    return await _reload(session, coupon.id)


async def update_coupon(session: AsyncSession, coupon_id: uuid.UUID, payload: CouponUpdate, actor: User) -> Coupon:
    coupon = await get_coupon(session, coupon_id)
    _ensure_can_modify(coupon, actor)

    data = payload.model_dump(exclude_unset=True)
    new_status = data.pop("status", None)
    if new_status is not None and actor.role != UserRole.ADMIN and new_status != CouponStatus.PENDING:
        raise Forbidden("Only administrators can approve or reject coupons")
    if data.get("category_id") is not None:
        await _require_category(session, data["category_id"])

    for field, value in data.items():
        if value is None and field not in NULLABLE_FIELDS:
            continue
        setattr(coupon, field, value)
    if new_status is not None:
        previous = coupon.status
        coupon.status = new_status
        logger.info(
            "coupon_status_changed",
            extra={"coupon_id": str(coupon.id), "from_status": previous.value, "to_status": new_status.value},
        )
    session.add(coupon)
    await session.commit()
    return await _reload(session, coupon.id)


async def delete_coupon(session: AsyncSession, coupon_id: uuid.UUID, actor: User) -> None:
    coupon = await get_coupon(session, coupon_id)
    _ensure_can_modify(coupon, actor)
    await session.delete(coupon)
    await session.commit()
    logger.info("coupon_deleted", extra={"coupon_id": str(coupon_id), "actor_id": str(actor.id)})


async def review_coupon(session: AsyncSession, coupon_id: uuid.UUID, decision: CouponStatus) -> Coupon:
    # Concurrent reviews are last-write-wins.
    coupon = await get_coupon(session, coupon_id)
    previous = coupon.status
    coupon.status = decision
    session.add(coupon)
    await session.commit()
    metrics.record_coupon_review()
    logger.info(
        "coupon_status_changed",
        extra={"coupon_id": str(coupon_id), "from_status": previous.value, "to_status": decision.value},
    )
    return await _reload(session, coupon_id)


async def resubmit_coupon(session: AsyncSession, coupon_id: uuid.UUID, owner: User) -> Coupon:
    coupon = await get_coupon(session, coupon_id)
    if coupon.business_id != owner.id:
        raise Forbidden("Only the owning business can resubmit this coupon")
    previous = coupon.status
    coupon.status = CouponStatus.PENDING
    session.add(coupon)
    await session.commit()
    logger.info(
        "coupon_status_changed",
        extra={"coupon_id": str(coupon_id), "from_status": previous.value, "to_status": CouponStatus.PENDING.value},
    )
    return await _reload(session, coupon_id)


def can_view_code(coupon: Coupon, viewer: User | None, now: datetime | None = None) -> bool:
    if viewer is None:
        return False
    if viewer.role == UserRole.ADMIN or viewer.id == coupon.business_id:
        return True
    return is_member(viewer, now)


def present_coupon(coupon: Coupon, viewer: User | None, now: datetime | None = None) -> CouponRead:
    data = CouponRead.model_validate(coupon)
    if can_view_code(coupon, viewer, now):
        return data
    return data.model_copy(update={"code": None, "code_locked": True})
