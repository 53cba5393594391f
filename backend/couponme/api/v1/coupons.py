from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.core.dependencies import get_current_user_optional, require_admin, require_auth, require_business
from couponme.db.session import get_session
from couponme.models.coupon import CouponStatus
from couponme.models.user import User
from couponme.schemas.coupon import CouponCreate, CouponDecision, CouponDeleted, CouponRead, CouponUpdate
from couponme.services import coupons as coupon_service

router = APIRouter(prefix="/coupons", tags=["coupons"])


@router.get("", response_model=list[CouponRead])
async def list_coupons(
    category_id: UUID | None = Query(default=None, alias="categoryId"),
    category: str | None = Query(default=None),
    status_filter: CouponStatus | None = Query(default=None, alias="status"),
    business_id: UUID | None = Query(default=None, alias="businessId"),
    limit: int | None = Query(default=None, ge=1),
    session: AsyncSession = Depends(get_session),
    viewer: User | None = Depends(get_current_user_optional),
) -> list[CouponRead]:
    filters = coupon_service.CouponFilters(
        category_id=category_id,
        category_slug=category,
        status=status_filter,
        business_id=business_id,
        limit=limit,
    )
    coupons = await coupon_service.list_coupons(session, filters)
    return [coupon_service.present_coupon(coupon, viewer) for coupon in coupons]


@router.post("", response_model=CouponRead, status_code=status.HTTP_201_CREATED)
async def create_coupon(
    payload: CouponCreate,
    session: AsyncSession = Depends(get_session),
    business: User = Depends(require_business),
) -> CouponRead:
    coupon = await coupon_service.create_coupon(session, payload, business)
    return coupon_service.present_coupon(coupon, business)


@router.get("/{coupon_id}", response_model=CouponRead)
async def get_coupon(
    coupon_id: UUID,
    session: AsyncSession = Depends(get_session),
    viewer: User | None = Depends(get_current_user_optional),
) -> CouponRead:
    coupon = await coupon_service.get_coupon(session, coupon_id)
    return coupon_service.present_coupon(coupon, viewer)


@router.patch("/{coupon_id}", response_model=CouponRead)
async def update_coupon(
    coupon_id: UUID,
    payload: CouponUpdate,
    session: AsyncSession = Depends(get_session),
    actor: User = Depends(require_auth),
) -> CouponRead:
    coupon = await coupon_service.update_coupon(session, coupon_id, payload, actor)
    return coupon_service.present_coupon(coupon, actor)


@router.delete("/{coupon_id}", response_model=CouponDeleted)
async def delete_coupon(
    coupon_id: UUID,
    session: AsyncSession = Depends(get_session),
    actor: User = Depends(require_auth),
) -> CouponDeleted:
    await coupon_service.delete_coupon(session, coupon_id, actor)
    return CouponDeleted(message="Coupon deleted successfully", id=coupon_id)


@router.post("/{coupon_id}/approve", response_model=CouponRead)
async def review_coupon(
    coupon_id: UUID,
    decision: CouponDecision,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> CouponRead:
    coupon = await coupon_service.review_coupon(session, coupon_id, CouponStatus(decision.status))
    return coupon_service.present_coupon(coupon, admin)


@router.post("/{coupon_id}/resubmit", response_model=CouponRead)
async def resubmit_coupon(
    coupon_id: UUID,
    session: AsyncSession = Depends(get_session),
    owner: User = Depends(require_auth),
) -> CouponRead:
    coupon = await coupon_service.resubmit_coupon(session, coupon_id, owner)
    return coupon_service.present_coupon(coupon, owner)
