from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from couponme.core.dependencies import require_admin
from couponme.db.session import get_session
from couponme.models.user import User, UserRole
from couponme.schemas.admin import DashboardStats, MessageResponse, StatsResponse
from couponme.schemas.coupon import CouponRead
from couponme.schemas.user import UserAdminRead, UserAdminUpdate
from couponme.services import coupons as coupon_service
from couponme.services import stats as stats_service
from couponme.services import users as user_service

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/coupons/pending", response_model=list[CouponRead])
async def pending_coupons(
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> list[CouponRead]:
    coupons = await coupon_service.list_pending_coupons(session)
    return [coupon_service.present_coupon(coupon, admin) for coupon in coupons]


@router.get("/stats", response_model=StatsResponse, dependencies=[Depends(require_admin)])
async def dashboard_stats(session: AsyncSession = Depends(get_session)) -> StatsResponse:
    stats = await stats_service.dashboard_stats(session)
    return StatsResponse(stats=DashboardStats(**stats))


@router.get("/users", response_model=list[UserAdminRead], dependencies=[Depends(require_admin)])
async def list_users(
    role: UserRole | None = Query(default=None),
    session: AsyncSession = Depends(get_session),
) -> list[UserAdminRead]:
    return await user_service.list_users(session, role=role)


@router.patch("/users/{user_id}", response_model=UserAdminRead, dependencies=[Depends(require_admin)])
async def update_user(
    user_id: UUID,
    payload: UserAdminUpdate,
    session: AsyncSession = Depends(get_session),
) -> UserAdminRead:
    return await user_service.update_user(session, user_id, payload)


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: UUID,
    session: AsyncSession = Depends(get_session),
    admin: User = Depends(require_admin),
) -> MessageResponse:
    await user_service.delete_user(session, user_id, admin)
    return MessageResponse(message="User deleted successfully")
