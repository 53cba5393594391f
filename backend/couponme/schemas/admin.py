from couponme.schemas.base import CamelModel


class DashboardStats(CamelModel):
    total_coupons: int
    pending_coupons: int
    approved_coupons: int
    rejected_coupons: int
    total_users: int
    total_businesses: int
    total_admins: int
    active_members: int


class StatsResponse(CamelModel):
    stats: DashboardStats


class MessageResponse(CamelModel):
    message: str
