from couponme.db.base import Base  # noqa: F401
from couponme.models.user import User, UserRole  # noqa: F401
from couponme.models.category import Category  # noqa: F401
from couponme.models.coupon import Coupon, CouponStatus  # noqa: F401
from couponme.models.webhook import PaymentWebhookEvent  # noqa: F401

__all__ = [
    "Base",
    "User",
    "UserRole",
    "Category",
    "Coupon",
    "CouponStatus",
    "PaymentWebhookEvent",
]
