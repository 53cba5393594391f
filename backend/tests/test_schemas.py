from datetime import datetime, timedelta, timezone

from couponme.schemas.coupon import CouponUpdate
from couponme.schemas.user import UserAdminUpdate


def test_admin_membership_expiry_is_normalised_to_utc() -> None:
    naive = UserAdminUpdate(membership_expiry=datetime(2030, 6, 1, 8, 0))
    assert naive.membership_expiry == datetime(2030, 6, 1, 8, 0, tzinfo=timezone.utc)
    assert naive.membership_expiry.tzinfo == timezone.utc

    athens = timezone(timedelta(hours=3))
    shifted = UserAdminUpdate(membership_expiry=datetime(2030, 6, 1, 8, 0, tzinfo=athens))
    assert shifted.membership_expiry.tzinfo == timezone.utc
    assert shifted.membership_expiry.hour == 5

    assert UserAdminUpdate(membership_expiry=None).membership_expiry is None


def test_coupon_expiration_is_normalised_to_utc() -> None:
    update = CouponUpdate(expiration_date=datetime(2030, 1, 1, 0, 30, tzinfo=timezone(timedelta(hours=2))))
    assert update.expiration_date == datetime(2029, 12, 31, 22, 30, tzinfo=timezone.utc)
    assert update.expiration_date.tzinfo == timezone.utc
