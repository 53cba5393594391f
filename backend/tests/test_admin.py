import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict

from fastapi.testclient import TestClient
from sqlalchemy import func, select

from couponme.models.coupon import Coupon, CouponStatus
from couponme.models.user import User, UserRole


def _add_coupon(session_factory: Callable, business_id, category_id, status: CouponStatus) -> None:
    async def insert() -> None:
        async with session_factory() as session:
            session.add(
                Coupon(
                    title="Seeded coupon",
                    description="Seeded coupon description",
                    code="SEED10",
                    discount_percentage=10,
                    expiration_date=datetime.now(timezone.utc) + timedelta(days=7),
                    status=status,
                    business_id=business_id,
                    category_id=category_id,
                )
            )
            await session.commit()

    asyncio.run(insert())


def test_stats_counts(test_app: Dict[str, object], make_user, make_category, headers_for) -> None:
    client: TestClient = test_app["client"]  # type: ignore[assignment]
    session_factory: Callable = test_app["session_factory"]  # type: ignore[assignment]
    now = datetime.now(timezone.utc)
    admin = make_user("admin@x.com", UserRole.ADMIN)
    biz = make_user("biz@x.com", UserRole.BUSINESS)
    make_user("member@x.com", membership_expiry=now + timedelta(days=10))
    make_user("lapsed@x.com", membership_expiry=now - timedelta(days=10))
    category = make_category()
    for status in (CouponStatus.PENDING, CouponStatus.PENDING, CouponStatus.APPROVED, CouponStatus.REJECTED):
        _add_coupon(session_factory, biz.id, category.id, status)

    assert client.get("/api/v1/admin/stats", headers=headers_for(biz)).status_code == 403

    res = client.get("/api/v1/admin/stats", headers=headers_for(admin))
    assert res.status_code == 200
    assert res.json() == {
        "stats": {
            "totalCoupons": 4,
            "pendingCoupons": 2,
            "approvedCoupons": 1,
            "rejectedCoupons": 1,
            "totalUsers": 2,
            "totalBusinesses": 1,
            "totalAdmins": 1,
            "activeMembers": 1,
        }
    }


def test_list_users_with_coupon_counts_and_role_filter(
    test_app: Dict[str, object], make_user, make_category, headers_for
) -> None:
    client: TestClient = test_app["client"]  # type: ignore[assignment]
    session_factory: Callable = test_app["session_factory"]  # type: ignore[assignment]
    admin = make_user("admin@x.com", UserRole.ADMIN)
    biz = make_user("biz@x.com", UserRole.BUSINESS)
    make_user("user@x.com")
    category = make_category()
    _add_coupon(session_factory, biz.id, category.id, CouponStatus.PENDING)
    _add_coupon(session_factory, biz.id, category.id, CouponStatus.APPROVED)

    res = client.get("/api/v1/admin/users", headers=headers_for(admin))
    assert res.status_code == 200
    body = res.json()
    assert [u["email"] for u in body] == ["user@x.com", "biz@x.com", "admin@x.com"]
    counts = {u["email"]: u["couponCount"] for u in body}
    assert counts == {"user@x.com": 0, "biz@x.com": 2, "admin@x.com": 0}

    only_business = client.get("/api/v1/admin/users", params={"role": "BUSINESS"}, headers=headers_for(admin))
    assert [u["email"] for u in only_business.json()] == ["biz@x.com"]


def test_update_user_role_and_membership(client: TestClient, make_user, headers_for) -> None:
    admin = make_user("admin@x.com", UserRole.ADMIN)
    target = make_user("user@x.com")
    headers = headers_for(admin)

    res = client.patch(
        f"/api/v1/admin/users/{target.id}",
        json={"role": "BUSINESS", "membershipExpiry": "2099-01-01T00:00:00Z", "name": "Renamed"},
        headers=headers,
    )
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["role"] == "BUSINESS"
    assert body["name"] == "Renamed"
    assert body["isMember"] is True

    partial = client.patch(f"/api/v1/admin/users/{target.id}", json={"name": "Again"}, headers=headers)
    assert partial.json()["membershipExpiry"] is not None

    cleared = client.patch(f"/api/v1/admin/users/{target.id}", json={"membershipExpiry": None}, headers=headers)
    assert cleared.json()["membershipExpiry"] is None
    assert cleared.json()["isMember"] is False

    missing = client.patch(
        "/api/v1/admin/users/00000000-0000-0000-0000-000000000000", json={"name": "Nobody"}, headers=headers
    )
    assert missing.status_code == 404


def test_delete_user_cascades_to_coupons(
    test_app: Dict[str, object], make_user, make_category, headers_for
) -> None:
    client: TestClient = test_app["client"]  # type: ignore[assignment]
    session_factory: Callable = test_app["session_factory"]  # type: ignore[assignment]
    admin = make_user("admin@x.com", UserRole.ADMIN)
    biz = make_user("biz@x.com", UserRole.BUSINESS)
    category = make_category()
    _add_coupon(session_factory, biz.id, category.id, CouponStatus.APPROVED)

    res = client.delete(f"/api/v1/admin/users/{biz.id}", headers=headers_for(admin))
    assert res.status_code == 200

    async def counts() -> tuple[int, int]:
        async with session_factory() as session:
            users = (await session.execute(select(func.count(User.id)))).scalar_one()
            coupons = (await session.execute(select(func.count(Coupon.id)))).scalar_one()
            return int(users), int(coupons)

    assert asyncio.run(counts()) == (1, 0)
    assert client.delete(f"/api/v1/admin/users/{biz.id}", headers=headers_for(admin)).status_code == 404


def test_admin_cannot_delete_self(client: TestClient, make_user, headers_for) -> None:
    admin = make_user("admin@x.com", UserRole.ADMIN)
    res = client.delete(f"/api/v1/admin/users/{admin.id}", headers=headers_for(admin))
    assert res.status_code == 400


def test_admin_endpoints_reject_non_admins(client: TestClient, make_user, headers_for) -> None:
    user = make_user("user@x.com")
    assert client.get("/api/v1/admin/users").status_code == 401
    assert client.get("/api/v1/admin/users", headers=headers_for(user)).status_code == 403
    assert client.delete(f"/api/v1/admin/users/{user.id}", headers=headers_for(user)).status_code == 403


def test_membership_expiry_is_stored_as_utc(test_app: Dict[str, object], make_user, headers_for) -> None:
    client: TestClient = test_app["client"]  # type: ignore[assignment]
    session_factory: Callable = test_app["session_factory"]  # type: ignore[assignment]
    admin = make_user("admin@x.com", UserRole.ADMIN)
    offset_user = make_user("offset@x.com")
    naive_user = make_user("naive@x.com")
    headers = headers_for(admin)

    res = client.patch(
        f"/api/v1/admin/users/{offset_user.id}",
        json={"membershipExpiry": "2099-01-01T12:00:00+02:00"},
        headers=headers,
    )
    assert res.status_code == 200, res.text
    res = client.patch(
        f"/api/v1/admin/users/{naive_user.id}",
        json={"membershipExpiry": "2099-01-01T12:00:00"},
        headers=headers,
    )
    assert res.status_code == 200, res.text

    async def stored(user_id) -> datetime:
        async with session_factory() as session:
            user = await session.get(User, user_id)
            return user.membership_expiry

    from_offset = asyncio.run(stored(offset_user.id))
    from_naive = asyncio.run(stored(naive_user.id))
    assert from_offset.replace(tzinfo=None) == datetime(2099, 1, 1, 10, 0)
    assert from_naive.replace(tzinfo=None) == datetime(2099, 1, 1, 12, 0)
