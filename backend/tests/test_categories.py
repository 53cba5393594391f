from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from couponme.models.user import UserRole


def _future() -> str:
    return (datetime.now(timezone.utc) + timedelta(days=30)).isoformat()


def test_list_categories_is_public_and_sorted(client: TestClient, make_category) -> None:
    make_category(slug="travel", name_en="Travel", name_el="Ταξίδια")
    make_category(slug="books", name_en="Books", name_el="Βιβλία")

    res = client.get("/api/v1/categories")
    assert res.status_code == 200
    body = res.json()
    assert [c["slug"] for c in body] == ["books", "travel"]
    assert body[0]["nameEl"] == "Βιβλία"


def test_category_crud_requires_admin(client: TestClient, make_user, headers_for) -> None:
    business = make_user("biz@x.com", UserRole.BUSINESS)
    payload = {"nameEn": "Books", "nameEl": "Βιβλία", "slug": "books"}

    assert client.post("/api/v1/categories", json=payload).status_code == 401
    res = client.post("/api/v1/categories", json=payload, headers=headers_for(business))
    assert res.status_code == 403
    assert res.json()["code"] == "forbidden"


def test_create_update_and_duplicate_slug(client: TestClient, make_user, headers_for) -> None:
    admin = make_user("admin@x.com", UserRole.ADMIN)
    headers = headers_for(admin)

    created = client.post(
        "/api/v1/categories", json={"nameEn": "Books", "nameEl": "Βιβλία", "slug": "books"}, headers=headers
    )
    assert created.status_code == 201, created.text
    category_id = created.json()["id"]

    dup = client.post(
        "/api/v1/categories", json={"nameEn": "More", "nameEl": "Άλλα", "slug": "books"}, headers=headers
    )
    assert dup.status_code == 400
    assert dup.json()["code"] == "conflict"

    client.post("/api/v1/categories", json={"nameEn": "Music", "nameEl": "Μουσική", "slug": "music"}, headers=headers)
    clash = client.patch(f"/api/v1/categories/{category_id}", json={"slug": "music"}, headers=headers)
    assert clash.status_code == 400
    assert clash.json()["code"] == "conflict"

    renamed = client.patch(f"/api/v1/categories/{category_id}", json={"nameEn": "Novels"}, headers=headers)
    assert renamed.status_code == 200
    assert renamed.json()["nameEn"] == "Novels"
    assert renamed.json()["slug"] == "books"


def test_create_category_validates_slug(client: TestClient, make_user, headers_for) -> None:
    admin = make_user("admin@x.com", UserRole.ADMIN)
    res = client.post(
        "/api/v1/categories",
        json={"nameEn": "Books", "nameEl": "Βιβλία", "slug": "Not A Slug"},
        headers=headers_for(admin),
    )
    assert res.status_code == 400
    assert res.json()["code"] == "validation_error"


def test_update_and_delete_missing_category(client: TestClient, make_user, headers_for) -> None:
    admin = make_user("admin@x.com", UserRole.ADMIN)
    missing = "00000000-0000-0000-0000-000000000000"
    assert client.patch(f"/api/v1/categories/{missing}", json={"nameEn": "X1"}, headers=headers_for(admin)).status_code == 404
    assert client.delete(f"/api/v1/categories/{missing}", headers=headers_for(admin)).status_code == 404


def test_delete_blocked_while_coupons_reference_category(client: TestClient, make_user, headers_for) -> None:
    admin = make_user("admin@x.com", UserRole.ADMIN)
    business = make_user("biz@x.com", UserRole.BUSINESS)

    category = client.post(
        "/api/v1/categories",
        json={"nameEn": "Books", "nameEl": "Βιβλία", "slug": "books"},
        headers=headers_for(admin),
    ).json()
    coupon = client.post(
        "/api/v1/coupons",
        json={
            "title": "10% off",
            "description": "Ten percent off every book",
            "code": "BOOK10",
            "discountPercentage": 10,
            "categoryId": category["id"],
            "expirationDate": _future(),
        },
        headers=headers_for(business),
    )
    assert coupon.status_code == 201, coupon.text

    blocked = client.delete(f"/api/v1/categories/{category['id']}", headers=headers_for(admin))
    assert blocked.status_code == 400
    body = blocked.json()
    assert body["code"] == "conflict"
    assert body["meta"]["count"] == 1
    assert "1 coupons" in body["detail"]

    deleted = client.delete(f"/api/v1/coupons/{coupon.json()['id']}", headers=headers_for(business))
    assert deleted.status_code == 200

    res = client.delete(f"/api/v1/categories/{category['id']}", headers=headers_for(admin))
    assert res.status_code == 200
    assert client.get("/api/v1/categories").json() == []
