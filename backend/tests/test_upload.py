from io import BytesIO
from pathlib import Path

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from PIL import Image

from couponme.core.config import settings
from couponme.models.user import UserRole
from couponme.services.storage import save_image_upload


class DummyUpload:
    def __init__(self, content: bytes, *, filename: str, content_type: str | None):
        self.file = BytesIO(content)
        self.filename = filename
        self.content_type = content_type


def _image_bytes(fmt: str = "PNG") -> bytes:
    buf = BytesIO()
    Image.new("RGB", (2, 2), color=(255, 0, 0)).save(buf, format=fmt)
    return buf.getvalue()


@pytest.fixture
def media_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setattr(settings, "media_root", str(tmp_path))
    return tmp_path


def test_save_accepts_png_under_coupons_dir(media_root: Path) -> None:
    url = save_image_upload(DummyUpload(_image_bytes(), filename="logo.png", content_type="image/png"))

    assert url.startswith("/media/coupons/")
    assert url.endswith(".png")
    assert (media_root / url.removeprefix("/media/")).exists()


@pytest.mark.parametrize(("fmt", "content_type", "suffix"), [("JPEG", "image/jpg", ".jpg"), ("WEBP", "image/webp", ".webp")])
def test_save_accepts_jpeg_and_webp(media_root: Path, fmt: str, content_type: str, suffix: str) -> None:
    url = save_image_upload(DummyUpload(_image_bytes(fmt), filename="x.bin", content_type=content_type))
    assert url.endswith(suffix)


def test_save_rejects_declared_type(media_root: Path) -> None:
    with pytest.raises(HTTPException) as exc:
        save_image_upload(DummyUpload(_image_bytes(), filename="doc.pdf", content_type="application/pdf"))
    assert exc.value.status_code == 400
    assert exc.value.detail == "Invalid file type"


def test_save_rejects_non_image_bytes(media_root: Path) -> None:
    with pytest.raises(HTTPException) as exc:
        save_image_upload(DummyUpload(b"definitely-not-an-image", filename="bad.png", content_type="image/png"))
    assert exc.value.detail == "Invalid file type"
    assert list(media_root.rglob("*.png")) == []


def test_save_rejects_oversized_file(media_root: Path) -> None:
    with pytest.raises(HTTPException) as exc:
        save_image_upload(DummyUpload(_image_bytes(), filename="big.png", content_type="image/png"), max_bytes=10)
    assert exc.value.detail == "File too large"


def test_upload_endpoint_roles_and_response(
    client: TestClient, make_user, headers_for, media_root: Path
) -> None:
    business = make_user("biz@x.com", UserRole.BUSINESS)
    user = make_user("user@x.com")
    files = {"file": ("logo.png", _image_bytes(), "image/png")}

    assert client.post("/api/v1/upload", files=files).status_code == 401
    assert client.post("/api/v1/upload", files=files, headers=headers_for(user)).status_code == 403

    res = client.post("/api/v1/upload", files=files, headers=headers_for(business))
    assert res.status_code == 200, res.text
    url = res.json()["url"]
    assert url.startswith("/media/coupons/")
    assert (media_root / url.removeprefix("/media/")).exists()


def test_upload_endpoint_requires_file(client: TestClient, make_user, headers_for, media_root: Path) -> None:
    admin = make_user("admin@x.com", UserRole.ADMIN)
    res = client.post("/api/v1/upload", headers=headers_for(admin))
    assert res.status_code == 400
    assert res.json()["detail"] == "No file uploaded"
