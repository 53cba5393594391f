import logging
import uuid
from io import BytesIO
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from fastapi import UploadFile

from couponme.core.config import settings
from couponme.core.errors import BadRequest

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")
COUPON_IMAGE_DIR = "coupons"

_EXTENSIONS = {"image/jpeg": ".jpg", "image/png": ".png", "image/webp": ".webp"}


def ensure_media_root(root: str | Path | None = None) -> Path:
    path = Path(root or settings.media_root)
    path.mkdir(parents=True, exist_ok=True)
    return path


def _detect_image_mime(content: bytes) -> str | None:
    try:
        with Image.open(BytesIO(content)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, OSError, ValueError):
        return None

    return {"JPEG": "image/jpeg", "PNG": "image/png", "WEBP": "image/webp"}.get((image_format or "").upper())


def save_image_upload(
    file: UploadFile | None,
    subdir: str = COUPON_IMAGE_DIR,
    max_bytes: int | None = None,
) -> str:
    """Validate an uploaded image and store it under ``media_root/subdir``.

    The declared content type must be allowed and the bytes must decode as the
    same family of image. Returns the public ``/media/...`` url.
    """
    if file is None or not file.filename:
        raise BadRequest("No file uploaded")

    limit = max_bytes if max_bytes is not None else settings.upload_max_bytes
    content = file.file.read(limit + 1)
    if len(content) > limit:
        logger.info("upload_rejected", extra={"reason": "too_large", "upload_name": file.filename})
        raise BadRequest("File too large")

    declared = (file.content_type or "").lower()
    if declared not in ALLOWED_IMAGE_TYPES:
        logger.info("upload_rejected", extra={"reason": "declared_type", "content_type": declared})
        raise BadRequest("Invalid file type")
    sniffed = _detect_image_mime(content)
    if sniffed is None:
        logger.info("upload_rejected", extra={"reason": "not_an_image", "content_type": declared})
        raise BadRequest("Invalid file type")

    base_root = ensure_media_root().resolve()
    dest_root = (base_root / subdir).resolve()
    dest_root.mkdir(parents=True, exist_ok=True)
    destination = dest_root / f"{uuid.uuid4().hex}{_EXTENSIONS[sniffed]}"
    destination.write_bytes(content)

    rel_path = destination.relative_to(base_root).as_posix()
    logger.info("upload_saved", extra={"path": rel_path, "size": len(content)})
    return f"/media/{rel_path}"
