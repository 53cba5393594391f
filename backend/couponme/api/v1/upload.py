from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.concurrency import run_in_threadpool

from couponme.core.dependencies import require_uploader
from couponme.schemas.payment import UploadResponse
from couponme.services import storage

router = APIRouter(tags=["uploads"])


@router.post("/upload", response_model=UploadResponse, dependencies=[Depends(require_uploader)])
async def upload_image(file: UploadFile | None = File(default=None)) -> UploadResponse:
    url = await run_in_threadpool(storage.save_image_upload, file)
    return UploadResponse(url=url)
