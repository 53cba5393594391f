from fastapi import APIRouter

from couponme.api.v1 import admin, auth, categories, coupons, membership, upload, webhooks
from couponme.core.metrics import snapshot as metrics_snapshot

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(categories.router)
api_router.include_router(coupons.router)
api_router.include_router(admin.router)
api_router.include_router(membership.router)
api_router.include_router(webhooks.router)
api_router.include_router(upload.router)


@api_router.get("/health", tags=["health"])
def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@api_router.get("/health/ready", tags=["health"])
def readiness() -> dict[str, str]:
    return {"status": "ready"}


@api_router.get("/metrics", tags=["metrics"])
def metrics() -> dict:
    return metrics_snapshot()
