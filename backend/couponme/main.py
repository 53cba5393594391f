import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from couponme.api.v1 import api_router
from couponme.core.config import settings
from couponme.core.errors import AppError
from couponme.core.logging_config import configure_logging
from couponme.core.sentry import init_sentry
from couponme.middleware import RequestLoggingMiddleware, SecurityHeadersMiddleware
from couponme.schemas.error import ErrorResponse

logger = logging.getLogger(__name__)

_STATUS_CODES = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
    429: "too_many_requests",
}


def _error_response(status_code: int, payload: ErrorResponse, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(payload.model_dump(exclude_none=True)),
        headers=headers,
    )


def get_application() -> FastAPI:
    configure_logging(settings.log_json)
    init_sentry()
    tags_metadata = [
        {"name": "auth", "description": "Registration, login and token refresh"},
        {"name": "coupons", "description": "Coupon submission, moderation and listing"},
        {"name": "categories", "description": "Bilingual coupon categories"},
        {"name": "admin", "description": "Moderation queue, users and dashboard stats"},
        {"name": "membership", "description": "Paid membership checkout"},
        {"name": "payments", "description": "Payment provider callbacks"},
    ]
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        openapi_tags=tags_metadata,
        swagger_ui_parameters={"displayRequestDuration": True},
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    media_root = Path(settings.media_root)
    media_root.mkdir(parents=True, exist_ok=True)
    app.include_router(api_router, prefix="/api/v1")
    app.mount("/media", StaticFiles(directory=media_root), name="media")

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if isinstance(exc, AppError):
            payload = ErrorResponse(detail=exc.detail, code=exc.code, meta=exc.meta)
        else:
            payload = ErrorResponse(detail=exc.detail, code=_STATUS_CODES.get(exc.status_code))
        return _error_response(exc.status_code, payload, getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = jsonable_encoder(exc.errors())
        return _error_response(400, ErrorResponse(detail=errors, code="validation_error"))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_error", extra={"path": request.url.path, "method": request.method})
        return _error_response(500, ErrorResponse(detail="Internal server error", code="internal_error"))

    return app


app = get_application()
