"""HTTP-mapped error taxonomy.

Each error is an ``HTTPException`` with a fixed status and a ``code`` that the
exception handlers in ``couponme.main`` copy into ``ErrorResponse.code``.
``meta`` carries structured context (for example a blocking row count).
"""

from typing import Any

from fastapi import HTTPException, status


class AppError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"
    default_detail: str = "Internal server error"

    def __init__(
        self,
        detail: Any = None,
        *,
        meta: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=self.status_code, detail=detail or self.default_detail, headers=headers)
        self.meta = meta


class Unauthorized(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthorized"
    default_detail = "Not authenticated"


class Forbidden(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_detail = "Forbidden"


class NotFound(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Not found"


class Conflict(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "conflict"
    default_detail = "Conflict"


class BadRequest(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"
    default_detail = "Bad request"


class InvalidSignature(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_signature"
    default_detail = "Invalid signature"


class ServiceUnavailable(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "service_unavailable"
    default_detail = "Service unavailable"


class BadGateway(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "bad_gateway"
    default_detail = "Upstream provider error"


class TooManyRequests(AppError):
    status_code = status.HTTP_429_TOO_MANY_REQUESTS
    code = "too_many_requests"
    default_detail = "Too many requests"
