from couponme.middleware.request_log import RequestLoggingMiddleware
from couponme.middleware.security import SecurityHeadersMiddleware

__all__ = ["RequestLoggingMiddleware", "SecurityHeadersMiddleware"]
