from typing import Any

from couponme.core.config import settings

_SCRUBBED_HEADERS = {"authorization", "cookie", "stripe-signature"}


def _scrub_request(event: dict[str, Any], _hint: dict[str, Any]) -> dict[str, Any]:
    headers = (event.get("request") or {}).get("headers")
    if isinstance(headers, dict):
        for name in list(headers):
            if name.lower() in _SCRUBBED_HEADERS:
                headers[name] = "[redacted]"
    return event


def init_sentry() -> bool:
    """Start error reporting when a DSN is configured. Returns whether it did."""
    if not settings.sentry_dsn:
        return False

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"couponme@{settings.app_version}",
        traces_sample_rate=settings.sentry_traces_sample_rate,
        integrations=[FastApiIntegration(), SqlalchemyIntegration()],
        before_send=_scrub_request,
        send_default_pii=False,
    )
    return True
