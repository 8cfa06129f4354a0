"""Sentry setup.

Error reports must never carry staff PINs, payment proof photos or
customer ID photos, and must not include raw SQL.
"""

import os
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.utils import BadDsn

from breadpos.core.logging import get_logger

logger = get_logger(__name__)

REDACTED = "[redacted]"
SENSITIVE_KEY_PARTS = ("pin", "photo", "password", "session", "cookie")

_sentry_initialized = False


def _is_sensitive(key: Any) -> bool:
    lowered = str(key).lower()
    return any(part in lowered for part in SENSITIVE_KEY_PARTS)


def _scrub(value: Any) -> Any:
    if isinstance(value, dict):
        return {k: REDACTED if _is_sensitive(k) else _scrub(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_scrub(item) for item in value]
    return value


def filter_sensitive_data(event: dict, hint: dict) -> dict:
    """before_send hook: redact secrets in request bodies and extras, drop SQL."""
    request = event.get("request")
    if isinstance(request, dict):
        for field in ("data", "cookies", "headers"):
            if field in request:
                request[field] = _scrub(request[field])

    extra = event.get("extra")
    if isinstance(extra, dict):
        event["extra"] = {k: v for k, v in _scrub(extra).items() if "sql" not in f"{k}{v}".lower()}

    breadcrumbs = event.get("breadcrumbs")
    if isinstance(breadcrumbs, dict):
        # newer SDKs wrap the list as {"values": [...]}
        breadcrumbs = breadcrumbs.get("values")
    if isinstance(breadcrumbs, list):
        kept = [
            crumb
            for crumb in breadcrumbs
            if not (isinstance(crumb, dict) and (crumb.get("category") or "").startswith("query"))
            and "sql" not in str(crumb.get("message", "") if isinstance(crumb, dict) else crumb).lower()
        ]
        event["breadcrumbs"] = {"values": kept}

    return event


def init_sentry() -> None:
    """Enable Sentry when SENTRY_DSN holds a real DSN; otherwise log and skip.

    Tracing stays off and the logging integration is disabled because
    structlog already ships every log line.
    """
    global _sentry_initialized

    if _sentry_initialized:
        return

    dsn = (os.getenv("SENTRY_DSN") or "").strip()
    if not dsn.startswith(("https://", "http://")):
        logger.info("sentry.disabled", configured=bool(dsn))
        return

    environment = os.getenv("ENVIRONMENT", "development")
    try:
        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            release=os.getenv("BREADPOS_RELEASE"),
            traces_sample_rate=0.0,
            send_default_pii=False,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(level=None, event_level=None),
            ],
            before_send=filter_sensitive_data,
        )
    except BadDsn as exc:
        logger.warning("sentry.init_failed", error=str(exc))
        return

    _sentry_initialized = True
    logger.info("sentry.initialized", environment=environment)
