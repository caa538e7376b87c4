from __future__ import annotations

import re
from typing import Any

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration

from little_lemon.core.config import settings

EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+(\.[\w-]+)+")
PHONE_PATTERN = re.compile(r"\+?\d[\d\-\(\)\s]{7,}\d")


def mask_pii(text: str | None) -> str | None:
    """Mask e-mail addresses and phone numbers from profile data."""
    if text is None:
        return None
    text = EMAIL_PATTERN.sub("[EMAIL_REDACTED]", text)
    return PHONE_PATTERN.sub("[PHONE_REDACTED]", text)


def before_send(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any] | None:
    """Scrub profile PII from Sentry events before sending."""
    logentry = event.get("logentry")
    if logentry and "message" in logentry:
        logentry["message"] = mask_pii(logentry["message"])

    if "exception" in event:
        for exception in event["exception"].get("values", []):
            if "value" in exception:
                exception["value"] = mask_pii(exception["value"])

    if "breadcrumbs" in event:
        for breadcrumb in event["breadcrumbs"].get("values", []):
            if "message" in breadcrumb:
                breadcrumb["message"] = mask_pii(breadcrumb["message"])
            if "data" in breadcrumb:
                for key, value in breadcrumb["data"].items():
                    if isinstance(value, str):
                        breadcrumb["data"][key] = mask_pii(value)

    return event


def init_sentry() -> bool:
    """Initialize Sentry error tracking when a DSN is configured."""
    if not settings.sentry_dsn:
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.sentry_environment or settings.environment,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            LoggingIntegration(level=None, event_level=None),
        ],
        traces_sample_rate=0.1,
        before_send=before_send,
        send_default_pii=False,
        attach_stacktrace=True,
        max_breadcrumbs=50,
    )

    sentry_sdk.set_tag("service", settings.app_name)
    sentry_sdk.set_tag("environment", settings.environment)
    return True
