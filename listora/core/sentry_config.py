"""
Sentry error tracking configuration for Listora.

When ``dsn`` is empty (the default) Sentry is never initialised.
Expected client errors (4xx, publish validation, expired seller tokens) are
dropped before sending; marketplace rejections are tagged with the error
code eBay returned.
"""

import logging

import sentry_sdk
from fastapi import HTTPException
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from listora.config import AppEnv
from listora.core.exceptions import (
    AuthExpiredError,
    ListoraError,
    PlatformRejectedError,
    PublishValidationError,
)

_EXPECTED_ERRORS = (PublishValidationError, AuthExpiredError)


def init_sentry(
    dsn: str,
    app_env: AppEnv,
    app_version: str,
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize the Sentry SDK.

    Returns:
        True if Sentry was initialised, False when disabled.
    """
    if not dsn:
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=app_env.value,
        release=f"listora@{app_version}",
        traces_sample_rate=traces_sample_rate,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            AsyncioIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
        before_send=_filter_events,
        send_default_pii=False,
    )
    return True


def _filter_events(event: dict, hint: dict) -> dict | None:
    """Drop expected client errors and tag Listora errors."""
    if "exc_info" not in hint:
        return event

    _, exc_value, _ = hint["exc_info"]

    if isinstance(exc_value, HTTPException) and exc_value.status_code < 500:
        return None

    if isinstance(exc_value, _EXPECTED_ERRORS):
        return None

    if isinstance(exc_value, ListoraError):
        tags = event.setdefault("tags", {})
        tags["error_type"] = type(exc_value).__name__
        if isinstance(exc_value, PlatformRejectedError) and exc_value.details.get("error_code"):
            tags["ebay_error_code"] = exc_value.details["error_code"]
        if exc_value.details:
            event["extra"] = {**event.get("extra", {}), **exc_value.details}

    return event
