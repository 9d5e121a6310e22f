# =============================================================================
# Sentry Error Tracking Integration
# =============================================================================
#
# Setup:
#   1. Install the extra: pip install quill[sentry]
#   2. Copy DSN to .env: SENTRY_DSN=https://...@sentry.io/...
#
# Usage:
#   init_sentry() is called at app startup (in quill/api/app.py)
#
# Authorization outcomes (401, 403, 404, 422) are expected traffic and
# are never reported.
#
# =============================================================================

import logging

from fastapi import HTTPException

from quill.config import get_settings

logger = logging.getLogger(__name__)

# Sentry SDK is optional - error tracking is skipped if not installed
try:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.logging import LoggingIntegration
    from sentry_sdk.integrations.starlette import StarletteIntegration
    SENTRY_AVAILABLE = True
except ImportError:
    SENTRY_AVAILABLE = False
    sentry_sdk = None

EXPECTED_STATUS_CODES = (401, 403, 404, 422)
SENSITIVE_HEADERS = ("authorization", "cookie")
QUIET_TRANSACTIONS = ("/health",)


def init_sentry() -> bool:
    """
    Initialize Sentry error tracking.

    Returns True if initialized, False if skipped.
    """
    settings = get_settings()

    if not settings.sentry_dsn:
        logger.debug("SENTRY_DSN not set - error tracking disabled")
        return False

    if not SENTRY_AVAILABLE:
        logger.warning("SENTRY_DSN is set but sentry-sdk is not installed")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        traces_sample_rate=0.1 if settings.is_production else 1.0,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            StarletteIntegration(transaction_style="endpoint"),
            LoggingIntegration(
                level=logging.INFO,
                event_level=logging.ERROR,
            ),
        ],
        # Emails and tokens stay out of reports
        send_default_pii=False,
        before_send=filter_events,
        before_send_transaction=filter_transactions,
    )

    logger.info(f"Sentry initialized for {settings.environment}")
    return True


def filter_events(event: dict, hint: dict) -> dict | None:
    """Drop expected HTTP errors and scrub credentials from requests."""
    if "exc_info" in hint:
        _, exc_value, _ = hint["exc_info"]
        if isinstance(exc_value, HTTPException) and exc_value.status_code in EXPECTED_STATUS_CODES:
            return None

    headers = event.get("request", {}).get("headers")
    if headers:
        for key in list(headers.keys()):
            if key.lower() in SENSITIVE_HEADERS:
                headers[key] = "[Filtered]"

    return event


def filter_transactions(event: dict, hint: dict) -> dict | None:
    if event.get("transaction", "") in QUIET_TRANSACTIONS:
        return None
    return event
