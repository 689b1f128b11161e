"""
Sentry configuration for error tracking.

Captures all unhandled exceptions with request context.
"""
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from atlasstudio.config import settings
from atlasstudio.logging_config import get_logger

logger = get_logger(component="sentry")


def configure_sentry():
    """
    Initialize Sentry with FastAPI and SQLAlchemy integrations.

    Requires SENTRY_DSN to be set; otherwise Sentry stays disabled.
    """
    dsn = settings.SENTRY_DSN

    if not dsn:
        logger.info("sentry_disabled", reason="SENTRY_DSN not set")
        return False

    sentry_sdk.init(
        dsn=dsn,
        integrations=[
            FastApiIntegration(),
            SqlalchemyIntegration(),
        ],
        before_send=scrub_credentials,
        # Sample rate: capture 10% of transactions for performance monitoring
        traces_sample_rate=0.1,
        environment=settings.ENVIRONMENT,
        release=settings.APP_VERSION,
        send_default_pii=False,
    )

    logger.info("sentry_initialized", environment=settings.ENVIRONMENT)
    return True


def scrub_credentials(event, hint):
    """
    Drop request bodies and cookies from error events.

    Register and login bodies contain plaintext passwords; cookies carry
    session tokens.
    """
    request = event.get("request")
    if request:
        request.pop("data", None)
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            for key in list(headers):
                if key.lower() in ("authorization", "cookie"):
                    headers[key] = "[Filtered]"
    return event


def capture_message(message, level="info"):
    """
    Capture a message to Sentry.

    Usage:
        capture_message("Provider misconfigured", level="warning")
    """
    if sentry_sdk.get_client().is_active():
        sentry_sdk.capture_message(message, level=level)
