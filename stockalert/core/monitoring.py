"""Optional Sentry error reporting."""
import logging
from typing import Any

from stockalert.core.config import BaseAppSettings, settings
from stockalert.core.logger import redact

logger = logging.getLogger(__name__)

_SENSITIVE_HEADERS = {"authorization", "cookie"}

_initialized = False


def scrub_event(event: dict[str, Any], hint: dict[str, Any] | None = None) -> dict[str, Any]:
    """Strip manager credentials from request data before it leaves the process."""
    request = event.get("request")
    if isinstance(request, dict):
        if request.get("query_string"):
            request["query_string"] = redact("?" + str(request["query_string"]))[1:]
        if request.get("url"):
            request["url"] = redact(str(request["url"]))
        request.pop("cookies", None)
        headers = request.get("headers")
        if isinstance(headers, dict):
            request["headers"] = {
                name: ("[Filtered]" if name.lower() in _SENSITIVE_HEADERS else value)
                for name, value in headers.items()
            }
    return event


def init_monitoring(app_settings: BaseAppSettings | None = None) -> None:
    global _initialized
    if _initialized:
        return
    app_settings = app_settings or settings
    if app_settings.SENTRY_DSN:
        try:
            import sentry_sdk
            from sentry_sdk.integrations.fastapi import FastApiIntegration

            sentry_sdk.init(
                dsn=app_settings.SENTRY_DSN,
                integrations=[FastApiIntegration()],
                traces_sample_rate=0.1,
                send_default_pii=False,
                before_send=scrub_event,
                environment=app_settings.ENV,
                release=f"stockalert@{app_settings.ENV}",
            )
            logger.info("Sentry initialized")
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to init Sentry: %s", exc)
    _initialized = True
