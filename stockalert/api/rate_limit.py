"""Per-client rate limits for the public intake and the sign-in form.

One ``Limiter`` serves the process. ``configure_rate_limits`` copies the
switch and the limit strings from the settings ``create_app`` was given; the
route decorators read them back on every request.
"""
import logging

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from stockalert.core.config import BaseAppSettings, settings

logger = logging.getLogger(__name__)


def get_client_ip(request: Request) -> str:
    """First hop of ``X-Forwarded-For`` when behind a proxy, else the socket peer."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    return get_remote_address(request) or ""


limiter = Limiter(
    key_func=get_client_ip,
    storage_uri="memory://",
    enabled=settings.RATE_LIMIT_ENABLED,
)

RATE_LIMITS = {
    "alert": settings.ALERT_RATE_LIMIT,
    "login": settings.LOGIN_RATE_LIMIT,
}


def configure_rate_limits(app_settings: BaseAppSettings) -> None:
    limiter.enabled = app_settings.RATE_LIMIT_ENABLED
    RATE_LIMITS["alert"] = app_settings.ALERT_RATE_LIMIT
    RATE_LIMITS["login"] = app_settings.LOGIN_RATE_LIMIT
    if app_settings.RATE_LIMIT_ENABLED:
        logger.info("Rate limits: alert=%s login=%s", RATE_LIMITS["alert"], RATE_LIMITS["login"])
    else:
        logger.info("Rate limiting disabled")


def alert_limit() -> str:
    return RATE_LIMITS["alert"]


def login_limit() -> str:
    return RATE_LIMITS["login"]
