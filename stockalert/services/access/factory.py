"""Factory function for the configured manager access strategy."""
import logging

from stockalert.core.config import BaseAppSettings

from .base import AccessGate
from .delegated import ClerkSessionGate
from .session import SignedSessionGate
from .shared_secret import SharedSecretGate

logger = logging.getLogger(__name__)


def create_access_gate(app_settings: BaseAppSettings) -> AccessGate:
    """Build the strategy named by ``MANAGER_AUTH_MODE``.

    Unconfigured strategies are still returned; they deny every request.
    """
    mode = app_settings.MANAGER_AUTH_MODE
    if mode == "session":
        gate: AccessGate = SignedSessionGate(
            password=app_settings.MANAGER_PASSWORD,
            secret=app_settings.SESSION_SECRET,
            cookie_name=app_settings.SESSION_COOKIE_NAME,
            ttl_days=app_settings.SESSION_TTL_DAYS,
            secure=app_settings.SESSION_COOKIE_SECURE,
        )
    elif mode == "delegated":
        gate = ClerkSessionGate(
            secret_key=app_settings.CLERK_SECRET_KEY,
            publishable_key=app_settings.CLERK_PUBLISHABLE_KEY,
            sign_in_url=app_settings.CLERK_SIGN_IN_URL,
            jwks_url=app_settings.CLERK_JWKS_URL,
            cookie_name=app_settings.CLERK_SESSION_COOKIE,
        )
    else:
        gate = SharedSecretGate(app_settings.MANAGER_KEY)
    logger.info("Manager access mode: %s (configured=%s)", gate.mode, gate.configured)
    return gate
