import logging
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware

from stockalert.api.rate_limit import configure_rate_limits, limiter
from stockalert.api.routes_alert import router as alert_router
from stockalert.api.routes_auth import router as auth_router
from stockalert.api.routes_health import router as health_router
from stockalert.api.routes_manager import router as manager_router
from stockalert.api.routes_metrics import router as metrics_router
from stockalert.api.routes_push import router as push_router
from stockalert.core.audit import configure_audit
from stockalert.core.config import BaseAppSettings, settings
from stockalert.core.errors import register_error_handlers
from stockalert.core.logger import init_logging
from stockalert.core.monitoring import init_monitoring
from stockalert.services.access import create_access_gate
from stockalert.services.alert_service import AlertService
from stockalert.services.cooldown import build_cooldown_gate
from stockalert.services.event_log import SheetsEventLog
from stockalert.services.notification.service import NotificationService

logger = logging.getLogger(__name__)

PUBLIC_DIR = Path(__file__).resolve().parent.parent / "public"

CONTENT_SECURITY_POLICY = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline' https://cdn.onesignal.com; "
    "style-src 'self' 'unsafe-inline' https://onesignal.com; "
    "img-src 'self' data: https:; "
    "connect-src 'self' https://onesignal.com https://*.onesignal.com; "
    "frame-src https://*.onesignal.com"
)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, hsts: bool = False) -> None:
        super().__init__(app)
        self.hsts = hsts

    async def dispatch(self, request, call_next):  # type: ignore[override]
        response = await call_next(request)
        if self.hsts:
            response.headers.setdefault("Strict-Transport-Security", "max-age=31536000; includeSubDomains")
        response.headers.setdefault("Referrer-Policy", "same-origin")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Content-Security-Policy", CONTENT_SECURITY_POLICY)
        return response


def log_configuration_warnings(app_settings: BaseAppSettings) -> None:
    """Report missing optional integrations once, at startup."""
    if app_settings.push_configured:
        logger.info("OneSignal config present.")
    else:
        logger.warning("OneSignal config missing: check ONESIGNAL_APP_ID and ONESIGNAL_API_KEY env vars.")
    if not app_settings.sheets_configured:
        logger.warning("Google Sheets config missing: set SHEET_ID and GOOGLE_SERVICE_ACCOUNT_JSON to enable logging.")
    mode = app_settings.MANAGER_AUTH_MODE
    if mode == "shared_secret" and not app_settings.MANAGER_KEY:
        logger.warning("MANAGER_KEY is not set; all manager views will answer 401.")
    elif mode == "session" and not app_settings.MANAGER_PASSWORD:
        logger.warning("MANAGER_PASSWORD is not set; manager sign-in is disabled and all manager views will answer 401.")
    elif mode == "delegated" and not app_settings.clerk_configured:
        logger.warning(
            "Clerk env vars missing. Set CLERK_SECRET_KEY, CLERK_PUBLISHABLE_KEY, and CLERK_SIGN_IN_URL; "
            "manager views will answer 401."
        )


def create_app(app_settings: BaseAppSettings | None = None) -> FastAPI:
    app_settings = app_settings or settings
    init_logging(app_settings)
    init_monitoring(app_settings)
    configure_audit(app_settings.AUDIT_LOG_FILE)
    configure_rate_limits(app_settings)
    log_configuration_warnings(app_settings)

    is_production = app_settings.ENV.lower() == "prod"
    app = FastAPI(
        title=app_settings.APP_NAME,
        debug=False,
        docs_url=None,
        redoc_url=None,
        openapi_url=None if is_production else "/openapi.json",
    )
    app.state.settings = app_settings
    app.state.alert_service = AlertService(
        cooldown=build_cooldown_gate(app_settings),
        notifier=NotificationService.from_settings(app_settings),
        event_log=SheetsEventLog.from_settings(app_settings),
    )
    app.state.access_gate = create_access_gate(app_settings)
    app.state.limiter = limiter

    app.add_middleware(SecurityHeadersMiddleware, hsts=is_production)
    register_error_handlers(app)

    app.include_router(health_router)
    app.include_router(alert_router)
    app.include_router(manager_router)
    app.include_router(auth_router)
    app.include_router(push_router)
    app.include_router(metrics_router)
    # Catch-all mount: must stay after every router
    app.mount("/", StaticFiles(directory=str(PUBLIC_DIR)), name="public")
    return app


app = create_app()
