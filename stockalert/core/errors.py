import logging
import uuid

from fastapi import Request
from fastapi.responses import PlainTextResponse, RedirectResponse
from slowapi.errors import RateLimitExceeded

from stockalert import metrics
from stockalert.core.exceptions import ManagerAccessDenied

logger = logging.getLogger("stockalert.errors")


def register_error_handlers(app):
    @app.exception_handler(ManagerAccessDenied)
    async def manager_access_denied(request: Request, exc: ManagerAccessDenied):
        metrics.access_denied(exc.reason)
        if exc.redirect_url:
            return RedirectResponse(url=exc.redirect_url, status_code=303)
        return PlainTextResponse("Unauthorized", status_code=401)

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_exceeded(request: Request, exc: RateLimitExceeded):
        metrics.rate_limit_exceeded()
        return PlainTextResponse("Too many requests. Please wait a moment and try again.", status_code=429)

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):  # noqa: BLE001
        correlation_id = uuid.uuid4().hex
        logger.exception("Unhandled error cid=%s path=%s method=%s", correlation_id, request.url.path, request.method)
        return PlainTextResponse(f"Internal server error (ref {correlation_id})", status_code=500)

    return app
