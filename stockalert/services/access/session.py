from __future__ import annotations

from datetime import datetime, timedelta, timezone
from urllib.parse import urlencode

from starlette.requests import Request

from stockalert.core.exceptions import InvalidCredentialsError
from stockalert.core.security import (
    TokenExpiredError,
    TokenValidationError,
    create_session_token,
    decode_session_token,
    secrets_match,
)

from .base import AccessGate, ManagerIdentity, current_path

LOGIN_PATH = "/login"
MANAGER_SUBJECT = "manager"


class SignedSessionGate(AccessGate):
    """Self-hosted sign-in: one manager password, a signed session cookie."""

    mode = "session"

    def __init__(
        self,
        password: str | None,
        secret: str,
        cookie_name: str = "stockalert_session",
        ttl_days: int = 7,
        secure: bool = True,
    ) -> None:
        self.password = password
        self.secret = secret
        self.cookie_name = cookie_name
        self.ttl_days = ttl_days
        self.secure = secure

    @property
    def configured(self) -> bool:
        return bool(self.password and self.secret)

    def login(self, password: str | None) -> str:
        """Check the manager password and mint a session token."""
        if not self.configured or not secrets_match(password, self.password):
            raise InvalidCredentialsError()
        return create_session_token(MANAGER_SUBJECT, self.secret, self.ttl_days)

    def cookie_settings(self) -> dict[str, object]:
        lifespan = timedelta(days=self.ttl_days)
        return {
            "httponly": True,
            "secure": self.secure,
            "samesite": "lax",
            "max_age": int(lifespan.total_seconds()),
            "expires": datetime.now(timezone.utc) + lifespan,
            "path": "/",
        }

    def sign_in_url(self, request: Request, return_to: str) -> str | None:
        return f"{LOGIN_PATH}?{urlencode({'next': return_to})}"

    async def authenticate(self, request: Request) -> ManagerIdentity:
        if not self.configured:
            raise self.deny(request, "not_configured")
        token = request.cookies.get(self.cookie_name)
        if not token:
            raise self.deny(request, "missing_session", current_path(request))
        try:
            payload = decode_session_token(token, self.secret)
        except TokenExpiredError:
            raise self.deny(request, "expired_session", current_path(request))
        except TokenValidationError:
            raise self.deny(request, "invalid_session", current_path(request))
        return ManagerIdentity(user_id=str(payload.get("sub", MANAGER_SUBJECT)), method=self.mode)

    async def landing_redirect(self, request: Request, after_login: str) -> str | None:
        token = request.cookies.get(self.cookie_name)
        if self.configured and token:
            try:
                decode_session_token(token, self.secret)
                return after_login
            except TokenValidationError:
                pass
        return self.sign_in_url(request, after_login)


def safe_next_path(value: str | None, default: str) -> str:
    """Only same-site relative paths are accepted as post-login targets."""
    if not value or not value.startswith("/") or value.startswith("//") or "\\" in value:
        return default
    return value
