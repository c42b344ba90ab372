from __future__ import annotations

import os
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

AUTH_MODES = ("shared_secret", "session", "delegated")


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "StockAlert"
    ENV: str = "dev"
    HOST: str = "0.0.0.0"
    PORT: int = 3000
    # Absolute base used for push deep links and QR codes; request base URL when unset
    PUBLIC_BASE_URL: str | None = None

    # OneSignal push delivery
    ONESIGNAL_APP_ID: str | None = None
    ONESIGNAL_API_KEY: str | None = None
    ONESIGNAL_API_URL: str = "https://onesignal.com/api/v1/notifications"
    ONESIGNAL_AUTH_SCHEME: str = "Basic"  # newer org keys use "Key"
    PUSH_TIMEOUT_SECONDS: float = 10.0

    # Google Sheets event log
    SHEET_ID: str | None = None
    GOOGLE_SERVICE_ACCOUNT_JSON: str | None = None
    SHEET_RANGE: str = "Sheet1!A:F"

    # Manager access
    MANAGER_AUTH_MODE: str = "shared_secret"
    MANAGER_KEY: str | None = None
    MANAGER_PASSWORD: str | None = None
    SESSION_SECRET: str = "change_me_session"
    SESSION_TTL_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "stockalert_session"
    SESSION_COOKIE_SECURE: bool = True

    # Delegated identity (Clerk)
    CLERK_SECRET_KEY: str | None = None
    CLERK_PUBLISHABLE_KEY: str | None = None
    CLERK_SIGN_IN_URL: str | None = None
    CLERK_JWKS_URL: str = "https://api.clerk.com/v1/jwks"
    CLERK_SESSION_COOKIE: str = "__session"
    DEFAULT_AFTER_LOGIN: str = "/checklist"

    # Cooldown
    COOLDOWN_SECONDS: float = 60.0
    COOLDOWN_BACKEND: str = "memory"  # memory | redis
    REDIS_URL: str = "redis://localhost:6379/0"

    # Manager view fetch windows
    MANAGER_FETCH_LIMIT: int = 50
    CSV_FETCH_LIMIT: int = 500
    CHECKLIST_FETCH_LIMIT: int = 200

    RATE_LIMIT_ENABLED: bool = True
    # Every phone behind a store NAT shares one budget; rejected scans are not logged
    ALERT_RATE_LIMIT: str = "120/minute"
    LOGIN_RATE_LIMIT: str = "10/minute"

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"
    SENTRY_DSN: str | None = None
    AUDIT_LOG_FILE: str | None = None

    @field_validator("MANAGER_AUTH_MODE", mode="before")
    @classmethod
    def normalize_auth_mode(cls, v):
        """Accept dashes and any case, e.g. ``Shared-Secret``."""
        if v is None:
            return "shared_secret"
        mode = str(v).strip().lower().replace("-", "_")
        if mode not in AUTH_MODES:
            raise ValueError(f"MANAGER_AUTH_MODE must be one of {', '.join(AUTH_MODES)}")
        return mode

    @property
    def push_configured(self) -> bool:
        return bool(self.ONESIGNAL_APP_ID and self.ONESIGNAL_API_KEY)

    @property
    def sheets_configured(self) -> bool:
        return bool(self.SHEET_ID and self.GOOGLE_SERVICE_ACCOUNT_JSON)

    @property
    def clerk_configured(self) -> bool:
        return bool(self.CLERK_SECRET_KEY and self.CLERK_PUBLISHABLE_KEY and self.CLERK_SIGN_IN_URL)

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        if self.ENV.lower() == "prod" and self.MANAGER_AUTH_MODE == "session":
            if self.SESSION_SECRET == "change_me_session":
                raise ValueError("Insecure default secrets in production: SESSION_SECRET uses default placeholder")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"
    SESSION_COOKIE_SECURE: bool = False


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    SESSION_COOKIE_SECURE: bool = False
    RATE_LIMIT_ENABLED: bool = False
    SESSION_SECRET: str = "test-session-secret"


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()
