from __future__ import annotations

import os

os.environ["APP_ENV"] = "test"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from stockalert.api.main import create_app  # noqa: E402
from stockalert.core.config import TestSettings  # noqa: E402
from stockalert.core.exceptions import (  # noqa: E402
    ExternalServiceError,
    ProviderHTTPError,
    ProviderUnavailableError,
)
from stockalert.core.results import CallResult  # noqa: E402
from stockalert.models.alert import AlertEvent, utc_timestamp  # noqa: E402
from stockalert.services.alert_service import AlertService  # noqa: E402
from stockalert.services.cooldown import CooldownGate  # noqa: E402


class FakeEventLog:
    """In-memory event log; ``events`` are returned newest first."""

    def __init__(self, events: list[AlertEvent] | None = None, fail_reads: bool = False) -> None:
        self.events = list(events or [])
        self.appended: list[AlertEvent] = []
        self.fail_reads = fail_reads

    async def append(self, event: AlertEvent) -> CallResult[None]:
        self.appended.append(event)
        return CallResult.success()

    async def recent(self, limit: int) -> CallResult[list[AlertEvent]]:
        if self.fail_reads:
            return CallResult.failure(ProviderUnavailableError("Google Sheets", "read failed"), [])
        return CallResult.success(self.events[:limit])


class FakeNotifier:
    """Records inventory alerts instead of calling OneSignal.

    ``error`` is returned as the failure of every send when set.
    """

    def __init__(self, configured: bool = True, error: ExternalServiceError | None = None) -> None:
        self.configured = configured
        self.error = error
        self.calls: list[tuple] = []

    async def send_inventory_alert(self, item, status, location="", target_url=None) -> CallResult[str]:
        self.calls.append((item, status, location, target_url))
        if self.error is not None:
            return CallResult.failure(self.error)
        return CallResult.success(f"notif-{len(self.calls)}")


REJECTED_PUSH = ProviderHTTPError("OneSignal", 400, '{"errors": ["bad"]}')
UNREACHABLE_PUSH = ProviderUnavailableError("OneSignal", "connection refused")


def make_event(item="Milk", status="Low", location="Aisle 3", timestamp=None, ip="10.0.0.1", user_agent="pytest"):
    return AlertEvent(
        timestamp=timestamp or utc_timestamp(),
        item=item,
        status=status,
        location=location,
        ip=ip,
        user_agent=user_agent,
    )


@pytest.fixture
def event_log():
    return FakeEventLog()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def make_app(event_log, notifier):
    """Build an app from ``TestSettings`` overrides with fake providers wired in."""

    def _make(**overrides):
        app_settings = TestSettings(**overrides)
        app = create_app(app_settings)
        app.state.alert_service = AlertService(
            cooldown=CooldownGate(window_seconds=app_settings.COOLDOWN_SECONDS),
            notifier=notifier,
            event_log=event_log,
        )
        return app

    return _make


@pytest.fixture
def client(make_app):
    """TestClient for shared-secret mode with manager key ``letmein``."""
    return TestClient(make_app(MANAGER_KEY="letmein"))
