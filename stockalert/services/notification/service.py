from __future__ import annotations

import logging

import httpx

from stockalert.core.config import BaseAppSettings
from stockalert.core.results import CallResult
from stockalert.services.notification.channels.onesignal import OneSignalChannel

logger = logging.getLogger(__name__)

ALERT_HEADING = "Inventory Alert"


def format_alert_message(item: str, status: str, location: str = "") -> str:
    location_suffix = f" (Location: {location})" if location else ""
    return f"{ALERT_HEADING}{location_suffix}: {item} is {status}. Please restock."


class NotificationService:
    """Facade for manager notifications.

    Push is the only channel today; callers go through ``send`` so another
    channel can be added without touching the intake flow.
    """

    def __init__(
        self,
        app_id: str | None,
        api_key: str | None,
        api_url: str = "https://onesignal.com/api/v1/notifications",
        auth_scheme: str = "Basic",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.app_id = app_id
        self.api_key = api_key
        self.api_url = api_url
        self.auth_scheme = auth_scheme
        self.timeout = timeout
        self.push = OneSignalChannel(self, transport=transport)

    @classmethod
    def from_settings(cls, app_settings: BaseAppSettings) -> NotificationService:
        return cls(
            app_id=app_settings.ONESIGNAL_APP_ID,
            api_key=app_settings.ONESIGNAL_API_KEY,
            api_url=app_settings.ONESIGNAL_API_URL,
            auth_scheme=app_settings.ONESIGNAL_AUTH_SCHEME,
            timeout=app_settings.PUSH_TIMEOUT_SECONDS,
        )

    @property
    def configured(self) -> bool:
        return bool(self.app_id and self.api_key)

    async def send(self, title: str, body: str, target_url: str | None = None) -> CallResult[str]:
        return await self.push.send(title, body, target_url)

    async def send_inventory_alert(
        self, item: str, status: str, location: str = "", target_url: str | None = None
    ) -> CallResult[str]:
        return await self.send(ALERT_HEADING, format_alert_message(item, status, location), target_url)
