from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import httpx

from stockalert import metrics
from stockalert.core.exceptions import (
    ProviderHTTPError,
    ProviderResponseError,
    ProviderUnavailableError,
    ServiceNotConfiguredError,
)
from stockalert.core.results import CallResult

if TYPE_CHECKING:  # pragma: no cover
    from stockalert.services.notification.service import NotificationService

logger = logging.getLogger(__name__)

SERVICE_NAME = "OneSignal"


class OneSignalChannel:
    """Web push to every subscribed device through the OneSignal REST API."""

    def __init__(self, service: "NotificationService", transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._service = service
        self._transport = transport

    def _payload(self, title: str, body: str, target_url: str | None) -> dict:
        payload = {
            "app_id": self._service.app_id,
            "included_segments": ["All"],
            "headings": {"en": title},
            "contents": {"en": body},
        }
        if target_url:
            payload["url"] = target_url
        return payload

    async def send(self, title: str, body: str, target_url: str | None = None) -> CallResult[str]:
        if not (self._service.app_id and self._service.api_key):
            logger.warning("Skipping push: OneSignal env vars missing.")
            return CallResult.failure(ServiceNotConfiguredError(SERVICE_NAME, "ONESIGNAL_APP_ID/ONESIGNAL_API_KEY"))
        headers = {
            "Content-Type": "application/json; charset=utf-8",
            "Authorization": f"{self._service.auth_scheme} {self._service.api_key}",
        }
        started = time.perf_counter()
        try:
            async with httpx.AsyncClient(timeout=self._service.timeout, transport=self._transport) as client:
                response = await client.post(
                    self._service.api_url,
                    json=self._payload(title, body, target_url),
                    headers=headers,
                )
        except httpx.HTTPError as exc:
            logger.error("OneSignal request failed: %s", exc)
            return CallResult.failure(ProviderUnavailableError(SERVICE_NAME, str(exc) or type(exc).__name__))
        finally:
            metrics.provider_latency("onesignal", time.perf_counter() - started)

        logger.info("OneSignal raw response: %s", response.text)
        if response.status_code >= 400:
            logger.error("OneSignal rejected notification: HTTP %s", response.status_code)
            return CallResult.failure(ProviderHTTPError(SERVICE_NAME, response.status_code, response.text))
        try:
            data = response.json()
        except ValueError:
            logger.error("OneSignal returned a non-JSON body")
            return CallResult.failure(ProviderResponseError(SERVICE_NAME, "response body is not JSON"))
        if not isinstance(data, dict):
            return CallResult.failure(ProviderResponseError(SERVICE_NAME, "unexpected response shape"))
        if data.get("errors"):
            logger.error("OneSignal reported errors: %s", data["errors"])
            return CallResult.failure(ProviderResponseError(SERVICE_NAME, f"errors: {data['errors']}"))
        notification_id = data.get("id")
        if not notification_id:
            return CallResult.failure(ProviderResponseError(SERVICE_NAME, "response has no notification id"))
        logger.info("Push sent via OneSignal (id: %s, recipients: %s)", notification_id, data.get("recipients"))
        return CallResult.success(str(notification_id))
