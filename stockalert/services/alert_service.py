"""Staff alert intake: cooldown check, push, and event log append."""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Protocol

from stockalert import metrics
from stockalert.core.exceptions import ProviderHTTPError, ProviderResponseError
from stockalert.core.results import CallResult
from stockalert.models.alert import AlertEvent, AlertReport, utc_timestamp
from stockalert.services.cooldown import CooldownGate
from stockalert.services.event_log import EventLog
from stockalert.utils.text import normalize

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    configured: bool

    async def send_inventory_alert(
        self, item: str, status: str, location: str = "", target_url: str | None = None
    ) -> CallResult[str]:  # pragma: no cover - protocol stub
        ...


@dataclass(frozen=True)
class IntakeOutcome:
    event: AlertEvent
    suppressed: bool
    notify_result: CallResult[str] | None
    log_result: CallResult[None]

    @property
    def notified(self) -> bool:
        return self.notify_result is not None and self.notify_result.ok

    @property
    def logged(self) -> bool:
        return self.log_result.ok


def reached_provider(result: CallResult[str]) -> bool:
    """Whether the dispatch got an answer from OneSignal, accepted or rejected.

    Only a completed round trip starts the cooldown; a push that never left
    (no credentials, network failure) does not.
    """
    return result.ok or isinstance(result.error, (ProviderHTTPError, ProviderResponseError))


class AlertService:
    def __init__(
        self,
        cooldown: CooldownGate,
        notifier: Notifier,
        event_log: EventLog,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.cooldown = cooldown
        self.notifier = notifier
        self.event_log = event_log
        self._clock = clock

    async def submit(
        self,
        report: AlertReport,
        ip: str = "",
        user_agent: str = "",
        target_url: str | None = None,
    ) -> IntakeOutcome:
        metrics.alert_received()
        item = normalize(report.item)
        status = normalize(report.qty)
        location = normalize(report.location)

        now = self._clock()
        key = report.cooldown_key
        suppressed = self.cooldown.should_suppress(key, now)

        notify_result: CallResult[str] | None = None
        if not self.notifier.configured:
            logger.warning("Skipping push: OneSignal env vars missing.")
            metrics.notification_outcome("disabled")
        elif suppressed:
            logger.info("Cooldown active, not sending push for %s", key)
            metrics.notification_outcome("suppressed")
        else:
            notify_result = await self.notifier.send_inventory_alert(item, status, location, target_url)
            if reached_provider(notify_result):
                self.cooldown.record_fired(key, now)
            if notify_result.ok:
                metrics.notification_outcome("sent")
            else:
                logger.warning("Push for %s not delivered: %s", key, notify_result.error)
                metrics.notification_outcome("failed")

        event = AlertEvent(
            timestamp=utc_timestamp(datetime.fromtimestamp(now, tz=timezone.utc)),
            item=item,
            status=status,
            location=location,
            ip=ip,
            user_agent=user_agent,
        )
        log_result = await self.event_log.append(event)
        return IntakeOutcome(event=event, suppressed=suppressed, notify_result=notify_result, log_result=log_result)
