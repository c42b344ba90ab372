import pytest

from conftest import REJECTED_PUSH, UNREACHABLE_PUSH, FakeEventLog, FakeNotifier

from stockalert.core.exceptions import ProviderResponseError
from stockalert.models.alert import AlertReport
from stockalert.services.alert_service import AlertService
from stockalert.services.cooldown import CooldownGate


class Clock:
    def __init__(self, now: float = 1_762_500_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _service(notifier=None, event_log=None, clock=None):
    return AlertService(
        cooldown=CooldownGate(window_seconds=60),
        notifier=notifier or FakeNotifier(),
        event_log=event_log or FakeEventLog(),
        clock=clock or Clock(),
    )


@pytest.mark.asyncio
async def test_first_report_notifies_and_logs():
    notifier, log = FakeNotifier(), FakeEventLog()
    svc = _service(notifier, log)

    outcome = await svc.submit(AlertReport("whole_milk", "running_low", "aisle_3"), ip="1.2.3.4", user_agent="ua",
                               target_url="https://shop.example/checklist")

    assert outcome.suppressed is False
    assert outcome.notified and outcome.logged
    assert notifier.calls == [("Whole Milk", "Running Low", "Aisle 3", "https://shop.example/checklist")]
    event = log.appended[0]
    assert (event.item, event.status, event.location, event.ip, event.user_agent) == (
        "Whole Milk", "Running Low", "Aisle 3", "1.2.3.4", "ua",
    )
    assert event.timestamp == "2025-11-07T07:20:00.000Z"


@pytest.mark.asyncio
async def test_repeat_within_window_is_logged_but_not_pushed():
    clock = Clock()
    notifier, log = FakeNotifier(), FakeEventLog()
    svc = _service(notifier, log, clock)
    report = AlertReport("milk", "low", "aisle_3")

    await svc.submit(report)
    clock.now += 30
    second = await svc.submit(AlertReport("milk", "out", "aisle_3"))

    assert second.suppressed is True
    assert second.notify_result is None
    assert len(notifier.calls) == 1
    assert len(log.appended) == 2

    clock.now += 31
    third = await svc.submit(report)
    assert third.suppressed is False
    assert len(notifier.calls) == 2


@pytest.mark.asyncio
async def test_other_location_is_not_suppressed():
    notifier = FakeNotifier()
    svc = _service(notifier)

    await svc.submit(AlertReport("milk", "low", "aisle_3"))
    await svc.submit(AlertReport("milk", "low", "aisle_4"))

    assert len(notifier.calls) == 2


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [REJECTED_PUSH, ProviderResponseError("OneSignal", "errors: ['All included players are not subscribed']")],
)
async def test_rejected_push_still_starts_cooldown(error):
    notifier, log = FakeNotifier(error=error), FakeEventLog()
    svc = _service(notifier, log)
    report = AlertReport("whole_milk", "running_low", "back_room")

    first = await svc.submit(report)
    second = await svc.submit(report)

    assert not first.notified
    assert second.suppressed is True
    assert len(notifier.calls) == 1
    assert len(log.appended) == 2


@pytest.mark.asyncio
async def test_unreachable_provider_does_not_start_cooldown():
    notifier = FakeNotifier(error=UNREACHABLE_PUSH)
    svc = _service(notifier)

    await svc.submit(AlertReport("milk", "low"))
    second = await svc.submit(AlertReport("milk", "low"))

    assert second.suppressed is False
    assert len(notifier.calls) == 2


@pytest.mark.asyncio
async def test_unconfigured_push_still_logs():
    notifier, log = FakeNotifier(configured=False), FakeEventLog()
    svc = _service(notifier, log)

    outcome = await svc.submit(AlertReport("milk", "low"))

    assert notifier.calls == []
    assert outcome.notify_result is None
    assert outcome.suppressed is False
    assert len(log.appended) == 1
