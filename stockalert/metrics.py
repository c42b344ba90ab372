"""Metrics facade.

Service code should ONLY call the semantic helpers here so the backend can
change freely. Counters live in the default Prometheus registry and are
exposed by ``GET /metrics``.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

_ALERTS_RECEIVED = Counter("stockalert_alerts_received_total", "Alert reports received from staff")
_NOTIFICATIONS = Counter(
    "stockalert_notifications_total",
    "Push notification outcomes",
    ["outcome"],  # sent | suppressed | failed | disabled
)
_EVENT_LOG_WRITES = Counter(
    "stockalert_event_log_writes_total", "Event log append outcomes", ["outcome"]
)
_EVENT_LOG_READS = Counter(
    "stockalert_event_log_reads_total", "Event log read outcomes", ["outcome"]
)
_ACCESS_DENIED = Counter(
    "stockalert_access_denied_total", "Manager requests denied by the access gate", ["reason"]
)
_RATE_LIMITED = Counter("stockalert_rate_limit_exceeded_total", "Requests rejected by the rate limiter")
_PROVIDER_LATENCY = Histogram(
    "stockalert_provider_latency_seconds",
    "Latency of calls to external providers",
    ["provider"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10),
)


def alert_received():
    _ALERTS_RECEIVED.inc()


def notification_outcome(outcome: str):
    _NOTIFICATIONS.labels(outcome=outcome).inc()


def event_log_write(ok: bool):
    _EVENT_LOG_WRITES.labels(outcome="ok" if ok else "error").inc()


def event_log_read(ok: bool):
    _EVENT_LOG_READS.labels(outcome="ok" if ok else "error").inc()


def access_denied(reason: str):
    _ACCESS_DENIED.labels(reason=reason).inc()


def rate_limit_exceeded():
    _RATE_LIMITED.inc()


def provider_latency(provider: str, seconds: float):
    _PROVIDER_LATENCY.labels(provider=provider).observe(seconds)
