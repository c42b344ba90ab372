"""Per-(item, location) cooldown on push notifications.

The gate only decides whether a push goes out. Alert events are always
logged regardless of what the gate says.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Protocol

import redis

from stockalert.core.config import BaseAppSettings
from stockalert.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 60.0


class CooldownStore(Protocol):
    """Minimal key-value interface used by the cooldown gate."""

    def get(self, key: str) -> float | None:  # pragma: no cover - protocol stub
        ...

    def set(self, key: str, fired_at: float) -> None:  # pragma: no cover - protocol stub
        ...


class InMemoryCooldownStore(CooldownStore):
    """Process-local store. State is lost on restart and not shared between instances."""

    def __init__(self) -> None:
        self._data: dict[str, float] = {}

    def get(self, key: str) -> float | None:
        return self._data.get(key)

    def set(self, key: str, fired_at: float) -> None:
        self._data[key] = fired_at


class RedisCooldownStore(CooldownStore):
    """Redis-backed store so every instance behind a load balancer shares one cooldown."""

    _PREFIX = "cooldown:"

    def __init__(self, client: redis.Redis, ttl_seconds: float = DEFAULT_COOLDOWN_SECONDS) -> None:
        self._client = client
        self._ttl = max(int(math.ceil(ttl_seconds)), 1)

    @classmethod
    def from_url(cls, url: str, ttl_seconds: float = DEFAULT_COOLDOWN_SECONDS) -> RedisCooldownStore:
        return cls(redis.Redis.from_url(url, decode_responses=True), ttl_seconds)

    def get(self, key: str) -> float | None:
        try:
            raw = self._client.get(self._PREFIX + key)
        except redis.RedisError as exc:
            logger.warning("Cooldown store unavailable, treating %s as never fired: %s", key, exc)
            return None
        return float(raw) if raw is not None else None

    def set(self, key: str, fired_at: float) -> None:
        try:
            self._client.setex(self._PREFIX + key, self._ttl, repr(fired_at))
        except redis.RedisError as exc:
            logger.warning("Failed to record cooldown for %s: %s", key, exc)


class CooldownGate:
    def __init__(self, store: CooldownStore | None = None, window_seconds: float = DEFAULT_COOLDOWN_SECONDS) -> None:
        self.store = store if store is not None else InMemoryCooldownStore()
        self.window_seconds = window_seconds

    def last_fired(self, key: str) -> float:
        fired_at = self.store.get(key)
        return fired_at if fired_at is not None else 0.0

    def should_suppress(self, key: str, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return current - self.last_fired(key) < self.window_seconds

    def record_fired(self, key: str, now: float | None = None) -> None:
        self.store.set(key, time.time() if now is None else now)


def build_cooldown_gate(app_settings: BaseAppSettings) -> CooldownGate:
    backend = app_settings.COOLDOWN_BACKEND.lower()
    window = app_settings.COOLDOWN_SECONDS
    if backend == "memory":
        return CooldownGate(InMemoryCooldownStore(), window)
    if backend == "redis":
        logger.info("Cooldown gate using Redis store")
        return CooldownGate(RedisCooldownStore.from_url(app_settings.REDIS_URL, window), window)
    raise ConfigurationError("COOLDOWN_BACKEND")
