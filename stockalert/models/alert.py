from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone

ROW_WIDTH = 6


def utc_timestamp(now: datetime | None = None) -> str:
    """ISO-8601 UTC string with millisecond precision and a ``Z`` suffix."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime | None:
    """Parse a stored timestamp; naive values are taken as UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


@dataclass(frozen=True)
class AlertReport:
    """Raw staff report as received on the intake URL."""

    item: str = "unknown"
    qty: str = "unknown"
    location: str = ""

    @property
    def cooldown_key(self) -> str:
        return f"{self.item}|{self.location or ''}"


@dataclass(frozen=True)
class AlertEvent:
    """One logged inventory condition, as stored in the event log."""

    timestamp: str
    item: str
    status: str
    location: str = ""
    ip: str = ""
    user_agent: str = ""

    def to_row(self) -> list[str]:
        return [self.timestamp, self.item, self.status, self.location or "", self.ip or "", self.user_agent or ""]

    @classmethod
    def from_row(cls, row: list) -> AlertEvent:
        cells = [str(cell) if cell is not None else "" for cell in row[:ROW_WIDTH]]
        cells += [""] * (ROW_WIDTH - len(cells))
        return cls(*cells)

    @property
    def recorded_at(self) -> datetime | None:
        return parse_timestamp(self.timestamp)
