"""Filtering and formatting of logged events for the manager views.

Everything here is pure: events come in newest first and go out in the same
order.
"""
from __future__ import annotations

import csv
import io
import re
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable

from stockalert.models.alert import AlertEvent, parse_timestamp

RANGE_TODAY = "today"
RANGE_ALL = "all"

CSV_HEADER = ["Time", "Item", "Status", "Location", "IP", "User Agent"]

_CHECKLIST_PATTERN = re.compile(r"low|running|out|empty|critical", re.IGNORECASE)
_CRITICAL_PATTERN = re.compile(r"out|empty|critical", re.IGNORECASE)
_WARNING_PATTERN = re.compile(r"low|running", re.IGNORECASE)


class Severity(str, Enum):
    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


def classify_severity(status: str | None) -> Severity:
    text = status or ""
    if _CRITICAL_PATTERN.search(text):
        return Severity.CRITICAL
    if _WARNING_PATTERN.search(text):
        return Severity.WARNING
    return Severity.NORMAL


def normalize_range(value: str | None) -> str:
    return RANGE_ALL if (value or "").strip().lower() == RANGE_ALL else RANGE_TODAY


def is_same_utc_day(timestamp: str, ref: datetime | None = None) -> bool:
    moment = parse_timestamp(timestamp)
    if moment is None:
        return False
    reference = (ref or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.date() == reference.date()


def filter_range(events: Iterable[AlertEvent], range_param: str | None, now: datetime | None = None) -> list[AlertEvent]:
    if normalize_range(range_param) == RANGE_ALL:
        return list(events)
    return [event for event in events if is_same_utc_day(event.timestamp, now)]


def build_checklist(events: Iterable[AlertEvent], now: datetime | None = None) -> list[AlertEvent]:
    """Today's low/out events, one per (item, location), newest kept."""
    by_key: dict[tuple[str, str], AlertEvent] = {}
    for event in filter_range(events, RANGE_TODAY, now):
        if not _CHECKLIST_PATTERN.search(event.status or ""):
            continue
        by_key.setdefault((event.item or "", event.location or ""), event)
    return list(by_key.values())


def events_to_csv(events: Iterable[AlertEvent]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\r\n")
    writer.writerow(CSV_HEADER)
    for event in events:
        writer.writerow(event.to_row())
    return buffer.getvalue()


def csv_filename(range_param: str | None) -> str:
    return f"inventory-alerts-{normalize_range(range_param)}.csv"
