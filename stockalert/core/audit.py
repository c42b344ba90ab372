"""Audit trail for manager access.

Sign-ins, sign-outs and denied requests become one JSON line each on the
``audit`` logger. With ``AUDIT_LOG_FILE`` set the same line is appended to
that file.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from stockalert.core.config import settings
from stockalert.models.alert import utc_timestamp

_logger = logging.getLogger("audit")

_audit_file: str | None = settings.AUDIT_LOG_FILE


def configure_audit(path: str | None) -> None:
    """Set (or clear) the JSON-lines file that receives audit events."""
    global _audit_file
    _audit_file = path or None


def _append_line(path: str, line: str) -> None:
    target = Path(path)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("a", encoding="utf-8") as fh:
            fh.write(line + "\n")
    except OSError as exc:
        _logger.warning("Audit file %s not writable: %s", path, exc)


def log_audit_event(action: str, user_id: str | None = None, status: str = "success", **metadata: Any) -> None:
    """Record an audit event.

    ``action`` is a dotted key such as ``manager.login``; ``status`` is one of
    ``success``, ``failure`` or ``denied``. ``None`` metadata values are dropped.
    """
    event: dict[str, Any] = {
        "ts": utc_timestamp(),
        "action": action,
        "actor": user_id or "anonymous",
        "status": status,
    }
    event.update({key: value for key, value in metadata.items() if value is not None})
    line = json.dumps(event, separators=(",", ":"), default=str)
    if _audit_file:
        _append_line(_audit_file, line)
    _logger.log(logging.INFO if status == "success" else logging.WARNING, line)


def log_denied(action: str, reason: str, **extra: Any) -> None:
    log_audit_event(action, status="denied", reason=reason, **extra)


def log_failure(action: str, error: str, **extra: Any) -> None:
    log_audit_event(action, status="failure", error=error, **extra)
