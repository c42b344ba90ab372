"""Google Sheets backed event log.

The sheet is the system of record for alert events: one row per report,
columns ``time, item, status, location, ip, user agent``. Rows are only ever
appended. Logging is best effort, so every call returns a ``CallResult``
instead of raising.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Protocol

from google.auth.exceptions import GoogleAuthError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from starlette.concurrency import run_in_threadpool

from stockalert import metrics
from stockalert.core.config import BaseAppSettings
from stockalert.core.exceptions import (
    ExternalServiceError,
    ProviderHTTPError,
    ProviderUnavailableError,
    ServiceNotConfiguredError,
)
from stockalert.core.results import CallResult
from stockalert.models.alert import AlertEvent

logger = logging.getLogger(__name__)

SERVICE_NAME = "Google Sheets"
SHEETS_SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
_HEADER_CELLS = {"time", "timestamp"}


class EventLog(Protocol):
    """Append-only store of alert events."""

    async def append(self, event: AlertEvent) -> CallResult[None]:  # pragma: no cover - protocol stub
        ...

    async def recent(self, limit: int) -> CallResult[list[AlertEvent]]:  # pragma: no cover - protocol stub
        ...


class SheetsEventLog(EventLog):
    def __init__(self, sheet_id: str | None, service_account_json: str | None, sheet_range: str = "Sheet1!A:F") -> None:
        self.sheet_id = sheet_id
        self.service_account_json = service_account_json
        self.sheet_range = sheet_range
        self._credentials: service_account.Credentials | None = None

    @classmethod
    def from_settings(cls, app_settings: BaseAppSettings) -> SheetsEventLog:
        return cls(app_settings.SHEET_ID, app_settings.GOOGLE_SERVICE_ACCOUNT_JSON, app_settings.SHEET_RANGE)

    @property
    def configured(self) -> bool:
        return bool(self.sheet_id and self.service_account_json)

    def _get_credentials(self) -> service_account.Credentials:
        if self._credentials is None:
            try:
                info = json.loads(self.service_account_json or "")
                self._credentials = service_account.Credentials.from_service_account_info(info, scopes=SHEETS_SCOPES)
            except (ValueError, TypeError, KeyError) as exc:
                raise ServiceNotConfiguredError(SERVICE_NAME, "GOOGLE_SERVICE_ACCOUNT_JSON") from exc
            logger.info("Google Sheets credentials loaded for %s", self._credentials.service_account_email)
        return self._credentials

    def _values(self):
        # httplib2 transports are not thread-safe, so each call builds its own client
        service = build("sheets", "v4", credentials=self._get_credentials(), cache_discovery=False)
        return service.spreadsheets().values()

    def _append_row(self, row: list[str]) -> None:
        self._values().append(
            spreadsheetId=self.sheet_id,
            range=self.sheet_range,
            valueInputOption="RAW",
            insertDataOption="INSERT_ROWS",
            body={"values": [row]},
        ).execute()

    def _read_rows(self) -> list[list]:
        response = self._values().get(spreadsheetId=self.sheet_id, range=self.sheet_range).execute()
        return response.get("values", []) or []

    async def _call(self, operation: str, func, *args):
        started = time.perf_counter()
        try:
            return await run_in_threadpool(func, *args)
        except ExternalServiceError:
            raise
        except HttpError as exc:
            status = getattr(exc.resp, "status", 0) or 0
            raise ProviderHTTPError(SERVICE_NAME, int(status), str(exc)) from exc
        except GoogleAuthError as exc:
            raise ProviderUnavailableError(SERVICE_NAME, f"authentication failed during {operation}: {exc}") from exc
        except Exception as exc:  # noqa: BLE001
            raise ProviderUnavailableError(SERVICE_NAME, f"{operation} failed: {exc}") from exc
        finally:
            metrics.provider_latency("sheets", time.perf_counter() - started)

    async def append(self, event: AlertEvent) -> CallResult[None]:
        if not self.configured:
            logger.info("Google Sheets env vars missing; skipping logging.")
            return CallResult.failure(ServiceNotConfiguredError(SERVICE_NAME, "SHEET_ID"))
        try:
            await self._call("append", self._append_row, event.to_row())
        except ExternalServiceError as exc:
            logger.error("Error logging to Google Sheets: %s", exc.message, extra={"details": exc.details})
            metrics.event_log_write(False)
            return CallResult.failure(exc)
        logger.info("Logged alert to Google Sheets: item=%s status=%s location=%s ip=%s",
                    event.item, event.status, event.location, event.ip)
        metrics.event_log_write(True)
        return CallResult.success()

    async def recent(self, limit: int) -> CallResult[list[AlertEvent]]:
        if not self.configured:
            return CallResult.success([])
        if limit <= 0:
            return CallResult.success([])
        try:
            rows = await self._call("read", self._read_rows)
        except ExternalServiceError as exc:
            logger.error("Error reading alerts from Google Sheets: %s", exc.message, extra={"details": exc.details})
            metrics.event_log_read(False)
            return CallResult.failure(exc, [])
        metrics.event_log_read(True)
        return CallResult.success(rows_to_events(rows, limit))


def rows_to_events(rows: list[list], limit: int) -> list[AlertEvent]:
    """Newest-first events from raw sheet rows in append order."""
    data = [row for row in rows if row]
    if data and str(data[0][0]).strip().lower() in _HEADER_CELLS:
        data = data[1:]
    return [AlertEvent.from_row(row) for row in reversed(data[-limit:])] if limit > 0 else []
