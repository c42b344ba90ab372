from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import PlainTextResponse, Response

from stockalert.api.dependencies import (
    AccessGateDep,
    EventLogDep,
    ManagerDep,
    SettingsDep,
    public_url,
)
from stockalert.api.views import render, url_with
from stockalert.services.alert_views import (
    RANGE_ALL,
    RANGE_TODAY,
    build_checklist,
    classify_severity,
    csv_filename,
    events_to_csv,
    filter_range,
    normalize_range,
)
from stockalert.services.qr_service import build_alert_url, render_qr_png

logger = logging.getLogger(__name__)

router = APIRouter(tags=["manager"])


@router.get("/manager")
async def manager_view(
    request: Request,
    manager: ManagerDep,
    gate: AccessGateDep,
    event_log: EventLogDep,
    app_settings: SettingsDep,
    range_param: str = Query(RANGE_TODAY, alias="range"),
):
    selected = normalize_range(range_param)
    result = await event_log.recent(app_settings.MANAGER_FETCH_LIMIT)
    if not result.ok:
        return PlainTextResponse("Error loading manager view.", status_code=500)
    events = filter_range(result.value or [], selected)
    params = gate.link_params(request)
    return render(
        "manager.html",
        manager=manager,
        selected_range=selected,
        rows=[(event, classify_severity(event.status).value) for event in events],
        today_url=url_with("/manager", {"range": RANGE_TODAY, **params}),
        all_url=url_with("/manager", {"range": RANGE_ALL, **params}),
        csv_url=url_with("/manager.csv", {"range": selected, **params}),
        checklist_url=url_with("/checklist", params),
        logout_url="/logout" if gate.mode == "session" else None,
    )


@router.get("/manager.csv")
async def manager_csv(
    manager: ManagerDep,
    event_log: EventLogDep,
    app_settings: SettingsDep,
    range_param: str = Query(RANGE_TODAY, alias="range"),
):
    selected = normalize_range(range_param)
    result = await event_log.recent(app_settings.CSV_FETCH_LIMIT)
    if not result.ok:
        return PlainTextResponse("Error generating CSV.", status_code=500)
    body = events_to_csv(filter_range(result.value or [], selected))
    return Response(
        content=body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{csv_filename(selected)}"'},
    )


@router.get("/checklist")
async def checklist_view(
    request: Request,
    manager: ManagerDep,
    gate: AccessGateDep,
    event_log: EventLogDep,
    app_settings: SettingsDep,
):
    result = await event_log.recent(app_settings.CHECKLIST_FETCH_LIMIT)
    if not result.ok:
        return PlainTextResponse("Error loading checklist.", status_code=500)
    params = gate.link_params(request)
    return render(
        "checklist.html",
        manager=manager,
        items=build_checklist(result.value or []),
        manager_url=url_with("/manager", params),
        logout_url="/logout" if gate.mode == "session" else None,
    )


@router.get("/qr.png")
async def alert_qr_code(
    request: Request,
    manager: ManagerDep,
    app_settings: SettingsDep,
    item: str,
    qty: str = "low",
    location: str = "",
):
    """PNG QR code pointing at the intake URL for one item, for printing on shelves."""
    target = build_alert_url(public_url(request, app_settings, ""), item, qty, location)
    return Response(content=render_qr_png(target), media_type="image/png")
