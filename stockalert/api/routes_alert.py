import logging

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from stockalert.api.dependencies import AlertServiceDep, SettingsDep, public_url
from stockalert.api.rate_limit import alert_limit, get_client_ip, limiter
from stockalert.api.views import render
from stockalert.models.alert import AlertReport

logger = logging.getLogger(__name__)

router = APIRouter(tags=["alerts"])


@router.get("/alert")
@limiter.limit(alert_limit)
async def report_alert(
    request: Request,
    svc: AlertServiceDep,
    app_settings: SettingsDep,
    item: str = "unknown",
    qty: str = "unknown",
    location: str = "",
):
    """Staff intake from a shelf QR code. No sign-in required."""
    report = AlertReport(item=item or "unknown", qty=qty or "unknown", location=location or "")
    try:
        outcome = await svc.submit(
            report,
            ip=get_client_ip(request),
            user_agent=request.headers.get("user-agent", ""),
            target_url=public_url(request, app_settings, "/checklist"),
        )
    except Exception:  # noqa: BLE001
        logger.exception("Error in /alert route")
        return PlainTextResponse("Error sending notification. Please tell a manager.", status_code=500)
    return render("alert_confirmation.html", outcome=outcome, event=outcome.event)
