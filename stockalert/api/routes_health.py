from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, RedirectResponse

from stockalert.api.dependencies import AccessGateDep, SettingsDep

router = APIRouter(tags=["health"])


@router.get("/")
async def landing(request: Request, gate: AccessGateDep, app_settings: SettingsDep):
    """Signed-in managers go to the checklist; others to sign-in where the mode has one."""
    target = await gate.landing_redirect(request, app_settings.DEFAULT_AFTER_LOGIN)
    if target:
        return RedirectResponse(url=target, status_code=302)
    if gate.mode == "delegated" and not gate.configured:
        return PlainTextResponse("Server is running, but Clerk env vars are missing.")
    return PlainTextResponse("Inventory alert server is running.")


@router.get("/healthz")
async def healthz(app_settings: SettingsDep) -> dict[str, object]:
    """Liveness plus which optional integrations are configured."""
    return {
        "status": "ok",
        "push": app_settings.push_configured,
        "event_log": app_settings.sheets_configured,
        "auth_mode": app_settings.MANAGER_AUTH_MODE,
    }


@router.get("/live")
async def live() -> dict[str, str]:
    """Kubernetes-style liveness endpoint (no dependencies)."""
    return {"status": "alive"}
