"""Self-hosted manager sign-in. Only mounted behaviour in ``session`` mode."""
import logging

from fastapi import APIRouter, Form, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from stockalert.api.dependencies import AccessGateDep, SettingsDep
from stockalert.api.rate_limit import get_client_ip, limiter, login_limit
from stockalert.api.views import render
from stockalert.core.audit import log_audit_event, log_failure
from stockalert.core.exceptions import InvalidCredentialsError
from stockalert.services.access import AccessGate, SignedSessionGate
from stockalert.services.access.session import LOGIN_PATH, safe_next_path

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _session_gate(gate: AccessGate) -> SignedSessionGate:
    if not isinstance(gate, SignedSessionGate):
        raise HTTPException(status_code=404, detail="Not Found")
    return gate


@router.get(LOGIN_PATH)
async def login_form(
    gate: AccessGateDep,
    app_settings: SettingsDep,
    next_param: str | None = Query(None, alias="next"),
):
    session_gate = _session_gate(gate)
    return render(
        "login.html",
        next_path=safe_next_path(next_param, app_settings.DEFAULT_AFTER_LOGIN),
        configured=session_gate.configured,
        error=None,
    )


@router.post(LOGIN_PATH)
@limiter.limit(login_limit)
async def login_submit(
    request: Request,
    gate: AccessGateDep,
    app_settings: SettingsDep,
    password: str = Form(""),
    next_param: str = Form("", alias="next"),
):
    session_gate = _session_gate(gate)
    target = safe_next_path(next_param, app_settings.DEFAULT_AFTER_LOGIN)
    try:
        token = session_gate.login(password)
    except InvalidCredentialsError as exc:
        log_failure("manager.login", error="invalid_password", ip=get_client_ip(request))
        return render(
            "login.html",
            status_code=exc.status_code,
            next_path=target,
            configured=session_gate.configured,
            error=exc.message,
        )
    response = RedirectResponse(url=target, status_code=303)
    response.set_cookie(session_gate.cookie_name, token, **session_gate.cookie_settings())
    log_audit_event("manager.login", user_id="manager", ip=get_client_ip(request))
    return response


@router.get("/logout")
async def logout(request: Request, gate: AccessGateDep):
    session_gate = _session_gate(gate)
    response = RedirectResponse(url=LOGIN_PATH, status_code=303)
    response.delete_cookie(
        session_gate.cookie_name,
        path="/",
        secure=session_gate.secure,
        httponly=True,
        samesite="lax",
    )
    log_audit_event("manager.logout", user_id=None, ip=get_client_ip(request))
    return response
