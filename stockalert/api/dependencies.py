"""Request-scoped access to the services built by ``create_app``."""
from typing import Annotated, TypeAlias

from fastapi import Depends, Request

from stockalert.core.config import BaseAppSettings
from stockalert.services.access import AccessGate, ManagerIdentity
from stockalert.services.alert_service import AlertService
from stockalert.services.event_log import EventLog


def get_app_settings(request: Request) -> BaseAppSettings:
    return request.app.state.settings


def get_alert_service(request: Request) -> AlertService:
    return request.app.state.alert_service


def get_event_log(request: Request) -> EventLog:
    return request.app.state.alert_service.event_log


def get_access_gate(request: Request) -> AccessGate:
    return request.app.state.access_gate


SettingsDep: TypeAlias = Annotated[BaseAppSettings, Depends(get_app_settings)]
AlertServiceDep: TypeAlias = Annotated[AlertService, Depends(get_alert_service)]
EventLogDep: TypeAlias = Annotated[EventLog, Depends(get_event_log)]
AccessGateDep: TypeAlias = Annotated[AccessGate, Depends(get_access_gate)]


async def require_manager(request: Request, gate: AccessGateDep) -> ManagerIdentity:
    """Raises ``ManagerAccessDenied`` (401 or sign-in redirect) for non-managers."""
    return await gate.authenticate(request)


ManagerDep: TypeAlias = Annotated[ManagerIdentity, Depends(require_manager)]


def public_url(request: Request, app_settings: BaseAppSettings, path: str) -> str:
    base = app_settings.PUBLIC_BASE_URL or str(request.base_url)
    return f"{base.rstrip('/')}{path}"
