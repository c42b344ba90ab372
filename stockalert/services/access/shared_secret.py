from __future__ import annotations

from starlette.requests import Request

from stockalert.core.security import secrets_match

from .base import AccessGate, ManagerIdentity

KEY_PARAM = "key"


class SharedSecretGate(AccessGate):
    """``?key=`` must equal the configured manager key.

    With no key configured every request is denied.
    """

    mode = "shared_secret"

    def __init__(self, manager_key: str | None) -> None:
        self.manager_key = manager_key

    @property
    def configured(self) -> bool:
        return bool(self.manager_key)

    async def authenticate(self, request: Request) -> ManagerIdentity:
        if not self.configured:
            raise self.deny(request, "not_configured")
        provided = request.query_params.get(KEY_PARAM)
        if not provided:
            raise self.deny(request, "missing_key")
        if not secrets_match(provided, self.manager_key):
            raise self.deny(request, "invalid_key")
        return ManagerIdentity(user_id="manager", method=self.mode)

    def link_params(self, request: Request) -> dict[str, str]:
        provided = request.query_params.get(KEY_PARAM)
        return {KEY_PARAM: provided} if provided else {}
