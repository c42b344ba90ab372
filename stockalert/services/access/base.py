"""Abstract base class for manager access strategies.

A strategy answers one question per request: is this caller an authorized
manager? Nothing is remembered between requests.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from starlette.requests import Request

from stockalert.core.audit import log_denied
from stockalert.core.exceptions import ManagerAccessDenied


@dataclass(frozen=True)
class ManagerIdentity:
    user_id: str
    method: str


class AccessGate(ABC):
    mode: str = ""

    @property
    @abstractmethod
    def configured(self) -> bool:
        """Whether the secrets this strategy needs are present."""

    @abstractmethod
    async def authenticate(self, request: Request) -> ManagerIdentity:
        """Return the manager identity or raise ``ManagerAccessDenied``."""

    def sign_in_url(self, request: Request, return_to: str) -> str | None:
        """Where to send an unauthenticated caller, or ``None`` for a bare 401."""
        return None

    def link_params(self, request: Request) -> dict[str, str]:
        """Query parameters manager pages must carry on their internal links."""
        return {}

    async def landing_redirect(self, request: Request, after_login: str) -> str | None:
        """Redirect target for ``GET /``; ``None`` means render the plain landing text."""
        return None

    def deny(self, request: Request, reason: str, return_to: str | None = None) -> ManagerAccessDenied:
        log_denied("manager.access", reason=reason, path=request.url.path, mode=self.mode)
        redirect = self.sign_in_url(request, return_to) if (return_to and self.configured) else None
        return ManagerAccessDenied(reason, redirect_url=redirect)


def current_url(request: Request) -> str:
    return str(request.url)


def current_path(request: Request) -> str:
    query = request.url.query
    return f"{request.url.path}?{query}" if query else request.url.path
