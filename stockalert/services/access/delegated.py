"""Delegated sign-in through a hosted identity provider (Clerk).

The provider's session token arrives in the ``__session`` cookie or as a
bearer token. It is verified against the signing keys the provider publishes,
fetched on every request, and the ``sub`` claim becomes the manager identity.
"""
from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlencode

import httpx
import jwt
from starlette.requests import Request

from .base import AccessGate, ManagerIdentity, current_url

logger = logging.getLogger(__name__)

SIGNING_ALGORITHMS = ["RS256"]


class IdentityVerificationError(Exception):
    """The session token could not be verified."""


class ClerkSessionGate(AccessGate):
    mode = "delegated"

    def __init__(
        self,
        secret_key: str | None,
        publishable_key: str | None,
        sign_in_url: str | None,
        jwks_url: str = "https://api.clerk.com/v1/jwks",
        cookie_name: str = "__session",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.secret_key = secret_key
        self.publishable_key = publishable_key
        self.sign_in_base = sign_in_url
        self.jwks_url = jwks_url
        self.cookie_name = cookie_name
        self.timeout = timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.secret_key and self.publishable_key and self.sign_in_base)

    def sign_in_url(self, request: Request, return_to: str) -> str | None:
        if not self.sign_in_base:
            return None
        return f"{self.sign_in_base}?{urlencode({'redirect_url': return_to})}"

    def _session_token(self, request: Request) -> str | None:
        auth_header = request.headers.get("Authorization", "")
        if auth_header.lower().startswith("bearer "):
            return auth_header[7:].strip() or None
        return request.cookies.get(self.cookie_name)

    async def fetch_signing_keys(self) -> list[dict[str, Any]]:
        headers = {"Authorization": f"Bearer {self.secret_key}"}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.jwks_url, headers=headers)
            response.raise_for_status()
            data = response.json()
        keys = data.get("keys") if isinstance(data, dict) else None
        if not isinstance(keys, list):
            raise IdentityVerificationError("JWKS response has no keys")
        return keys

    async def verify_token(self, token: str) -> str:
        """Return the user id carried by a valid session token."""
        try:
            kid = jwt.get_unverified_header(token).get("kid")
            keys = await self.fetch_signing_keys()
            candidates = [k for k in keys if k.get("kid") == kid] if kid else keys
            if not candidates:
                raise IdentityVerificationError(f"no signing key matches kid={kid}")
            signing_key = jwt.PyJWK(candidates[0]).key
            claims = jwt.decode(
                token,
                signing_key,
                algorithms=SIGNING_ALGORITHMS,
                options={"verify_aud": False},
                leeway=5,
            )
        except (httpx.HTTPError, ValueError, jwt.PyJWTError) as exc:
            raise IdentityVerificationError(str(exc) or type(exc).__name__) from exc
        user_id = claims.get("sub")
        if not user_id:
            raise IdentityVerificationError("token has no subject")
        return str(user_id)

    async def authenticate(self, request: Request) -> ManagerIdentity:
        if not self.configured:
            raise self.deny(request, "not_configured")
        token = self._session_token(request)
        if not token:
            raise self.deny(request, "missing_session", current_url(request))
        try:
            user_id = await self.verify_token(token)
        except IdentityVerificationError as exc:
            logger.error("Clerk session verification failed: %s", exc)
            raise self.deny(request, "invalid_session", current_url(request))
        return ManagerIdentity(user_id=user_id, method=self.mode)

    async def landing_redirect(self, request: Request, after_login: str) -> str | None:
        if not self.configured:
            return None
        token = self._session_token(request)
        if token:
            try:
                await self.verify_token(token)
                return after_login
            except IdentityVerificationError:
                pass
        return self.sign_in_url(request, str(request.base_url).rstrip("/") + after_login)
