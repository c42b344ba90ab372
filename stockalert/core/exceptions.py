"""Exception hierarchy for StockAlert.

Error codes follow pattern: [CATEGORY][NUMBER]
- ACC: Manager access errors (100-199)
- EXT: External provider errors (200-299)
- SYS: System errors (400-499)

External provider errors are normally not raised. They travel inside a
``CallResult`` so the caller decides whether to log and continue.
"""

from __future__ import annotations

from typing import Any


class StockAlertException(Exception):
    """Base exception for all StockAlert application errors."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}


# ============================================================================
# MANAGER ACCESS ERRORS (ACC100-199)
# ============================================================================

class ManagerAccessDenied(StockAlertException):
    """Caller is not an authorized manager.

    When ``redirect_url`` is set the caller is sent to a sign-in page
    instead of receiving a bare 401.
    """

    def __init__(self, reason: str, redirect_url: str | None = None):
        super().__init__(
            message="Unauthorized",
            code="ACC100",
            status_code=401,
            details={"reason": reason},
        )
        self.reason = reason
        self.redirect_url = redirect_url


class InvalidCredentialsError(StockAlertException):
    """Manager password did not match."""

    def __init__(self):
        super().__init__(
            message="Incorrect password",
            code="ACC101",
            status_code=401,
        )


# ============================================================================
# EXTERNAL PROVIDER ERRORS (EXT200-299)
# ============================================================================

class ExternalServiceError(StockAlertException):
    """Base class for failures talking to push, spreadsheet or identity providers."""

    def __init__(
        self,
        service_name: str,
        message: str,
        code: str = "EXT200",
        status_code: int = 502,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=f"{service_name}: {message}",
            code=code,
            status_code=status_code,
            details={"service": service_name, **(details or {})},
        )
        self.service_name = service_name


class ServiceNotConfiguredError(ExternalServiceError):
    """Provider credentials are missing or unusable."""

    def __init__(self, service_name: str, parameter: str):
        super().__init__(
            service_name,
            f"{parameter} is not configured properly",
            code="EXT201",
            status_code=503,
            details={"parameter": parameter},
        )
        self.parameter = parameter


class ProviderHTTPError(ExternalServiceError):
    """Provider answered with a non-success HTTP status."""

    def __init__(self, service_name: str, http_status: int, body: str | None = None):
        super().__init__(
            service_name,
            f"HTTP {http_status}",
            code="EXT202",
            details={"http_status": http_status, "body": (body or "")[:500]},
        )
        self.http_status = http_status


class ProviderResponseError(ExternalServiceError):
    """Provider answered 2xx but the body was malformed or reported errors."""

    def __init__(self, service_name: str, reason: str):
        super().__init__(service_name, reason, code="EXT203")


class ProviderUnavailableError(ExternalServiceError):
    """Provider could not be reached (network, DNS, timeout, auth transport)."""

    def __init__(self, service_name: str, reason: str):
        super().__init__(service_name, reason, code="EXT204", status_code=503)


# ============================================================================
# SYSTEM ERRORS (SYS400-499)
# ============================================================================

class ConfigurationError(StockAlertException):
    """Application configuration is invalid."""

    def __init__(self, parameter: str):
        super().__init__(
            message=f"Configuration error: {parameter} is not configured properly",
            code="SYS401",
            status_code=500,
            details={"parameter": parameter},
        )
