"""Outcome of a call to an external provider."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from stockalert.core.exceptions import ExternalServiceError

T = TypeVar("T")


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """Either a value or a typed provider failure.

    A failed result may still carry a usable fallback ``value`` (for example an
    empty list of events), so callers that only care about data can ignore
    ``error`` while callers that care about health can inspect it.
    """

    value: T | None = None
    error: ExternalServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> CallResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: ExternalServiceError, value: T | None = None) -> CallResult[T]:
        return cls(value=value, error=error)
