"""Tagged results returned by every repository call."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Generic, TypeVar

from hitek.integration.sheet_client import ProxyResult
from hitek.models import ErrorKind

T = TypeVar("T")


@dataclass(slots=True)
class Outcome(Generic[T]):
    """Success with a value, or a failure tagged with its kind."""

    ok: bool
    value: T | None = None
    error: str | None = None
    kind: ErrorKind | None = None

    @classmethod
    def success(cls, value: T | None = None) -> Outcome[T]:
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: str, kind: ErrorKind) -> Outcome[T]:
        return cls(ok=False, error=error, kind=kind)

    @classmethod
    def invalid(cls, error: str) -> Outcome[T]:
        return cls.failure(error, ErrorKind.VALIDATION)

    @classmethod
    def from_proxy_error(cls, result: ProxyResult) -> Outcome[T]:
        return cls.failure(
            result.message or "Unknown error.",
            result.error_kind or ErrorKind.REMOTE,
        )


@dataclass(slots=True)
class BatchReport:
    """How a multi-row write went; partial failure is a normal result."""

    total: int
    created: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return self.total - self.created

    @property
    def complete(self) -> bool:
        return self.failed == 0
