"""Error kinds and the result type returned by engine operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class PosError(Exception):
    """Base class for every failure the terminal reports to the cashier."""

    kind = "error"

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else self.kind


class ValidationError(PosError):
    kind = "validation"


class InsufficientTenderError(ValidationError):
    kind = "insufficient_tender"


class NotFoundError(PosError):
    kind = "not_found"


class PersistenceError(PosError):
    kind = "persistence"


class AuthorizationError(PosError):
    kind = "authorization"


@dataclass(frozen=True)
class Result:
    """Outcome of one engine operation: a value, or the error that aborted it."""

    value: Any = None
    error: PosError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any = None) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, error: PosError) -> "Result":
        return cls(error=error)
