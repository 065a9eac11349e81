"""Local error taxonomy for ageplateau.

The library is compute-only and must not depend on any host application. We
keep a small, stable error enum/envelope that downstream applications can
translate into their own error formats, plus the exception and warning
classes raised by the estimators.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ErrorType(str, Enum):
    DEGENERATE_INPUT = "DEGENERATE_INPUT"
    INVALID_CONFIG = "INVALID_CONFIG"
    INVALID_DATA = "INVALID_DATA"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorEnvelope(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: ErrorType
    message: str
    context: dict[str, Any] = Field(default_factory=dict)


def make_error(error_type: ErrorType, message: str, **context: Any) -> ErrorEnvelope:
    return ErrorEnvelope(type=error_type, message=message, context=dict(context))


class AgePlateauError(Exception):
    """Base class for errors raised by ageplateau."""

    error_type: ErrorType = ErrorType.INTERNAL_ERROR

    def to_envelope(self) -> ErrorEnvelope:
        return make_error(self.error_type, str(self))


class DegenerateInputError(AgePlateauError, ValueError):
    """Raised when fewer than two usable points reach the weighted-mean estimator.

    Attributes:
        n_usable: Number of finite, eligible points that were supplied.
    """

    error_type = ErrorType.DEGENERATE_INPUT

    def __init__(self, n_usable: int, message: str | None = None) -> None:
        self.n_usable = int(n_usable)
        super().__init__(
            message or f"Need at least 2 usable points for a weighted mean, got {self.n_usable}"
        )

    def to_envelope(self) -> ErrorEnvelope:
        return make_error(self.error_type, str(self), n_usable=self.n_usable)


class ConfigError(AgePlateauError, ValueError):
    """Raised when a configuration file cannot be read or validated."""

    error_type = ErrorType.INVALID_CONFIG


class NonConvergenceWarning(RuntimeWarning):
    """The random-effects dispersion solve hit its iteration cap.

    The best available estimate is still returned, flagged with
    ``converged=False``.
    """


class MissingOptionalDependencyError(ImportError):
    """Raised when an optional dependency is required but not installed.

    Attributes:
        extra: The pip extra that provides the dependency (e.g., "plotting").
        install_hint: Installation command hint.
    """

    def __init__(self, extra: str, install_hint: str | None = None) -> None:
        self.extra = extra
        self.install_hint = install_hint or f"pip install 'ageplateau[{extra}]'"
        super().__init__(
            f"This feature requires the '{extra}' extra. Install with: {self.install_hint}"
        )


__all__ = [
    "AgePlateauError",
    "ConfigError",
    "DegenerateInputError",
    "ErrorEnvelope",
    "ErrorType",
    "MissingOptionalDependencyError",
    "NonConvergenceWarning",
    "make_error",
]
