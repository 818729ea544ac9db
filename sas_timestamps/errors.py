"""Error catalog for the timestamp service.

The engine itself never fails for string input; the only user-visible failure
is a usage error (missing ``name``). Configuration problems surface at startup
as ConfigError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class ConfigError(ValueError):
    """Raised when the static tables or constants are inconsistent."""


@dataclass(frozen=True, slots=True)
class ErrorCode:
    """Represents a stable failure used in the ``error`` field of a response."""

    code: str
    default_message: str

    def as_error(self, *, message: str | None = None) -> str:
        return message if message is not None else self.default_message


MISSING_NAME = ErrorCode(
    code="MISSING_NAME",
    default_message="Missing 'name' query param",
)

UNEXPECTED_ERROR = ErrorCode(
    code="UNEXPECTED_ERROR",
    default_message="Unexpected error in timestamp service.",
)


def error_details(exc: Exception) -> dict[str, Any]:
    """Debug-only description of an unexpected exception."""

    return {"type": type(exc).__name__, "message": str(exc)}
