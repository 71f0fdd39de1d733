"""Exception types raised by reachmap.

Only hard failures are raised. Missing movement data and iteration-ceiling hits
are expected steady states and come back as (possibly empty or truncated)
results instead.
"""

from __future__ import annotations

from typing import Any, Optional


class ReachmapError(Exception):
    """Base class for all reachmap exceptions."""


class InvalidInputError(ReachmapError, ValueError):
    """Raised by explicit validators (config, scenario files, rule names).

    The calculator itself never raises this for empty tiers or zero-size
    footprints; it returns an empty result.
    """


class VisibilityOracleError(ReachmapError):
    """Raised when the visibility backend fails or answers with non-bool data.

    Visibility that cannot be determined is never treated as clear, so the
    search stops and the caller gets the underlying failure chained on this one.
    """

    def __init__(self, *, operation: str, arguments: tuple, reason: str, result: Optional[Any] = None) -> None:
        self.operation = operation
        self.arguments = arguments
        self.reason = reason
        self.result = result
        message = (
            f"Visibility oracle failed during {operation}{arguments}: {reason}\n\n"
            "Remediation tips:\n"
            "  - Check that the oracle is bound to the current wall snapshot\n"
            "  - segment_blocked/point_unsafe must return plain booleans\n"
            "  - Enable DEBUG_SEARCH=true to trace the failing expansion"
        )
        super().__init__(message)
