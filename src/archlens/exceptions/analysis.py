"""Analysis-related exceptions: broken input contracts."""

from typing import Any, Optional

from .base import ArchLensError


class AnalysisError(ArchLensError):
    """Base class for analysis-related errors."""

    pass


class InputContractError(AnalysisError):
    """Raised when a caller hands the core an input it cannot work with.

    Local problems (bad globs, unreadable sources, empty cohorts) are
    recovered inside the core; only a missing or mistyped input surfaces.
    """

    def __init__(self, argument: str, reason: str, value: Optional[Any] = None):
        details = {"argument": argument, "reason": reason}
        if value is not None:
            details["type"] = type(value).__name__

        super().__init__(f"Invalid input for '{argument}': {reason}", details=details)
        self.argument = argument
        self.reason = reason


def require_sequence(value: Any, argument: str) -> None:
    """Fail fast when a required collection argument is ``None`` or a bare string."""
    if value is None:
        raise InputContractError(argument, "expected a sequence, got None")
    if isinstance(value, (str, bytes)):
        raise InputContractError(argument, "expected a sequence, got a string", value)
