"""Types shared across analysis packages."""

from datetime import datetime, timezone
from enum import Enum


class Severity(Enum):
    """Severity of a blocker or drift event."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort key: HIGH first."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}


def as_utc(moment: datetime) -> datetime:
    """Return ``moment`` timezone-aware; naive datetimes are read as UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
