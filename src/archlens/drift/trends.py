"""Trend analysis over a series of snapshots."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from ..models import as_utc, utc_now
from .models import ArchSnapshot, DriftEvent

SLOPE_THRESHOLD = 0.05
MAX_TOP_EVENTS = 10


class TrendDirection(Enum):
    IMPROVING = "improving"
    STABLE = "stable"
    DEGRADING = "degrading"


class TimeWindow(Enum):
    ONE_MONTH = "1mo"
    THREE_MONTHS = "3mo"
    SIX_MONTHS = "6mo"
    TWELVE_MONTHS = "12mo"

    @property
    def days(self) -> int:
        return {"1mo": 30, "3mo": 90, "6mo": 180, "12mo": 365}[self.value]


@dataclass(frozen=True)
class TrendDataPoint:
    date: datetime
    drift_score: float
    decision_count: int
    circular_deps: int
    avg_coupling: float
    violation_count: int


@dataclass(frozen=True)
class TrendSummary:
    time_window: TimeWindow
    start_date: datetime
    end_date: datetime
    data_points: tuple[TrendDataPoint, ...]
    drift_trend: TrendDirection
    coupling_trend: TrendDirection
    avg_drift_score: float
    decision_stability: float  # 0-1, 1 = no decisions changed
    top_drift_events: tuple[DriftEvent, ...]


def _linear_slope(values: list[float]) -> float:
    """Simple linear regression slope."""
    n = len(values)
    if n < 2:
        return 0.0

    x_mean = (n - 1) / 2.0
    y_mean = sum(values) / n

    numerator = sum((i - x_mean) * (v - y_mean) for i, v in enumerate(values))
    denominator = sum((i - x_mean) ** 2 for i in range(n))

    if denominator == 0:
        return 0.0
    return numerator / denominator


def classify_trend(values: list[float]) -> TrendDirection:
    """Rising drift or coupling is degrading."""
    slope = _linear_slope(values)
    if slope > SLOPE_THRESHOLD:
        return TrendDirection.DEGRADING
    if slope < -SLOPE_THRESHOLD:
        return TrendDirection.IMPROVING
    return TrendDirection.STABLE


def decision_stability(snapshots: Sequence[ArchSnapshot]) -> float:
    """1 minus the mean share of decision titles added or removed between neighbours."""
    if len(snapshots) < 2:
        return 1.0

    change_rates = []
    for prev, curr in zip(snapshots, snapshots[1:]):
        before = {d.title for d in prev.decisions}
        after = {d.title for d in curr.decisions}
        changed = len(after - before) + len(before - after)
        change_rates.append(changed / max(len(before), len(after), 1))

    return max(0.0, 1 - sum(change_rates) / len(change_rates))


def analyze_trends(
    snapshots: Sequence[ArchSnapshot],
    events: Sequence[DriftEvent] = (),
    window: TimeWindow = TimeWindow.THREE_MONTHS,
    now: Optional[datetime] = None,
) -> TrendSummary:
    """Summarize snapshots and events created within ``window`` of ``now``."""
    now = as_utc(now) if now else utc_now()
    cutoff = now - timedelta(days=window.days)

    in_window = sorted(
        (s for s in snapshots if as_utc(s.created_at) >= cutoff), key=lambda s: as_utc(s.created_at)
    )
    recent_events = sorted(
        (e for e in events if as_utc(e.detected_at) >= cutoff),
        key=lambda e: as_utc(e.detected_at),
        reverse=True,
    )

    points = tuple(
        TrendDataPoint(
            date=s.created_at,
            drift_score=s.drift_score,
            decision_count=s.decision_count,
            circular_deps=s.dependency_stats.circular_deps,
            avg_coupling=s.dependency_stats.avg_coupling,
            violation_count=s.violation_count,
        )
        for s in in_window
    )

    avg_drift = sum(p.drift_score for p in points) / len(points) if points else 0.0

    return TrendSummary(
        time_window=window,
        start_date=cutoff,
        end_date=now,
        data_points=points,
        drift_trend=classify_trend([p.drift_score for p in points]),
        coupling_trend=classify_trend([p.avg_coupling for p in points]),
        avg_drift_score=round(avg_drift, 2),
        decision_stability=round(decision_stability(in_window), 3),
        top_drift_events=tuple(recent_events[:MAX_TOP_EVENTS]),
    )
