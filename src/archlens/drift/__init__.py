"""Architectural drift: snapshot comparison, drift events and trends."""

from .detector import NEUTRAL_DRIFT_SCORE, calculate_drift_score, detect_drift
from .models import (
    ArchSnapshot,
    Decision,
    DependencyStats,
    DriftEvent,
    DriftEventType,
    DriftResult,
)
from .trends import TimeWindow, TrendDirection, TrendSummary, analyze_trends

__all__ = [
    "NEUTRAL_DRIFT_SCORE",
    "ArchSnapshot",
    "Decision",
    "DependencyStats",
    "DriftEvent",
    "DriftEventType",
    "DriftResult",
    "TimeWindow",
    "TrendDirection",
    "TrendSummary",
    "analyze_trends",
    "calculate_drift_score",
    "detect_drift",
]
