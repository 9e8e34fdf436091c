"""Tests for drift trend analysis."""

from datetime import timedelta

import pytest

from archlens.drift import (
    ArchSnapshot,
    Decision,
    DependencyStats,
    DriftEventType,
    TimeWindow,
    TrendDirection,
    analyze_trends,
)
from archlens.drift.models import DriftEvent
from archlens.drift.trends import MAX_TOP_EVENTS, classify_trend, decision_stability
from archlens.models import Severity


def _snapshot(created_at, drift=0.0, coupling=0.0, titles=(), cycles=0, violations=0):
    return ArchSnapshot(
        id=f"snap-{created_at:%Y%m%d}",
        repo_id="repo",
        commit_sha="a" * 40,
        drift_score=drift,
        decisions=tuple(Decision(t.lower(), t) for t in titles),
        violation_count=violations,
        dependency_stats=DependencyStats(circular_deps=cycles, avg_coupling=coupling),
        created_at=created_at,
    )


def _event(detected_at, name="e"):
    return DriftEvent(
        id=name,
        repo_id="repo",
        type=DriftEventType.VIOLATION_SPIKE,
        severity=Severity.LOW,
        description=name,
        detected_at=detected_at,
        snapshot_id="snap",
    )


class TestTimeWindow:
    @pytest.mark.parametrize(
        "window,days",
        [
            (TimeWindow.ONE_MONTH, 30),
            (TimeWindow.THREE_MONTHS, 90),
            (TimeWindow.SIX_MONTHS, 180),
            (TimeWindow.TWELVE_MONTHS, 365),
        ],
    )
    def test_days(self, window, days):
        assert window.days == days

    def test_from_value(self):
        assert TimeWindow("6mo") is TimeWindow.SIX_MONTHS


class TestClassifyTrend:
    def test_rising_is_degrading(self):
        assert classify_trend([10.0, 20.0, 30.0]) is TrendDirection.DEGRADING

    def test_falling_is_improving(self):
        assert classify_trend([0.5, 0.4, 0.3]) is TrendDirection.IMPROVING

    def test_small_slope_is_stable(self):
        assert classify_trend([1.0, 1.04]) is TrendDirection.STABLE

    def test_too_few_points(self):
        assert classify_trend([]) is TrendDirection.STABLE
        assert classify_trend([99.0]) is TrendDirection.STABLE


class TestDecisionStability:
    def test_one_change_in_two_transitions(self, now):
        snapshots = [
            _snapshot(now - timedelta(days=2), titles=["Layers"]),
            _snapshot(now - timedelta(days=1), titles=["Layers", "CQRS"]),
            _snapshot(now, titles=["Layers", "CQRS"]),
        ]
        assert decision_stability(snapshots) == 0.75

    def test_complete_turnover_floors_at_zero(self, now):
        snapshots = [_snapshot(now - timedelta(days=1), titles=["A"]), _snapshot(now, titles=["B"])]
        assert decision_stability(snapshots) == 0.0

    def test_single_snapshot_is_stable(self, now):
        assert decision_stability([_snapshot(now, titles=["A"])]) == 1.0


class TestAnalyzeTrends:
    def test_summary_over_window(self, now):
        snapshots = [
            _snapshot(now - timedelta(days=10), drift=30.0, coupling=0.3),
            _snapshot(now - timedelta(days=120), drift=90.0, coupling=0.9),
            _snapshot(now - timedelta(days=80), drift=10.0, coupling=0.5),
            _snapshot(now - timedelta(days=40), drift=20.0, coupling=0.4, cycles=2, violations=7),
        ]
        summary = analyze_trends(snapshots, now=now)

        assert summary.time_window is TimeWindow.THREE_MONTHS
        assert summary.end_date == now
        assert summary.start_date == now - timedelta(days=90)
        assert [p.drift_score for p in summary.data_points] == [10.0, 20.0, 30.0]
        assert summary.data_points[1].circular_deps == 2
        assert summary.data_points[1].violation_count == 7
        assert summary.drift_trend is TrendDirection.DEGRADING
        assert summary.coupling_trend is TrendDirection.IMPROVING
        assert summary.avg_drift_score == 20.0
        assert summary.decision_stability == 1.0

    def test_shorter_window_excludes_older_snapshots(self, now):
        snapshots = [_snapshot(now - timedelta(days=40), drift=50.0), _snapshot(now - timedelta(days=5), drift=10.0)]
        summary = analyze_trends(snapshots, window=TimeWindow.ONE_MONTH, now=now)
        assert [p.drift_score for p in summary.data_points] == [10.0]
        assert summary.drift_trend is TrendDirection.STABLE

    def test_top_events_most_recent_first_and_capped(self, now):
        events = [_event(now - timedelta(days=d), name=f"e{d}") for d in range(1, 15)]
        events.append(_event(now - timedelta(days=200), name="old"))
        summary = analyze_trends([], events, now=now)
        assert len(summary.top_drift_events) == MAX_TOP_EVENTS
        assert [e.id for e in summary.top_drift_events[:3]] == ["e1", "e2", "e3"]
        assert "old" not in {e.id for e in summary.top_drift_events}

    def test_naive_and_aware_timestamps_mix(self, now):
        naive = now.replace(tzinfo=None)
        snapshots = [
            _snapshot(naive - timedelta(days=20), drift=10.0),
            _snapshot(now - timedelta(days=10), drift=20.0),
            _snapshot(naive - timedelta(days=200), drift=90.0),
        ]
        events = [_event(naive - timedelta(days=1), name="naive"), _event(now - timedelta(days=2), name="aware")]

        summary = analyze_trends(snapshots, events, now=naive)
        assert [p.drift_score for p in summary.data_points] == [10.0, 20.0]
        assert [e.id for e in summary.top_drift_events] == ["naive", "aware"]
        assert summary.end_date == now

    def test_no_history(self, now):
        summary = analyze_trends([], now=now)
        assert summary.data_points == ()
        assert summary.avg_drift_score == 0.0
        assert summary.decision_stability == 1.0
        assert summary.drift_trend is TrendDirection.STABLE
        assert summary.top_drift_events == ()
