"""Snapshot-to-snapshot drift detection.

The current run is captured as a fresh ArchSnapshot and diffed against the
most recent prior snapshot of the same repository. Each measurable
regression becomes a DriftEvent; the events and current counts feed a
0-100 drift score.

Drift score:
    sum of event severity weights (15 / 8 / 3)
  + lost decisions / previous decisions * 30
  + current violations * 0.5
  + current cycles * 2.0
rounded and capped at 100. Every term is non-negative and grows with the
violation and cycle counts, so the score never drops when either grows.
"""

import uuid
from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from ..architecture.models import Violation
from ..config import DriftThresholds
from ..exceptions import InputContractError, require_sequence
from ..graph.models import DependencyGraph
from ..logging_config import get_logger
from ..models import Severity, as_utc, utc_now
from .models import (
    ArchSnapshot,
    Decision,
    DependencyStats,
    DriftEvent,
    DriftEventType,
    DriftResult,
)

logger = get_logger(__name__)

NEUTRAL_DRIFT_SCORE = 0.0


def dependency_stats_of(graph: DependencyGraph) -> DependencyStats:
    return DependencyStats(
        total_modules=graph.total_modules,
        circular_deps=graph.cycle_count,
        avg_coupling=graph.avg_coupling,
        avg_instability=graph.avg_instability,
        avg_distance=graph.avg_distance,
    )


class _EventLog:
    """Collects the events of one comparison."""

    def __init__(self, repo_id: str, snapshot_id: str, detected_at: datetime):
        self.repo_id = repo_id
        self.snapshot_id = snapshot_id
        self.detected_at = detected_at
        self.events: list[DriftEvent] = []

    def add(
        self,
        event_type: DriftEventType,
        severity: Severity,
        description: str,
        decision_id: Optional[str] = None,
    ) -> None:
        self.events.append(
            DriftEvent(
                id=str(uuid.uuid4()),
                repo_id=self.repo_id,
                type=event_type,
                severity=severity,
                description=description,
                detected_at=self.detected_at,
                snapshot_id=self.snapshot_id,
                decision_id=decision_id,
            )
        )


def _compare_decisions(
    log: _EventLog,
    previous: Sequence[Decision],
    current: Sequence[Decision],
    t: DriftThresholds,
) -> None:
    prev_by_title = {d.title: d for d in previous}
    curr_by_title = {d.title: d for d in current}

    for title, prev in prev_by_title.items():
        if title not in curr_by_title:
            log.add(
                DriftEventType.DECISION_LOST,
                Severity.HIGH if prev.confidence > t.decision_lost_high_confidence else Severity.MEDIUM,
                f'Architectural decision "{title}" is no longer detected. '
                "This may indicate architectural drift.",
                prev.id,
            )

    for title in curr_by_title:
        if title not in prev_by_title:
            log.add(
                DriftEventType.DECISION_EMERGED,
                Severity.LOW,
                f'New architectural pattern detected: "{title}". '
                "Review whether this aligns with intended architecture.",
            )

    for title, curr in curr_by_title.items():
        prev = prev_by_title.get(title)
        if prev is None:
            continue
        drop = prev.confidence - curr.confidence
        if drop > t.decision_weakened_drop:
            log.add(
                DriftEventType.DECISION_WEAKENED,
                Severity.HIGH if drop > t.decision_weakened_high_drop else Severity.MEDIUM,
                f'Confidence in "{title}" dropped from {prev.confidence * 100:.0f}% '
                f"to {curr.confidence * 100:.0f}%. The pattern may be eroding.",
                curr.id,
            )


def _compare_structure(
    log: _EventLog,
    previous: ArchSnapshot,
    stats: DependencyStats,
    violation_count: int,
    t: DriftThresholds,
) -> None:
    prev_stats = previous.dependency_stats

    new_cycles = stats.circular_deps - prev_stats.circular_deps
    if new_cycles > 0:
        log.add(
            DriftEventType.CIRCULAR_DEP_INTRODUCED,
            Severity.HIGH if new_cycles > t.new_cycles_high else Severity.MEDIUM,
            f"{new_cycles} new circular dependency group(s) detected (total: {stats.circular_deps}).",
        )

    coupling_rise = stats.avg_coupling - prev_stats.avg_coupling
    if coupling_rise > t.coupling_increase:
        log.add(
            DriftEventType.COUPLING_REGRESSION,
            Severity.HIGH if coupling_rise > t.coupling_increase_high else Severity.MEDIUM,
            f"Average module coupling increased by {coupling_rise * 100:.1f}% "
            f"({prev_stats.avg_coupling:.2f} -> {stats.avg_coupling:.2f}).",
        )

    instability_rise = stats.avg_instability - prev_stats.avg_instability
    if instability_rise > t.instability_increase:
        log.add(
            DriftEventType.INSTABILITY_REGRESSION,
            Severity.HIGH if instability_rise > t.instability_increase_high else Severity.MEDIUM,
            f"Average module instability increased by {instability_rise * 100:.1f}% "
            f"({prev_stats.avg_instability:.2f} -> {stats.avg_instability:.2f}). "
            "Modules are becoming less stable.",
        )

    increase = violation_count - previous.violation_count
    if increase >= t.violation_spike_min_increase and (
        previous.violation_count == 0 or increase / previous.violation_count >= t.violation_spike_ratio
    ):
        if increase > t.violation_spike_high:
            severity = Severity.HIGH
        elif increase > t.violation_spike_medium:
            severity = Severity.MEDIUM
        else:
            severity = Severity.LOW
        log.add(
            DriftEventType.VIOLATION_SPIKE,
            severity,
            f"Layer violations rose by {increase} "
            f"({previous.violation_count} -> {violation_count}).",
        )


def calculate_drift_score(
    events: Sequence[DriftEvent],
    previous_decision_count: int,
    violation_count: int,
    cycle_count: int,
    t: DriftThresholds,
) -> float:
    weights = {
        Severity.HIGH: t.high_severity_weight,
        Severity.MEDIUM: t.medium_severity_weight,
        Severity.LOW: t.low_severity_weight,
    }
    score = sum(weights[e.severity] for e in events)

    if previous_decision_count > 0:
        lost = sum(1 for e in events if e.type is DriftEventType.DECISION_LOST)
        score += lost / previous_decision_count * t.lost_decision_penalty

    score += violation_count * t.violation_weight
    score += cycle_count * t.cycle_weight

    return float(min(round(score), t.max_score))


def detect_drift(
    repo_id: str,
    commit_sha: str,
    graph: DependencyGraph,
    violations: Sequence[Violation] = (),
    decisions: Sequence[Decision] = (),
    previous: Optional[ArchSnapshot] = None,
    thresholds: Optional[DriftThresholds] = None,
    now: Optional[datetime] = None,
) -> DriftResult:
    """Capture the current snapshot and diff it against ``previous``.

    Without a previous snapshot the drift score is NEUTRAL_DRIFT_SCORE and
    no events are emitted. ``previous`` is never modified.

    Raises:
        InputContractError: If ``graph`` is None or a collection is None.
    """
    if graph is None:
        raise InputContractError("graph", "expected a DependencyGraph, got None")
    require_sequence(violations, "violations")
    require_sequence(decisions, "decisions")
    thresholds = thresholds or DriftThresholds()
    now = as_utc(now) if now else utc_now()

    snapshot_id = str(uuid.uuid4())
    stats = dependency_stats_of(graph)
    violation_count = len(violations)

    if previous is None:
        logger.debug("No previous snapshot for %s; recording a baseline", repo_id)
        drift_score = NEUTRAL_DRIFT_SCORE
        events: list[DriftEvent] = []
    else:
        log = _EventLog(repo_id, snapshot_id, now)
        _compare_decisions(log, previous.decisions, decisions, thresholds)
        _compare_structure(log, previous, stats, violation_count, thresholds)
        events = log.events
        drift_score = calculate_drift_score(
            events, previous.decision_count, violation_count, stats.circular_deps, thresholds
        )
        logger.info(
            "Drift for %s at %s: score %.0f, %d events", repo_id, commit_sha[:12], drift_score, len(events)
        )

    snapshot = ArchSnapshot(
        id=snapshot_id,
        repo_id=repo_id,
        commit_sha=commit_sha,
        drift_score=drift_score,
        decisions=tuple(decisions),
        violation_count=violation_count,
        dependency_stats=stats,
        created_at=now,
    )
    return DriftResult(drift_score=drift_score, events=tuple(events), snapshot=snapshot)
