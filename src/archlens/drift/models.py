"""Drift data models: decisions, immutable snapshots and drift events."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ..models import Severity


class DriftEventType(Enum):
    DECISION_LOST = "decision_lost"
    DECISION_EMERGED = "decision_emerged"
    DECISION_WEAKENED = "decision_weakened"
    CIRCULAR_DEP_INTRODUCED = "circular_dep_introduced"
    COUPLING_REGRESSION = "coupling_regression"
    INSTABILITY_REGRESSION = "instability_regression"
    VIOLATION_SPIKE = "violation_spike"


@dataclass(frozen=True)
class Decision:
    """An architectural decision reported by the decision extractor.

    Decisions are matched across snapshots by ``title``.
    """

    id: str
    title: str
    confidence: float = 1.0  # 0-1


@dataclass(frozen=True)
class DependencyStats:
    total_modules: int = 0
    circular_deps: int = 0
    avg_coupling: float = 0.0
    avg_instability: float = 0.0
    avg_distance: float = 0.0


@dataclass(frozen=True)
class ArchSnapshot:
    """Architecture state at one commit. Created once per run, never mutated."""

    id: str
    repo_id: str
    commit_sha: str
    drift_score: float
    decisions: tuple[Decision, ...]
    violation_count: int
    dependency_stats: DependencyStats
    created_at: datetime

    @property
    def decision_count(self) -> int:
        return len(self.decisions)


@dataclass(frozen=True)
class DriftEvent:
    id: str
    repo_id: str
    type: DriftEventType
    severity: Severity
    description: str
    detected_at: datetime
    snapshot_id: str
    decision_id: Optional[str] = None


@dataclass(frozen=True)
class DriftResult:
    drift_score: float
    events: tuple[DriftEvent, ...]
    snapshot: ArchSnapshot
