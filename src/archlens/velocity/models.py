"""Velocity data models.

Ontology:
  Inputs:    PullRequest, ReviewViolation (plus GitMetrics from archlens.temporal)
  Derived:   DeveloperPRMetrics, Blocker, EffortScore, ImpactScore
  Outputs:   VelocityScore, TeamVelocity, VelocityResult
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional

from ..models import Severity
from ..temporal.models import GitMetrics


class VelocityTrend(Enum):
    ACCELERATING = "accelerating"
    DECELERATING = "decelerating"
    STABLE = "stable"


class VelocityPeriod(Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    SPRINT = "sprint"
    MONTHLY = "monthly"


class PRState(Enum):
    OPEN = "open"
    CLOSED = "closed"
    MERGED = "merged"


class BlockerType(Enum):
    STALLED_PR = "stalled_pr"
    LONG_LIVED_BRANCH = "long_lived_branch"
    REVIEW_BOTTLENECK = "review_bottleneck"
    HIGH_VIOLATION_RATE = "high_violation_rate"
    DEPENDENCY_BLOCK = "dependency_block"


# ── Inputs ─────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PullRequest:
    """A pull request as fetched by the hosting integration."""

    id: str
    number: int
    title: str
    author: str
    state: PRState
    created_at: datetime
    updated_at: datetime
    merged_at: Optional[datetime] = None
    closed_at: Optional[datetime] = None
    files_changed: int = 0
    lines_added: int = 0
    lines_removed: int = 0
    review_rounds: int = 0
    time_to_merge: Optional[timedelta] = None
    reviewers: tuple[str, ...] = ()
    has_arch_violations: bool = False
    violation_count: int = 0
    branch_name: str = ""
    base_branch: str = "main"


@dataclass(frozen=True)
class ReviewViolation:
    """A decision violation raised in code review, attributed to a developer."""

    developer_id: str
    decision_id: str
    file_path: Optional[str] = None


# ── Derived ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class DeveloperPRMetrics:
    developer_id: str
    prs_opened: int = 0
    prs_merged: int = 0
    prs_closed: int = 0  # closed without merge
    avg_files_changed: float = 0.0
    avg_lines_changed: float = 0.0
    avg_time_to_merge_seconds: float = 0.0
    avg_review_rounds: float = 0.0
    prs_with_violations: int = 0
    reviews_given: int = 0


@dataclass(frozen=True)
class Blocker:
    """A detected condition impeding development throughput."""

    type: BlockerType
    description: str
    severity: Severity
    related_entity: str  # developer id, or "team"
    stale_since: Optional[datetime] = None


@dataclass(frozen=True)
class EffortScore:
    developer_id: str
    raw_lines_changed: int
    complexity_multiplier: float
    complexity_weighted_effort: float
    normalized_score: float = 0.0  # set by the cohort normalization pass


@dataclass(frozen=True)
class ImpactScore:
    developer_id: str
    boundaries_crossed: int
    core_module_touches: int
    peripheral_module_touches: int
    raw_score: float
    normalized_score: float = 0.0  # set by the cohort normalization pass


# ── Outputs ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class VelocityScore:
    developer_id: str
    period: VelocityPeriod
    period_start: Optional[datetime]
    period_end: Optional[datetime]
    commits: int
    prs_opened: int
    prs_merged: int
    lines_added: int
    lines_removed: int
    weighted_effort: float
    architectural_impact: float
    review_contribution: float
    refactoring_ratio: float
    velocity_score: float
    trend: VelocityTrend = VelocityTrend.STABLE
    blockers: tuple[Blocker, ...] = ()


@dataclass(frozen=True)
class TeamVelocity:
    team_id: str
    period: VelocityPeriod
    period_start: Optional[datetime]
    period_end: Optional[datetime]
    members: tuple[VelocityScore, ...]
    team_velocity_score: float
    top_blockers: tuple[Blocker, ...]
    architectural_health: float
    highlights: tuple[str, ...]


@dataclass(frozen=True)
class VelocityInput:
    """Everything the per-developer calculator consumes for one period."""

    git_metrics: tuple[GitMetrics, ...] = ()
    effort_scores: tuple[EffortScore, ...] = ()
    impact_scores: tuple[ImpactScore, ...] = ()
    pr_metrics: tuple[DeveloperPRMetrics, ...] = ()
    refactoring_ratios: dict[str, float] = field(default_factory=dict)
    blockers: tuple[Blocker, ...] = ()
    period: VelocityPeriod = VelocityPeriod.WEEKLY
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    previous_scores: tuple[VelocityScore, ...] = ()  # most recent first


@dataclass(frozen=True)
class VelocityResult:
    scores: tuple[VelocityScore, ...]
    team_velocity: TeamVelocity
    blockers: tuple[Blocker, ...]
