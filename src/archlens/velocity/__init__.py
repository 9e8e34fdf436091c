"""Developer and team velocity: effort, impact, review, refactoring, blockers."""

from .blockers import (
    detect_blockers,
    filter_by_severity,
    format_blocker_alerts,
    format_single_blocker,
    group_blockers_by_type,
)
from .calculator import (
    calculate_developer_velocity_scores,
    calculate_review_score,
    calculate_team_velocity,
    determine_trend,
)
from .effort import calculate_effort_scores, get_complexity_multiplier
from .impact import calculate_impact_scores, identify_core_modules
from .models import (
    Blocker,
    BlockerType,
    DeveloperPRMetrics,
    EffortScore,
    ImpactScore,
    PRState,
    PullRequest,
    ReviewViolation,
    TeamVelocity,
    VelocityInput,
    VelocityPeriod,
    VelocityResult,
    VelocityScore,
    VelocityTrend,
)
from .normalize import normalize_cohort
from .pipeline import calculate_velocity
from .prs import aggregate_pr_metrics

__all__ = [
    "Blocker",
    "BlockerType",
    "DeveloperPRMetrics",
    "EffortScore",
    "ImpactScore",
    "PRState",
    "PullRequest",
    "ReviewViolation",
    "TeamVelocity",
    "VelocityInput",
    "VelocityPeriod",
    "VelocityResult",
    "VelocityScore",
    "VelocityTrend",
    "aggregate_pr_metrics",
    "calculate_developer_velocity_scores",
    "calculate_effort_scores",
    "calculate_impact_scores",
    "calculate_review_score",
    "calculate_team_velocity",
    "calculate_velocity",
    "detect_blockers",
    "determine_trend",
    "filter_by_severity",
    "format_blocker_alerts",
    "format_single_blocker",
    "get_complexity_multiplier",
    "group_blockers_by_type",
    "identify_core_modules",
    "normalize_cohort",
]
