"""One velocity run: git metrics and deltas in, developer and team scores out."""

from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from ..architecture.models import Violation
from ..complexity.deltas import calculate_refactoring_ratio
from ..complexity.models import ComplexityDelta
from ..config import AnalysisConfig
from ..exceptions import require_sequence
from ..graph.models import DependencyGraph
from ..logging_config import get_logger
from ..temporal.models import GitMetrics
from .blockers import detect_blockers
from .calculator import calculate_developer_velocity_scores, calculate_team_velocity
from .effort import calculate_effort_scores
from .impact import calculate_impact_scores
from .models import (
    PullRequest,
    ReviewViolation,
    VelocityInput,
    VelocityPeriod,
    VelocityResult,
    VelocityScore,
)
from .prs import aggregate_pr_metrics

logger = get_logger(__name__)


def refactoring_ratios_by_developer(
    git_metrics: Sequence[GitMetrics],
    deltas: Sequence[ComplexityDelta],
) -> dict[str, float]:
    """Refactoring ratio over each developer's touched files.

    Developers without a touched file that has a delta get the ratio over
    all deltas.
    """
    overall = calculate_refactoring_ratio(deltas)
    by_path = {d.file_path: d for d in deltas}

    ratios: dict[str, float] = {}
    for metrics in git_metrics:
        own = [by_path[p] for p in metrics.files_touched if p in by_path]
        ratios[metrics.developer_id] = calculate_refactoring_ratio(own) if own else overall
    return ratios


def calculate_velocity(
    git_metrics: Sequence[GitMetrics],
    team_id: str,
    period: VelocityPeriod = VelocityPeriod.WEEKLY,
    period_start: Optional[datetime] = None,
    period_end: Optional[datetime] = None,
    complexity_deltas: Sequence[ComplexityDelta] = (),
    prs: Sequence[PullRequest] = (),
    graph: Optional[DependencyGraph] = None,
    layer_violations: Sequence[Violation] = (),
    review_violations: Sequence[ReviewViolation] = (),
    previous_scores: Sequence[VelocityScore] = (),
    arch_health: Optional[float] = None,
    config: Optional[AnalysisConfig] = None,
    now: Optional[datetime] = None,
) -> VelocityResult:
    """Score every developer and the team for one period.

    Steps: refactoring ratios, PR aggregation, effort, impact, blockers,
    per-developer velocity, team velocity.

    Raises:
        InputContractError: If ``git_metrics`` or another required
            collection is None.
    """
    require_sequence(git_metrics, "git_metrics")
    require_sequence(complexity_deltas, "complexity_deltas")
    require_sequence(prs, "prs")
    config = config or AnalysisConfig()

    ratios = refactoring_ratios_by_developer(git_metrics, complexity_deltas)
    pr_metrics = aggregate_pr_metrics(prs, period_start, period_end) if prs else []

    effort = calculate_effort_scores(git_metrics, complexity_deltas, config.scoring)
    impact = calculate_impact_scores(
        git_metrics, graph, layer_violations, review_violations, config.scoring
    )
    blockers = detect_blockers(prs, pr_metrics, config.blockers, now)

    data = VelocityInput(
        git_metrics=tuple(git_metrics),
        effort_scores=tuple(effort),
        impact_scores=tuple(impact),
        pr_metrics=tuple(pr_metrics),
        refactoring_ratios=ratios,
        blockers=tuple(blockers),
        period=period,
        period_start=period_start,
        period_end=period_end,
        previous_scores=tuple(previous_scores),
    )
    scores = calculate_developer_velocity_scores(data, config.velocity, config.scoring)
    team = calculate_team_velocity(
        scores, team_id, blockers, arch_health, period, period_start, period_end
    )

    logger.info(
        "Velocity for team %s: %d developers, %d blockers, team score %.2f",
        team_id,
        len(scores),
        len(blockers),
        team.team_velocity_score,
    )
    return VelocityResult(scores=tuple(scores), team_velocity=team, blockers=tuple(blockers))
