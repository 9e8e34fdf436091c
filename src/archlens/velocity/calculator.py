"""Rolling velocity calculator.

Blends four sub-scores per developer with configurable weights:

    velocity = effort * w_complexity
             + impact * w_arch_impact
             + review contribution * w_review
             + refactoring ratio * 100 * w_refactoring

and aggregates developer scores into a team score.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Optional, Union

from ..config import ScoringConfig, VelocityWeights
from ..logging_config import get_logger
from ..models import Severity
from .blockers import sort_by_severity
from .models import (
    Blocker,
    DeveloperPRMetrics,
    TeamVelocity,
    VelocityInput,
    VelocityPeriod,
    VelocityScore,
    VelocityTrend,
)
from .normalize import clamp

logger = get_logger(__name__)

MAX_TOP_BLOCKERS = 5
NO_ACTIVITY_HIGHLIGHT = "No developer activity recorded for this period."

# Default architectural health: base + refactoring boost - blocker penalty
HEALTH_BASE = 80.0
HEALTH_REFACTORING_BOOST = 20.0
HEALTH_PENALTY_PER_BLOCKER = 5.0
HEALTH_MAX_PENALTY = 30.0


def _fmt(value: float) -> str:
    """Render a score without trailing zeros (50.0 -> '50')."""
    return f"{value:g}"


def _plural(count: int) -> str:
    return "s" if count > 1 else ""


def calculate_review_score(pr: Optional[DeveloperPRMetrics]) -> float:
    """Review contribution on 0-100.

    Reviews given (10 each, up to 50), plus merge efficiency (merged PRs per
    review round, 10 each, up to 30), minus up to 20 for the share of the
    developer's PRs that carried violations.
    """
    if pr is None:
        return 0.0

    review_score = min(pr.reviews_given * 10, 50)

    merge_efficiency = 0.0
    if pr.prs_merged > 0 and pr.avg_review_rounds > 0:
        merge_efficiency = min(pr.prs_merged / max(pr.avg_review_rounds, 1) * 10, 30)

    penalty = pr.prs_with_violations / pr.prs_opened * 20 if pr.prs_opened > 0 else 0.0

    return clamp(round(review_score + merge_efficiency - penalty, 2))


def determine_trend(
    current: float,
    previous: Sequence[Union[VelocityScore, float]],
    scoring: Optional[ScoringConfig] = None,
) -> VelocityTrend:
    """Compare ``current`` with the mean of the most recent prior scores.

    ``previous`` is ordered most recent first. With too little history the
    trend is STABLE. The threshold is strict: a delta of exactly 10 is STABLE.
    """
    scoring = scoring or ScoringConfig()
    if len(previous) < scoring.min_trend_history:
        return VelocityTrend.STABLE

    recent = [
        s.velocity_score if isinstance(s, VelocityScore) else float(s)
        for s in previous[: scoring.trend_window]
    ]
    delta = current - sum(recent) / len(recent)

    if delta > scoring.trend_threshold:
        return VelocityTrend.ACCELERATING
    if delta < -scoring.trend_threshold:
        return VelocityTrend.DECELERATING
    return VelocityTrend.STABLE


def calculate_developer_velocity_scores(
    data: VelocityInput,
    weights: Optional[VelocityWeights] = None,
    scoring: Optional[ScoringConfig] = None,
) -> list[VelocityScore]:
    """One VelocityScore per developer seen in any input, in sorted id order."""
    w = (weights or VelocityWeights()).normalized()

    git = {m.developer_id: m for m in data.git_metrics}
    effort = {e.developer_id: e for e in data.effort_scores}
    impact = {i.developer_id: i for i in data.impact_scores}
    prs = {p.developer_id: p for p in data.pr_metrics}
    developer_ids = sorted(set(git) | set(effort) | set(impact) | set(prs))

    scores: list[VelocityScore] = []
    for dev in developer_ids:
        g = git.get(dev)
        pr = prs.get(dev)
        effort_score = effort[dev].normalized_score if dev in effort else 0.0
        impact_score = impact[dev].normalized_score if dev in impact else 0.0
        review = calculate_review_score(pr)
        refactoring = min(max(data.refactoring_ratios.get(dev, 0.0), 0.0), 1.0)

        raw = (
            effort_score * w.complexity_weight
            + impact_score * w.arch_impact_weight
            + review * w.review_weight
            + refactoring * 100 * w.refactoring_weight
        )
        velocity = clamp(round(raw, 2))

        history = [s for s in data.previous_scores if s.developer_id == dev]

        scores.append(
            VelocityScore(
                developer_id=dev,
                period=data.period,
                period_start=data.period_start,
                period_end=data.period_end,
                commits=g.commits if g else 0,
                prs_opened=pr.prs_opened if pr else 0,
                prs_merged=pr.prs_merged if pr else 0,
                lines_added=g.lines_added if g else 0,
                lines_removed=g.lines_removed if g else 0,
                weighted_effort=effort_score,
                architectural_impact=impact_score,
                review_contribution=review,
                refactoring_ratio=round(refactoring, 3),
                velocity_score=velocity,
                trend=determine_trend(velocity, history, scoring),
                blockers=tuple(b for b in data.blockers if b.related_entity == dev),
            )
        )

    return scores


def generate_highlights(scores: Sequence[VelocityScore], blockers: Sequence[Blocker]) -> list[str]:
    """Highlight strings in fixed order.

    Top contributor, team average, accelerating count, decelerating count,
    high-severity blocker count, total activity. Zero counts are omitted.
    """
    if not scores:
        return []

    highlights: list[str] = []

    # Ties go to the first developer in id order
    top = max(scores, key=lambda s: s.velocity_score)
    highlights.append(f"Top contributor: {top.developer_id} (velocity score: {_fmt(top.velocity_score)})")

    average = round(sum(s.velocity_score for s in scores) / len(scores), 2)
    highlights.append(f"Team average velocity: {_fmt(average)}")

    accelerating = sum(1 for s in scores if s.trend is VelocityTrend.ACCELERATING)
    decelerating = sum(1 for s in scores if s.trend is VelocityTrend.DECELERATING)
    if accelerating:
        highlights.append(f"{accelerating} team member{_plural(accelerating)} accelerating")
    if decelerating:
        highlights.append(f"{decelerating} team member{_plural(decelerating)} decelerating")

    high = sum(1 for b in blockers if b.severity is Severity.HIGH)
    if high:
        highlights.append(f"{high} high-severity blocker{_plural(high)} detected")

    commits = sum(s.commits for s in scores)
    merged = sum(s.prs_merged for s in scores)
    highlights.append(f"Total: {commits} commits, {merged} PRs merged")

    return highlights


def default_architectural_health(scores: Sequence[VelocityScore]) -> float:
    if not scores:
        return 100.0
    avg_refactoring = sum(s.refactoring_ratio for s in scores) / len(scores)
    blocker_count = sum(len(s.blockers) for s in scores)
    penalty = min(blocker_count * HEALTH_PENALTY_PER_BLOCKER, HEALTH_MAX_PENALTY)
    return clamp(round(HEALTH_BASE + avg_refactoring * HEALTH_REFACTORING_BOOST - penalty, 2))


def calculate_team_velocity(
    scores: Sequence[VelocityScore],
    team_id: str,
    blockers: Sequence[Blocker] = (),
    arch_health: Optional[float] = None,
    period: VelocityPeriod = VelocityPeriod.WEEKLY,
    period_start: Optional[datetime] = None,
    period_end: Optional[datetime] = None,
) -> TeamVelocity:
    """Team mean score, top five blockers (HIGH first) and highlights.

    The period of the first member wins over the ``period*`` arguments,
    which only matter for an empty team.
    """
    if not scores:
        return TeamVelocity(
            team_id=team_id,
            period=period,
            period_start=period_start,
            period_end=period_end,
            members=(),
            team_velocity_score=0.0,
            top_blockers=(),
            architectural_health=arch_health if arch_health is not None else 100.0,
            highlights=(NO_ACTIVITY_HIGHLIGHT,),
        )

    first = scores[0]
    team_score = round(sum(s.velocity_score for s in scores) / len(scores), 2)
    health = arch_health if arch_health is not None else default_architectural_health(scores)

    logger.debug("Team %s: %d members, score %.2f", team_id, len(scores), team_score)

    return TeamVelocity(
        team_id=team_id,
        period=first.period,
        period_start=first.period_start,
        period_end=first.period_end,
        members=tuple(scores),
        team_velocity_score=team_score,
        top_blockers=tuple(sort_by_severity(blockers)[:MAX_TOP_BLOCKERS]),
        architectural_health=health,
        highlights=tuple(generate_highlights(scores, blockers)),
    )
