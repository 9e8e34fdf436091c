"""Effort scoring: lines changed, weighted by the complexity of the code touched."""

from collections.abc import Sequence
from dataclasses import replace
from typing import Optional

from ..complexity.models import ComplexityDelta
from ..config import ScoringConfig
from ..exceptions import require_sequence
from ..logging_config import get_logger
from ..temporal.models import GitMetrics
from .models import EffortScore
from .normalize import normalize_cohort

logger = get_logger(__name__)

# (max complexity, multiplier), checked in order
COMPLEXITY_TIERS: tuple[tuple[float, float], ...] = (
    (5, 1.0),
    (10, 1.5),
    (20, 2.5),
)
VERY_HIGH_COMPLEXITY_MULTIPLIER = 4.0


def get_complexity_multiplier(complexity: float) -> float:
    """Multiplier for changing code of the given cyclomatic complexity."""
    for ceiling, multiplier in COMPLEXITY_TIERS:
        if complexity <= ceiling:
            return multiplier
    return VERY_HIGH_COMPLEXITY_MULTIPLIER


def _average(values: Sequence[float]) -> Optional[float]:
    return sum(values) / len(values) if values else None


def complexity_multiplier_for(
    metrics: GitMetrics,
    after_complexity: dict[str, float],
) -> float:
    """Multiplier from the developer's touched files.

    Uses the average post-change complexity of the touched files that have
    a delta; without such files, the average over all deltas. No deltas or
    no changed files means raw lines (1.0).
    """
    if not after_complexity or metrics.files_changed == 0:
        return 1.0

    own = [after_complexity[p] for p in metrics.files_touched if p in after_complexity]
    avg = _average(own)
    if avg is None:
        avg = _average(list(after_complexity.values()))
    return get_complexity_multiplier(avg) if avg is not None else 1.0


def calculate_effort_scores(
    git_metrics: Sequence[GitMetrics],
    deltas: Sequence[ComplexityDelta] = (),
    scoring: Optional[ScoringConfig] = None,
) -> list[EffortScore]:
    """Effort for every developer, normalized over the whole cohort.

    Raises:
        InputContractError: If ``git_metrics`` or ``deltas`` is None.
    """
    require_sequence(git_metrics, "git_metrics")
    require_sequence(deltas, "deltas")
    scoring = scoring or ScoringConfig()

    after_complexity = {d.file_path: d.after_avg_complexity for d in deltas}

    raw: list[EffortScore] = []
    for metrics in git_metrics:
        lines = metrics.total_lines_changed
        multiplier = complexity_multiplier_for(metrics, after_complexity)
        raw.append(
            EffortScore(
                developer_id=metrics.developer_id,
                raw_lines_changed=lines,
                complexity_multiplier=multiplier,
                complexity_weighted_effort=round(lines * multiplier, 2),
            )
        )

    normalized = normalize_cohort(
        [s.complexity_weighted_effort for s in raw],
        scoring.effort_reference,
        scoring.effort_reference_score,
    )
    logger.debug("Scored effort for %d developers", len(raw))
    return [replace(s, normalized_score=n) for s, n in zip(raw, normalized)]
