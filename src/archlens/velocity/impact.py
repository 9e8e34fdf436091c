"""Architectural impact scoring.

Scores a developer's changes by how many architectural boundaries they
cross and whether they touch core or peripheral modules:

    raw = boundaries * 3.0 + core touches * 2.0 + peripheral touches * 0.5

Raw scores are normalized over the cohort (reference 50 -> 100).
"""

from collections.abc import Sequence
from dataclasses import replace
from typing import Optional

from ..architecture.models import Violation
from ..config import ScoringConfig
from ..exceptions import require_sequence
from ..graph.models import DependencyGraph
from ..logging_config import get_logger
from ..temporal.models import GitMetrics
from .models import ImpactScore, ReviewViolation
from .normalize import normalize_cohort

logger = get_logger(__name__)

BACKEND_EXTENSIONS = frozenset({".py", ".go", ".rs", ".java"})
FRONTEND_EXTENSIONS = frozenset({".tsx", ".jsx", ".vue", ".svelte"})
CONFIG_EXTENSIONS = frozenset({".yml", ".yaml", ".json", ".toml"})

# Source extensions split between core and peripheral when only
# per-extension counts are known
SOURCE_EXTENSIONS = frozenset({".ts", ".js", ".py", ".go", ".rs", ".java"})


def identify_core_modules(
    graph: Optional[DependencyGraph],
    scoring: Optional[ScoringConfig] = None,
) -> set[str]:
    """Files with coupling above the threshold or enough importers."""
    if graph is None:
        return set()
    scoring = scoring or ScoringConfig()

    return {
        path
        for path, node in graph.nodes.items()
        if node.coupling_score > scoring.core_coupling_threshold
        or node.fan_in >= scoring.core_fan_in_threshold
    }


def count_boundary_crossings(
    metrics: GitMetrics,
    layer_violations: Sequence[Violation] = (),
    review_violations: Sequence[ReviewViolation] = (),
) -> int:
    """Distinct boundaries the developer crossed in the period.

    One per layer pair of a layer violation in a file they touched, one per
    decision they were flagged for in review, plus the file-type heuristic:
    backend and frontend together count once, and either of them together
    with config counts once, when more than two extensions were touched.
    """
    touched = set(metrics.files_touched)
    layer_pairs = {
        (v.source_layer, v.target_layer) for v in layer_violations if v.source_file in touched
    }
    decisions = {
        v.decision_id for v in review_violations if v.developer_id == metrics.developer_id
    }
    crossings = len(layer_pairs) + len(decisions)

    extensions = set(metrics.file_types_touched)
    if len(extensions) > 2:
        has_backend = bool(extensions & BACKEND_EXTENSIONS)
        has_frontend = bool(extensions & FRONTEND_EXTENSIONS)
        has_config = bool(extensions & CONFIG_EXTENSIONS)
        if has_backend and has_frontend:
            crossings += 1
        if (has_backend or has_frontend) and has_config:
            crossings += 1

    return crossings


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def count_module_touches(
    metrics: GitMetrics,
    core_modules: set[str],
    graph: Optional[DependencyGraph],
) -> tuple[int, int]:
    """``(core, peripheral)`` touch counts.

    Exact when the developer's touched files and a graph are known.
    Otherwise estimated from extension counts: source-file touches are
    split by a core ratio (core modules / 20, at most 0.5; 0.3 with no core
    modules) and everything else is peripheral.
    """
    if metrics.files_touched and graph is not None:
        core = sum(1 for path in metrics.files_touched if path in core_modules)
        return core, len(metrics.files_touched) - core

    ratio = min(len(core_modules) / 20, 0.5) if core_modules else 0.3
    core = peripheral = 0
    for ext, count in metrics.file_types_touched.items():
        if ext in SOURCE_EXTENSIONS:
            core += _round_half_up(count * ratio)
            peripheral += _round_half_up(count * (1 - ratio))
        else:
            peripheral += count
    return core, peripheral


def calculate_impact_scores(
    git_metrics: Sequence[GitMetrics],
    graph: Optional[DependencyGraph] = None,
    layer_violations: Sequence[Violation] = (),
    review_violations: Sequence[ReviewViolation] = (),
    scoring: Optional[ScoringConfig] = None,
) -> list[ImpactScore]:
    """Impact for every developer, normalized over the whole cohort.

    Raises:
        InputContractError: If ``git_metrics`` is None.
    """
    require_sequence(git_metrics, "git_metrics")
    scoring = scoring or ScoringConfig()
    core_modules = identify_core_modules(graph, scoring)

    raw: list[ImpactScore] = []
    for metrics in git_metrics:
        boundaries = count_boundary_crossings(metrics, layer_violations, review_violations)
        core, peripheral = count_module_touches(metrics, core_modules, graph)
        raw_score = (
            boundaries * scoring.boundary_weight
            + core * scoring.core_weight
            + peripheral * scoring.peripheral_weight
        )
        raw.append(
            ImpactScore(
                developer_id=metrics.developer_id,
                boundaries_crossed=boundaries,
                core_module_touches=core,
                peripheral_module_touches=peripheral,
                raw_score=round(raw_score, 2),
            )
        )

    normalized = normalize_cohort(
        [s.raw_score for s in raw],
        scoring.impact_reference,
        scoring.impact_reference_score,
    )
    logger.debug("Scored impact for %d developers (%d core modules)", len(raw), len(core_modules))
    return [replace(s, normalized_score=n) for s, n in zip(raw, normalized)]
