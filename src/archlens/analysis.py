"""One architecture analysis run.

Example:
    >>> from archlens import ParsedFile, analyze_architecture
    >>> report = analyze_architecture(
    ...     [ParsedFile("src/ui/page.ts", ("src/db/client.ts",)), ParsedFile("src/db/client.ts")],
    ...     repo_id="web",
    ...     commit_sha="abc123",
    ... )
    >>> report.graph.total_modules
    2
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .architecture.inference import resolve_layers
from .architecture.layers import detect_layer_violations
from .architecture.models import LayerDefinition, Violation
from .config import AnalysisConfig
from .drift.detector import detect_drift
from .drift.models import ArchSnapshot, Decision, DriftResult
from .exceptions import require_sequence
from .graph.builder import build_dependency_graph
from .graph.models import DependencyGraph, ParsedFile
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ArchitectureReport:
    graph: DependencyGraph
    layers: tuple[LayerDefinition, ...]
    violations: tuple[Violation, ...]
    drift: DriftResult


def analyze_architecture(
    files: Sequence[ParsedFile],
    *,
    repo_id: str,
    commit_sha: str,
    layers: Optional[Sequence[LayerDefinition]] = None,
    decisions: Sequence[Decision] = (),
    previous_snapshot: Optional[ArchSnapshot] = None,
    config: Optional[AnalysisConfig] = None,
    now: Optional[datetime] = None,
) -> ArchitectureReport:
    """Build the graph, check layers and compare against the previous snapshot.

    Layers come from ``layers``, then ``config.layers``, then inference
    from the file paths.

    Raises:
        InputContractError: If ``files`` or ``decisions`` is None.
    """
    require_sequence(files, "files")
    require_sequence(decisions, "decisions")
    config = config or AnalysisConfig()

    graph = build_dependency_graph(files, coupling_formula=config.coupling_formula)

    configured = layers if layers else config.layers
    used_layers = resolve_layers(configured, graph.nodes)
    violations = detect_layer_violations(graph, used_layers)

    drift = detect_drift(
        repo_id,
        commit_sha,
        graph,
        violations=violations,
        decisions=decisions,
        previous=previous_snapshot,
        thresholds=config.drift,
        now=now,
    )

    logger.info(
        "Analyzed %s: %d files, %d cycles, %d layer violations, drift %.0f",
        repo_id,
        graph.total_modules,
        graph.cycle_count,
        len(violations),
        drift.drift_score,
    )

    return ArchitectureReport(
        graph=graph,
        layers=used_layers,
        violations=tuple(violations),
        drift=drift,
    )
