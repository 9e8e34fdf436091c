"""Dependency graph construction from parsed files."""

from collections.abc import Sequence

from ..exceptions import InputContractError, require_sequence
from ..logging_config import get_logger
from .algorithms import compute_coupling_metrics, compute_coupling_scores, find_cycles
from .models import CouplingFormula, DependencyGraph, FileNode, ParsedFile

logger = get_logger(__name__)


def build_dependency_graph(
    files: Sequence[ParsedFile],
    coupling_formula: CouplingFormula = CouplingFormula.FAN_IN_RELATIVE,
) -> DependencyGraph:
    """Build the directed import graph for one analysis run.

    Every input file becomes a node, even with no imports and no importers.
    Each import adds a forward edge and, when the target is an input file,
    an entry in the target's ``imported_by`` index. Self-imports are dropped,
    repeated imports of the same target collapse into one edge, and targets
    outside the input set stay on the edge list as external dependencies.

    Raises:
        InputContractError: If ``files`` is None or contains non-ParsedFile items.
    """
    require_sequence(files, "files")

    nodes: dict[str, FileNode] = {}
    by_path: dict[str, ParsedFile] = {}
    for f in files:
        if not isinstance(f, ParsedFile):
            raise InputContractError("files", "every item must be a ParsedFile", f)
        if f.path in nodes:
            logger.debug("Duplicate file %s in input; keeping the first entry", f.path)
            continue
        nodes[f.path] = FileNode(path=f.path)
        by_path[f.path] = f

    edges: list[tuple[str, str]] = []
    external: dict[str, list[str]] = {}

    for path, parsed in by_path.items():
        node = nodes[path]
        for target in parsed.imports:
            if target == path or target in node.imports:
                continue

            node.imports.append(target)
            edges.append((path, target))

            target_node = nodes.get(target)
            if target_node is not None:
                target_node.imported_by.append(path)
            else:
                external.setdefault(path, []).append(target)

    scores = compute_coupling_scores(nodes, coupling_formula)
    for path, score in scores.items():
        nodes[path].coupling_score = score

    cycles = find_cycles(nodes)
    metrics = compute_coupling_metrics(nodes, by_path)

    total = len(nodes)
    avg_coupling = sum(scores.values()) / total if total else 0.0
    avg_instability = sum(m.instability for m in metrics.values()) / total if total else 0.0
    avg_distance = (
        sum(m.distance_from_main_sequence for m in metrics.values()) / total if total else 0.0
    )

    logger.debug(
        "Built dependency graph: %d nodes, %d edges (%d external), %d cycles",
        total,
        len(edges),
        sum(len(v) for v in external.values()),
        len(cycles),
    )

    return DependencyGraph(
        nodes=nodes,
        edges=edges,
        external_imports=external,
        cycles=cycles,
        coupling_metrics=metrics,
        avg_coupling=avg_coupling,
        avg_instability=round(avg_instability, 3),
        avg_distance=round(avg_distance, 3),
    )
