"""Graph algorithms: cycle detection, coupling scores, Martin metrics, subgraphs."""

from collections import deque

from .models import (
    CircularDependency,
    CouplingFormula,
    CouplingMetrics,
    DependencyGraph,
    FileNode,
    ParsedFile,
)

_WHITE, _GRAY, _BLACK = 0, 1, 2


def find_cycles(nodes: dict[str, FileNode]) -> list[CircularDependency]:
    """Detect import cycles with a colouring depth-first search (iterative).

    WHITE = unvisited, GRAY = on the current path, BLACK = finished.
    A back edge to a GRAY node closes the cycle formed by the path segment
    from that node to the current one. Roots are visited in sorted order
    and cycles with the same file set are reported once.
    """
    color: dict[str, int] = dict.fromkeys(nodes, _WHITE)
    cycles: list[CircularDependency] = []
    seen: set[frozenset[str]] = set()

    for root in sorted(nodes):
        if color[root] != _WHITE:
            continue

        path: list[str] = [root]
        on_path_index: dict[str, int] = {root: 0}
        color[root] = _GRAY
        stack = [iter(_internal_targets(nodes, root))]

        while stack:
            u = path[-1]
            advanced = False
            for v in stack[-1]:
                if color[v] == _GRAY:
                    segment = path[on_path_index[v]:]
                    files = frozenset(segment)
                    if files not in seen:
                        seen.add(files)
                        cycles.append(CircularDependency(files=files, cycle=tuple(segment) + (v,)))
                elif color[v] == _WHITE:
                    color[v] = _GRAY
                    on_path_index[v] = len(path)
                    path.append(v)
                    stack.append(iter(_internal_targets(nodes, v)))
                    advanced = True
                    break

            if not advanced:
                stack.pop()
                path.pop()
                del on_path_index[u]
                color[u] = _BLACK

    return cycles


def _internal_targets(nodes: dict[str, FileNode], path: str) -> list[str]:
    return [t for t in nodes[path].imports if t in nodes]


def compute_coupling_scores(
    nodes: dict[str, FileNode],
    formula: CouplingFormula = CouplingFormula.FAN_IN_RELATIVE,
) -> dict[str, float]:
    """Coupling score in [0, 1] per node.

    FAN_IN_RELATIVE: distinct importers / the largest importer count in the
    graph; files nobody imports score 0.
    FAN_BLEND: (fan-in + fan-out) / total nodes, capped at 1.
    """
    if not nodes:
        return {}

    if formula is CouplingFormula.FAN_BLEND:
        total = len(nodes)
        return {
            path: min((node.fan_in + node.fan_out) / total, 1.0)
            for path, node in nodes.items()
        }

    max_fan_in = max(node.fan_in for node in nodes.values())
    if max_fan_in == 0:
        return dict.fromkeys(nodes, 0.0)
    return {path: node.fan_in / max_fan_in for path, node in nodes.items()}


def compute_coupling_metrics(
    nodes: dict[str, FileNode],
    files: dict[str, ParsedFile],
) -> dict[str, CouplingMetrics]:
    """Martin metrics (Ca, Ce, I, A, D) for every node.

    Efferent coupling counts internal imports only; external packages
    are not part of the measured system.
    """
    metrics: dict[str, CouplingMetrics] = {}

    for path, node in nodes.items():
        ca = node.fan_in
        ce = len(_internal_targets(nodes, path))
        instability = ce / (ca + ce) if ca + ce > 0 else 0.0

        parsed = files.get(path)
        abstractness = 0.0
        if parsed is not None:
            total_types = parsed.abstract_types + parsed.concrete_types
            if total_types > 0:
                abstractness = parsed.abstract_types / total_types

        distance = abs(abstractness + instability - 1)

        metrics[path] = CouplingMetrics(
            afferent_coupling=ca,
            efferent_coupling=ce,
            instability=round(instability, 3),
            abstractness=round(abstractness, 3),
            distance_from_main_sequence=round(distance, 3),
        )

    return metrics


def get_subgraph(graph: DependencyGraph, target: str, depth: int) -> list[FileNode]:
    """Nodes within ``depth`` hops of ``target`` along imports and importers.

    Breadth-first, so every node is reported at its shortest distance.
    Returns an empty list when ``target`` is not in the graph.
    """
    if target not in graph.nodes or depth < 0:
        return []

    visited: set[str] = {target}
    result: list[FileNode] = []
    queue: deque[tuple[str, int]] = deque([(target, 0)])

    while queue:
        path, distance = queue.popleft()
        node = graph.nodes[path]
        result.append(node)
        if distance == depth:
            continue
        for neighbor in (*node.imports, *node.imported_by):
            if neighbor in graph.nodes and neighbor not in visited:
                visited.add(neighbor)
                queue.append((neighbor, distance + 1))

    return result
