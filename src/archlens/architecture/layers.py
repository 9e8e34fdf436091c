"""Layer assignment and layer-violation detection.

Files are assigned to at most one layer: layers are tried in declared
order and, within a layer, patterns in declared order; the first match
wins. Every internal graph edge between two different layers is then
checked against the source layer's allowed set.
"""

import re
from collections.abc import Sequence
from typing import Optional

from ..exceptions import InputContractError, require_sequence
from ..graph.models import DependencyGraph
from ..logging_config import get_logger
from .models import LayerDefinition, Violation

logger = get_logger(__name__)

_NO_DEPENDENCIES = "nothing (it should have no dependencies)"


def _glob_to_regex(pattern: str) -> str:
    """Translate a path glob to a regex.

    ``*`` and ``?`` stay inside one path segment, ``**/`` matches zero or
    more whole directories and any other ``**`` matches anything.
    """
    parts: list[str] = []
    i = 0
    n = len(pattern)
    while i < n:
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        elif pattern[i] == "[" and pattern.find("]", i + 2) != -1:
            end = pattern.find("]", i + 2)
            body = pattern[i + 1 : end]
            if body.startswith("!"):
                body = "^" + body[1:]
            parts.append(f"[{body}]")
            i = end + 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return "".join(parts) + r"\Z"


def _compile_pattern(pattern: str) -> Optional[re.Pattern[str]]:
    """Compile a layer glob; a pattern that cannot be compiled yields None."""
    try:
        return re.compile(_glob_to_regex(pattern))
    except re.error:
        logger.warning("Ignoring unusable layer pattern %r", pattern)
        return None


class LayerResolver:
    """Maps file paths to layer names for a single analysis run.

    Holds the per-run memo cache; build a new resolver for every run.
    """

    def __init__(self, layers: Sequence[LayerDefinition]):
        self.layers = list(layers)
        self._allowed: dict[str, frozenset[str]] = {
            layer.name: frozenset(layer.allowed_dependencies) for layer in self.layers
        }
        self._compiled: list[tuple[str, re.Pattern[str]]] = []
        for layer in self.layers:
            for pattern in layer.patterns:
                regex = _compile_pattern(pattern)
                if regex is not None:
                    self._compiled.append((layer.name, regex))
        self._cache: dict[str, Optional[str]] = {}

        warn_unknown_dependencies(self.layers)

    def layer_of(self, path: str) -> Optional[str]:
        """Name of the first layer whose pattern matches ``path``, else None."""
        if path in self._cache:
            return self._cache[path]

        found: Optional[str] = None
        for name, regex in self._compiled:
            if regex.match(path):
                found = name
                break

        self._cache[path] = found
        return found

    def allowed_for(self, layer_name: str) -> frozenset[str]:
        return self._allowed.get(layer_name, frozenset())


def warn_unknown_dependencies(layers: Sequence[LayerDefinition]) -> list[str]:
    """Log and return allowed-dependency names that match no layer."""
    names = {layer.name for layer in layers}
    unknown = []
    for layer in layers:
        for dep in sorted(layer.allowed_dependencies):
            if dep not in names:
                logger.warning("Layer %r allows unknown layer %r", layer.name, dep)
                unknown.append(dep)
    return unknown


def format_violation_message(source_layer: str, target_layer: str, allowed: frozenset[str]) -> str:
    allowed_text = ", ".join(sorted(allowed)) if allowed else _NO_DEPENDENCIES
    return (
        f"Layer violation: {source_layer} -> {target_layer}. "
        f'The "{source_layer}" layer is only allowed to depend on: {allowed_text}.'
    )


def detect_layer_violations(
    graph: DependencyGraph,
    layers: Sequence[LayerDefinition],
) -> list[Violation]:
    """Check every graph edge against the layer hierarchy.

    Source files are visited in sorted order and targets in import order,
    so identical inputs always give an identical list. Edges whose source
    or target has no layer, and same-layer edges, are skipped.

    Raises:
        InputContractError: If ``graph`` or ``layers`` is None.
    """
    if graph is None:
        raise InputContractError("graph", "expected a DependencyGraph, got None")
    require_sequence(layers, "layers")

    if not layers:
        return []

    resolver = LayerResolver(layers)
    violations: list[Violation] = []

    for path in sorted(graph.nodes):
        source_layer = resolver.layer_of(path)
        if source_layer is None:
            continue

        for target in graph.nodes[path].imports:
            # Unresolved targets have no layer
            if target not in graph.nodes:
                continue
            target_layer = resolver.layer_of(target)
            if target_layer is None or target_layer == source_layer:
                continue

            allowed = resolver.allowed_for(source_layer)
            if target_layer in allowed:
                continue

            violations.append(
                Violation(
                    source_file=path,
                    target_file=target,
                    source_layer=source_layer,
                    target_layer=target_layer,
                    import_statement=target,
                    message=format_violation_message(source_layer, target_layer, allowed),
                )
            )

    logger.debug("Checked %d files against %d layers: %d violations", len(graph.nodes), len(layers), len(violations))
    return violations


def group_violations_by_file(violations: Sequence[Violation]) -> dict[str, list[Violation]]:
    """Violations keyed by source file, files sorted, targets sorted within a file."""
    grouped: dict[str, list[Violation]] = {}
    for v in violations:
        grouped.setdefault(v.source_file, []).append(v)
    return {
        path: sorted(grouped[path], key=lambda v: (v.target_file, v.target_layer))
        for path in sorted(grouped)
    }
