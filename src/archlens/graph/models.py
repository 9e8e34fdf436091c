"""Data models for the file-level dependency graph.

Ontology:
  Input:     ParsedFile: a file path plus the import targets found in it
  Graph:     FileNode / DependencyGraph: forward edges and the inverse index
  Derived:   CircularDependency, CouplingMetrics: structures and measurements
"""

from dataclasses import dataclass, field
from enum import Enum


class CouplingFormula(Enum):
    """How a node's coupling score is computed."""

    FAN_IN_RELATIVE = "fan_in_relative"  # importers / max importers in the graph
    FAN_BLEND = "fan_blend"  # (fan_in + fan_out) / total nodes, capped at 1


# ── Input ──────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ParsedFile:
    """A file handed to the graph builder by the parsing collaborator.

    ``imports`` holds resolved repository paths where resolution succeeded;
    anything else is kept verbatim and treated as an external dependency.
    """

    path: str
    imports: tuple[str, ...] = ()
    language: str | None = None

    # Carried for downstream significance scoring; unused by the core
    export_count: int = 0
    decorator_count: int = 0

    # Abstract vs concrete type declarations, feeds Martin abstractness
    abstract_types: int = 0
    concrete_types: int = 0


# ── Graph ──────────────────────────────────────────────────────────


@dataclass
class FileNode:
    """One file in the graph.

    ``imports`` is ordered and deduplicated; ``imported_by`` only lists
    files inside the graph.
    """

    path: str
    imports: list[str] = field(default_factory=list)
    imported_by: list[str] = field(default_factory=list)
    coupling_score: float = 0.0

    @property
    def fan_in(self) -> int:
        return len(self.imported_by)

    @property
    def fan_out(self) -> int:
        return len(self.imports)


@dataclass(frozen=True)
class CircularDependency:
    """A detected import cycle.

    ``cycle`` is the ordered path with the first file repeated at the end,
    e.g. ``("a.ts", "b.ts", "a.ts")``.
    """

    files: frozenset[str]
    cycle: tuple[str, ...]


@dataclass(frozen=True)
class CouplingMetrics:
    """Robert C. Martin package metrics for a single file."""

    afferent_coupling: int  # Ca: files that import this one
    efferent_coupling: int  # Ce: files this one imports
    instability: float  # Ce / (Ca + Ce), 0 when isolated
    abstractness: float  # abstract types / all declared types
    distance_from_main_sequence: float  # |A + I - 1|


@dataclass
class DependencyGraph:
    """Directed import graph keyed by repository-relative path.

    Edges are directed: ``nodes[A].imports`` containing B means A depends on B.
    """

    nodes: dict[str, FileNode] = field(default_factory=dict)
    edges: list[tuple[str, str]] = field(default_factory=list)

    # Targets that match no input file, per importing file
    external_imports: dict[str, list[str]] = field(default_factory=dict)

    cycles: list[CircularDependency] = field(default_factory=list)
    coupling_metrics: dict[str, CouplingMetrics] = field(default_factory=dict)

    avg_coupling: float = 0.0
    avg_instability: float = 0.0
    avg_distance: float = 0.0

    @property
    def total_modules(self) -> int:
        return len(self.nodes)

    @property
    def cycle_count(self) -> int:
        return len(self.cycles)

    @property
    def coupling_scores(self) -> dict[str, float]:
        return {path: node.coupling_score for path, node in self.nodes.items()}

    def internal_edges(self) -> list[tuple[str, str]]:
        """Edges whose target is a file in the graph."""
        return [(s, t) for s, t in self.edges if t in self.nodes]
