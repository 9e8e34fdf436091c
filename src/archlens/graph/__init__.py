"""Structural analysis: file-level dependency graph and its algorithms."""

from .algorithms import find_cycles, get_subgraph
from .builder import build_dependency_graph
from .models import (
    CircularDependency,
    CouplingFormula,
    CouplingMetrics,
    DependencyGraph,
    FileNode,
    ParsedFile,
)

__all__ = [
    "CircularDependency",
    "CouplingFormula",
    "CouplingMetrics",
    "DependencyGraph",
    "FileNode",
    "ParsedFile",
    "build_dependency_graph",
    "find_cycles",
    "get_subgraph",
]
