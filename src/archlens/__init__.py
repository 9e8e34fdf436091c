"""
ArchLens - Architectural Intelligence for Codebases

Builds file-level dependency graphs, checks layer boundaries, scores
developer velocity from complexity-weighted effort and architectural
impact, and tracks architectural drift across snapshots.

The core is pure: callers hand in parsed files and git-derived statistics,
and get plain dataclasses back.
"""

__version__ = "0.1.0"

from .analysis import ArchitectureReport, analyze_architecture
from .architecture import LayerDefinition, Violation, detect_layer_violations
from .config import AnalysisConfig, load_config
from .drift import ArchSnapshot, Decision, DriftResult, analyze_trends, detect_drift
from .graph import DependencyGraph, ParsedFile, build_dependency_graph
from .logging_config import get_logger, setup_logging
from .serialization import to_record
from .velocity import VelocityResult, calculate_velocity

__all__ = [
    "analyze_architecture",  # Main entry point
    "calculate_velocity",
    "ArchitectureReport",
    "AnalysisConfig",
    "load_config",
    "ParsedFile",
    "DependencyGraph",
    "build_dependency_graph",
    "LayerDefinition",
    "Violation",
    "detect_layer_violations",
    "ArchSnapshot",
    "Decision",
    "DriftResult",
    "detect_drift",
    "analyze_trends",
    "VelocityResult",
    "to_record",
    "setup_logging",
    "get_logger",
]
