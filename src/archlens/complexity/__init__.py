"""Text complexity analysis: cyclomatic/cognitive scores and change deltas."""

from .analyzer import (
    MAX_FUNCTION_SCAN_LINES,
    calculate_file_complexity,
    calculate_function_complexity,
    cognitive_complexity,
    count_decision_points,
    cyclomatic_complexity,
    extract_functions,
)
from .deltas import (
    calculate_complexity_deltas,
    calculate_complexity_from_diffs,
    calculate_refactoring_ratio,
)
from .models import (
    MODULE_BLOCK_NAME,
    ComplexityDelta,
    ExtractionMode,
    FileComplexity,
    FunctionComplexity,
    FunctionExtraction,
)
from .stripper import strip_comments_and_strings

__all__ = [
    "MAX_FUNCTION_SCAN_LINES",
    "MODULE_BLOCK_NAME",
    "ComplexityDelta",
    "ExtractionMode",
    "FileComplexity",
    "FunctionComplexity",
    "FunctionExtraction",
    "calculate_complexity_deltas",
    "calculate_complexity_from_diffs",
    "calculate_file_complexity",
    "calculate_function_complexity",
    "calculate_refactoring_ratio",
    "cognitive_complexity",
    "count_decision_points",
    "cyclomatic_complexity",
    "extract_functions",
    "strip_comments_and_strings",
]
