"""Complexity models: per-function scores, per-file aggregates, change deltas."""

from dataclasses import dataclass
from enum import Enum

MODULE_BLOCK_NAME = "<module>"


class ExtractionMode(Enum):
    """How a file was split into scored blocks."""

    FUNCTIONS = "functions"  # one block per detected function
    WHOLE_FILE = "whole_file"  # no functions found; the file is one <module> block


@dataclass(frozen=True)
class FunctionComplexity:
    file_path: str
    function_name: str
    line_start: int  # 1-indexed, inclusive
    line_end: int
    cyclomatic: int  # >= 1
    cognitive: int  # >= 0


@dataclass(frozen=True)
class FunctionExtraction:
    """Result of function extraction.

    ``WHOLE_FILE`` carries exactly one ``<module>`` block spanning the file.
    """

    mode: ExtractionMode
    functions: tuple[FunctionComplexity, ...]


@dataclass(frozen=True)
class FileComplexity:
    file_path: str
    functions: tuple[FunctionComplexity, ...]
    avg_cyclomatic: float
    avg_cognitive: float
    max_cyclomatic: int
    max_cognitive: int
    extraction: ExtractionMode = ExtractionMode.FUNCTIONS


@dataclass(frozen=True)
class ComplexityDelta:
    """Change in average cyclomatic complexity of one file.

    At most one of ``refactoring_reduction`` and ``complexity_addition``
    is non-zero.
    """

    file_path: str
    before_avg_complexity: float
    after_avg_complexity: float
    complexity_change: float
    refactoring_reduction: float
    complexity_addition: float

    @classmethod
    def from_values(cls, file_path: str, before: float, after: float) -> "ComplexityDelta":
        change = after - before
        return cls(
            file_path=file_path,
            before_avg_complexity=round(before, 2),
            after_avg_complexity=round(after, 2),
            complexity_change=round(change, 2),
            refactoring_reduction=round(-change, 2) if change < 0 else 0.0,
            complexity_addition=round(change, 2) if change > 0 else 0.0,
        )
