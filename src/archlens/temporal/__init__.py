"""Git-derived inputs: numstat logs and unified diffs, already captured as text."""

from .diffs import parse_unified_diff
from .models import DiffHunk, DiffStatus, FileDiff, GitMetrics
from .numstat import file_extension, parse_numstat_log

__all__ = [
    "DiffHunk",
    "DiffStatus",
    "FileDiff",
    "GitMetrics",
    "file_extension",
    "parse_numstat_log",
    "parse_unified_diff",
]
