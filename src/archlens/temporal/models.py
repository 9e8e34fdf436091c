"""Data models for git-derived inputs."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class DiffStatus(Enum):
    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"


@dataclass(frozen=True)
class DiffHunk:
    file_path: str
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    content: str  # hunk body without the @@ header
    additions: int
    deletions: int

    def added_lines(self) -> list[str]:
        return [line[1:] for line in self.content.split("\n") if line.startswith("+") and not line.startswith("+++")]

    def removed_lines(self) -> list[str]:
        return [line[1:] for line in self.content.split("\n") if line.startswith("-") and not line.startswith("---")]


@dataclass(frozen=True)
class FileDiff:
    file_path: str
    status: DiffStatus = DiffStatus.MODIFIED
    hunks: tuple[DiffHunk, ...] = ()
    old_path: Optional[str] = None  # set for renames only

    @property
    def additions(self) -> int:
        return sum(h.additions for h in self.hunks)

    @property
    def deletions(self) -> int:
        return sum(h.deletions for h in self.hunks)


@dataclass(frozen=True)
class GitMetrics:
    """One developer's git activity over a period.

    ``files_touched`` lists the paths the developer changed; it lets effort
    and impact be attributed per developer instead of per cohort.
    """

    developer_id: str  # author email
    commits: int = 0
    files_changed: int = 0
    lines_added: int = 0
    lines_removed: int = 0
    file_types_touched: dict[str, int] = field(default_factory=dict)
    period_start: Optional[datetime] = None
    period_end: Optional[datetime] = None
    files_touched: tuple[str, ...] = ()

    @property
    def total_lines_changed(self) -> int:
        return self.lines_added + self.lines_removed

    @property
    def dominant_file_type(self) -> Optional[str]:
        """Most touched extension; ties go to the first seen."""
        if not self.file_types_touched:
            return None
        return max(self.file_types_touched.items(), key=lambda kv: kv[1])[0]
