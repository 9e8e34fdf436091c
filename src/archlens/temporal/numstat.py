"""Parse ``git log --numstat`` output into per-developer GitMetrics.

Expected format (the caller runs git)::

    git log --format=%H|%at|%ae|%s --numstat --since=... --until=...

Each commit is a header line followed by ``added<TAB>removed<TAB>path``
lines. Binary files report ``-`` for both counts and add no lines.
"""

import posixpath
import re
from datetime import datetime
from typing import Optional

from ..logging_config import get_logger
from .models import GitMetrics

logger = get_logger(__name__)

# 40-char hex hash | unix timestamp | author email | subject
_HEADER_RE = re.compile(r"^[0-9a-f]{40}\|\d+\|[^|]+\|.*$")
_NUMSTAT_RE = re.compile(r"^(\d+|-)\t(\d+|-)\t(.+)$")

# ``src/{old => new}/x.py`` or ``old.py => new.py``
_RENAME_BRACES_RE = re.compile(r"\{([^{}]*) => ([^{}]*)\}")


def file_extension(path: str) -> str:
    """Extension with its dot, or '' (dotfiles have none)."""
    base = posixpath.basename(path)
    _, ext = posixpath.splitext(base)
    return ext


def _renamed_target(path: str) -> str:
    if "=>" not in path:
        return path
    if "{" in path:
        return posixpath.normpath(_RENAME_BRACES_RE.sub(lambda m: m.group(2), path))
    return path.split("=>", 1)[1].strip()


class _DeveloperTotals:
    def __init__(self, email: str):
        self.email = email
        self.commits = 0
        self.files_changed = 0
        self.lines_added = 0
        self.lines_removed = 0
        self.file_types: dict[str, int] = {}
        self.files: list[str] = []

    def to_metrics(self, period_start: Optional[datetime], period_end: Optional[datetime]) -> GitMetrics:
        return GitMetrics(
            developer_id=self.email,
            commits=self.commits,
            files_changed=self.files_changed,
            lines_added=self.lines_added,
            lines_removed=self.lines_removed,
            file_types_touched=dict(self.file_types),
            period_start=period_start,
            period_end=period_end,
            files_touched=tuple(sorted(set(self.files))),
        )


def parse_numstat_log(
    raw: str,
    period_start: Optional[datetime] = None,
    period_end: Optional[datetime] = None,
) -> list[GitMetrics]:
    """Aggregate a numstat log into one GitMetrics per author email.

    Header lines are detected by regex, so merge commits without numstat
    lines and consecutive headers are handled. Results are sorted by
    developer id.
    """
    totals: dict[str, _DeveloperTotals] = {}
    current: Optional[_DeveloperTotals] = None

    for line in raw.split("\n"):
        line = line.rstrip("\r")
        if not line.strip():
            continue

        if _HEADER_RE.match(line):
            email = line.split("|", 3)[2].strip()
            current = totals.setdefault(email, _DeveloperTotals(email))
            current.commits += 1
            continue

        match = _NUMSTAT_RE.match(line)
        if match is None:
            logger.debug("Skipping unrecognized git log line: %r", line[:80])
            continue
        if current is None:
            continue

        added, removed, path = match.groups()
        path = _renamed_target(path)
        current.files_changed += 1
        current.lines_added += int(added) if added != "-" else 0
        current.lines_removed += int(removed) if removed != "-" else 0
        current.files.append(path)

        ext = file_extension(path)
        if ext:
            current.file_types[ext] = current.file_types.get(ext, 0) + 1

    return [totals[email].to_metrics(period_start, period_end) for email in sorted(totals)]
