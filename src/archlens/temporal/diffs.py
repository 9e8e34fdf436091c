"""Parse unified diff text (``git diff --unified=3``) into FileDiff records."""

import re

from .models import DiffHunk, DiffStatus, FileDiff

_FILE_HEADER_RE = re.compile(r"^diff --git a/(.+) b/(.+)$")
_HUNK_HEADER_RE = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")


class _HunkBuilder:
    def __init__(self, file_path: str, match: re.Match[str]):
        self.file_path = file_path
        self.old_start = int(match.group(1))
        self.old_lines = int(match.group(2) or 1)
        self.new_start = int(match.group(3))
        self.new_lines = int(match.group(4) or 1)
        self.lines: list[str] = []

    def build(self) -> DiffHunk:
        return DiffHunk(
            file_path=self.file_path,
            old_start=self.old_start,
            old_lines=self.old_lines,
            new_start=self.new_start,
            new_lines=self.new_lines,
            content="\n".join(self.lines),
            additions=sum(1 for line in self.lines if line.startswith("+")),
            deletions=sum(1 for line in self.lines if line.startswith("-")),
        )


def parse_unified_diff(raw: str) -> list[FileDiff]:
    """Split a multi-file unified diff into per-file hunks.

    Sections without a parsable ``diff --git`` header are skipped.
    """
    diffs: list[FileDiff] = []

    old_path = new_path = ""
    status = DiffStatus.MODIFIED
    hunks: list[DiffHunk] = []
    hunk: _HunkBuilder | None = None
    in_file = False

    def flush() -> None:
        if not in_file:
            return
        all_hunks = hunks + ([hunk.build()] if hunk is not None else [])
        final_status = status
        if final_status is DiffStatus.MODIFIED and old_path != new_path:
            final_status = DiffStatus.RENAMED
        diffs.append(
            FileDiff(
                file_path=new_path,
                status=final_status,
                hunks=tuple(all_hunks),
                old_path=old_path if final_status is DiffStatus.RENAMED else None,
            )
        )

    for line in raw.split("\n"):
        header = _FILE_HEADER_RE.match(line)
        if header:
            flush()
            old_path, new_path = header.group(1), header.group(2)
            status = DiffStatus.MODIFIED
            hunks, hunk, in_file = [], None, True
            continue

        if not in_file:
            continue

        hunk_header = _HUNK_HEADER_RE.match(line)
        if hunk_header:
            if hunk is not None:
                hunks.append(hunk.build())
            hunk = _HunkBuilder(new_path, hunk_header)
            continue

        if hunk is None:
            if line.startswith("new file mode"):
                status = DiffStatus.ADDED
            elif line.startswith("deleted file mode"):
                status = DiffStatus.DELETED
            continue

        hunk.lines.append(line)

    flush()
    return diffs
