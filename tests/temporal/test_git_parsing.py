"""Tests for numstat log and unified diff parsing."""

from datetime import datetime, timezone

from archlens.temporal import (
    DiffStatus,
    GitMetrics,
    file_extension,
    parse_numstat_log,
    parse_unified_diff,
)

NUMSTAT_LOG = "\n".join(
    [
        f"{'a' * 40}|1700000000|alice@example.com|Add feature",
        "10\t2\tsrc/app.ts",
        "5\t0\tsrc/api/handler.py",
        "-\t-\tassets/logo.png",
        "",
        f"{'b' * 40}|1700000100|bob@example.com|Move util",
        "3\t3\tsrc/{old => new}/util.ts",
        f"{'c' * 40}|1700000200|alice@example.com|Merge branch 'main'",
        f"{'d' * 40}|1700000300|alice@example.com|Rename readme",
        "1\t1\tREADME.md => docs/README.md",
        "",
    ]
)

UNIFIED_DIFF = "\n".join(
    [
        "diff --git a/src/a.ts b/src/a.ts",
        "index 1234567..89abcde 100644",
        "--- a/src/a.ts",
        "+++ b/src/a.ts",
        "@@ -1,3 +1,4 @@",
        " const a = 1;",
        "-if (a) {",
        "+if (a && b) {",
        "+  go();",
        " }",
        "@@ -10 +11,2 @@",
        "+x();",
        " y();",
        "diff --git a/new.ts b/new.ts",
        "new file mode 100644",
        "--- /dev/null",
        "+++ b/new.ts",
        "@@ -0,0 +1 @@",
        "+export const n = 1;",
        "diff --git a/old.ts b/moved.ts",
        "similarity index 90%",
        "rename from old.ts",
        "rename to moved.ts",
        "diff --git a/gone.ts b/gone.ts",
        "deleted file mode 100644",
        "--- a/gone.ts",
        "+++ /dev/null",
        "@@ -1 +0,0 @@",
        "-bye();",
        "",
    ]
)


class TestParseNumstatLog:
    def test_one_entry_per_author_sorted(self):
        metrics = parse_numstat_log(NUMSTAT_LOG)
        assert [m.developer_id for m in metrics] == ["alice@example.com", "bob@example.com"]

    def test_totals(self):
        alice = parse_numstat_log(NUMSTAT_LOG)[0]
        assert alice.commits == 3
        assert alice.files_changed == 4
        assert alice.lines_added == 16
        assert alice.lines_removed == 3
        assert alice.total_lines_changed == 19

    def test_binary_files_add_no_lines(self):
        alice = parse_numstat_log(NUMSTAT_LOG)[0]
        assert alice.file_types_touched[".png"] == 1

    def test_file_types_and_touched_paths(self):
        alice = parse_numstat_log(NUMSTAT_LOG)[0]
        assert alice.file_types_touched == {".ts": 1, ".py": 1, ".png": 1, ".md": 1}
        assert alice.files_touched == (
            "assets/logo.png",
            "docs/README.md",
            "src/api/handler.py",
            "src/app.ts",
        )

    def test_brace_rename_resolves_to_new_path(self):
        bob = parse_numstat_log(NUMSTAT_LOG)[1]
        assert bob.files_touched == ("src/new/util.ts",)

    def test_period_is_carried(self):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        end = datetime(2024, 1, 8, tzinfo=timezone.utc)
        (metrics,) = parse_numstat_log(NUMSTAT_LOG.split("\n", 5)[0] + "\n1\t1\ta.ts", start, end)
        assert (metrics.period_start, metrics.period_end) == (start, end)

    def test_noise_is_ignored(self):
        raw = "3\t1\torphan.ts\nnot a git line\n" + f"{'e' * 40}|1700000000|eve@example.com|Init\n2\t0\ta.ts"
        (eve,) = parse_numstat_log(raw)
        assert eve.lines_added == 2
        assert eve.files_touched == ("a.ts",)

    def test_empty_log(self):
        assert parse_numstat_log("") == []


class TestFileExtension:
    def test_extensions(self):
        assert file_extension("src/app.ts") == ".ts"
        assert file_extension("a/b.tar.gz") == ".gz"
        assert file_extension(".gitignore") == ""
        assert file_extension("Makefile") == ""


class TestGitMetrics:
    def test_dominant_file_type(self):
        metrics = GitMetrics("dev", file_types_touched={".ts": 4, ".py": 2})
        assert metrics.dominant_file_type == ".ts"
        assert GitMetrics("dev").dominant_file_type is None


class TestParseUnifiedDiff:
    def test_files_and_statuses(self):
        diffs = parse_unified_diff(UNIFIED_DIFF)
        assert [(d.file_path, d.status) for d in diffs] == [
            ("src/a.ts", DiffStatus.MODIFIED),
            ("new.ts", DiffStatus.ADDED),
            ("moved.ts", DiffStatus.RENAMED),
            ("gone.ts", DiffStatus.DELETED),
        ]

    def test_hunks(self):
        modified = parse_unified_diff(UNIFIED_DIFF)[0]
        first, second = modified.hunks
        assert (first.old_start, first.old_lines, first.new_start, first.new_lines) == (1, 3, 1, 4)
        assert (first.additions, first.deletions) == (2, 1)
        assert (second.old_start, second.old_lines, second.new_start, second.new_lines) == (10, 1, 11, 2)
        assert (modified.additions, modified.deletions) == (3, 1)
        assert first.added_lines() == ["if (a && b) {", "  go();"]
        assert first.removed_lines() == ["if (a) {"]

    def test_rename_keeps_old_path(self):
        renamed = parse_unified_diff(UNIFIED_DIFF)[2]
        assert renamed.old_path == "old.ts"
        assert renamed.hunks == ()

    def test_deleted_file(self):
        deleted = parse_unified_diff(UNIFIED_DIFF)[3]
        assert deleted.deletions == 1
        assert deleted.old_path is None

    def test_text_without_headers(self):
        assert parse_unified_diff("@@ -1 +1 @@\n+x") == []
