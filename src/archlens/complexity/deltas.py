"""Complexity change between two versions of a set of files."""

from collections.abc import Iterable, Mapping, Sequence
from typing import Optional, Union

from ..exceptions import InputContractError, require_sequence
from ..logging_config import get_logger
from ..temporal.models import FileDiff
from .analyzer import calculate_file_complexity, count_decision_points
from .models import ComplexityDelta
from .stripper import strip_comments_and_strings

logger = get_logger(__name__)


def _avg_complexity(source: Optional[str], file_path: str) -> float:
    """Average cyclomatic complexity, 0 for missing or empty text."""
    if not source:
        return 0.0
    return calculate_file_complexity(source, file_path).avg_cyclomatic


def calculate_complexity_deltas(
    changed: Iterable[Union[FileDiff, str]],
    before: Mapping[str, Optional[str]],
    after: Mapping[str, Optional[str]],
) -> list[ComplexityDelta]:
    """Before/after average complexity for each changed file.

    Args:
        changed: FileDiffs or plain paths of the changed files
        before: Path -> source text before the change (None = unavailable)
        after: Path -> source text after the change (None = unavailable)

    Text that is missing or unavailable counts as zero complexity; the
    rest of the batch is still scored.
    """
    require_sequence(changed, "changed")
    for name, mapping in (("before", before), ("after", after)):
        if mapping is None:
            raise InputContractError(name, "expected a mapping of path to text, got None")

    deltas: list[ComplexityDelta] = []
    for item in changed:
        path = item.file_path if isinstance(item, FileDiff) else item
        old_path = item.old_path if isinstance(item, FileDiff) and item.old_path else path

        before_text = before.get(old_path)
        after_text = after.get(path)
        if before_text is None and after_text is None:
            logger.debug("No source text for %s; scoring it as zero complexity", path)

        deltas.append(
            ComplexityDelta.from_values(
                path,
                _avg_complexity(before_text, old_path),
                _avg_complexity(after_text, path),
            )
        )

    return deltas


def calculate_complexity_from_diffs(diffs: Sequence[FileDiff]) -> list[ComplexityDelta]:
    """Estimate complexity change from diff hunks alone.

    Counts decision points on added and removed lines. Used when full
    before/after sources are unavailable; ``before``/``after`` then hold the
    removed/added decision-point counts rather than averages.
    """
    require_sequence(diffs, "diffs")

    deltas: list[ComplexityDelta] = []
    for diff in diffs:
        added = 0
        removed = 0
        for hunk in diff.hunks:
            added += sum(count_decision_points(strip_comments_and_strings(line)) for line in hunk.added_lines())
            removed += sum(count_decision_points(strip_comments_and_strings(line)) for line in hunk.removed_lines())
        deltas.append(ComplexityDelta.from_values(diff.file_path, removed, added))

    return deltas


def calculate_refactoring_ratio(deltas: Iterable[ComplexityDelta]) -> float:
    """Total reduction / (total reduction + total addition), 3 dp.

    Exactly 0.0 when nothing changed.
    """
    reduction = 0.0
    addition = 0.0
    for delta in deltas:
        reduction += delta.refactoring_reduction
        addition += delta.complexity_addition

    total = reduction + addition
    if total <= 0:
        return 0.0
    return round(min(max(reduction / total, 0.0), 1.0), 3)
