"""Two-stage cohort normalization shared by effort and impact scoring."""

from collections.abc import Sequence

import numpy as np

MAX_SCORE = 100.0


def clamp(value: float, low: float = 0.0, high: float = MAX_SCORE) -> float:
    return min(max(value, low), high)


def normalize_cohort(
    raw_values: Sequence[float],
    reference: float,
    reference_score: float,
) -> list[float]:
    """Map a cohort's raw values onto 0-100.

    Stage one scales every value so that ``reference`` lands on
    ``reference_score``. Stage two applies only when some provisional score
    exceeds 100: the whole cohort is rescaled so the maximum is exactly 100,
    which preserves relative ordering. Values are rounded to 2 dp and
    clamped to [0, 100]. A non-positive reference scores everyone 0.
    """
    if len(raw_values) == 0:
        return []
    if reference <= 0:
        return [0.0] * len(raw_values)

    big = np.finfo(float).max
    values = np.nan_to_num(np.asarray(raw_values, dtype=float), nan=0.0, posinf=big, neginf=0.0)

    with np.errstate(over="ignore"):
        provisional = values / reference * reference_score
    provisional = np.nan_to_num(provisional, nan=0.0, posinf=big, neginf=0.0)

    peak = float(provisional.max())
    if peak > MAX_SCORE:
        provisional = provisional / peak * MAX_SCORE

    normalized = np.clip(np.round(provisional, 2), 0.0, MAX_SCORE)
    return [float(v) for v in normalized]
