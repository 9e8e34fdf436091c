"""Pull request aggregation per developer."""

from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from ..exceptions import require_sequence
from ..models import as_utc
from .models import DeveloperPRMetrics, PRState, PullRequest


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def aggregate_pr_metrics(
    prs: Sequence[PullRequest],
    period_start: Optional[datetime] = None,
    period_end: Optional[datetime] = None,
) -> list[DeveloperPRMetrics]:
    """Per-developer PR metrics for PRs created within the period.

    Reviewers who authored nothing still get an entry carrying their review
    count. Results are sorted by developer id.
    """
    require_sequence(prs, "prs")

    start = as_utc(period_start) if period_start else None
    end = as_utc(period_end) if period_end else None
    in_period = [
        pr
        for pr in prs
        if (start is None or as_utc(pr.created_at) >= start)
        and (end is None or as_utc(pr.created_at) <= end)
    ]

    by_author: dict[str, list[PullRequest]] = {}
    reviews: dict[str, int] = {}
    for pr in in_period:
        by_author.setdefault(pr.author, []).append(pr)
        for reviewer in pr.reviewers:
            reviews[reviewer] = reviews.get(reviewer, 0) + 1

    metrics: dict[str, DeveloperPRMetrics] = {}
    for author, authored in by_author.items():
        merged = [pr for pr in authored if pr.state is PRState.MERGED]
        closed = [pr for pr in authored if pr.state is PRState.CLOSED and pr.merged_at is None]
        merge_times = [pr.time_to_merge.total_seconds() for pr in merged if pr.time_to_merge is not None]

        metrics[author] = DeveloperPRMetrics(
            developer_id=author,
            prs_opened=len(authored),
            prs_merged=len(merged),
            prs_closed=len(closed),
            avg_files_changed=round(_mean([pr.files_changed for pr in authored]), 2),
            avg_lines_changed=round(_mean([pr.lines_added + pr.lines_removed for pr in authored]), 2),
            avg_time_to_merge_seconds=float(round(_mean(merge_times))),
            avg_review_rounds=round(_mean([pr.review_rounds for pr in authored]), 2),
            prs_with_violations=sum(1 for pr in authored if pr.has_arch_violations),
            reviews_given=reviews.get(author, 0),
        )

    for reviewer, count in reviews.items():
        if reviewer not in metrics:
            metrics[reviewer] = DeveloperPRMetrics(developer_id=reviewer, reviews_given=count)

    return [metrics[dev] for dev in sorted(metrics)]
