"""Development blocker detection and plain-text alerts.

Blockers detected:
  - Stalled PRs (no activity for more than N days)
  - Long-lived branches (PR open for more than N days)
  - Review bottlenecks (more than N open PRs awaiting one reviewer)
  - High violation rates (per developer and team-wide)

``now`` is always injectable so detection is reproducible.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from ..config import BlockerThresholds
from ..exceptions import require_sequence
from ..models import Severity, as_utc, utc_now
from .models import Blocker, BlockerType, DeveloperPRMetrics, PRState, PullRequest

SECONDS_PER_DAY = 24 * 60 * 60

BLOCKER_TYPE_LABELS: dict[BlockerType, str] = {
    BlockerType.STALLED_PR: "Stalled PR",
    BlockerType.LONG_LIVED_BRANCH: "Long-lived Branch",
    BlockerType.REVIEW_BOTTLENECK: "Review Bottleneck",
    BlockerType.HIGH_VIOLATION_RATE: "High Violation Rate",
    BlockerType.DEPENDENCY_BLOCK: "Dependency Block",
}

NO_BLOCKERS_MESSAGE = "No development blockers detected."


def _whole_days(later: datetime, earlier: datetime) -> tuple[float, int]:
    seconds = (as_utc(later) - as_utc(earlier)).total_seconds()
    return seconds, int(seconds // SECONDS_PER_DAY)


def detect_stalled_prs(
    open_prs: Sequence[PullRequest], stale_days: int, now: datetime
) -> list[Blocker]:
    blockers: list[Blocker] = []
    for pr in open_prs:
        if pr.state is not PRState.OPEN:
            continue
        seconds, days = _whole_days(now, pr.updated_at)
        if seconds <= stale_days * SECONDS_PER_DAY:
            continue
        blockers.append(
            Blocker(
                type=BlockerType.STALLED_PR,
                description=(
                    f'PR #{pr.number} "{pr.title}" has had no activity for {days} days '
                    f"(author: {pr.author})"
                ),
                severity=Severity.HIGH if days > stale_days * 2 else Severity.MEDIUM,
                related_entity=pr.author,
                stale_since=pr.updated_at,
            )
        )
    return blockers


def detect_long_lived_branches(
    open_prs: Sequence[PullRequest], long_branch_days: int, now: datetime
) -> list[Blocker]:
    blockers: list[Blocker] = []
    for pr in open_prs:
        if pr.state is not PRState.OPEN:
            continue
        seconds, days = _whole_days(now, pr.created_at)
        if seconds <= long_branch_days * SECONDS_PER_DAY:
            continue
        blockers.append(
            Blocker(
                type=BlockerType.LONG_LIVED_BRANCH,
                description=(
                    f'Branch "{pr.branch_name}" has been open for {days} days '
                    f"via PR #{pr.number} (author: {pr.author})"
                ),
                severity=Severity.HIGH if days > long_branch_days * 2 else Severity.MEDIUM,
                related_entity=pr.author,
                stale_since=pr.created_at,
            )
        )
    return blockers


def detect_review_bottlenecks(open_prs: Sequence[PullRequest], threshold: int) -> list[Blocker]:
    pending: dict[str, list[PullRequest]] = {}
    for pr in open_prs:
        if pr.state is not PRState.OPEN:
            continue
        for reviewer in pr.reviewers:
            pending.setdefault(reviewer, []).append(pr)

    blockers: list[Blocker] = []
    for reviewer in sorted(pending):
        prs = pending[reviewer]
        count = len(prs)
        if count <= threshold:
            continue
        numbers = ", ".join(f"#{pr.number}" for pr in prs)
        blockers.append(
            Blocker(
                type=BlockerType.REVIEW_BOTTLENECK,
                description=(
                    f"{reviewer} has {count} PRs awaiting review ({numbers}), "
                    f"exceeding the threshold of {threshold}"
                ),
                severity=Severity.HIGH if count > threshold * 2 else Severity.MEDIUM,
                related_entity=reviewer,
            )
        )
    return blockers


def _rate_severity(rate: float) -> Severity:
    if rate >= 0.75:
        return Severity.HIGH
    if rate >= 0.5:
        return Severity.MEDIUM
    return Severity.LOW


def detect_high_violation_rates(
    pr_metrics: Sequence[DeveloperPRMetrics],
    prs: Sequence[PullRequest],
    rate_threshold: float,
) -> list[Blocker]:
    blockers: list[Blocker] = []

    for metrics in sorted(pr_metrics, key=lambda m: m.developer_id):
        if metrics.prs_opened == 0 or metrics.prs_with_violations == 0:
            continue
        rate = metrics.prs_with_violations / metrics.prs_opened
        if rate < rate_threshold:
            continue
        total_violations = sum(
            pr.violation_count
            for pr in prs
            if pr.author == metrics.developer_id and pr.has_arch_violations
        )
        blockers.append(
            Blocker(
                type=BlockerType.HIGH_VIOLATION_RATE,
                description=(
                    f"{metrics.developer_id} has architectural violations in "
                    f"{metrics.prs_with_violations} of {metrics.prs_opened} PRs "
                    f"({round(rate * 100)}% rate, {total_violations} total violations)"
                ),
                severity=_rate_severity(rate),
                related_entity=metrics.developer_id,
            )
        )

    total = len(prs)
    flagged = sum(1 for pr in prs if pr.has_arch_violations)
    if total > 0 and flagged / total >= rate_threshold:
        blockers.append(
            Blocker(
                type=BlockerType.HIGH_VIOLATION_RATE,
                description=(
                    f"Team-wide architectural violation rate is {round(flagged / total * 100)}% "
                    f"({flagged} of {total} PRs)"
                ),
                severity=Severity.HIGH,
                related_entity="team",
            )
        )

    return blockers


def detect_blockers(
    prs: Sequence[PullRequest],
    pr_metrics: Sequence[DeveloperPRMetrics] = (),
    thresholds: Optional[BlockerThresholds] = None,
    now: Optional[datetime] = None,
) -> list[Blocker]:
    """Run every detector over the period's PRs.

    Raises:
        InputContractError: If ``prs`` or ``pr_metrics`` is None.
    """
    require_sequence(prs, "prs")
    require_sequence(pr_metrics, "pr_metrics")
    thresholds = thresholds or BlockerThresholds()
    now = as_utc(now) if now else utc_now()

    open_prs = [pr for pr in prs if pr.state is PRState.OPEN]

    blockers: list[Blocker] = []
    blockers.extend(detect_stalled_prs(open_prs, thresholds.stale_pr_days, now))
    blockers.extend(detect_long_lived_branches(open_prs, thresholds.long_branch_days, now))
    blockers.extend(detect_review_bottlenecks(open_prs, thresholds.review_bottleneck_threshold))
    blockers.extend(detect_high_violation_rates(pr_metrics, prs, thresholds.high_violation_rate))
    return blockers


def sort_by_severity(blockers: Sequence[Blocker]) -> list[Blocker]:
    """Stable sort, HIGH first."""
    return sorted(blockers, key=lambda b: b.severity.rank)


def filter_by_severity(blockers: Sequence[Blocker], min_severity: Severity) -> list[Blocker]:
    return [b for b in blockers if b.severity.rank <= min_severity.rank]


def group_blockers_by_type(blockers: Sequence[Blocker]) -> dict[BlockerType, list[Blocker]]:
    """Blockers grouped in BlockerType order, severity-sorted within a group."""
    grouped: dict[BlockerType, list[Blocker]] = {}
    for blocker in sort_by_severity(blockers):
        grouped.setdefault(blocker.type, []).append(blocker)
    return {t: grouped[t] for t in BlockerType if t in grouped}


def format_single_blocker(blocker: Blocker) -> str:
    label = BLOCKER_TYPE_LABELS[blocker.type]
    since = f" (since {blocker.stale_since:%b %d, %Y})" if blocker.stale_since else ""
    return f"[{blocker.severity.name}] {label}: {blocker.description}{since}"


def format_blocker_alerts(blockers: Sequence[Blocker]) -> str:
    """Plain-text blocker report grouped by type."""
    if not blockers:
        return NO_BLOCKERS_MESSAGE

    counts = {s: sum(1 for b in blockers if b.severity is s) for s in Severity}
    lines = [
        "=== Development Blockers Report ===",
        f"Total: {len(blockers)} blocker(s) detected",
        "",
        f"Severity breakdown: {counts[Severity.HIGH]} high, "
        f"{counts[Severity.MEDIUM]} medium, {counts[Severity.LOW]} low",
        "",
    ]

    for blocker_type, group in group_blockers_by_type(blockers).items():
        lines.append(f"--- {BLOCKER_TYPE_LABELS[blocker_type]} ({len(group)}) ---")
        lines.extend(format_single_blocker(b) for b in group)
        lines.append("")

    return "\n".join(lines)
