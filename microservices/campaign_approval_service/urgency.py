"""
Review Urgency Scoring

Pure functions over a snapshot of pending campaigns. The score is a small
weighted sum so reviewers can predict the ranking:

    urgency = age + budget + platform
    age       3 if waiting more than 2 days, 2 if more than 1 day, else 1
    budget    +2 when budget > 5000
    platform  +1 when running on both platforms
"""

import math
from collections import Counter
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import (
    ApprovalRecord,
    ApprovalStatistics,
    ApprovalStatus,
    Campaign,
    PlatformSelection,
    QueueOrdering,
    ReasonCount,
    ReviewQueueItem,
    ReviewQueueStats,
)

HIGH_BUDGET_THRESHOLD = Decimal("5000")
HIGH_PRIORITY_SCORE = 4
TOP_REJECTION_REASONS = 5

SECONDS_PER_DAY = 86400
SECONDS_PER_HOUR = 3600


def days_since(submitted_at: datetime, now: datetime) -> int:
    """Whole days elapsed, never negative"""
    elapsed = (now - submitted_at).total_seconds()
    return max(0, math.floor(elapsed / SECONDS_PER_DAY))


def urgency_score(days_since_submission: int, budget: Decimal, platform: PlatformSelection) -> int:
    if days_since_submission > 2:
        age = 3
    elif days_since_submission > 1:
        age = 2
    else:
        age = 1

    budget_component = 2 if Decimal(str(budget)) > HIGH_BUDGET_THRESHOLD else 0
    platform_component = 1 if platform == PlatformSelection.BOTH else 0
    return age + budget_component + platform_component


def build_queue_items(
    pending: Iterable[Tuple[Campaign, ApprovalRecord]],
    now: datetime,
) -> List[ReviewQueueItem]:
    """Score each (campaign, open record) pair"""
    items = []
    for campaign, record in pending:
        days = days_since(record.submitted_at, now)
        items.append(ReviewQueueItem(
            campaign=campaign,
            approval_id=record.approval_id,
            submitted_at=record.submitted_at,
            days_since_submission=days,
            urgency_score=urgency_score(days, campaign.budget, campaign.platform),
        ))
    return items


def order_queue(items: Sequence[ReviewQueueItem], ordering: QueueOrdering) -> List[ReviewQueueItem]:
    """Sort queue items; ties always fall back to oldest submission first"""
    if ordering == QueueOrdering.HIGH_BUDGET:
        key = lambda i: (-i.campaign.budget, i.submitted_at, i.campaign.campaign_id)
    elif ordering == QueueOrdering.OLDEST:
        key = lambda i: (i.submitted_at, i.campaign.campaign_id)
    else:
        key = lambda i: (-i.urgency_score, i.submitted_at, i.campaign.campaign_id)
    return sorted(items, key=key)


def queue_stats(items: Sequence[ReviewQueueItem], now: datetime) -> ReviewQueueStats:
    if not items:
        return ReviewQueueStats()

    total_wait_hours = sum(
        (now - i.submitted_at).total_seconds() / SECONDS_PER_HOUR for i in items
    )
    return ReviewQueueStats(
        total_pending=len(items),
        high_priority=sum(1 for i in items if i.urgency_score >= HIGH_PRIORITY_SCORE),
        average_wait_hours=round(total_wait_hours / len(items), 1),
    )


def paginate(items: Sequence[ReviewQueueItem], page: int, limit: int) -> Tuple[List[ReviewQueueItem], int]:
    """Return one page and the page count"""
    pages = math.ceil(len(items) / limit) if items else 0
    start = (page - 1) * limit
    return list(items[start:start + limit]), pages


def approval_statistics(
    records: Sequence[ApprovalRecord],
    timeframe_days: int,
    pending: Optional[int] = None,
) -> ApprovalStatistics:
    """Summarize review throughput for records submitted in the timeframe"""
    counts = Counter(r.status for r in records)
    approved = counts[ApprovalStatus.APPROVED]
    rejected = counts[ApprovalStatus.REJECTED]
    needs_changes = counts[ApprovalStatus.NEEDS_CHANGES]

    approval_hours = [
        (r.reviewed_at - r.submitted_at).total_seconds() / SECONDS_PER_HOUR
        for r in records
        if r.status == ApprovalStatus.APPROVED and r.reviewed_at is not None
    ]

    reasons = Counter(
        code
        for r in records
        if r.status in (ApprovalStatus.REJECTED, ApprovalStatus.NEEDS_CHANGES)
        for code in r.reason_codes
    )

    return ApprovalStatistics(
        timeframe_days=timeframe_days,
        total_submissions=len(records),
        approved=approved,
        rejected=rejected,
        needs_changes=needs_changes,
        launch_failed=counts[ApprovalStatus.LAUNCH_FAILED],
        pending=counts[ApprovalStatus.PENDING_REVIEW] if pending is None else pending,
        approval_rate=round(approved / len(records) * 100, 1) if records else 0.0,
        average_approval_hours=round(sum(approval_hours) / len(approval_hours), 1) if approval_hours else 0.0,
        top_rejection_reasons=[
            ReasonCount(reason=reason, count=count)
            for reason, count in reasons.most_common(TOP_REJECTION_REASONS)
        ],
    )


__all__ = [
    "days_since",
    "urgency_score",
    "build_queue_items",
    "order_queue",
    "queue_stats",
    "paginate",
    "approval_statistics",
    "HIGH_BUDGET_THRESHOLD",
    "HIGH_PRIORITY_SCORE",
]
