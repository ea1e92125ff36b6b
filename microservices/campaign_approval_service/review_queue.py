"""
Review Queue Service

Read-only views for reviewers: the scored pending queue and review
throughput statistics. Mutations go through the orchestrator.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from .models import (
    Actor,
    ApprovalStatistics,
    CampaignStatus,
    QueueOrdering,
    ReviewQueuePage,
)
from .protocols import CampaignApprovalRepositoryProtocol, ForbiddenError, ValidationFailedError
from .urgency import approval_statistics, build_queue_items, order_queue, paginate, queue_stats

logger = logging.getLogger(__name__)


class ReviewQueueService:
    """Pending review queue and approval statistics"""

    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100
    DEFAULT_TIMEFRAME_DAYS = 30
    MAX_TIMEFRAME_DAYS = 365

    def __init__(self, repository: CampaignApprovalRepositoryProtocol):
        self.repository = repository

    async def get_pending_reviews(
        self,
        actor: Actor,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
        ordering: QueueOrdering = QueueOrdering.URGENCY,
        now: Optional[datetime] = None,
    ) -> ReviewQueuePage:
        """
        Pending campaigns scored, ordered and paginated.

        Stats cover the whole pending snapshot, not just the page.
        """
        self._require_reviewer(actor)
        if page < 1:
            raise ValidationFailedError("Page must be at least 1")
        if not 1 <= limit <= self.MAX_PAGE_SIZE:
            raise ValidationFailedError(f"Limit must be between 1 and {self.MAX_PAGE_SIZE}")
        now = now or datetime.now(timezone.utc)

        campaigns = await self.repository.list_campaigns_by_status(CampaignStatus.PENDING_REVIEW)
        open_records = {r.campaign_id: r for r in await self.repository.list_open_approvals()}

        pending = []
        for campaign in campaigns:
            record = open_records.get(campaign.campaign_id)
            if record is None:
                logger.warning(f"Campaign {campaign.campaign_id} is pending review without an open approval")
                continue
            pending.append((campaign, record))

        items = order_queue(build_queue_items(pending, now), ordering)
        page_items, pages = paginate(items, page, limit)

        return ReviewQueuePage(
            items=page_items,
            page=page,
            limit=limit,
            total=len(items),
            pages=pages,
            ordering=ordering,
            stats=queue_stats(items, now),
        )

    async def get_approval_statistics(
        self,
        actor: Actor,
        timeframe_days: int = DEFAULT_TIMEFRAME_DAYS,
        now: Optional[datetime] = None,
    ) -> ApprovalStatistics:
        """Review throughput for submissions in the last ``timeframe_days``"""
        self._require_reviewer(actor)
        if not 1 <= timeframe_days <= self.MAX_TIMEFRAME_DAYS:
            raise ValidationFailedError(f"Timeframe must be between 1 and {self.MAX_TIMEFRAME_DAYS} days")
        now = now or datetime.now(timezone.utc)

        records = await self.repository.list_approvals_since(now - timedelta(days=timeframe_days))
        open_records = await self.repository.list_open_approvals()
        return approval_statistics(records, timeframe_days, pending=len(open_records))

    @staticmethod
    def _require_reviewer(actor: Actor) -> None:
        if not actor.can_review:
            raise ForbiddenError("Review authority required")


__all__ = ["ReviewQueueService"]
