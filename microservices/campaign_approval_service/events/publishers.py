"""
Campaign Approval Event Publishers

Publishes events to NATS JetStream.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.nats_client import Event

from ..models import Campaign
from .models import (
    ApprovalEventType,
    BulkApprovedEventData,
    CampaignApprovedEventData,
    CampaignLaunchFailedEventData,
    CampaignReviewedEventData,
    CampaignStatusChangedEventData,
    CampaignSubmittedEventData,
    CampaignUpdatedEventData,
)

logger = logging.getLogger(__name__)


class ApprovalEventPublisher:
    """Publisher for campaign approval service events"""

    def __init__(self, event_bus=None):
        self.event_bus = event_bus
        self.source = "campaign_approval_service"

    async def publish(
        self,
        event_type: ApprovalEventType,
        data: Dict[str, Any],
    ) -> bool:
        """
        Publish an event to NATS.

        Args:
            event_type: The event type enum
            data: Event data payload

        Returns:
            True if published successfully, False otherwise
        """
        if not self.event_bus:
            logger.debug(f"Event bus not configured, skipping publish: {event_type.value}")
            return False

        try:
            event = Event(
                event_type=event_type.value,
                source=self.source,
                data=data,
                subject=data.get("campaign_id"),
            )
            published = await self.event_bus.publish_event(event)
            logger.debug(f"Published event: {event_type.value}")
            return bool(published)

        except Exception as e:
            logger.warning(f"Failed to publish event {event_type.value}: {e}")
            return False

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    # ====================
    # Review Events
    # ====================

    async def publish_campaign_submitted(self, campaign: Campaign, approval_id: str) -> bool:
        """Publish campaign.submitted event"""
        data = CampaignSubmittedEventData(
            campaign_id=campaign.campaign_id,
            approval_id=approval_id,
            owner_id=campaign.owner_id,
            platform=campaign.platform.value,
            budget=str(campaign.budget),
            timestamp=self._now(),
        )
        return await self.publish(ApprovalEventType.SUBMITTED, data.model_dump(mode="json"))

    async def publish_campaign_approved(
        self,
        campaign: Campaign,
        approval_id: str,
        reviewer_id: str,
    ) -> bool:
        """Publish campaign.approved event"""
        data = CampaignApprovedEventData(
            campaign_id=campaign.campaign_id,
            approval_id=approval_id,
            owner_id=campaign.owner_id,
            reviewer_id=reviewer_id,
            platform_ids={p.value: pid for p, pid in campaign.platform_ids.items()},
            timestamp=self._now(),
        )
        return await self.publish(ApprovalEventType.APPROVED, data.model_dump(mode="json"))

    async def publish_launch_failed(
        self,
        campaign_id: str,
        approval_id: str,
        reviewer_id: str,
        succeeded: List[str],
        failed: List[str],
    ) -> bool:
        """Publish campaign.launch_failed event"""
        data = CampaignLaunchFailedEventData(
            campaign_id=campaign_id,
            approval_id=approval_id,
            reviewer_id=reviewer_id,
            succeeded=succeeded,
            failed=failed,
            timestamp=self._now(),
        )
        return await self.publish(ApprovalEventType.LAUNCH_FAILED, data.model_dump(mode="json"))

    async def publish_campaign_reviewed(
        self,
        campaign: Campaign,
        approval_id: str,
        reviewer_id: str,
        feedback: str,
        reasons: List[str],
        needs_changes: bool,
    ) -> bool:
        """Publish campaign.changes_requested or campaign.rejected event"""
        data = CampaignReviewedEventData(
            campaign_id=campaign.campaign_id,
            approval_id=approval_id,
            owner_id=campaign.owner_id,
            reviewer_id=reviewer_id,
            reasons=reasons,
            feedback=feedback,
            timestamp=self._now(),
        )
        event_type = ApprovalEventType.CHANGES_REQUESTED if needs_changes else ApprovalEventType.REJECTED
        return await self.publish(event_type, data.model_dump(mode="json"))

    # ====================
    # Lifecycle Events
    # ====================

    async def publish_status_changed(
        self,
        event_type: ApprovalEventType,
        campaign: Campaign,
        previous_status: str,
        changed_by: str,
        reason: Optional[str] = None,
        warnings: Optional[List[str]] = None,
    ) -> bool:
        """Publish campaign.paused / activated / completed / cancelled event"""
        data = CampaignStatusChangedEventData(
            campaign_id=campaign.campaign_id,
            previous_status=previous_status,
            status=campaign.status.value,
            changed_by=changed_by,
            reason=reason,
            warnings=warnings or [],
            timestamp=self._now(),
        )
        return await self.publish(event_type, data.model_dump(mode="json"))

    async def publish_campaign_updated(
        self,
        campaign_id: str,
        changed_fields: List[str],
        updated_by: str,
    ) -> bool:
        """Publish campaign.updated event"""
        data = CampaignUpdatedEventData(
            campaign_id=campaign_id,
            changed_fields=changed_fields,
            updated_by=updated_by,
            timestamp=self._now(),
        )
        return await self.publish(ApprovalEventType.UPDATED, data.model_dump(mode="json"))

    # ====================
    # Bulk Events
    # ====================

    async def publish_bulk_approved(
        self,
        reviewer_id: str,
        campaign_ids: List[str],
        total: int,
        successful: int,
        failed: int,
    ) -> bool:
        """Publish campaign.bulk.approved event"""
        data = BulkApprovedEventData(
            reviewer_id=reviewer_id,
            campaign_ids=campaign_ids,
            total=total,
            successful=successful,
            failed=failed,
            timestamp=self._now(),
        )
        return await self.publish(ApprovalEventType.BULK_APPROVED, data.model_dump(mode="json"))


__all__ = ["ApprovalEventPublisher"]
