"""
Campaign Approval Event Data Models

Event type definitions and data structures for campaign approval events.
"""

from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Event Type Definitions
# =============================================================================


class ApprovalEventType(str, Enum):
    """
    Events published by campaign_approval_service.

    Other services should reference these when subscribing.
    """
    # Review events
    SUBMITTED = "campaign.submitted"
    APPROVED = "campaign.approved"
    LAUNCH_FAILED = "campaign.launch_failed"
    REJECTED = "campaign.rejected"
    CHANGES_REQUESTED = "campaign.changes_requested"

    # Lifecycle events
    PAUSED = "campaign.paused"
    ACTIVATED = "campaign.activated"
    COMPLETED = "campaign.completed"
    CANCELLED = "campaign.cancelled"
    UPDATED = "campaign.updated"

    # Bulk events
    BULK_APPROVED = "campaign.bulk.approved"


class ApprovalStreamConfig:
    """Stream configuration for campaign_approval_service"""
    STREAM_NAME = "campaign-approval-events"
    SUBJECTS = ["events.campaign.>"]


# =============================================================================
# Event Data Models - Published Events
# =============================================================================


class CampaignSubmittedEventData(BaseModel):
    """campaign.submitted event data"""
    campaign_id: str = Field(..., description="Campaign ID")
    approval_id: str = Field(..., description="Open approval record ID")
    owner_id: str = Field(..., description="Campaign owner")
    platform: str = Field(..., description="meta, google or both")
    budget: str = Field(..., description="Campaign budget")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


class CampaignApprovedEventData(BaseModel):
    """campaign.approved event data"""
    campaign_id: str = Field(..., description="Campaign ID")
    approval_id: str = Field(..., description="Closed approval record ID")
    owner_id: str = Field(..., description="Campaign owner")
    reviewer_id: str = Field(..., description="Approving reviewer")
    platform_ids: Dict[str, str] = Field(default_factory=dict, description="Platform campaign ids")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


class CampaignLaunchFailedEventData(BaseModel):
    """campaign.launch_failed event data"""
    campaign_id: str = Field(..., description="Campaign ID")
    approval_id: str = Field(..., description="Closed approval record ID")
    reviewer_id: str = Field(..., description="Approving reviewer")
    succeeded: List[str] = Field(default_factory=list, description="Platforms that launched")
    failed: List[str] = Field(default_factory=list, description="Platforms that failed")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


class CampaignReviewedEventData(BaseModel):
    """campaign.rejected and campaign.changes_requested event data"""
    campaign_id: str = Field(..., description="Campaign ID")
    approval_id: str = Field(..., description="Closed approval record ID")
    owner_id: str = Field(..., description="Campaign owner")
    reviewer_id: str = Field(..., description="Reviewer")
    reasons: List[str] = Field(default_factory=list, description="Reason codes")
    feedback: str = Field(..., description="Reviewer feedback")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


class CampaignStatusChangedEventData(BaseModel):
    """campaign.paused / activated / completed / cancelled event data"""
    campaign_id: str = Field(..., description="Campaign ID")
    previous_status: str = Field(..., description="Status before the change")
    status: str = Field(..., description="Status after the change")
    changed_by: str = Field(..., description="User or system that made the change")
    reason: Optional[str] = Field(None, description="Reason given, if any")
    warnings: List[str] = Field(default_factory=list, description="Platform warnings")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


class CampaignUpdatedEventData(BaseModel):
    """campaign.updated event data"""
    campaign_id: str = Field(..., description="Campaign ID")
    changed_fields: List[str] = Field(..., description="List of changed field names")
    updated_by: str = Field(..., description="User who updated the campaign")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


class BulkApprovedEventData(BaseModel):
    """campaign.bulk.approved event data"""
    reviewer_id: str = Field(..., description="Reviewer who ran the batch")
    campaign_ids: List[str] = Field(default_factory=list, description="Campaigns approved")
    total: int = Field(..., description="Items in the batch")
    successful: int = Field(..., description="Items approved")
    failed: int = Field(..., description="Items that failed")
    timestamp: Optional[datetime] = Field(None, description="Event timestamp")


__all__ = [
    "ApprovalEventType",
    "ApprovalStreamConfig",
    "CampaignSubmittedEventData",
    "CampaignApprovedEventData",
    "CampaignLaunchFailedEventData",
    "CampaignReviewedEventData",
    "CampaignStatusChangedEventData",
    "CampaignUpdatedEventData",
    "BulkApprovedEventData",
]
