"""
Campaign Approval Service Events

Event models and publisher for campaign approval service.
"""

from .models import (
    ApprovalEventType,
    ApprovalStreamConfig,
    CampaignSubmittedEventData,
    CampaignApprovedEventData,
    CampaignLaunchFailedEventData,
    CampaignReviewedEventData,
    CampaignStatusChangedEventData,
    CampaignUpdatedEventData,
    BulkApprovedEventData,
)
from .publishers import ApprovalEventPublisher

__all__ = [
    # Event Types
    "ApprovalEventType",
    "ApprovalStreamConfig",
    # Event Data Models
    "CampaignSubmittedEventData",
    "CampaignApprovedEventData",
    "CampaignLaunchFailedEventData",
    "CampaignReviewedEventData",
    "CampaignStatusChangedEventData",
    "CampaignUpdatedEventData",
    "BulkApprovedEventData",
    # Publisher
    "ApprovalEventPublisher",
]
