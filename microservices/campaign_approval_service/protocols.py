"""
Campaign Approval Service Protocols

Defines interfaces for dependency injection and testing.
Following the protocol-based architecture pattern.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .models import (
    AdPlatform,
    ApprovalRecord,
    ApprovalStatus,
    Campaign,
    CampaignStatus,
    PlatformCampaignStatus,
    PlatformOutcome,
)


# ====================
# Repository Protocol
# ====================


class CampaignApprovalRepositoryProtocol(Protocol):
    """Protocol for campaign and approval record storage"""

    async def initialize(self) -> None:
        """Initialize repository connection"""
        ...

    async def close(self) -> None:
        """Close repository connection"""
        ...

    async def health_check(self) -> bool:
        """Check repository health"""
        ...

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        """Get campaign by ID"""
        ...

    async def list_campaigns_by_status(self, status: CampaignStatus) -> List[Campaign]:
        """List every campaign in a status"""
        ...

    async def compare_and_set_status(
        self,
        campaign_id: str,
        expected_status: CampaignStatus,
        new_status: CampaignStatus,
        expected_version: Optional[int] = None,
        updates: Optional[Dict[str, Any]] = None,
    ) -> Optional[Campaign]:
        """
        Conditionally move a campaign to a new status.

        Applies ``updates`` in the same write and bumps ``version``.
        Returns None when the stored status or version no longer matches.
        """
        ...

    async def create_submission(
        self,
        record: ApprovalRecord,
        expected_status: CampaignStatus,
        expected_version: int,
    ) -> Campaign:
        """
        Open an approval record and move the campaign to PENDING_REVIEW atomically.

        Raises ConflictError when another record is open or the status moved.
        """
        ...

    async def close_review(
        self,
        record: ApprovalRecord,
        expected_status: CampaignStatus,
        new_status: CampaignStatus,
        expected_version: Optional[int] = None,
        updates: Optional[Dict[str, Any]] = None,
    ) -> Campaign:
        """
        Close an open approval record and transition its campaign atomically.

        Raises ConflictError when the record was already closed or the status moved.
        """
        ...

    async def get_open_approval(self, campaign_id: str) -> Optional[ApprovalRecord]:
        """Get the approval record awaiting review, if any"""
        ...

    async def get_latest_approval(
        self,
        campaign_id: str,
        status: Optional[ApprovalStatus] = None,
    ) -> Optional[ApprovalRecord]:
        """Get the most recent approval record, optionally filtered by status"""
        ...

    async def list_approvals(self, campaign_id: str) -> List[ApprovalRecord]:
        """List approval records for a campaign, newest first"""
        ...

    async def list_open_approvals(self) -> List[ApprovalRecord]:
        """List all approval records awaiting review"""
        ...

    async def list_approvals_since(self, since: datetime) -> List[ApprovalRecord]:
        """List approval records submitted at or after ``since``"""
        ...


# ====================
# Platform Adapter Protocol
# ====================


class PlatformAdapterProtocol(Protocol):
    """Protocol for an advertising platform adapter"""

    platform: AdPlatform
    timeout_seconds: float

    async def create(self, campaign: Campaign, options: Optional[Dict[str, Any]] = None) -> str:
        """
        Create the platform campaign and return its platform id.

        Idempotent per local campaign id: an existing platform campaign
        for the same local id is returned instead of creating another.
        """
        ...

    async def update_status(self, platform_campaign_id: str, status: PlatformCampaignStatus) -> None:
        """Enable or pause a platform campaign"""
        ...

    async def health_check(self) -> bool:
        """Check platform API reachability"""
        ...


# ====================
# Event Bus Protocol
# ====================


class EventBusProtocol(Protocol):
    """Protocol for event bus"""

    async def publish_event(self, event: Any) -> bool:
        """Publish an event"""
        ...


# ====================
# External Service Client Protocols
# ====================


class NotificationClientProtocol(Protocol):
    """Protocol for notification_service client"""

    async def notify_campaign_owner(
        self,
        owner_id: str,
        campaign_id: str,
        title: str,
        body: str,
        action_url: Optional[str] = None,
        channels: Sequence[str] = ("in_app",),
        **metadata,
    ) -> List[str]:
        """Deliver a campaign message to its owner on each channel"""
        ...


# ====================
# Custom Exceptions
# ====================


class ApprovalServiceError(Exception):
    """Base exception for the campaign approval service"""
    pass


class CampaignNotFoundError(ApprovalServiceError):
    """Campaign not found or not visible to the caller"""
    pass


class ValidationFailedError(ApprovalServiceError):
    """Local precondition not met"""

    def __init__(
        self,
        message: str,
        errors: Optional[List[str]] = None,
        warnings: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.errors = errors or [message]
        self.warnings = warnings or []


class ConflictError(ApprovalServiceError):
    """State changed concurrently"""
    pass


class InvalidCampaignStateError(ConflictError):
    """Operation not allowed in the campaign's current status"""

    def __init__(self, message: str, current_status: Optional[CampaignStatus] = None):
        super().__init__(message)
        self.current_status = current_status


class ForbiddenError(ApprovalServiceError):
    """Caller lacks the required ownership or role"""
    pass


class PartialFailureError(ApprovalServiceError):
    """One or more platform calls failed; local state was rolled back"""

    def __init__(
        self,
        message: str,
        outcomes: Dict[AdPlatform, PlatformOutcome],
        campaign: Optional[Campaign] = None,
    ):
        super().__init__(message)
        self.outcomes = outcomes
        self.campaign = campaign

    @property
    def succeeded(self) -> List[AdPlatform]:
        return [p for p, o in self.outcomes.items() if o.success]

    @property
    def failed(self) -> List[AdPlatform]:
        return [p for p, o in self.outcomes.items() if not o.success]


class PlatformAdapterError(ApprovalServiceError):
    """Advertising platform call failed"""

    def __init__(
        self,
        platform: AdPlatform,
        message: str,
        error_type: str = "api_error",
        retryable: bool = False,
        status_code: Optional[int] = None,
    ):
        super().__init__(f"{platform.value}: {message}")
        self.platform = platform
        self.error_type = error_type
        self.retryable = retryable
        self.status_code = status_code


__all__ = [
    "CampaignApprovalRepositoryProtocol",
    "PlatformAdapterProtocol",
    "EventBusProtocol",
    "NotificationClientProtocol",
    "ApprovalServiceError",
    "CampaignNotFoundError",
    "ValidationFailedError",
    "ConflictError",
    "InvalidCampaignStateError",
    "ForbiddenError",
    "PartialFailureError",
    "PlatformAdapterError",
]
