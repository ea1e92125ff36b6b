"""
Campaign Approval Service Data Models

Pydantic models for the campaign lifecycle, approval records, the review
queue and bulk operations.
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, model_validator


# =============================================================================
# ENUMS
# =============================================================================

class AdPlatform(str, Enum):
    """External advertising platform"""
    META = "meta"
    GOOGLE = "google"


class PlatformSelection(str, Enum):
    """Which platforms a campaign runs on"""
    META = "meta"
    GOOGLE = "google"
    BOTH = "both"

    @property
    def platforms(self) -> List[AdPlatform]:
        if self == PlatformSelection.BOTH:
            return [AdPlatform.META, AdPlatform.GOOGLE]
        return [AdPlatform(self.value)]

    def includes(self, platform: AdPlatform) -> bool:
        return platform in self.platforms


class CampaignStatus(str, Enum):
    """Campaign lifecycle status"""
    DRAFT = "draft"
    PENDING_REVIEW = "pending_review"
    ACTIVE = "active"
    PAUSED = "paused"
    NEEDS_CHANGES = "needs_changes"
    REJECTED = "rejected"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that hold live platform campaigns
LIVE_STATUSES = frozenset({CampaignStatus.ACTIVE, CampaignStatus.PAUSED})
# Statuses the owner may edit freely and submit from
EDITABLE_STATUSES = frozenset({
    CampaignStatus.DRAFT,
    CampaignStatus.NEEDS_CHANGES,
    CampaignStatus.REJECTED,
})
TERMINAL_STATUSES = frozenset({CampaignStatus.COMPLETED, CampaignStatus.CANCELLED})


class ApprovalStatus(str, Enum):
    """Approval record outcome. PENDING_REVIEW is the only open state."""
    PENDING_REVIEW = "pending_review"
    APPROVED = "approved"
    REJECTED = "rejected"
    NEEDS_CHANGES = "needs_changes"
    LAUNCH_FAILED = "launch_failed"


class PlatformCampaignStatus(str, Enum):
    """Desired delivery status on an advertising platform"""
    ENABLED = "enabled"
    PAUSED = "paused"


class UserRole(str, Enum):
    """Caller role"""
    CLIENT = "client"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


REVIEW_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


class QueueOrdering(str, Enum):
    """Review queue ordering"""
    URGENCY = "urgency"
    HIGH_BUDGET = "high_budget"
    OLDEST = "oldest"


class BulkOperation(str, Enum):
    """Operations accepted by the generic bulk endpoint"""
    PAUSE = "pause"
    ACTIVATE = "activate"
    COMPLETE = "complete"
    CANCEL = "cancel"


# =============================================================================
# ACTOR
# =============================================================================

class Actor(BaseModel):
    """Authenticated caller, taken from gateway headers"""
    user_id: str
    role: UserRole = UserRole.CLIENT
    organization_id: Optional[str] = None

    @property
    def can_review(self) -> bool:
        return self.role in REVIEW_ROLES

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN


SYSTEM_ACTOR = Actor(user_id="system", role=UserRole.SUPER_ADMIN)


# =============================================================================
# CAMPAIGN MODELS
# =============================================================================

class Creative(BaseModel):
    """Ad creative attached to a campaign"""
    creative_id: str = Field(default_factory=lambda: f"crv_{uuid4().hex[:16]}")
    headline: str = ""
    description: str = ""
    call_to_action: Optional[str] = None
    image_url: Optional[str] = None


class Campaign(BaseModel):
    """Core campaign model"""
    campaign_id: str = Field(default_factory=lambda: f"cmp_{uuid4().hex[:16]}")
    owner_id: str
    organization_id: Optional[str] = None
    name: str = Field(..., max_length=255)
    platform: PlatformSelection
    budget: Decimal = Field(..., gt=0)
    target_audience: str = ""
    objectives: List[str] = Field(default_factory=list)
    creatives: List[Creative] = Field(default_factory=list)
    landing_page_slug: Optional[str] = None

    status: CampaignStatus = CampaignStatus.DRAFT
    meta_campaign_id: Optional[str] = None
    google_campaign_id: Optional[str] = None
    version: int = Field(default=1, ge=1)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @model_validator(mode="after")
    def validate_platform_ids(self):
        """Platform ids exist only while live and only for selected platforms"""
        for platform in AdPlatform:
            if self.platform_id(platform) is None:
                continue
            if self.status not in LIVE_STATUSES:
                raise ValueError(
                    f"{platform.value} campaign id set while status is {self.status.value}"
                )
            if not self.platform.includes(platform):
                raise ValueError(
                    f"{platform.value} campaign id set but platform is {self.platform.value}"
                )
        return self

    def platform_id(self, platform: AdPlatform) -> Optional[str]:
        if platform == AdPlatform.META:
            return self.meta_campaign_id
        return self.google_campaign_id

    @property
    def platform_ids(self) -> Dict[AdPlatform, str]:
        """Stored platform ids, keyed by platform"""
        return {
            p: self.platform_id(p)
            for p in AdPlatform
            if self.platform_id(p) is not None
        }

    def snapshot(self) -> Dict[str, Any]:
        """Review snapshot stored with each approval record"""
        return {
            "name": self.name,
            "budget": str(self.budget),
            "platform": self.platform.value,
            "target_audience": self.target_audience,
            "objectives": list(self.objectives),
            "creatives_count": len(self.creatives),
        }


def platform_id_field(platform: AdPlatform) -> str:
    """Campaign attribute holding the id for a platform"""
    return f"{platform.value}_campaign_id"


class PlatformOutcome(BaseModel):
    """Result of one platform call inside a fan-out"""
    platform: AdPlatform
    success: bool
    platform_campaign_id: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    reused: bool = False


class ApprovalRecord(BaseModel):
    """Append-only audit row, one per submission attempt"""
    approval_id: str = Field(default_factory=lambda: f"apr_{uuid4().hex[:16]}")
    campaign_id: str
    owner_id: str
    submitted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    reviewed_at: Optional[datetime] = None
    status: ApprovalStatus = ApprovalStatus.PENDING_REVIEW
    reviewer_id: Optional[str] = None
    feedback: Optional[str] = None
    reason_codes: List[str] = Field(default_factory=list)
    review_snapshot: Dict[str, Any] = Field(default_factory=dict)
    platform_results: Dict[str, PlatformOutcome] = Field(default_factory=dict)

    @property
    def is_open(self) -> bool:
        return self.reviewed_at is None

    @model_validator(mode="after")
    def validate_open_state(self):
        if self.is_open and self.status != ApprovalStatus.PENDING_REVIEW:
            raise ValueError("Open approval records must be pending review")
        if not self.is_open and self.status == ApprovalStatus.PENDING_REVIEW:
            raise ValueError("Closed approval records need a decision status")
        return self

    def reusable_platform_ids(self) -> Dict[AdPlatform, str]:
        """Platform ids created during a failed launch, safe to re-enable"""
        if self.status != ApprovalStatus.LAUNCH_FAILED:
            return {}
        return {
            outcome.platform: outcome.platform_campaign_id
            for outcome in self.platform_results.values()
            if outcome.platform_campaign_id
        }


# =============================================================================
# VALIDATION
# =============================================================================

class ValidationResult(BaseModel):
    """Validator output"""
    valid: bool
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class ApprovalData(BaseModel):
    """Reviewer options applied when launching on the platforms"""
    use_lead_gen: bool = True
    use_psychology_targeting: bool = True
    notes: Optional[str] = Field(None, max_length=2000)


class ApproveRequest(BaseModel):
    """Approve request body"""
    approval_data: ApprovalData = Field(default_factory=ApprovalData)


class RejectRequest(BaseModel):
    """Reject request body"""
    feedback: str = Field(..., description="Reviewer feedback shown to the owner")
    reasons: List[str] = Field(default_factory=list, description="Structured reason codes")
    needs_changes: bool = Field(default=True, description="Allow the owner to revise and resubmit")


class CancelRequest(BaseModel):
    """Cancel request body"""
    reason: Optional[str] = Field(None, max_length=500)


class CampaignUpdateRequest(BaseModel):
    """Owner edits to a campaign"""
    name: Optional[str] = Field(None, max_length=255)
    budget: Optional[Decimal] = Field(None, gt=0)
    platform: Optional[PlatformSelection] = None
    target_audience: Optional[str] = None
    objectives: Optional[List[str]] = None
    creatives: Optional[List[Creative]] = None
    landing_page_slug: Optional[str] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class BulkApproveRequest(BaseModel):
    """Bulk approve request body"""
    campaign_ids: List[str]
    approval_data: ApprovalData = Field(default_factory=ApprovalData)


class BulkOperationRequest(BaseModel):
    """Generic bulk lifecycle request body"""
    operation: BulkOperation
    campaign_ids: List[str]
    reason: Optional[str] = Field(None, max_length=500)


# =============================================================================
# RESULT MODELS
# =============================================================================

class SubmissionResult(BaseModel):
    """Submit outcome"""
    approval_id: str
    estimated_review_time: str
    campaign: Campaign
    warnings: List[str] = Field(default_factory=list)


class ApprovalResult(BaseModel):
    """Approve outcome"""
    campaign: Campaign
    approval_id: str
    platform_results: Dict[str, PlatformOutcome] = Field(default_factory=dict)


class ReviewResult(BaseModel):
    """Reject / request-changes outcome"""
    campaign: Campaign
    approval_id: str
    status: ApprovalStatus


class LifecycleResult(BaseModel):
    """Pause, activate, complete and cancel outcome"""
    campaign: Campaign
    warnings: List[str] = Field(default_factory=list)
    platform_results: Dict[str, PlatformOutcome] = Field(default_factory=dict)


class ApprovalHistory(BaseModel):
    """Approval records for one campaign, newest first"""
    campaign_id: str
    current_status: CampaignStatus
    approvals: List[ApprovalRecord] = Field(default_factory=list)


# =============================================================================
# REVIEW QUEUE MODELS
# =============================================================================

class ReviewQueueItem(BaseModel):
    """Pending campaign with its urgency score"""
    campaign: Campaign
    approval_id: str
    submitted_at: datetime
    days_since_submission: int
    urgency_score: int


class ReviewQueueStats(BaseModel):
    """Aggregates over the whole pending snapshot"""
    total_pending: int = 0
    high_priority: int = 0
    average_wait_hours: float = 0.0


class ReviewQueuePage(BaseModel):
    """Paginated review queue"""
    items: List[ReviewQueueItem] = Field(default_factory=list)
    page: int
    limit: int
    total: int
    pages: int
    ordering: QueueOrdering
    stats: ReviewQueueStats = Field(default_factory=ReviewQueueStats)


class ReasonCount(BaseModel):
    reason: str
    count: int


class ApprovalStatistics(BaseModel):
    """Review throughput over a timeframe"""
    timeframe_days: int
    total_submissions: int = 0
    approved: int = 0
    rejected: int = 0
    needs_changes: int = 0
    launch_failed: int = 0
    pending: int = 0
    approval_rate: float = 0.0
    average_approval_hours: float = 0.0
    top_rejection_reasons: List[ReasonCount] = Field(default_factory=list)


# =============================================================================
# BULK MODELS
# =============================================================================

class BulkItemResult(BaseModel):
    """Per-campaign bulk result"""
    campaign_id: str
    success: bool
    message: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None


class BulkSummary(BaseModel):
    total: int = 0
    successful: int = 0
    failed: int = 0


class BulkOperationResult(BaseModel):
    """Bulk outcome with per-item results"""
    operation: str
    results: List[BulkItemResult] = Field(default_factory=list)
    summary: BulkSummary = Field(default_factory=BulkSummary)


# =============================================================================
# SERVICE MODELS
# =============================================================================

class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    service: str
    port: int
    version: str
    dependencies: Dict[str, str] = Field(default_factory=dict)


class ReadinessResponse(BaseModel):
    """Readiness check response"""
    ready: bool
    checks: Dict[str, bool] = Field(default_factory=dict)
    details: Dict[str, str] = Field(default_factory=dict)


class LivenessResponse(BaseModel):
    """Liveness check response"""
    alive: bool
    uptime_seconds: float


class ErrorResponse(BaseModel):
    """Standard error response"""
    detail: str
    error_code: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = [
    # Enums
    "AdPlatform",
    "PlatformSelection",
    "CampaignStatus",
    "ApprovalStatus",
    "PlatformCampaignStatus",
    "UserRole",
    "QueueOrdering",
    "BulkOperation",
    "LIVE_STATUSES",
    "EDITABLE_STATUSES",
    "TERMINAL_STATUSES",
    "REVIEW_ROLES",
    # Core Models
    "Actor",
    "SYSTEM_ACTOR",
    "Creative",
    "Campaign",
    "platform_id_field",
    "PlatformOutcome",
    "ApprovalRecord",
    "ValidationResult",
    # Request Models
    "ApprovalData",
    "ApproveRequest",
    "RejectRequest",
    "CancelRequest",
    "CampaignUpdateRequest",
    "BulkApproveRequest",
    "BulkOperationRequest",
    # Result Models
    "SubmissionResult",
    "ApprovalResult",
    "ReviewResult",
    "LifecycleResult",
    "ApprovalHistory",
    "ReviewQueueItem",
    "ReviewQueueStats",
    "ReviewQueuePage",
    "ReasonCount",
    "ApprovalStatistics",
    "BulkItemResult",
    "BulkSummary",
    "BulkOperationResult",
    # Service Models
    "HealthResponse",
    "ReadinessResponse",
    "LivenessResponse",
    "ErrorResponse",
]
