"""
Component Test Fixtures for Campaign Approval Service

In-memory repository with the same compare-and-swap semantics as the
PostgreSQL one, recording platform adapters and mocked event bus and
notification clients.
"""

import asyncio
import pytest
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

import sys
import os

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_approval_service.bulk_coordinator import BulkOperationCoordinator
from microservices.campaign_approval_service.models import PlatformCampaignStatus
from microservices.campaign_approval_service.orchestrator import ApprovalOrchestrator
from microservices.campaign_approval_service.protocols import ConflictError, PlatformAdapterError
from microservices.campaign_approval_service.review_queue import ReviewQueueService
from tests.contracts.campaign_approval.data_contract import (
    AdPlatform,
    ApprovalRecord,
    ApprovalStatus,
    Campaign,
    CampaignStatus,
    ApprovalTestDataFactory,
)


# ====================
# Mock Repository
# ====================


class MockApprovalRepository:
    """Dict-backed repository; every write is compare-and-swap under one lock"""

    def __init__(self):
        self.campaigns: Dict[str, Campaign] = {}
        self.approvals: List[ApprovalRecord] = []
        self._lock = asyncio.Lock()

    async def initialize(self):
        pass

    async def close(self):
        pass

    async def health_check(self) -> bool:
        return True

    # Seeding helpers

    def add_campaign(self, campaign: Campaign) -> Campaign:
        self.campaigns[campaign.campaign_id] = campaign
        return campaign

    def add_approval(self, record: ApprovalRecord) -> ApprovalRecord:
        self.approvals.append(record)
        return record

    # Campaigns

    async def get_campaign(self, campaign_id: str) -> Optional[Campaign]:
        await asyncio.sleep(0)
        return self.campaigns.get(campaign_id)

    async def list_campaigns_by_status(self, status: CampaignStatus) -> List[Campaign]:
        return [c for c in self.campaigns.values() if c.status == status]

    def _swap(
        self,
        campaign_id: str,
        expected_status: CampaignStatus,
        new_status: CampaignStatus,
        expected_version: Optional[int],
        updates: Optional[Dict[str, Any]],
    ) -> Optional[Campaign]:
        current = self.campaigns.get(campaign_id)
        if current is None or current.status != expected_status:
            return None
        if expected_version is not None and current.version != expected_version:
            return None

        data = current.model_dump()
        data.update(updates or {})
        data.update(
            status=new_status,
            version=current.version + 1,
            updated_at=datetime.now(timezone.utc),
        )
        return Campaign.model_validate(data)

    async def compare_and_set_status(
        self,
        campaign_id: str,
        expected_status: CampaignStatus,
        new_status: CampaignStatus,
        expected_version: Optional[int] = None,
        updates: Optional[Dict[str, Any]] = None,
    ) -> Optional[Campaign]:
        async with self._lock:
            updated = self._swap(campaign_id, expected_status, new_status, expected_version, updates)
            if updated:
                self.campaigns[campaign_id] = updated
            return updated

    # Approval records

    async def create_submission(
        self,
        record: ApprovalRecord,
        expected_status: CampaignStatus,
        expected_version: int,
    ) -> Campaign:
        async with self._lock:
            if any(r.campaign_id == record.campaign_id and r.is_open for r in self.approvals):
                raise ConflictError(f"Campaign {record.campaign_id} already has an open approval request")
            updated = self._swap(
                record.campaign_id, expected_status, CampaignStatus.PENDING_REVIEW, expected_version, None
            )
            if updated is None:
                raise ConflictError(f"Campaign {record.campaign_id} changed during submission")
            self.campaigns[record.campaign_id] = updated
            self.approvals.append(record)
            return updated

    async def close_review(
        self,
        record: ApprovalRecord,
        expected_status: CampaignStatus,
        new_status: CampaignStatus,
        expected_version: Optional[int] = None,
        updates: Optional[Dict[str, Any]] = None,
    ) -> Campaign:
        async with self._lock:
            index = next(
                (i for i, r in enumerate(self.approvals) if r.approval_id == record.approval_id and r.is_open),
                None,
            )
            if index is None:
                raise ConflictError(f"Approval {record.approval_id} was already reviewed")
            updated = self._swap(record.campaign_id, expected_status, new_status, expected_version, updates)
            if updated is None:
                raise ConflictError(f"Campaign {record.campaign_id} changed during review")
            self.approvals[index] = record
            self.campaigns[record.campaign_id] = updated
            return updated

    async def get_open_approval(self, campaign_id: str) -> Optional[ApprovalRecord]:
        return next((r for r in self.approvals if r.campaign_id == campaign_id and r.is_open), None)

    async def get_latest_approval(
        self,
        campaign_id: str,
        status: Optional[ApprovalStatus] = None,
    ) -> Optional[ApprovalRecord]:
        records = await self.list_approvals(campaign_id)
        return next((r for r in records if status is None or r.status == status), None)

    async def list_approvals(self, campaign_id: str) -> List[ApprovalRecord]:
        records = [r for r in self.approvals if r.campaign_id == campaign_id]
        return sorted(records, key=lambda r: r.submitted_at, reverse=True)

    async def list_open_approvals(self) -> List[ApprovalRecord]:
        return [r for r in self.approvals if r.is_open]

    async def list_approvals_since(self, since: datetime) -> List[ApprovalRecord]:
        return [r for r in self.approvals if r.submitted_at >= since]

    def approvals_for(self, campaign_id: str) -> List[ApprovalRecord]:
        return [r for r in self.approvals if r.campaign_id == campaign_id]


# ====================
# Mock Platform Adapter
# ====================


class MockPlatformAdapter:
    """
    Records every call and keeps platform-side campaign status.

    ``fail(op, error, times)`` makes ``create``, ``enable`` or ``pause``
    raise ``error``; ``times=None`` fails every call.
    """

    def __init__(self, platform: AdPlatform, timeout_seconds: float = 1.0):
        self.platform = platform
        self.timeout_seconds = timeout_seconds
        self.delay = 0.0
        self.calls: List[Tuple[str, ...]] = []
        self.statuses: Dict[str, PlatformCampaignStatus] = {}
        self.by_local_id: Dict[str, str] = {}
        self.last_options: Optional[Dict[str, Any]] = None
        self._failures: Dict[str, List[Any]] = {}
        self._counter = 0

    def fail(self, operation: str, error: Optional[Exception] = None, times: Optional[int] = None) -> None:
        error = error or PlatformAdapterError(self.platform, f"{operation} rejected")
        self._failures[operation] = [error, times]

    def _maybe_fail(self, operation: str) -> None:
        failure = self._failures.get(operation)
        if not failure:
            return
        error, remaining = failure
        if remaining is None:
            raise error
        if remaining > 0:
            failure[1] = remaining - 1
            raise error

    def count(self, operation: str) -> int:
        return sum(1 for call in self.calls if call[0] == operation)

    async def create(self, campaign: Campaign, options: Optional[Dict[str, Any]] = None) -> str:
        self.calls.append(("create", campaign.campaign_id))
        self.last_options = options
        if self.delay:
            await asyncio.sleep(self.delay)
        self._maybe_fail("create")

        existing = self.by_local_id.get(campaign.campaign_id)
        if existing:
            return existing
        self._counter += 1
        platform_campaign_id = f"{self.platform.value}_{self._counter}"
        self.by_local_id[campaign.campaign_id] = platform_campaign_id
        self.statuses[platform_campaign_id] = PlatformCampaignStatus.PAUSED
        return platform_campaign_id

    async def update_status(self, platform_campaign_id: str, status: PlatformCampaignStatus) -> None:
        operation = "enable" if status == PlatformCampaignStatus.ENABLED else "pause"
        self.calls.append((operation, platform_campaign_id))
        if self.delay:
            await asyncio.sleep(self.delay)
        self._maybe_fail(operation)
        self.statuses[platform_campaign_id] = status

    async def health_check(self) -> bool:
        return True

    def enabled_ids(self) -> List[str]:
        return [pid for pid, s in self.statuses.items() if s == PlatformCampaignStatus.ENABLED]


# ====================
# Mock Event Bus / Notification Client
# ====================


class MockEventBus:
    """Captures published events"""

    def __init__(self):
        self.published_events: List[Dict[str, Any]] = []
        self._should_raise: Optional[Exception] = None

    async def publish_event(self, event: Any) -> bool:
        if self._should_raise:
            raise self._should_raise
        self.published_events.append({
            "type": event.type,
            "source": event.source,
            "subject": event.subject,
            "data": event.data,
        })
        return True

    def get_published(self, event_type: Optional[str] = None) -> List[Dict[str, Any]]:
        if event_type:
            return [e for e in self.published_events if e["type"] == event_type]
        return self.published_events


class MockNotificationClient:
    """Captures notifications sent to campaign owners"""

    def __init__(self):
        self.sent: List[Dict[str, Any]] = []
        self._should_raise: Optional[Exception] = None

    async def notify_campaign_owner(
        self,
        owner_id: str,
        campaign_id: str,
        title: str,
        body: str,
        action_url: Optional[str] = None,
        channels=("in_app",),
        **metadata,
    ) -> List[str]:
        if self._should_raise:
            raise self._should_raise
        content = {"title": title, "body": body, "action_url": action_url}
        ids = []
        for channel in channels:
            self.sent.append({
                "user_id": owner_id,
                "channel_type": channel,
                "content": content,
                "campaign_id": campaign_id,
                **metadata,
            })
            ids.append(f"ntf_{len(self.sent)}")
        return ids


# ====================
# Fixtures
# ====================


@pytest.fixture
def factory():
    """Provide test data factory"""
    return ApprovalTestDataFactory()


@pytest.fixture
def mock_repository():
    return MockApprovalRepository()


@pytest.fixture
def meta_adapter():
    return MockPlatformAdapter(AdPlatform.META)


@pytest.fixture
def google_adapter():
    return MockPlatformAdapter(AdPlatform.GOOGLE)


@pytest.fixture
def mock_event_bus():
    return MockEventBus()


@pytest.fixture
def mock_notification_client():
    return MockNotificationClient()


@pytest.fixture
def orchestrator(mock_repository, meta_adapter, google_adapter, mock_event_bus, mock_notification_client):
    """Orchestrator wired to mocks, with no wait between pause retries"""
    orchestrator = ApprovalOrchestrator(
        repository=mock_repository,
        adapters=[meta_adapter, google_adapter],
        event_bus=mock_event_bus,
        notification_client=mock_notification_client,
        frontend_url="https://app.example.com",
    )
    orchestrator.PAUSE_RETRY_WAIT_SECONDS = 0
    return orchestrator


@pytest.fixture
def review_queue(mock_repository):
    return ReviewQueueService(mock_repository)


@pytest.fixture
def bulk_coordinator(orchestrator):
    return BulkOperationCoordinator(orchestrator)


@pytest.fixture
def reviewer(factory):
    return factory.make_admin()


@pytest.fixture
def super_admin(factory):
    return factory.make_super_admin()


@pytest.fixture
def pending_campaign(mock_repository, factory):
    """Store a PENDING_REVIEW campaign with its open approval record"""

    def make(hours_waiting: float = 1.0, **overrides) -> Campaign:
        campaign = mock_repository.add_campaign(
            factory.make_campaign(status=CampaignStatus.PENDING_REVIEW, **overrides)
        )
        submitted_at = factory.make_timestamp(hours_ago=hours_waiting)
        mock_repository.add_approval(factory.make_open_record(campaign, submitted_at=submitted_at))
        return campaign

    return make


@pytest.fixture
def live_campaign(mock_repository, meta_adapter, google_adapter, factory):
    """Store an ACTIVE or PAUSED campaign whose platform campaigns exist on the adapters"""

    def make(status: CampaignStatus = CampaignStatus.ACTIVE, **overrides) -> Campaign:
        campaign = mock_repository.add_campaign(factory.make_live_campaign(status=status, **overrides))
        platform_status = (
            PlatformCampaignStatus.ENABLED if status == CampaignStatus.ACTIVE else PlatformCampaignStatus.PAUSED
        )
        for adapter in (meta_adapter, google_adapter):
            platform_id = campaign.platform_id(adapter.platform)
            if platform_id:
                adapter.statuses[platform_id] = platform_status
                adapter.by_local_id[campaign.campaign_id] = platform_id
        return campaign

    return make
