"""
Component Tests for Lifecycle Operations

pause / activate / complete / cancel, owner edits and reads.
"""

import pytest

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_approval_service.models import PlatformCampaignStatus
from microservices.campaign_approval_service.protocols import (
    CampaignNotFoundError,
    ConflictError,
    ForbiddenError,
    InvalidCampaignStateError,
    PartialFailureError,
    PlatformAdapterError,
    ValidationFailedError,
)
from tests.contracts.campaign_approval.data_contract import (
    AdPlatform,
    CampaignStatus,
    PlatformSelection,
)


def _transient(platform: AdPlatform) -> PlatformAdapterError:
    return PlatformAdapterError(platform, "service unavailable", retryable=True, status_code=503)


class TestPause:
    """Pause always lands in PAUSED and reports platform failures"""

    @pytest.mark.asyncio
    async def test_pause_both_platforms(self, orchestrator, live_campaign, meta_adapter, google_adapter, mock_event_bus):
        campaign = live_campaign()

        result = await orchestrator.pause(campaign.campaign_id)

        assert result.campaign.status == CampaignStatus.PAUSED
        assert result.warnings == []
        assert meta_adapter.enabled_ids() == []
        assert google_adapter.enabled_ids() == []
        # Ids are kept while paused
        assert result.campaign.platform_ids == campaign.platform_ids
        event = mock_event_bus.get_published("campaign.paused")[0]
        assert event["data"]["changed_by"] == "system"
        assert event["data"]["previous_status"] == "active"

    @pytest.mark.asyncio
    async def test_platform_failure_becomes_warning(self, orchestrator, live_campaign, google_adapter, mock_repository):
        # Given: Google refuses every pause
        campaign = live_campaign()
        google_adapter.fail("pause")

        # When: pausing
        result = await orchestrator.pause(campaign.campaign_id)

        # Then: local status is PAUSED and the warning names Google
        assert result.campaign.status == CampaignStatus.PAUSED
        assert mock_repository.campaigns[campaign.campaign_id].status == CampaignStatus.PAUSED
        assert len(result.warnings) == 1
        assert result.warnings[0].startswith("Failed to pause google campaign:")
        assert not result.platform_results["google"].success

    @pytest.mark.asyncio
    async def test_transient_failures_are_retried(self, orchestrator, live_campaign, google_adapter):
        campaign = live_campaign()
        google_adapter.fail("pause", _transient(AdPlatform.GOOGLE), times=2)

        result = await orchestrator.pause(campaign.campaign_id)

        assert result.warnings == []
        assert google_adapter.count("pause") == 3

    @pytest.mark.asyncio
    async def test_retries_are_bounded(self, orchestrator, live_campaign, google_adapter):
        campaign = live_campaign()
        google_adapter.fail("pause", _transient(AdPlatform.GOOGLE))

        result = await orchestrator.pause(campaign.campaign_id)

        assert google_adapter.count("pause") == orchestrator.PAUSE_RETRY_ATTEMPTS
        assert len(result.warnings) == 1

    @pytest.mark.asyncio
    async def test_permanent_failure_not_retried(self, orchestrator, live_campaign, google_adapter):
        campaign = live_campaign()
        google_adapter.fail("pause")

        await orchestrator.pause(campaign.campaign_id)

        assert google_adapter.count("pause") == 1

    @pytest.mark.asyncio
    async def test_only_active_campaigns_pause(self, orchestrator, live_campaign):
        campaign = live_campaign(status=CampaignStatus.PAUSED)
        with pytest.raises(InvalidCampaignStateError):
            await orchestrator.pause(campaign.campaign_id)

    @pytest.mark.asyncio
    async def test_stranger_cannot_pause(self, orchestrator, live_campaign, factory):
        campaign = live_campaign()
        with pytest.raises(ForbiddenError):
            await orchestrator.pause(campaign.campaign_id, factory.make_client())

    @pytest.mark.asyncio
    async def test_owner_can_pause(self, orchestrator, live_campaign, factory):
        campaign = live_campaign()
        result = await orchestrator.pause(campaign.campaign_id, factory.make_client(campaign.owner_id))
        assert result.campaign.status == CampaignStatus.PAUSED


class TestActivate:
    """Activation is all-or-nothing across platforms"""

    @pytest.mark.asyncio
    async def test_activate_both_platforms(self, orchestrator, live_campaign, meta_adapter, google_adapter):
        campaign = live_campaign(status=CampaignStatus.PAUSED)

        result = await orchestrator.activate(campaign.campaign_id)

        assert result.campaign.status == CampaignStatus.ACTIVE
        assert meta_adapter.enabled_ids() == [campaign.meta_campaign_id]
        assert google_adapter.enabled_ids() == [campaign.google_campaign_id]

    @pytest.mark.asyncio
    async def test_partial_failure_stays_paused(
        self, orchestrator, live_campaign, meta_adapter, google_adapter, mock_repository
    ):
        # Given: Google refuses to enable
        campaign = live_campaign(status=CampaignStatus.PAUSED)
        google_adapter.fail("enable")

        # When: activating
        with pytest.raises(PartialFailureError) as exc_info:
            await orchestrator.activate(campaign.campaign_id)

        # Then: Meta is paused again and the campaign stays PAUSED
        assert exc_info.value.succeeded == [AdPlatform.META]
        assert exc_info.value.failed == [AdPlatform.GOOGLE]
        assert meta_adapter.statuses[campaign.meta_campaign_id] == PlatformCampaignStatus.PAUSED
        stored = mock_repository.campaigns[campaign.campaign_id]
        assert stored.status == CampaignStatus.PAUSED
        assert stored.version == campaign.version

    @pytest.mark.asyncio
    async def test_lost_race_compensates(self, orchestrator, live_campaign, meta_adapter, mock_repository):
        # Given: the campaign changes after activate read it
        campaign = live_campaign(status=CampaignStatus.PAUSED, platform=PlatformSelection.META)
        original_update = meta_adapter.update_status

        async def update_then_race(platform_campaign_id, status):
            await original_update(platform_campaign_id, status)
            if status == PlatformCampaignStatus.ENABLED:
                await mock_repository.compare_and_set_status(
                    campaign.campaign_id, CampaignStatus.PAUSED, CampaignStatus.CANCELLED,
                    updates={"meta_campaign_id": None},
                )

        meta_adapter.update_status = update_then_race

        # When: activating
        with pytest.raises(ConflictError):
            await orchestrator.activate(campaign.campaign_id)

        # Then: the platform campaign is paused again
        assert meta_adapter.statuses[campaign.meta_campaign_id] == PlatformCampaignStatus.PAUSED


class TestCompleteAndCancel:
    """Terminal transitions clear platform ids"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [CampaignStatus.ACTIVE, CampaignStatus.PAUSED])
    async def test_complete(self, orchestrator, live_campaign, meta_adapter, status):
        campaign = live_campaign(status=status)

        result = await orchestrator.complete(campaign.campaign_id)

        assert result.campaign.status == CampaignStatus.COMPLETED
        assert result.campaign.platform_ids == {}
        assert meta_adapter.statuses[campaign.meta_campaign_id] == PlatformCampaignStatus.PAUSED

    @pytest.mark.asyncio
    async def test_cancel_with_reason(self, orchestrator, live_campaign, reviewer, mock_event_bus):
        campaign = live_campaign()

        result = await orchestrator.cancel(campaign.campaign_id, reviewer, reason="Client request")

        assert result.campaign.status == CampaignStatus.CANCELLED
        assert result.campaign.platform_ids == {}
        event = mock_event_bus.get_published("campaign.cancelled")[0]
        assert event["data"]["reason"] == "Client request"
        assert event["data"]["changed_by"] == reviewer.user_id

    @pytest.mark.asyncio
    async def test_cancel_warns_on_platform_failure(self, orchestrator, live_campaign, meta_adapter):
        campaign = live_campaign()
        meta_adapter.fail("pause")

        result = await orchestrator.cancel(campaign.campaign_id)

        assert result.campaign.status == CampaignStatus.CANCELLED
        assert result.warnings[0].startswith("Failed to pause meta campaign:")

    @pytest.mark.asyncio
    async def test_draft_cannot_complete(self, orchestrator, mock_repository, factory):
        campaign = mock_repository.add_campaign(factory.make_campaign())
        with pytest.raises(InvalidCampaignStateError):
            await orchestrator.complete(campaign.campaign_id)

    @pytest.mark.asyncio
    async def test_completed_campaign_is_final(self, orchestrator, live_campaign):
        campaign = live_campaign()
        await orchestrator.complete(campaign.campaign_id)

        with pytest.raises(InvalidCampaignStateError):
            await orchestrator.activate(campaign.campaign_id)


class TestUpdateCampaign:
    """Owner edits"""

    @pytest.mark.asyncio
    async def test_draft_edit(self, orchestrator, mock_repository, mock_event_bus, factory):
        campaign = mock_repository.add_campaign(factory.make_campaign())
        owner = factory.make_client(campaign.owner_id)

        updated = await orchestrator.update_campaign(
            campaign.campaign_id, owner, {"name": "Autumn Wellness Push", "platform": PlatformSelection.BOTH}
        )

        assert updated.name == "Autumn Wellness Push"
        assert updated.platform == PlatformSelection.BOTH
        assert updated.version == campaign.version + 1
        assert mock_event_bus.get_published("campaign.updated")[0]["data"]["changed_fields"] == ["name", "platform"]

    @pytest.mark.asyncio
    async def test_budget_locked_while_pending(self, orchestrator, pending_campaign, factory, mock_repository):
        campaign = pending_campaign()

        with pytest.raises(ValidationFailedError) as exc_info:
            await orchestrator.update_campaign(
                campaign.campaign_id, factory.make_client(campaign.owner_id), {"budget": 9000}
            )

        assert "Field 'budget' cannot be changed while campaign is pending_review" in exc_info.value.errors
        assert mock_repository.campaigns[campaign.campaign_id].budget == campaign.budget

    @pytest.mark.asyncio
    async def test_only_owner_edits(self, orchestrator, mock_repository, factory):
        campaign = mock_repository.add_campaign(factory.make_campaign())
        with pytest.raises(ForbiddenError):
            await orchestrator.update_campaign(campaign.campaign_id, factory.make_admin(), {"name": "Hijacked"})

    @pytest.mark.asyncio
    async def test_empty_edit_is_a_no_op(self, orchestrator, mock_repository, factory):
        campaign = mock_repository.add_campaign(factory.make_campaign())
        updated = await orchestrator.update_campaign(campaign.campaign_id, factory.make_client(campaign.owner_id), {})
        assert updated.version == campaign.version


class TestReads:
    """Visibility of campaigns and history"""

    @pytest.mark.asyncio
    async def test_owner_and_reviewer_can_read(self, orchestrator, mock_repository, reviewer, factory):
        campaign = mock_repository.add_campaign(factory.make_campaign())
        assert await orchestrator.get_campaign(campaign.campaign_id, factory.make_client(campaign.owner_id))
        assert await orchestrator.get_campaign(campaign.campaign_id, reviewer)

    @pytest.mark.asyncio
    async def test_other_clients_see_not_found(self, orchestrator, mock_repository, factory):
        campaign = mock_repository.add_campaign(factory.make_campaign())
        with pytest.raises(CampaignNotFoundError):
            await orchestrator.get_campaign(campaign.campaign_id, factory.make_client())

    @pytest.mark.asyncio
    async def test_history_newest_first(self, orchestrator, pending_campaign, reviewer, factory):
        campaign = pending_campaign()
        await orchestrator.reject(campaign.campaign_id, reviewer, "Needs a clearer call to action")
        await orchestrator.submit(campaign.campaign_id, campaign.owner_id)

        history = await orchestrator.get_approval_history(campaign.campaign_id, reviewer)

        assert history.current_status == CampaignStatus.PENDING_REVIEW
        assert len(history.approvals) == 2
        assert history.approvals[0].is_open
