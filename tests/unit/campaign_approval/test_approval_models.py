"""
Unit Tests for Campaign Approval Models

Model-level invariants: platform ids only while live, open approval
records always pending, and reuse of ids from failed launches.
"""

import pytest
from decimal import Decimal
from pydantic import ValidationError

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_approval_service.models import (
    CampaignUpdateRequest,
    SYSTEM_ACTOR,
    platform_id_field,
)
from tests.contracts.campaign_approval.data_contract import (
    AdPlatform,
    ApprovalRecord,
    ApprovalStatus,
    CampaignStatus,
    PlatformOutcome,
    PlatformSelection,
    UserRole,
)


class TestPlatformSelection:

    def test_both_expands_to_each_platform(self):
        assert PlatformSelection.BOTH.platforms == [AdPlatform.META, AdPlatform.GOOGLE]

    def test_single_platform(self):
        assert PlatformSelection.GOOGLE.platforms == [AdPlatform.GOOGLE]
        assert not PlatformSelection.GOOGLE.includes(AdPlatform.META)


class TestCampaignPlatformIds:
    """Platform ids exist only while live and only for selected platforms"""

    def test_live_campaign_holds_ids(self, factory):
        campaign = factory.make_live_campaign(platform=PlatformSelection.BOTH)
        assert set(campaign.platform_ids) == {AdPlatform.META, AdPlatform.GOOGLE}

    @pytest.mark.parametrize("status", [
        CampaignStatus.DRAFT,
        CampaignStatus.PENDING_REVIEW,
        CampaignStatus.COMPLETED,
        CampaignStatus.CANCELLED,
    ])
    def test_ids_rejected_outside_live_statuses(self, factory, status):
        with pytest.raises(ValidationError):
            factory.make_campaign(status=status, meta_campaign_id="meta_123")

    def test_id_rejected_for_unselected_platform(self, factory):
        with pytest.raises(ValidationError):
            factory.make_campaign(
                status=CampaignStatus.ACTIVE,
                platform=PlatformSelection.META,
                google_campaign_id="g_123",
            )

    def test_budget_must_be_positive(self, factory):
        with pytest.raises(ValidationError):
            factory.make_campaign(budget=Decimal("0"))

    def test_platform_id_field(self):
        assert platform_id_field(AdPlatform.META) == "meta_campaign_id"
        assert platform_id_field(AdPlatform.GOOGLE) == "google_campaign_id"

    def test_snapshot(self, factory):
        campaign = factory.make_campaign(budget=Decimal("2500.50"))
        snapshot = campaign.snapshot()
        assert snapshot["budget"] == "2500.50"
        assert snapshot["platform"] == "meta"
        assert snapshot["creatives_count"] == 1


class TestApprovalRecord:

    def test_new_record_is_open(self, factory):
        record = factory.make_open_record(factory.make_campaign())
        assert record.is_open
        assert record.status == ApprovalStatus.PENDING_REVIEW

    def test_open_record_must_be_pending(self, factory):
        with pytest.raises(ValidationError):
            ApprovalRecord(
                campaign_id=factory.make_campaign_id(),
                owner_id=factory.make_user_id(),
                status=ApprovalStatus.APPROVED,
            )

    def test_closed_record_needs_decision(self, factory):
        with pytest.raises(ValidationError):
            ApprovalRecord(
                campaign_id=factory.make_campaign_id(),
                owner_id=factory.make_user_id(),
                reviewed_at=factory.make_timestamp(),
            )


class TestReusablePlatformIds:
    """Ids kept from a failed launch"""

    def test_launch_failed_record_exposes_created_ids(self, factory):
        # Given: Meta created and enabled, Google created but failed to enable
        record = factory.make_closed_record(
            factory.make_campaign_id(),
            ApprovalStatus.LAUNCH_FAILED,
            platform_results={
                "meta": PlatformOutcome(platform=AdPlatform.META, success=True, platform_campaign_id="m1"),
                "google": PlatformOutcome(
                    platform=AdPlatform.GOOGLE,
                    success=False,
                    platform_campaign_id="g1",
                    error="google: enable failed",
                ),
            },
        )

        # Then: both ids can be reused
        assert record.reusable_platform_ids() == {AdPlatform.META: "m1", AdPlatform.GOOGLE: "g1"}

    def test_failed_create_has_nothing_to_reuse(self, factory):
        record = factory.make_closed_record(
            factory.make_campaign_id(),
            ApprovalStatus.LAUNCH_FAILED,
            platform_results={
                "google": PlatformOutcome(platform=AdPlatform.GOOGLE, success=False, error="boom"),
            },
        )
        assert record.reusable_platform_ids() == {}

    def test_other_statuses_never_reuse(self, factory):
        record = factory.make_closed_record(
            factory.make_campaign_id(),
            ApprovalStatus.APPROVED,
            platform_results={
                "meta": PlatformOutcome(platform=AdPlatform.META, success=True, platform_campaign_id="m1"),
            },
        )
        assert record.reusable_platform_ids() == {}


class TestActor:

    @pytest.mark.parametrize("role,can_review", [
        (UserRole.CLIENT, False),
        (UserRole.ADMIN, True),
        (UserRole.SUPER_ADMIN, True),
    ])
    def test_review_authority(self, factory, role, can_review):
        assert factory.make_client().model_copy(update={"role": role}).can_review is can_review

    def test_system_actor_is_super_admin(self):
        assert SYSTEM_ACTOR.is_super_admin


class TestCampaignUpdateRequest:

    def test_changes_only_includes_set_fields(self):
        request = CampaignUpdateRequest(name="New name", budget=Decimal("300"))
        assert request.changes() == {"name": "New name", "budget": Decimal("300")}

    def test_empty_request(self):
        assert CampaignUpdateRequest().changes() == {}
