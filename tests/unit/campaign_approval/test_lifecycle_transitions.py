"""
Unit Tests for the Campaign Lifecycle State Machine

Every transition the orchestrator performs is resolved through this table.
"""

import pytest

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../.."))

from microservices.campaign_approval_service.protocols import InvalidCampaignStateError
from microservices.campaign_approval_service.state_machine import (
    CampaignTransition,
    TRANSITIONS,
    allowed_transitions,
    can_transition,
    next_status,
)
from tests.contracts.campaign_approval.data_contract import CampaignStatus


class TestValidTransitions:
    """Transitions permitted by the table"""

    @pytest.mark.parametrize("source", [
        CampaignStatus.DRAFT,
        CampaignStatus.NEEDS_CHANGES,
        CampaignStatus.REJECTED,
    ])
    def test_submit_from_editable_statuses(self, source):
        # Given/When: submitting from an editable status
        # Then: campaign goes to review
        assert next_status(source, CampaignTransition.SUBMIT) == CampaignStatus.PENDING_REVIEW

    def test_review_outcomes_from_pending(self):
        pending = CampaignStatus.PENDING_REVIEW
        assert next_status(pending, CampaignTransition.APPROVE) == CampaignStatus.ACTIVE
        assert next_status(pending, CampaignTransition.REQUEST_CHANGES) == CampaignStatus.NEEDS_CHANGES
        assert next_status(pending, CampaignTransition.REJECT) == CampaignStatus.REJECTED
        assert next_status(pending, CampaignTransition.LAUNCH_FAILED) == CampaignStatus.DRAFT

    def test_pause_and_activate(self):
        assert next_status(CampaignStatus.ACTIVE, CampaignTransition.PAUSE) == CampaignStatus.PAUSED
        assert next_status(CampaignStatus.PAUSED, CampaignTransition.ACTIVATE) == CampaignStatus.ACTIVE

    @pytest.mark.parametrize("source", [CampaignStatus.ACTIVE, CampaignStatus.PAUSED])
    def test_terminal_transitions_from_live_statuses(self, source):
        assert next_status(source, CampaignTransition.COMPLETE) == CampaignStatus.COMPLETED
        assert next_status(source, CampaignTransition.CANCEL) == CampaignStatus.CANCELLED


class TestInvalidTransitions:
    """Transitions the table rejects"""

    def test_cannot_approve_draft(self):
        # Given: a draft campaign
        # When: approving it
        # Then: InvalidCampaignStateError carries the current status
        with pytest.raises(InvalidCampaignStateError) as exc_info:
            next_status(CampaignStatus.DRAFT, CampaignTransition.APPROVE)
        assert exc_info.value.current_status == CampaignStatus.DRAFT
        assert "pending_review" in str(exc_info.value)

    def test_cannot_submit_live_campaign(self):
        with pytest.raises(InvalidCampaignStateError):
            next_status(CampaignStatus.ACTIVE, CampaignTransition.SUBMIT)

    def test_cannot_pause_paused_campaign(self):
        assert not can_transition(CampaignStatus.PAUSED, CampaignTransition.PAUSE)

    @pytest.mark.parametrize("terminal", [CampaignStatus.COMPLETED, CampaignStatus.CANCELLED])
    def test_terminal_statuses_have_no_exits(self, terminal):
        assert allowed_transitions(terminal) == []

    def test_rejected_campaign_may_only_resubmit(self):
        assert allowed_transitions(CampaignStatus.REJECTED) == [CampaignTransition.SUBMIT]


class TestTransitionTable:
    """Table shape"""

    def test_every_transition_has_a_rule(self):
        assert set(TRANSITIONS) == set(CampaignTransition)

    def test_every_status_is_reachable_or_a_source(self):
        seen = set()
        for sources, target in TRANSITIONS.values():
            seen |= sources
            seen.add(target)
        assert seen == set(CampaignStatus)

    def test_invalid_state_error_is_a_conflict(self):
        from microservices.campaign_approval_service.protocols import ConflictError
        assert issubclass(InvalidCampaignStateError, ConflictError)
