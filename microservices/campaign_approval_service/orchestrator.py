"""
Campaign Approval Orchestrator

Owns every campaign status change: submission, review decisions, platform
launch and the later pause / activate / complete / cancel lifecycle.

Platform calls fan out concurrently, one task per selected platform, and
are joined before anything is written locally. Local writes are
compare-and-swap on the status (and version) that was read, so a
concurrent change surfaces as ConflictError instead of being overwritten.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional

from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from .events import ApprovalEventPublisher, ApprovalEventType
from .models import (
    Actor,
    AdPlatform,
    ApprovalData,
    ApprovalHistory,
    ApprovalRecord,
    ApprovalResult,
    ApprovalStatus,
    Campaign,
    CampaignStatus,
    LifecycleResult,
    PlatformCampaignStatus,
    PlatformOutcome,
    ReviewResult,
    SubmissionResult,
    SYSTEM_ACTOR,
    platform_id_field,
)
from .protocols import (
    CampaignApprovalRepositoryProtocol,
    CampaignNotFoundError,
    ConflictError,
    EventBusProtocol,
    ForbiddenError,
    NotificationClientProtocol,
    PartialFailureError,
    PlatformAdapterError,
    PlatformAdapterProtocol,
    ValidationFailedError,
)
from .state_machine import CampaignTransition, next_status
from .validator import validate_campaign, validate_update

logger = logging.getLogger(__name__)

PlatformCall = Callable[[PlatformAdapterProtocol], Awaitable[Optional[str]]]


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, asyncio.TimeoutError):
        return True
    return isinstance(error, PlatformAdapterError) and error.retryable


class ApprovalOrchestrator:
    """Campaign lifecycle and multi-platform approval business logic"""

    # Constants from business rules
    ESTIMATED_REVIEW_TIME = "2-4 business hours"
    MIN_FEEDBACK_LENGTH = 10
    PAUSE_RETRY_ATTEMPTS = 3
    PAUSE_RETRY_WAIT_SECONDS = 0.5
    PAUSE_RETRY_MAX_WAIT_SECONDS = 4.0
    RECEIPT_CHANNELS = ("in_app",)
    DECISION_CHANNELS = ("in_app", "email")

    def __init__(
        self,
        repository: CampaignApprovalRepositoryProtocol,
        adapters: Iterable[PlatformAdapterProtocol],
        event_bus: Optional[EventBusProtocol] = None,
        notification_client: Optional[NotificationClientProtocol] = None,
        frontend_url: str = "",
    ):
        self.repository = repository
        self.adapters: Dict[AdPlatform, PlatformAdapterProtocol] = {a.platform: a for a in adapters}
        self.events = ApprovalEventPublisher(event_bus)
        self.notification_client = notification_client
        self.frontend_url = frontend_url.rstrip("/")

    # ====================
    # Submission
    # ====================

    async def submit(self, campaign_id: str, owner_id: str) -> SubmissionResult:
        """
        Send a campaign to human review.

        Raises:
            CampaignNotFoundError: unknown campaign
            ForbiddenError: caller does not own the campaign
            ConflictError: already pending, or a concurrent submit won
            InvalidCampaignStateError: status cannot be submitted
            ValidationFailedError: campaign is incomplete
        """
        campaign = await self._get_or_raise(campaign_id)
        if campaign.owner_id != owner_id:
            raise ForbiddenError("Only the campaign owner can submit it for review")

        if campaign.status == CampaignStatus.PENDING_REVIEW:
            raise ConflictError(f"Campaign {campaign_id} is already pending review")
        next_status(campaign.status, CampaignTransition.SUBMIT)

        if await self.repository.get_open_approval(campaign_id):
            raise ConflictError(f"Campaign {campaign_id} already has an open approval request")

        validation = validate_campaign(campaign)
        if not validation.valid:
            raise ValidationFailedError(
                "Campaign validation failed",
                errors=validation.errors,
                warnings=validation.warnings,
            )

        record = ApprovalRecord(
            campaign_id=campaign_id,
            owner_id=owner_id,
            review_snapshot=campaign.snapshot(),
        )
        updated = await self.repository.create_submission(
            record,
            expected_status=campaign.status,
            expected_version=campaign.version,
        )
        logger.info(f"Campaign {campaign_id} submitted for review ({record.approval_id})")

        await self.events.publish_campaign_submitted(updated, record.approval_id)
        await self._notify_owner(
            updated,
            title="Campaign submitted for review",
            body=(
                f"Your campaign \"{updated.name}\" is in the review queue. "
                f"Estimated review time: {self.ESTIMATED_REVIEW_TIME}."
            ),
            decision=False,
            approval_id=record.approval_id,
        )

        return SubmissionResult(
            approval_id=record.approval_id,
            estimated_review_time=self.ESTIMATED_REVIEW_TIME,
            campaign=updated,
            warnings=validation.warnings,
        )

    # ====================
    # Review Decisions
    # ====================

    async def approve(
        self,
        campaign_id: str,
        reviewer: Actor,
        data: Optional[ApprovalData] = None,
    ) -> ApprovalResult:
        """
        Approve a pending campaign and launch it on every selected platform.

        Platform campaigns are created PAUSED first (or reused from an
        earlier failed launch) and only enabled once all of them exist.
        When any platform fails, platforms already enabled are paused
        again, the campaign goes back to DRAFT with no platform ids and the
        approval record is closed as LAUNCH_FAILED with the per-platform
        outcome kept for the next attempt.

        Raises:
            ForbiddenError: reviewer lacks review authority
            InvalidCampaignStateError: campaign is not pending review
            ConflictError: another write won; platforms this call enabled are paused again
            PartialFailureError: one or more platforms failed
        """
        self._require_reviewer(reviewer)
        data = data or ApprovalData()

        campaign = await self._get_or_raise(campaign_id)
        target = next_status(campaign.status, CampaignTransition.APPROVE)
        record = await self._get_open_approval_or_raise(campaign_id)

        previous = await self.repository.get_latest_approval(campaign_id, ApprovalStatus.LAUNCH_FAILED)
        reusable = previous.reusable_platform_ids() if previous else {}
        options = data.model_dump(exclude={"notes"})

        outcomes = await self._launch(campaign, reusable, options)
        now = datetime.now(timezone.utc)
        platform_results = {p.value: o for p, o in outcomes.items()}

        if all(o.success for o in outcomes.values()):
            closed = record.model_copy(update={
                "status": ApprovalStatus.APPROVED,
                "reviewed_at": now,
                "reviewer_id": reviewer.user_id,
                "feedback": data.notes,
                "platform_results": platform_results,
            })
            try:
                updated = await self.repository.close_review(
                    closed,
                    expected_status=campaign.status,
                    new_status=target,
                    expected_version=campaign.version,
                    updates={platform_id_field(p): o.platform_campaign_id for p, o in outcomes.items()},
                )
            except ConflictError:
                await self._release_unclaimed(campaign_id, outcomes)
                raise
            launched = ", ".join(f"{p.value}={pid}" for p, pid in updated.platform_ids.items())
            logger.info(f"Campaign {campaign_id} approved by {reviewer.user_id}: {launched}")

            await self.events.publish_campaign_approved(updated, record.approval_id, reviewer.user_id)
            await self._notify_owner(
                updated,
                title="Campaign approved",
                body=f"Your campaign \"{updated.name}\" was approved and is now live.",
                approval_id=record.approval_id,
            )
            return ApprovalResult(
                campaign=updated,
                approval_id=record.approval_id,
                platform_results=platform_results,
            )

        failed_record = record.model_copy(update={
            "status": ApprovalStatus.LAUNCH_FAILED,
            "reviewed_at": now,
            "reviewer_id": reviewer.user_id,
            "feedback": data.notes,
            "platform_results": platform_results,
        })
        rolled_back = await self.repository.close_review(
            failed_record,
            expected_status=campaign.status,
            new_status=next_status(campaign.status, CampaignTransition.LAUNCH_FAILED),
            expected_version=campaign.version,
        )

        error = PartialFailureError(
            self._failure_message("Campaign launch", outcomes),
            outcomes=outcomes,
            campaign=rolled_back,
        )
        logger.warning(f"Campaign {campaign_id} launch failed, rolled back to draft: {error}")

        await self.events.publish_launch_failed(
            campaign_id,
            record.approval_id,
            reviewer.user_id,
            succeeded=[p.value for p in error.succeeded],
            failed=[p.value for p in error.failed],
        )
        await self._notify_owner(
            rolled_back,
            title="Campaign launch problem",
            body=(
                f"Your campaign \"{rolled_back.name}\" was approved but could not be "
                f"launched on {', '.join(p.value for p in error.failed)}. "
                "It has been returned to draft so it can be resubmitted."
            ),
            approval_id=record.approval_id,
        )
        raise error

    async def reject(
        self,
        campaign_id: str,
        reviewer: Actor,
        feedback: str,
        reasons: Optional[List[str]] = None,
        needs_changes: bool = True,
    ) -> ReviewResult:
        """
        Close a pending review as NEEDS_CHANGES (default) or REJECTED.

        Raises:
            ValidationFailedError: feedback shorter than MIN_FEEDBACK_LENGTH
            ForbiddenError: reviewer lacks review authority
            InvalidCampaignStateError: campaign is not pending review
        """
        feedback = (feedback or "").strip()
        if len(feedback) < self.MIN_FEEDBACK_LENGTH:
            raise ValidationFailedError(
                f"Feedback must be at least {self.MIN_FEEDBACK_LENGTH} characters long"
            )
        self._require_reviewer(reviewer)

        if needs_changes:
            transition, decision = CampaignTransition.REQUEST_CHANGES, ApprovalStatus.NEEDS_CHANGES
        else:
            transition, decision = CampaignTransition.REJECT, ApprovalStatus.REJECTED

        campaign = await self._get_or_raise(campaign_id)
        target = next_status(campaign.status, transition)
        record = await self._get_open_approval_or_raise(campaign_id)

        closed = record.model_copy(update={
            "status": decision,
            "reviewed_at": datetime.now(timezone.utc),
            "reviewer_id": reviewer.user_id,
            "feedback": feedback,
            "reason_codes": list(reasons or []),
        })
        updated = await self.repository.close_review(
            closed,
            expected_status=campaign.status,
            new_status=target,
            expected_version=campaign.version,
        )
        logger.info(f"Campaign {campaign_id} {decision.value} by {reviewer.user_id}")

        await self.events.publish_campaign_reviewed(
            updated,
            record.approval_id,
            reviewer.user_id,
            feedback=feedback,
            reasons=closed.reason_codes,
            needs_changes=needs_changes,
        )
        if needs_changes:
            title = "Campaign needs changes"
            body = f"Your campaign \"{updated.name}\" needs changes before it can go live: {feedback}"
        else:
            title = "Campaign rejected"
            body = f"Your campaign \"{updated.name}\" was rejected: {feedback}"
        await self._notify_owner(updated, title=title, body=body, approval_id=record.approval_id)

        return ReviewResult(campaign=updated, approval_id=record.approval_id, status=decision)

    # ====================
    # Lifecycle
    # ====================

    async def pause(self, campaign_id: str, actor: Optional[Actor] = None) -> LifecycleResult:
        """
        Pause an active campaign.

        Each platform pause is retried; the local status moves to PAUSED
        regardless and any platform still failing is reported in warnings.
        """
        campaign = await self._get_or_raise(campaign_id)
        actor = self._require_manager(campaign, actor)
        target = next_status(campaign.status, CampaignTransition.PAUSE)

        outcomes = await self._fan_out(
            {p: self._status_call(pid, PlatformCampaignStatus.PAUSED) for p, pid in campaign.platform_ids.items()},
            retry=True,
        )
        warnings = self._warnings("pause", outcomes)

        updated = await self._transition(campaign, target)
        if warnings:
            logger.warning(f"Campaign {campaign_id} paused with platform failures: {warnings}")
        else:
            logger.info(f"Campaign {campaign_id} paused by {actor.user_id}")

        await self.events.publish_status_changed(
            ApprovalEventType.PAUSED, updated, campaign.status.value, actor.user_id, warnings=warnings
        )
        return LifecycleResult(
            campaign=updated,
            warnings=warnings,
            platform_results={p.value: o for p, o in outcomes.items()},
        )

    async def activate(self, campaign_id: str, actor: Optional[Actor] = None) -> LifecycleResult:
        """
        Re-enable a paused campaign on every platform.

        All-or-nothing: when any platform fails, platforms just enabled are
        paused again and the campaign stays PAUSED.

        Raises:
            PartialFailureError: one or more platforms failed
        """
        campaign = await self._get_or_raise(campaign_id)
        actor = self._require_manager(campaign, actor)
        target = next_status(campaign.status, CampaignTransition.ACTIVATE)

        platform_ids = campaign.platform_ids
        outcomes = await self._fan_out(
            {p: self._status_call(pid, PlatformCampaignStatus.ENABLED) for p, pid in platform_ids.items()}
        )
        enabled = {p: o.platform_campaign_id for p, o in outcomes.items() if o.success}

        if len(enabled) < len(outcomes):
            await self._compensate(enabled)
            error = PartialFailureError(
                self._failure_message("Campaign activation", outcomes),
                outcomes=outcomes,
                campaign=campaign,
            )
            logger.warning(f"Campaign {campaign_id} activation failed, still paused: {error}")
            raise error

        try:
            updated = await self._transition(campaign, target)
        except ConflictError:
            await self._compensate(enabled)
            raise

        logger.info(f"Campaign {campaign_id} activated by {actor.user_id}")
        await self.events.publish_status_changed(
            ApprovalEventType.ACTIVATED, updated, campaign.status.value, actor.user_id
        )
        return LifecycleResult(
            campaign=updated,
            platform_results={p.value: o for p, o in outcomes.items()},
        )

    async def complete(self, campaign_id: str, actor: Optional[Actor] = None) -> LifecycleResult:
        """End a live campaign normally"""
        return await self._close_out(
            campaign_id,
            actor,
            CampaignTransition.COMPLETE,
            ApprovalEventType.COMPLETED,
        )

    async def cancel(
        self,
        campaign_id: str,
        actor: Optional[Actor] = None,
        reason: Optional[str] = None,
    ) -> LifecycleResult:
        """Stop a live campaign early"""
        return await self._close_out(
            campaign_id,
            actor,
            CampaignTransition.CANCEL,
            ApprovalEventType.CANCELLED,
            reason=reason,
        )

    async def _close_out(
        self,
        campaign_id: str,
        actor: Optional[Actor],
        transition: CampaignTransition,
        event_type: ApprovalEventType,
        reason: Optional[str] = None,
    ) -> LifecycleResult:
        campaign = await self._get_or_raise(campaign_id)
        actor = self._require_manager(campaign, actor)
        target = next_status(campaign.status, transition)

        outcomes = await self._fan_out(
            {p: self._status_call(pid, PlatformCampaignStatus.PAUSED) for p, pid in campaign.platform_ids.items()},
            retry=True,
        )
        warnings = self._warnings("pause", outcomes)

        # Terminal campaigns hold no platform ids
        updated = await self._transition(
            campaign,
            target,
            updates={platform_id_field(p): None for p in campaign.platform_ids},
        )
        logger.info(f"Campaign {campaign_id} {target.value} by {actor.user_id}")

        await self.events.publish_status_changed(
            event_type, updated, campaign.status.value, actor.user_id, reason=reason, warnings=warnings
        )
        return LifecycleResult(
            campaign=updated,
            warnings=warnings,
            platform_results={p.value: o for p, o in outcomes.items()},
        )

    # ====================
    # Owner Edits & Reads
    # ====================

    async def update_campaign(self, campaign_id: str, actor: Actor, changes: Dict[str, Any]) -> Campaign:
        """
        Apply owner edits.

        Raises:
            ForbiddenError: caller does not own the campaign
            ValidationFailedError: edit touches a locked field or breaks budget bounds
            ConflictError: the campaign changed since it was read
        """
        campaign = await self._get_or_raise(campaign_id)
        if campaign.owner_id != actor.user_id:
            raise ForbiddenError("Only the campaign owner can edit it")
        if not changes:
            return campaign

        validation = validate_update(campaign, changes)
        if not validation.valid:
            raise ValidationFailedError(
                "Campaign update rejected",
                errors=validation.errors,
                warnings=validation.warnings,
            )

        updated = await self.repository.compare_and_set_status(
            campaign_id,
            expected_status=campaign.status,
            new_status=campaign.status,
            expected_version=campaign.version,
            updates=changes,
        )
        if updated is None:
            raise ConflictError(f"Campaign {campaign_id} was modified concurrently")

        logger.info(f"Campaign {campaign_id} updated by {actor.user_id}: {sorted(changes)}")
        await self.events.publish_campaign_updated(campaign_id, sorted(changes), actor.user_id)
        return updated

    async def get_campaign(self, campaign_id: str, actor: Actor) -> Campaign:
        """Campaign visible to its owner and to reviewers"""
        campaign = await self._get_or_raise(campaign_id)
        if campaign.owner_id != actor.user_id and not actor.can_review:
            raise CampaignNotFoundError(f"Campaign not found: {campaign_id}")
        return campaign

    async def get_approval_history(self, campaign_id: str, actor: Actor) -> ApprovalHistory:
        """Approval records for a campaign, newest first"""
        campaign = await self.get_campaign(campaign_id, actor)
        approvals = await self.repository.list_approvals(campaign_id)
        return ApprovalHistory(
            campaign_id=campaign_id,
            current_status=campaign.status,
            approvals=approvals,
        )

    # ====================
    # Platform Fan-out
    # ====================

    async def _fan_out(
        self,
        calls: Dict[AdPlatform, PlatformCall],
        retry: bool = False,
    ) -> Dict[AdPlatform, PlatformOutcome]:
        """
        Run one call per platform concurrently and collect the outcomes.

        Each call runs under its adapter's own timeout. Failures, timeouts
        included, become unsuccessful outcomes; nothing is raised.
        """
        platforms = list(calls)
        results = await asyncio.gather(
            *(self._call_platform(p, calls[p], retry) for p in platforms)
        )
        return dict(zip(platforms, results))

    async def _call_platform(self, platform: AdPlatform, call: PlatformCall, retry_call: bool) -> PlatformOutcome:
        adapter = self.adapters.get(platform)
        if adapter is None:
            return PlatformOutcome(
                platform=platform,
                success=False,
                error=f"{platform.value}: no adapter configured",
                error_type="not_configured",
            )

        async def attempt() -> Optional[str]:
            return await asyncio.wait_for(call(adapter), timeout=adapter.timeout_seconds)

        if retry_call:
            attempt = retry(
                stop=stop_after_attempt(self.PAUSE_RETRY_ATTEMPTS),
                wait=wait_exponential(
                    multiplier=self.PAUSE_RETRY_WAIT_SECONDS,
                    max=self.PAUSE_RETRY_MAX_WAIT_SECONDS,
                ),
                retry=retry_if_exception(_is_retryable),
                reraise=True,
            )(attempt)

        try:
            platform_campaign_id = await attempt()
            return PlatformOutcome(
                platform=platform,
                success=True,
                platform_campaign_id=platform_campaign_id,
            )

        except asyncio.TimeoutError:
            logger.warning(f"{platform.value} call timed out after {adapter.timeout_seconds}s")
            return PlatformOutcome(
                platform=platform,
                success=False,
                error=f"{platform.value}: timed out after {adapter.timeout_seconds}s",
                error_type="timeout",
            )

        except PlatformAdapterError as e:
            logger.warning(f"{platform.value} call failed: {e}")
            return PlatformOutcome(
                platform=platform,
                success=False,
                error=str(e),
                error_type=e.error_type,
            )

        except Exception as e:
            logger.error(f"Unexpected {platform.value} adapter error: {e}", exc_info=True)
            return PlatformOutcome(
                platform=platform,
                success=False,
                error=f"{platform.value}: {e}",
                error_type="unexpected",
            )

    @staticmethod
    def _status_call(platform_campaign_id: str, status: PlatformCampaignStatus) -> PlatformCall:
        async def call(adapter: PlatformAdapterProtocol) -> str:
            await adapter.update_status(platform_campaign_id, status)
            return platform_campaign_id
        return call

    @staticmethod
    def _create_call(campaign: Campaign, options: Dict[str, Any]) -> PlatformCall:
        async def call(adapter: PlatformAdapterProtocol) -> str:
            return await adapter.create(campaign, options)
        return call

    async def _launch(
        self,
        campaign: Campaign,
        reusable: Dict[AdPlatform, str],
        options: Dict[str, Any],
    ) -> Dict[AdPlatform, PlatformOutcome]:
        """Create (or reuse) paused platform campaigns, then enable them all"""
        platforms = campaign.platform.platforms
        outcomes: Dict[AdPlatform, PlatformOutcome] = {}

        to_create = [p for p in platforms if p not in reusable]
        outcomes.update(await self._fan_out({p: self._create_call(campaign, options) for p in to_create}))
        for platform in platforms:
            if platform in reusable:
                logger.info(f"Reusing {platform.value} campaign {reusable[platform]} for {campaign.campaign_id}")
                outcomes[platform] = PlatformOutcome(
                    platform=platform,
                    success=True,
                    platform_campaign_id=reusable[platform],
                    reused=True,
                )

        if not all(o.success for o in outcomes.values()):
            return {p: outcomes[p] for p in platforms}

        enabled = await self._fan_out({
            p: self._status_call(outcomes[p].platform_campaign_id, PlatformCampaignStatus.ENABLED)
            for p in platforms
        })
        failed = [p for p, o in enabled.items() if not o.success]
        if failed:
            await self._compensate({p: o.platform_campaign_id for p, o in enabled.items() if o.success})
            for platform in failed:
                # Created but never enabled; keep the id for the next attempt
                outcomes[platform] = enabled[platform].model_copy(update={
                    "platform_campaign_id": outcomes[platform].platform_campaign_id,
                    "reused": outcomes[platform].reused,
                })

        return {p: outcomes[p] for p in platforms}

    async def _release_unclaimed(self, campaign_id: str, outcomes: Dict[AdPlatform, PlatformOutcome]) -> None:
        """
        Pause platforms a launch enabled after its final write lost a race.

        Ids the stored campaign now carries belong to whoever won (a
        concurrent approval of the same campaign) and stay enabled.
        """
        current = await self.repository.get_campaign(campaign_id)
        claimed = current.platform_ids if current else {}
        await self._compensate({
            p: o.platform_campaign_id
            for p, o in outcomes.items()
            if o.success and claimed.get(p) != o.platform_campaign_id
        })

    async def _compensate(self, enabled: Dict[AdPlatform, str]) -> None:
        """Best-effort pause of platforms enabled during a failed operation"""
        if not enabled:
            return
        outcomes = await self._fan_out(
            {p: self._status_call(pid, PlatformCampaignStatus.PAUSED) for p, pid in enabled.items()},
            retry=True,
        )
        for platform, outcome in outcomes.items():
            if not outcome.success:
                logger.error(
                    f"Compensating pause failed on {platform.value} campaign "
                    f"{enabled[platform]}: {outcome.error}"
                )

    @staticmethod
    def _warnings(action: str, outcomes: Dict[AdPlatform, PlatformOutcome]) -> List[str]:
        return [
            f"Failed to {action} {platform.value} campaign: {outcome.error}"
            for platform, outcome in outcomes.items()
            if not outcome.success
        ]

    @staticmethod
    def _failure_message(action: str, outcomes: Dict[AdPlatform, PlatformOutcome]) -> str:
        failed = [p.value for p, o in outcomes.items() if not o.success]
        succeeded = [p.value for p, o in outcomes.items() if o.success]
        message = f"{action} failed on {', '.join(failed)}"
        if succeeded:
            message += f" (succeeded on {', '.join(succeeded)})"
        return message

    # ====================
    # Helpers
    # ====================

    async def _get_or_raise(self, campaign_id: str) -> Campaign:
        campaign = await self.repository.get_campaign(campaign_id)
        if not campaign:
            raise CampaignNotFoundError(f"Campaign not found: {campaign_id}")
        return campaign

    async def _get_open_approval_or_raise(self, campaign_id: str) -> ApprovalRecord:
        record = await self.repository.get_open_approval(campaign_id)
        if record is None:
            raise ConflictError(f"Campaign {campaign_id} has no open approval request")
        return record

    async def _transition(
        self,
        campaign: Campaign,
        target: CampaignStatus,
        updates: Optional[Dict[str, Any]] = None,
    ) -> Campaign:
        updated = await self.repository.compare_and_set_status(
            campaign.campaign_id,
            expected_status=campaign.status,
            new_status=target,
            expected_version=campaign.version,
            updates=updates,
        )
        if updated is None:
            raise ConflictError(f"Campaign {campaign.campaign_id} was modified concurrently")
        return updated

    @staticmethod
    def _require_reviewer(actor: Actor) -> None:
        if not actor.can_review:
            raise ForbiddenError("Review authority required")

    @staticmethod
    def _require_manager(campaign: Campaign, actor: Optional[Actor]) -> Actor:
        """Owner, reviewer or the system may run lifecycle operations"""
        if actor is None:
            return SYSTEM_ACTOR
        if actor.user_id != campaign.owner_id and not actor.can_review:
            raise ForbiddenError("Only the campaign owner or a reviewer can change its status")
        return actor

    async def _notify_owner(
        self,
        campaign: Campaign,
        title: str,
        body: str,
        decision: bool = True,
        **metadata,
    ) -> None:
        """Best-effort owner notification; decisions also go out by email"""
        if not self.notification_client:
            return
        try:
            await self.notification_client.notify_campaign_owner(
                owner_id=campaign.owner_id,
                campaign_id=campaign.campaign_id,
                title=title,
                body=body,
                action_url=f"{self.frontend_url}/campaigns/{campaign.campaign_id}",
                channels=self.DECISION_CHANNELS if decision else self.RECEIPT_CHANNELS,
                **metadata,
            )
        except Exception as e:
            logger.warning(f"Failed to notify owner of campaign {campaign.campaign_id}: {e}")


__all__ = ["ApprovalOrchestrator"]
