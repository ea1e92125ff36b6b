"""
Bulk Operation Coordinator

Runs one orchestrator operation per campaign, sequentially. Items are
isolated: a failure becomes that item's result and never stops the batch.
There is no rollback across items.
"""

import logging
from typing import Awaitable, Callable, Dict, List, Optional

from .models import (
    Actor,
    ApprovalData,
    BulkItemResult,
    BulkOperation,
    BulkOperationResult,
    BulkSummary,
)
from .orchestrator import ApprovalOrchestrator
from .protocols import (
    ApprovalServiceError,
    CampaignNotFoundError,
    ConflictError,
    ForbiddenError,
    InvalidCampaignStateError,
    PartialFailureError,
    ValidationFailedError,
)

logger = logging.getLogger(__name__)

ERROR_TYPES = (
    (PartialFailureError, "partial_failure"),
    (InvalidCampaignStateError, "invalid_state"),
    (ConflictError, "conflict"),
    (ValidationFailedError, "validation_failed"),
    (ForbiddenError, "forbidden"),
    (CampaignNotFoundError, "not_found"),
)


def error_type_for(error: Exception) -> str:
    for error_class, name in ERROR_TYPES:
        if isinstance(error, error_class):
            return name
    return "internal_error"


def unique_ids(campaign_ids: List[str]) -> List[str]:
    """Drop duplicates, keeping first-seen order"""
    return list(dict.fromkeys(campaign_ids))


class BulkOperationCoordinator:
    """Batch approve and batch lifecycle operations"""

    MAX_BULK_APPROVE = 10
    MAX_BULK_OPERATION = 100

    def __init__(self, orchestrator: ApprovalOrchestrator):
        self.orchestrator = orchestrator

    async def bulk_approve(
        self,
        reviewer: Actor,
        campaign_ids: List[str],
        data: Optional[ApprovalData] = None,
    ) -> BulkOperationResult:
        """
        Approve up to MAX_BULK_APPROVE campaigns.

        Raises:
            ForbiddenError: reviewer is not a super admin
            ValidationFailedError: empty batch or more than MAX_BULK_APPROVE ids
        """
        if not reviewer.is_super_admin:
            raise ForbiddenError("Bulk approval requires super admin")
        campaign_ids = self._check_batch(campaign_ids, self.MAX_BULK_APPROVE)
        data = data or ApprovalData()

        async def approve(campaign_id: str) -> str:
            result = await self.orchestrator.approve(campaign_id, reviewer, data)
            return f"Approved and launched on {', '.join(result.platform_results)}"

        result = await self._run_each("approve", campaign_ids, approve)
        await self.orchestrator.events.publish_bulk_approved(
            reviewer.user_id,
            [r.campaign_id for r in result.results if r.success],
            total=result.summary.total,
            successful=result.summary.successful,
            failed=result.summary.failed,
        )
        return result

    async def run(
        self,
        operation: BulkOperation,
        actor: Actor,
        campaign_ids: List[str],
        reason: Optional[str] = None,
    ) -> BulkOperationResult:
        """
        Apply a lifecycle operation to up to MAX_BULK_OPERATION campaigns.

        Raises:
            ForbiddenError: actor lacks review authority
            ValidationFailedError: empty batch or more than MAX_BULK_OPERATION ids
        """
        if not actor.can_review:
            raise ForbiddenError("Bulk operations require review authority")
        campaign_ids = self._check_batch(campaign_ids, self.MAX_BULK_OPERATION)

        handlers: Dict[BulkOperation, Callable[[str], Awaitable[str]]] = {
            BulkOperation.PAUSE: lambda cid: self._lifecycle(self.orchestrator.pause(cid, actor), "Paused"),
            BulkOperation.ACTIVATE: lambda cid: self._lifecycle(self.orchestrator.activate(cid, actor), "Activated"),
            BulkOperation.COMPLETE: lambda cid: self._lifecycle(self.orchestrator.complete(cid, actor), "Completed"),
            BulkOperation.CANCEL: lambda cid: self._lifecycle(
                self.orchestrator.cancel(cid, actor, reason), "Cancelled"
            ),
        }
        return await self._run_each(operation.value, campaign_ids, handlers[operation])

    # ====================
    # Helpers
    # ====================

    @staticmethod
    def _check_batch(campaign_ids: List[str], limit: int) -> List[str]:
        if not campaign_ids:
            raise ValidationFailedError("At least one campaign id is required")
        if len(campaign_ids) > limit:
            raise ValidationFailedError(f"Maximum {limit} campaigns per bulk operation")
        return unique_ids(campaign_ids)

    @staticmethod
    async def _lifecycle(operation: Awaitable, verb: str) -> str:
        result = await operation
        if result.warnings:
            return f"{verb} with warnings: {'; '.join(result.warnings)}"
        return verb

    async def _run_each(
        self,
        operation: str,
        campaign_ids: List[str],
        handler: Callable[[str], Awaitable[str]],
    ) -> BulkOperationResult:
        results: List[BulkItemResult] = []
        for campaign_id in campaign_ids:
            try:
                message = await handler(campaign_id)
                results.append(BulkItemResult(campaign_id=campaign_id, success=True, message=message))
            except ApprovalServiceError as e:
                logger.warning(f"Bulk {operation} failed for {campaign_id}: {e}")
                results.append(BulkItemResult(
                    campaign_id=campaign_id,
                    success=False,
                    error=str(e),
                    error_type=error_type_for(e),
                ))
            except Exception as e:
                logger.error(f"Bulk {operation} error for {campaign_id}: {e}", exc_info=True)
                results.append(BulkItemResult(
                    campaign_id=campaign_id,
                    success=False,
                    error=str(e),
                    error_type=error_type_for(e),
                ))

        successful = sum(1 for r in results if r.success)
        summary = BulkSummary(total=len(results), successful=successful, failed=len(results) - successful)
        logger.info(f"Bulk {operation}: {summary.successful}/{summary.total} succeeded")
        return BulkOperationResult(operation=operation, results=results, summary=summary)


__all__ = ["BulkOperationCoordinator", "error_type_for", "unique_ids"]
