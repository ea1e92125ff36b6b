"""
Campaign Approval Service Client

Client for other services to call campaign_approval_service.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from core.config_manager import ConfigManager

logger = logging.getLogger(__name__)


class CampaignApprovalClient:
    """Client for campaign_approval_service"""

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if config is None:
            config = ConfigManager("default")

        host, port = config.discover_service(
            service_name='campaign_approval_service',
            default_host='localhost',
            default_port=8252,
            env_host_key='CAMPAIGN_APPROVAL_SERVICE_HOST',
            env_port_key='CAMPAIGN_APPROVAL_SERVICE_PORT'
        )
        self.base_url = f"http://{host}:{port}"
        self.timeout = 60.0
        self._transport = transport

    @staticmethod
    def _headers(user_id: str, role: Optional[str] = None) -> Dict[str, str]:
        headers = {"X-User-ID": user_id}
        if role:
            headers["X-User-Role"] = role
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        user_id: str,
        role: Optional[str] = None,
        **kwargs,
    ) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.request(
                method,
                f"{self.base_url}{path}",
                headers=self._headers(user_id, role),
                **kwargs,
            )
            response.raise_for_status()
            return response.json()

    # ====================
    # Campaigns
    # ====================

    async def get_campaign(
        self,
        campaign_id: str,
        user_id: str,
        role: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Get campaign by ID.

        Returns:
            Campaign data or None if not found
        """
        try:
            return await self._request("GET", f"/api/v1/campaigns/{campaign_id}", user_id, role)

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 404:
                return None
            logger.error(f"Error getting campaign: {e.response.text}")
            raise

    async def get_approval_history(
        self,
        campaign_id: str,
        user_id: str,
        role: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Approval records for a campaign, newest first"""
        try:
            return await self._request("GET", f"/api/v1/campaigns/{campaign_id}/approvals", user_id, role)

        except httpx.HTTPStatusError as e:
            logger.error(f"Error getting approval history: {e.response.text}")
            raise

    # ====================
    # Review Workflow
    # ====================

    async def submit_campaign(self, campaign_id: str, user_id: str) -> Dict[str, Any]:
        """
        Submit a campaign for review.

        Args:
            campaign_id: Campaign ID
            user_id: Campaign owner

        Returns:
            Submission result with approval_id and estimated_review_time
        """
        try:
            return await self._request("POST", f"/api/v1/campaigns/{campaign_id}/submit", user_id)

        except httpx.HTTPStatusError as e:
            logger.error(f"Error submitting campaign: {e.response.text}")
            raise

    async def approve_campaign(
        self,
        campaign_id: str,
        reviewer_id: str,
        role: str = "admin",
        use_lead_gen: bool = True,
        use_psychology_targeting: bool = True,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Approve a campaign and launch it on its platforms.

        Raises:
            httpx.HTTPStatusError: 502 carries per-platform results
        """
        try:
            return await self._request(
                "POST",
                f"/api/v1/campaigns/{campaign_id}/approve",
                reviewer_id,
                role,
                json={
                    "approval_data": {
                        "use_lead_gen": use_lead_gen,
                        "use_psychology_targeting": use_psychology_targeting,
                        "notes": notes,
                    }
                },
            )

        except httpx.HTTPStatusError as e:
            logger.error(f"Error approving campaign: {e.response.text}")
            raise

    async def reject_campaign(
        self,
        campaign_id: str,
        reviewer_id: str,
        feedback: str,
        reasons: Optional[List[str]] = None,
        needs_changes: bool = True,
        role: str = "admin",
    ) -> Dict[str, Any]:
        """Reject a campaign or request changes"""
        try:
            return await self._request(
                "POST",
                f"/api/v1/campaigns/{campaign_id}/reject",
                reviewer_id,
                role,
                json={
                    "feedback": feedback,
                    "reasons": reasons or [],
                    "needs_changes": needs_changes,
                },
            )

        except httpx.HTTPStatusError as e:
            logger.error(f"Error rejecting campaign: {e.response.text}")
            raise

    # ====================
    # Lifecycle
    # ====================

    async def pause_campaign(self, campaign_id: str, user_id: str, role: Optional[str] = None) -> Dict[str, Any]:
        """Pause a live campaign"""
        try:
            return await self._request("POST", f"/api/v1/campaigns/{campaign_id}/pause", user_id, role)

        except httpx.HTTPStatusError as e:
            logger.error(f"Error pausing campaign: {e.response.text}")
            raise

    async def activate_campaign(self, campaign_id: str, user_id: str, role: Optional[str] = None) -> Dict[str, Any]:
        """Re-enable a paused campaign"""
        try:
            return await self._request("POST", f"/api/v1/campaigns/{campaign_id}/activate", user_id, role)

        except httpx.HTTPStatusError as e:
            logger.error(f"Error activating campaign: {e.response.text}")
            raise

    # ====================
    # Review Queue
    # ====================

    async def get_pending_reviews(
        self,
        reviewer_id: str,
        page: int = 1,
        limit: int = 20,
        ordering: str = "urgency",
        role: str = "admin",
    ) -> Dict[str, Any]:
        """Review queue page with stats"""
        try:
            return await self._request(
                "GET",
                "/api/v1/approvals/pending",
                reviewer_id,
                role,
                params={"page": page, "limit": limit, "ordering": ordering},
            )

        except httpx.HTTPStatusError as e:
            logger.error(f"Error getting pending reviews: {e.response.text}")
            raise

    async def get_approval_statistics(
        self,
        reviewer_id: str,
        timeframe_days: int = 30,
        role: str = "admin",
    ) -> Dict[str, Any]:
        """Approval statistics over a timeframe"""
        try:
            return await self._request(
                "GET",
                "/api/v1/approvals/stats",
                reviewer_id,
                role,
                params={"timeframe_days": timeframe_days},
            )

        except httpx.HTTPStatusError as e:
            logger.error(f"Error getting approval statistics: {e.response.text}")
            raise

    async def bulk_approve(
        self,
        reviewer_id: str,
        campaign_ids: List[str],
        role: str = "super_admin",
        **approval_data,
    ) -> Dict[str, Any]:
        """Approve up to 10 campaigns"""
        try:
            return await self._request(
                "POST",
                "/api/v1/approvals/bulk-approve",
                reviewer_id,
                role,
                json={"campaign_ids": campaign_ids, "approval_data": approval_data},
            )

        except httpx.HTTPStatusError as e:
            logger.error(f"Error bulk approving campaigns: {e.response.text}")
            raise

    async def health_check(self) -> bool:
        """Check if campaign_approval_service is healthy"""
        try:
            async with httpx.AsyncClient(timeout=5.0, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/health")
                return response.status_code == 200
        except httpx.HTTPError:
            return False


__all__ = ["CampaignApprovalClient"]
