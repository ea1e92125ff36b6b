"""
Google Ads Client

Google Ads REST adapter. Creates a search campaign (PAUSED) backed by its
own campaign budget. Access tokens come from an OAuth refresh-token
exchange and are cached until shortly before expiry.
"""

import logging
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

import httpx

from core.config.ads_config import GoogleAdsConfig

from ..models import AdPlatform, Campaign, PlatformCampaignStatus
from .ad_platform_client import AdPlatformClient

logger = logging.getLogger(__name__)

STATUS_MAP = {
    PlatformCampaignStatus.ENABLED: "ENABLED",
    PlatformCampaignStatus.PAUSED: "PAUSED",
}

BUDGET_DAYS = 30
# Budgets must be a multiple of the minimum currency unit (0.01 in micros)
MICROS_STEP = 10000
DEFAULT_TARGET_CPA_MICROS = 50 * 1000000
TOKEN_EXPIRY_MARGIN_SECONDS = 60


def gaql_like_literal(value: str) -> str:
    """Escape a literal for a GAQL LIKE pattern"""
    escaped = "".join(f"[{c}]" if c in "[]%_" else c for c in value)
    return escaped.replace("'", "\\'")


def daily_budget_micros(budget: Decimal) -> int:
    """Monthly budget in currency units to a daily budget in micros"""
    micros = Decimal(str(budget)) * 1000000 / BUDGET_DAYS
    steps = (micros / MICROS_STEP).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    return int(steps) * MICROS_STEP


class GoogleAdsClient(AdPlatformClient):
    """Adapter for the Google Ads REST API"""

    platform = AdPlatform.GOOGLE

    def __init__(
        self,
        config: Optional[GoogleAdsConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or GoogleAdsConfig.from_env()
        super().__init__(timeout_seconds=self.config.timeout_seconds, transport=transport)
        self.base_url = (
            f"{self.config.base_url.rstrip('/')}/{self.config.api_version}"
            f"/customers/{self.config.customer_id}"
        )
        self._access_token: Optional[str] = None
        self._token_expires_at = 0.0

    # ====================
    # Auth
    # ====================

    async def _get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._token_expires_at:
            return self._access_token

        body = await self._request(
            "POST",
            self.config.token_url,
            data={
                "grant_type": "refresh_token",
                "client_id": self.config.client_id,
                "client_secret": self.config.client_secret,
                "refresh_token": self.config.refresh_token,
            },
        )
        self._access_token = body["access_token"]
        expires_in = int(body.get("expires_in", 3600))
        self._token_expires_at = time.monotonic() + max(0, expires_in - TOKEN_EXPIRY_MARGIN_SECONDS)
        return self._access_token

    async def _headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {await self._get_access_token()}",
            "developer-token": self.config.developer_token,
        }
        if self.config.login_customer_id:
            headers["login-customer-id"] = self.config.login_customer_id
        return headers

    async def _mutate(self, resource: str, operations: list) -> Dict[str, Any]:
        return await self._request(
            "POST",
            f"{self.base_url}/{resource}:mutate",
            json={"operations": operations},
            headers=await self._headers(),
        )

    # ====================
    # Adapter Operations
    # ====================

    async def create(self, campaign: Campaign, options: Optional[Dict[str, Any]] = None) -> str:
        """
        Create a PAUSED search campaign with its budget.

        Returns the existing Google campaign id when one already carries
        this campaign's local tag.
        """
        if not self.config.is_configured:
            raise self._not_configured()

        options = options or {}
        existing = await self.find_campaign(campaign.campaign_id)
        if existing:
            logger.info(f"Reusing Google campaign {existing} for {campaign.campaign_id}")
            return existing

        name = self.platform_campaign_name(campaign)
        budget = await self._mutate("campaignBudgets", [{
            "create": {
                "name": f"{name} budget",
                "amountMicros": str(daily_budget_micros(campaign.budget)),
                "deliveryMethod": "STANDARD",
                "explicitlyShared": False,
            }
        }])
        budget_resource = budget["results"][0]["resourceName"]

        bidding: Dict[str, Any]
        if options.get("use_psychology_targeting"):
            bidding = {"targetCpa": {"targetCpaMicros": str(DEFAULT_TARGET_CPA_MICROS)}}
        else:
            bidding = {"manualCpc": {"enhancedCpcEnabled": False}}

        created = await self._mutate("campaigns", [{
            "create": {
                "name": name,
                "advertisingChannelType": "SEARCH",
                "status": "PAUSED",
                "campaignBudget": budget_resource,
                "networkSettings": {
                    "targetGoogleSearch": True,
                    "targetSearchNetwork": True,
                    "targetContentNetwork": False,
                    "targetPartnerSearchNetwork": False,
                },
                **bidding,
            }
        }])
        google_campaign_id = created["results"][0]["resourceName"].split("/")[-1]

        logger.info(f"Created Google campaign {google_campaign_id} for {campaign.campaign_id}")
        return google_campaign_id

    async def update_status(self, platform_campaign_id: str, status: PlatformCampaignStatus) -> None:
        """Set a Google campaign ENABLED or PAUSED"""
        if not self.config.is_configured:
            raise self._not_configured()

        await self._mutate("campaigns", [{
            "update": {
                "resourceName": f"customers/{self.config.customer_id}/campaigns/{platform_campaign_id}",
                "status": STATUS_MAP[status],
            },
            "updateMask": "status",
        }])
        logger.info(f"Google campaign {platform_campaign_id} set to {STATUS_MAP[status]}")

    async def health_check(self) -> bool:
        if not self.config.is_configured:
            return False
        await self._request(
            "GET",
            f"{self.config.base_url.rstrip('/')}/{self.config.api_version}/customers:listAccessibleCustomers",
            headers=await self._headers(),
        )
        return True

    # ====================
    # Helpers
    # ====================

    async def find_campaign(self, campaign_id: str) -> Optional[str]:
        """Google campaign id whose name carries the local tag, if any"""
        query = (
            "SELECT campaign.id, campaign.name FROM campaign "
            f"WHERE campaign.name LIKE '%{gaql_like_literal(self.local_tag(campaign_id))}%' "
            "AND campaign.status != 'REMOVED'"
        )
        body = await self._request(
            "POST",
            f"{self.base_url}/googleAds:search",
            json={"query": query},
            headers=await self._headers(),
        )
        for row in body.get("results", []):
            found = row.get("campaign", {})
            if self.local_tag(campaign_id) in found.get("name", ""):
                return str(found["id"])
        return None


__all__ = ["GoogleAdsClient", "daily_budget_micros"]
