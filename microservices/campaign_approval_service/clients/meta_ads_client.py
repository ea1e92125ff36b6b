"""
Meta Ads Client

Graph API adapter. A platform campaign is a PAUSED campaign plus one ad
set carrying the daily budget; enabling and pausing flip the campaign
status only.
"""

import json
import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

import httpx

from core.config.ads_config import MetaAdsConfig

from ..models import AdPlatform, Campaign, PlatformCampaignStatus
from .ad_platform_client import AdPlatformClient

logger = logging.getLogger(__name__)

OBJECTIVE_MAP = {
    "awareness": "OUTCOME_AWARENESS",
    "traffic": "OUTCOME_TRAFFIC",
    "leads": "OUTCOME_LEADS",
    "conversions": "OUTCOME_SALES",
    "engagement": "OUTCOME_ENGAGEMENT",
    "video-views": "OUTCOME_ENGAGEMENT",
}
DEFAULT_OBJECTIVE = "OUTCOME_AWARENESS"

DEFAULT_TARGETING = {
    "geo_locations": {"countries": ["US"]},
    "age_min": 18,
    "age_max": 65,
}

STATUS_MAP = {
    PlatformCampaignStatus.ENABLED: "ACTIVE",
    PlatformCampaignStatus.PAUSED: "PAUSED",
}

# Monthly budget is spread over this many days
BUDGET_DAYS = 30


def daily_budget_cents(budget: Decimal) -> int:
    """Monthly budget in currency units to a daily budget in cents"""
    cents = Decimal(str(budget)) * 100 / BUDGET_DAYS
    return int(cents.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class MetaAdsClient(AdPlatformClient):
    """Adapter for the Meta Marketing API"""

    platform = AdPlatform.META

    def __init__(
        self,
        config: Optional[MetaAdsConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or MetaAdsConfig.from_env()
        super().__init__(timeout_seconds=self.config.timeout_seconds, transport=transport)
        self.base_url = f"{self.config.base_url.rstrip('/')}/{self.config.api_version}"

    @property
    def account_path(self) -> str:
        account_id = self.config.ad_account_id
        if not account_id.startswith("act_"):
            account_id = f"act_{account_id}"
        return f"{self.base_url}/{account_id}"

    def _auth(self) -> Dict[str, str]:
        return {"access_token": self.config.access_token}

    # ====================
    # Adapter Operations
    # ====================

    async def create(self, campaign: Campaign, options: Optional[Dict[str, Any]] = None) -> str:
        """
        Create the campaign and its ad set, both PAUSED.

        Returns the existing Meta campaign id when one already carries this
        campaign's local tag.
        """
        if not self.config.is_configured:
            raise self._not_configured()

        options = options or {}
        existing = await self.find_campaign(campaign.campaign_id)
        if existing:
            # An earlier attempt may have failed between the two POSTs
            if not await self._has_ad_set(existing):
                logger.warning(f"Meta campaign {existing} has no ad set, creating it")
                await self._create_ad_set(existing, campaign, options)
            logger.info(f"Reusing Meta campaign {existing} for {campaign.campaign_id}")
            return existing

        objective = "OUTCOME_LEADS" if options.get("use_lead_gen") else self._objective(campaign.objectives)
        created = await self._request(
            "POST",
            f"{self.account_path}/campaigns",
            data={
                **self._auth(),
                "name": self.platform_campaign_name(campaign),
                "objective": objective,
                "status": "PAUSED",
                "special_ad_categories": json.dumps([]),
            },
        )
        meta_campaign_id = created["id"]
        await self._create_ad_set(meta_campaign_id, campaign, options)

        logger.info(f"Created Meta campaign {meta_campaign_id} for {campaign.campaign_id}")
        return meta_campaign_id

    async def update_status(self, platform_campaign_id: str, status: PlatformCampaignStatus) -> None:
        """Set a Meta campaign ACTIVE or PAUSED"""
        if not self.config.is_configured:
            raise self._not_configured()

        await self._request(
            "POST",
            f"{self.base_url}/{platform_campaign_id}",
            data={**self._auth(), "status": STATUS_MAP[status]},
        )
        logger.info(f"Meta campaign {platform_campaign_id} set to {STATUS_MAP[status]}")

    async def health_check(self) -> bool:
        if not self.config.is_configured:
            return False
        await self._request("GET", f"{self.base_url}/me", params=self._auth())
        return True

    # ====================
    # Helpers
    # ====================

    async def find_campaign(self, campaign_id: str) -> Optional[str]:
        """Meta campaign id whose name carries the local tag, if any"""
        body = await self._request(
            "GET",
            f"{self.account_path}/campaigns",
            params={
                **self._auth(),
                "fields": "id,name,status",
                "filtering": json.dumps([{
                    "field": "name",
                    "operator": "CONTAIN",
                    "value": self.local_tag(campaign_id),
                }]),
            },
        )
        for item in body.get("data", []):
            if self.local_tag(campaign_id) in item.get("name", ""):
                return item["id"]
        return None

    async def _has_ad_set(self, meta_campaign_id: str) -> bool:
        body = await self._request(
            "GET",
            f"{self.base_url}/{meta_campaign_id}/adsets",
            params={**self._auth(), "fields": "id"},
        )
        return bool(body.get("data"))

    async def _create_ad_set(self, meta_campaign_id: str, campaign: Campaign, options: Dict[str, Any]) -> str:
        """PAUSED ad set carrying the daily budget"""
        created = await self._request(
            "POST",
            f"{self.account_path}/adsets",
            data={
                **self._auth(),
                "name": f"{campaign.name} - Ad Set",
                "campaign_id": meta_campaign_id,
                "daily_budget": str(daily_budget_cents(campaign.budget)),
                "billing_event": "IMPRESSIONS",
                "optimization_goal": "LEAD_GENERATION" if options.get("use_lead_gen") else "REACH",
                "targeting": json.dumps(DEFAULT_TARGETING),
                "status": "PAUSED",
            },
        )
        return created.get("id", "")

    @staticmethod
    def _objective(objectives: List[str]) -> str:
        if not objectives:
            return DEFAULT_OBJECTIVE
        return OBJECTIVE_MAP.get(objectives[0].strip().lower(), DEFAULT_OBJECTIVE)


__all__ = ["MetaAdsClient", "daily_budget_cents"]
