"""
Advertising Platform Client Base

Shared httpx plumbing for the Meta and Google Ads adapters: timeouts,
error mapping into PlatformAdapterError and the local-id name tag used for
lookup-before-create.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..models import AdPlatform, Campaign
from ..protocols import PlatformAdapterError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


class AdPlatformClient:
    """Base class for advertising platform adapters"""

    platform: AdPlatform

    def __init__(
        self,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    # ====================
    # Naming
    # ====================

    @staticmethod
    def local_tag(campaign_id: str) -> str:
        """Marker embedded in platform campaign names to find them again"""
        return f"[{campaign_id}]"

    @classmethod
    def platform_campaign_name(cls, campaign: Campaign) -> str:
        return f"{campaign.name} {cls.local_tag(campaign.campaign_id)}"

    # ====================
    # HTTP
    # ====================

    def _http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport)

    async def _request(self, method: str, url: str, **kwargs) -> Dict[str, Any]:
        """Send a request and return the decoded JSON body"""
        try:
            async with self._http_client() as client:
                response = await client.request(method, url, **kwargs)
                response.raise_for_status()
                return response.json() if response.content else {}

        except httpx.TimeoutException as e:
            raise PlatformAdapterError(
                self.platform,
                f"request timed out after {self.timeout_seconds}s",
                error_type="timeout",
                retryable=True,
            ) from e

        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            message = self._error_message(e.response)
            logger.error(f"{self.platform.value} API error {status_code}: {message}")
            raise PlatformAdapterError(
                self.platform,
                message,
                error_type="rate_limited" if status_code == 429 else "api_error",
                retryable=status_code in RETRYABLE_STATUS_CODES,
                status_code=status_code,
            ) from e

        except httpx.HTTPError as e:
            raise PlatformAdapterError(
                self.platform,
                f"network error: {e}",
                error_type="network",
                retryable=True,
            ) from e

    def _error_message(self, response: httpx.Response) -> str:
        """Best human-readable message from an error response"""
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"

        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return error.get("message") or str(error)
        if isinstance(error, str):
            return body.get("error_description") or error
        return str(body)

    def _not_configured(self) -> PlatformAdapterError:
        return PlatformAdapterError(
            self.platform,
            "credentials not configured",
            error_type="not_configured",
            retryable=False,
        )


__all__ = ["AdPlatformClient", "RETRYABLE_STATUS_CODES"]
