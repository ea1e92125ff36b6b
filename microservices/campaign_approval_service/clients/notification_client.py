"""
Notification Service Client

Tells campaign owners about review decisions through notification_service.
Submission receipts go in-app only; decisions also go out by email.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from core.config_manager import ConfigManager

logger = logging.getLogger(__name__)

IN_APP = "in_app"
EMAIL = "email"


class NotificationClient:
    """Client for notification_service"""

    def __init__(
        self,
        config: Optional[ConfigManager] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if config is None:
            config = ConfigManager("campaign_approval_service")

        host, port = config.discover_service(
            service_name='notification_service',
            default_host='localhost',
            default_port=8270,
            env_host_key='NOTIFICATION_SERVICE_HOST',
            env_port_key='NOTIFICATION_SERVICE_PORT'
        )
        self.base_url = f"http://{host}:{port}"
        self.timeout = config.get_float("NOTIFICATION_TIMEOUT_SECONDS", 10.0)
        self._transport = transport

    async def notify_campaign_owner(
        self,
        owner_id: str,
        campaign_id: str,
        title: str,
        body: str,
        action_url: Optional[str] = None,
        channels: Sequence[str] = (IN_APP,),
        **metadata,
    ) -> List[str]:
        """
        Deliver one campaign message to its owner on each channel.

        A failed channel does not stop the others; the last error is raised
        only when no channel accepted the message.

        Returns:
            notification ids, one per delivered channel
        """
        content: Dict[str, Any] = {"title": title, "body": body}
        if action_url:
            content["action_url"] = action_url

        delivered: List[str] = []
        last_error: Optional[Exception] = None
        for channel in channels:
            try:
                response = await self._post(
                    "/api/v1/notifications",
                    {
                        "user_id": owner_id,
                        "channel_type": channel,
                        "content": content,
                        "campaign_id": campaign_id,
                        **metadata,
                    },
                )
                delivered.append(response.get("notification_id", ""))
            except httpx.HTTPError as e:
                logger.warning(f"{channel} notification for campaign {campaign_id} failed: {e}")
                last_error = e

        if not delivered and last_error is not None:
            raise last_error
        return delivered

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.post(f"{self.base_url}{path}", json=payload)
            if response.is_error:
                logger.error(f"notification_service returned {response.status_code}: {response.text}")
            response.raise_for_status()
            return response.json()

    async def health_check(self) -> bool:
        """Check if notification_service is healthy"""
        try:
            async with httpx.AsyncClient(timeout=5.0, transport=self._transport) as client:
                response = await client.get(f"{self.base_url}/health")
                return response.status_code == 200
        except httpx.HTTPError:
            return False


__all__ = ["NotificationClient", "IN_APP", "EMAIL"]
