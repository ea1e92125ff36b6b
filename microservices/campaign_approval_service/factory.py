"""
Campaign Approval Service Factory

Factory for creating campaign approval service instances with proper
dependency injection.
"""

import logging
from typing import List, Optional

from core.config_manager import ConfigManager
from core.nats_client import NATSEventBus

from .approval_repository import CampaignApprovalRepository
from .bulk_coordinator import BulkOperationCoordinator
from .clients.google_ads_client import GoogleAdsClient
from .clients.meta_ads_client import MetaAdsClient
from .clients.notification_client import NotificationClient
from .orchestrator import ApprovalOrchestrator
from .protocols import PlatformAdapterProtocol
from .review_queue import ReviewQueueService

logger = logging.getLogger(__name__)


class CampaignApprovalServiceFactory:
    """Factory for creating campaign approval service components"""

    def __init__(self, config: Optional[ConfigManager] = None):
        self.config = config or ConfigManager("campaign_approval_service")
        self._repository: Optional[CampaignApprovalRepository] = None
        self._nats_client: Optional[NATSEventBus] = None
        self._notification_client: Optional[NotificationClient] = None
        self._adapters: List[PlatformAdapterProtocol] = []
        self._orchestrator: Optional[ApprovalOrchestrator] = None
        self._review_queue: Optional[ReviewQueueService] = None
        self._bulk_coordinator: Optional[BulkOperationCoordinator] = None

    async def initialize(self) -> None:
        """Initialize all components"""
        logger.info("Initializing Campaign Approval Service components...")

        # Initialize repository
        self._repository = CampaignApprovalRepository(self.config)
        await self._repository.initialize()

        # Initialize NATS client
        try:
            self._nats_client = NATSEventBus(
                service_name="campaign_approval_service",
                config=self.config,
            )
            await self._nats_client.connect()
            logger.info("NATS client connected")
        except Exception as e:
            logger.warning(f"NATS client initialization failed: {e}")
            self._nats_client = None

        # Initialize platform adapters and service clients
        ads = self.config.ads
        self._adapters = [MetaAdsClient(ads.meta), GoogleAdsClient(ads.google)]
        for adapter in self._adapters:
            if not adapter.config.is_configured:
                logger.warning(f"{adapter.platform.value} ads credentials not configured")
        self._notification_client = NotificationClient(self.config)

        # Initialize services
        self._orchestrator = ApprovalOrchestrator(
            repository=self._repository,
            adapters=self._adapters,
            event_bus=self._nats_client,
            notification_client=self._notification_client,
            frontend_url=ads.frontend_url,
        )
        self._review_queue = ReviewQueueService(self._repository)
        self._bulk_coordinator = BulkOperationCoordinator(self._orchestrator)

        logger.info("Campaign Approval Service components initialized")

    async def close(self) -> None:
        """Close all components"""
        logger.info("Closing Campaign Approval Service components...")

        if self._nats_client:
            await self._nats_client.close()

        if self._repository:
            await self._repository.close()

        logger.info("Campaign Approval Service components closed")

    @property
    def repository(self) -> CampaignApprovalRepository:
        """Get campaign approval repository"""
        if not self._repository:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._repository

    @property
    def orchestrator(self) -> ApprovalOrchestrator:
        """Get approval orchestrator"""
        if not self._orchestrator:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._orchestrator

    @property
    def review_queue(self) -> ReviewQueueService:
        """Get review queue service"""
        if not self._review_queue:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._review_queue

    @property
    def bulk_coordinator(self) -> BulkOperationCoordinator:
        """Get bulk operation coordinator"""
        if not self._bulk_coordinator:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._bulk_coordinator

    @property
    def adapters(self) -> List[PlatformAdapterProtocol]:
        """Get advertising platform adapters"""
        return list(self._adapters)

    @property
    def nats_client(self) -> Optional[NATSEventBus]:
        """Get NATS client"""
        return self._nats_client

    @property
    def notification_client(self) -> NotificationClient:
        """Get notification client"""
        if not self._notification_client:
            raise RuntimeError("Factory not initialized. Call initialize() first.")
        return self._notification_client


# Global factory instance
_factory: Optional[CampaignApprovalServiceFactory] = None


async def get_factory() -> CampaignApprovalServiceFactory:
    """Get or create factory instance"""
    global _factory
    if _factory is None:
        _factory = CampaignApprovalServiceFactory()
        await _factory.initialize()
    return _factory


async def close_factory() -> None:
    """Close factory instance"""
    global _factory
    if _factory:
        await _factory.close()
        _factory = None


__all__ = [
    "CampaignApprovalServiceFactory",
    "get_factory",
    "close_factory",
]
