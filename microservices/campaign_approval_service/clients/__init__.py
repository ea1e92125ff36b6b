"""
Campaign Approval Service Clients

Advertising platform adapters and clients for other microservices.
"""

from .ad_platform_client import AdPlatformClient
from .meta_ads_client import MetaAdsClient
from .google_ads_client import GoogleAdsClient
from .notification_client import NotificationClient

__all__ = [
    "AdPlatformClient",
    "MetaAdsClient",
    "GoogleAdsClient",
    "NotificationClient",
]
