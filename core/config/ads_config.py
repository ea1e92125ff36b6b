#!/usr/bin/env python3
"""Advertising platform configuration

Credentials and timeouts for the Meta Marketing API and the Google Ads API.
An adapter whose credentials are missing reports itself as not configured
instead of failing at import time.
"""
import os
from dataclasses import dataclass

def _float(val: str, default: float) -> float:
    try:
        return float(val) if val else default
    except ValueError:
        return default


@dataclass
class MetaAdsConfig:
    """Meta (Facebook/Instagram) Marketing API settings"""
    app_id: str = ""
    access_token: str = ""
    ad_account_id: str = ""
    page_id: str = ""
    api_version: str = "v18.0"
    base_url: str = "https://graph.facebook.com"
    timeout_seconds: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token and self.ad_account_id)

    @classmethod
    def from_env(cls) -> 'MetaAdsConfig':
        """Load Meta config from environment variables"""
        return cls(
            app_id=os.getenv("META_APP_ID", ""),
            access_token=os.getenv("META_ACCESS_TOKEN", ""),
            ad_account_id=os.getenv("META_AD_ACCOUNT_ID", ""),
            page_id=os.getenv("META_PAGE_ID", ""),
            api_version=os.getenv("META_API_VERSION", "v18.0"),
            base_url=os.getenv("META_GRAPH_URL", "https://graph.facebook.com"),
            timeout_seconds=_float(os.getenv("META_TIMEOUT_SECONDS", "30"), 30.0),
        )


@dataclass
class GoogleAdsConfig:
    """Google Ads REST API settings"""
    developer_token: str = ""
    client_id: str = ""
    client_secret: str = ""
    refresh_token: str = ""
    customer_id: str = ""
    login_customer_id: str = ""
    api_version: str = "v17"
    base_url: str = "https://googleads.googleapis.com"
    token_url: str = "https://oauth2.googleapis.com/token"
    timeout_seconds: float = 30.0

    @property
    def is_configured(self) -> bool:
        return bool(
            self.developer_token
            and self.client_id
            and self.client_secret
            and self.refresh_token
            and self.customer_id
        )

    @classmethod
    def from_env(cls) -> 'GoogleAdsConfig':
        """Load Google Ads config from environment variables"""
        return cls(
            developer_token=os.getenv("GOOGLE_ADS_DEVELOPER_TOKEN", ""),
            client_id=os.getenv("GOOGLE_ADS_CLIENT_ID", ""),
            client_secret=os.getenv("GOOGLE_ADS_CLIENT_SECRET", ""),
            refresh_token=os.getenv("GOOGLE_ADS_REFRESH_TOKEN", ""),
            customer_id=os.getenv("GOOGLE_ADS_CUSTOMER_ID", "").replace("-", ""),
            login_customer_id=os.getenv("GOOGLE_ADS_LOGIN_CUSTOMER_ID", "").replace("-", ""),
            api_version=os.getenv("GOOGLE_ADS_API_VERSION", "v17"),
            base_url=os.getenv("GOOGLE_ADS_BASE_URL", "https://googleads.googleapis.com"),
            token_url=os.getenv("GOOGLE_OAUTH_TOKEN_URL", "https://oauth2.googleapis.com/token"),
            timeout_seconds=_float(os.getenv("GOOGLE_ADS_TIMEOUT_SECONDS", "30"), 30.0),
        )


@dataclass
class AdsConfig:
    """Both advertising platforms plus the public site used in ad links"""
    meta: MetaAdsConfig
    google: GoogleAdsConfig
    frontend_url: str = "http://localhost:3000"

    @classmethod
    def from_env(cls) -> 'AdsConfig':
        return cls(
            meta=MetaAdsConfig.from_env(),
            google=GoogleAdsConfig.from_env(),
            frontend_url=os.getenv("FRONTEND_URL", "http://localhost:3000").rstrip("/"),
        )
