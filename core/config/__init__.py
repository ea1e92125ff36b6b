#!/usr/bin/env python3
"""Modular configuration system for the campaign approval platform

Configuration hierarchy:
- infra_config: Infrastructure services (PostgreSQL, NATS)
- ads_config: Advertising platform credentials (Meta, Google Ads)
- logging_config: Logging configuration
"""
import os
from dotenv import load_dotenv
from .logging_config import LoggingConfig
from .infra_config import InfraConfig
from .ads_config import AdsConfig, MetaAdsConfig, GoogleAdsConfig

# Load environment file based on ENV
env = os.getenv("ENV") or os.getenv("ENVIRONMENT", "development")
env_files = {
    "development": "deployment/environments/dev.env",
    "dev": "deployment/environments/dev.env",
    "testing": "deployment/environments/test.env",
    "test": "deployment/environments/test.env",
    "staging": "deployment/environments/staging.env",
    "production": "deployment/environments/production.env",
}
env_file = env_files.get(env, "deployment/environments/dev.env")
load_dotenv(env_file, override=False)

__all__ = [
    'LoggingConfig',
    'InfraConfig',
    'AdsConfig',
    'MetaAdsConfig',
    'GoogleAdsConfig',
]
