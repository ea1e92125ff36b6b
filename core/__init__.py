#!/usr/bin/env python3
"""
Core Module for Microservices Architecture

Shared infrastructure components for the campaign approval platform.

COMPONENTS:
    - config/: Environment-driven configuration dataclasses (dotenv backed)
    - config_manager.py: Per-service configuration and dependency discovery
    - postgres_client.py: asyncpg pool wrapper with transactions
    - nats_client.py: NATS JetStream event bus

USAGE:
    from core.config_manager import ConfigManager

    config = ConfigManager("campaign_approval_service")
"""

__version__ = "1.0.0"
