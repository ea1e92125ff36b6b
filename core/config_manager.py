"""
Configuration Manager

Per-service view over environment configuration. Values are resolved from
the process environment (populated from the deployment env file by
``core.config``) and fall back to the defaults supplied by the caller.

Usage:
    from core.config_manager import ConfigManager

    config = ConfigManager("campaign_approval_service")
    host, port = config.discover_service(
        service_name="notification_service",
        default_host="localhost",
        default_port=8270,
        env_host_key="NOTIFICATION_SERVICE_HOST",
        env_port_key="NOTIFICATION_SERVICE_PORT",
    )
"""

import logging
import os
from typing import Any, Optional, Tuple

from core.config import InfraConfig, AdsConfig, LoggingConfig

logger = logging.getLogger(__name__)


class ConfigManager:
    """Environment-backed configuration for a single service"""

    def __init__(self, service_name: str):
        self.service_name = service_name
        self._prefix = service_name.upper()

    # ====================
    # Service Discovery
    # ====================

    def discover_service(
        self,
        service_name: str,
        default_host: str,
        default_port: int,
        env_host_key: Optional[str] = None,
        env_port_key: Optional[str] = None,
    ) -> Tuple[str, int]:
        """
        Resolve host and port for a dependency.

        Priority: explicit env keys, then defaults.
        """
        host = os.getenv(env_host_key) if env_host_key else None
        port_value = os.getenv(env_port_key) if env_port_key else None

        host = host or default_host
        try:
            port = int(port_value) if port_value else default_port
        except ValueError:
            logger.warning(f"Invalid port for {service_name}: {port_value}, using {default_port}")
            port = default_port

        logger.debug(f"Discovered {service_name} at {host}:{port}")
        return host, port

    # ====================
    # Typed Accessors
    # ====================

    def get(self, key: str, default: Any = None) -> Any:
        """
        Read a setting, preferring the service-prefixed variable.

        ``get("pause_retry_attempts")`` checks
        ``CAMPAIGN_APPROVAL_SERVICE_PAUSE_RETRY_ATTEMPTS`` then
        ``PAUSE_RETRY_ATTEMPTS``.
        """
        upper = key.upper()
        value = os.getenv(f"{self._prefix}_{upper}")
        if value is None:
            value = os.getenv(upper)
        return default if value is None else value

    def get_int(self, key: str, default: int) -> int:
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid integer for {key}: {value}, using {default}")
            return default

    def get_float(self, key: str, default: float) -> float:
        value = self.get(key)
        if value is None:
            return default
        try:
            return float(value)
        except (TypeError, ValueError):
            logger.warning(f"Invalid float for {key}: {value}, using {default}")
            return default

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None:
            return default
        return str(value).lower() in ("1", "true", "yes", "on")

    # ====================
    # Config Sections
    # ====================

    @property
    def infra(self) -> InfraConfig:
        return InfraConfig.from_env()

    @property
    def ads(self) -> AdsConfig:
        return AdsConfig.from_env()

    @property
    def logging(self) -> LoggingConfig:
        return LoggingConfig.from_env()


__all__ = ["ConfigManager"]
