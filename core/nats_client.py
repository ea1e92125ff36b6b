"""
NATS JetStream Client for Python Microservices

Provides event-driven communication between services. Events are published
to JetStream subjects of the form ``<prefix>.<event type>``, for example
``events.campaign.approved``.
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import nats
from nats.js.errors import BadRequestError

if TYPE_CHECKING:
    from core.config_manager import ConfigManager


class DecimalEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles Decimal and datetime types"""
    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, Enum):
            return obj.value
        return super().default(obj)


logger = logging.getLogger(__name__)


class Event:
    """Event model"""

    def __init__(
        self,
        event_type: str,
        source: str,
        data: Dict[str, Any],
        subject: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
    ):
        self.id = str(uuid.uuid4())
        self.type = event_type.value if isinstance(event_type, Enum) else event_type
        self.source = source
        self.data = data
        self.subject = subject
        self.timestamp = datetime.now(timezone.utc).isoformat()
        self.metadata = metadata or {}
        self.version = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "source": self.source,
            "subject": self.subject,
            "timestamp": self.timestamp,
            "data": self.data,
            "metadata": self.metadata,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        event = cls.__new__(cls)
        event.id = data.get("id")
        event.type = data.get("type")
        event.source = data.get("source")
        event.subject = data.get("subject")
        event.timestamp = data.get("timestamp")
        event.data = data.get("data", {})
        event.metadata = data.get("metadata", {})
        event.version = data.get("version", "1.0.0")
        return event


class NATSEventBus:
    """NATS JetStream event bus"""

    def __init__(
        self,
        service_name: str,
        config: Optional["ConfigManager"] = None,
    ):
        """
        Initialize NATS Event Bus.

        Args:
            service_name: Name of the service (sent as the connection name)
            config: Optional ConfigManager instance for service discovery
        """
        from core.config_manager import ConfigManager

        self.service_name = service_name

        if config is None:
            config = ConfigManager(service_name)

        infra = config.infra
        self.host, self.port = config.discover_service(
            service_name='nats_service',
            default_host=infra.nats_host,
            default_port=infra.nats_port,
            env_host_key='NATS_HOST',
            env_port_key='NATS_PORT'
        )
        self.stream_name = infra.nats_stream
        self.subject_prefix = infra.nats_subject_prefix

        self._nc = None
        self._js = None

        logger.info(f"NATS EventBus initialized: {self.host}:{self.port}")

    @property
    def servers(self) -> List[str]:
        return [f"nats://{self.host}:{self.port}"]

    @property
    def is_connected(self) -> bool:
        return bool(self._nc is not None and self._nc.is_connected)

    async def connect(self):
        """Connect to NATS and make sure the stream exists"""
        try:
            self._nc = await nats.connect(servers=self.servers, name=self.service_name)
            self._js = self._nc.jetstream()
            try:
                await self._js.add_stream(
                    name=self.stream_name,
                    subjects=[f"{self.subject_prefix}.>"],
                )
            except BadRequestError as e:
                # Stream already exists with a different configuration
                logger.warning(f"JetStream stream {self.stream_name} not updated: {e}")
            logger.info(f"Connected to NATS as {self.service_name}")
        except Exception as e:
            logger.error(f"Failed to connect to NATS: {e}")
            raise

    def subject_for(self, event: Event) -> str:
        return f"{self.subject_prefix}.{event.type}"

    async def publish_event(self, event: Event) -> bool:
        """
        Publish an event to NATS JetStream.

        Returns:
            True once the stream has acknowledged the message
        """
        if not self._js:
            logger.warning(f"NATS not connected, event dropped: {event.type}")
            return False

        payload = json.dumps(event.to_dict(), cls=DecimalEncoder).encode()
        await self._js.publish(
            self.subject_for(event),
            payload,
            headers={
                "event_id": event.id,
                "event_type": event.type,
                "source": event.source,
            },
        )
        logger.debug(f"Published event {event.type} ({event.id})")
        return True

    async def close(self):
        """Drain and close the connection"""
        if self._nc is not None:
            await self._nc.drain()
            self._nc = None
            self._js = None
            logger.info("NATS connection closed")


__all__ = ["Event", "NATSEventBus", "DecimalEncoder"]
