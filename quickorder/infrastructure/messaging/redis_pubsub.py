"""Redis Pub/Sub for cross-worker collection change notifications.

Each worker polls Firestore for its own live subscriptions. When one worker
writes, it publishes the collection name so the other workers poll at once
instead of waiting for their next interval.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Protocol

import redis.asyncio as redis

from quickorder.core.config import get_settings
from quickorder.shared.utils.datetime import utc_now
from quickorder.shared.utils.generators import generate_cuid

logger = logging.getLogger(__name__)


class _Wakeable(Protocol):
    def wake(self, collection: str) -> None: ...


class _RedisPubSubBase:
    """Shared Redis connection and channel logic for change notifications."""

    CHANNEL_PREFIX = "collection_changed"

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        """Initialize. Pass redis_client for DI/testing."""
        self.redis = redis_client
        self.settings = get_settings()
        self._connected = redis_client is not None

    async def connect(self) -> None:
        """Establish Redis connection. Call on app startup."""
        if self._connected:
            return
        if self.redis is None:
            try:
                self.redis = redis.Redis(
                    host=self.settings.redis_host,
                    port=self.settings.redis_port,
                    db=self.settings.redis_db,
                    password=self.settings.redis_password.get_secret_value()
                    if self.settings.redis_password
                    else None,
                    decode_responses=True,
                    socket_connect_timeout=5,
                )
                await self.redis.ping()
                self._connected = True
                logger.info("Redis pub/sub connected")
            except (redis.ConnectionError, redis.TimeoutError) as e:
                logger.warning("Redis pub/sub connection failed: %s", e)
                self._connected = False
                self.redis = None

    async def disconnect(self) -> None:
        """Close Redis connection. Call on app shutdown."""
        if self.redis:
            await self.redis.close()
            self._connected = False
            logger.info("Redis pub/sub disconnected")

    def is_available(self) -> bool:
        """Return True if Redis is connected."""
        return self._connected and self.redis is not None

    def _get_channel(self, collection: str) -> str:
        return f"{self.CHANNEL_PREFIX}:{collection}"


class CollectionChangePublisher(_RedisPubSubBase):
    """Announces local writes (implements IChangeNotifier)."""

    def __init__(self, redis_client: redis.Redis | None = None) -> None:
        super().__init__(redis_client)
        self.origin = generate_cuid()

    async def publish(self, collection: str) -> None:
        if not self.is_available() or self.redis is None:
            logger.debug("Redis not available, skipping publish")
            return
        message = json.dumps({"origin": self.origin, "at": utc_now().isoformat()})
        await self.redis.publish(self._get_channel(collection), message)
        logger.debug("Published change for %s", collection)


def _parse_change(message: dict[str, Any]) -> tuple[str, str] | None:
    """(collection, origin) from a pmessage, or None when malformed."""
    channel = message.get("channel")
    channel_str = channel.decode() if isinstance(channel, bytes) else (channel or "")
    if ":" not in channel_str:
        return None
    collection = channel_str.split(":", 1)[1]
    try:
        data = json.loads(message["data"])
    except (json.JSONDecodeError, KeyError, TypeError):
        logger.warning("Malformed change notification on %s", channel_str)
        return None
    return collection, data.get("origin", "")


async def run_change_listener(store: _Wakeable, publisher: CollectionChangePublisher) -> None:
    """Wake the store's pollers for changes published by other workers.

    Call as a background task from lifespan when Redis is enabled. Cancelling the task stops the loop.
    """
    if not publisher.is_available() or publisher.redis is None:
        logger.warning("Redis not available, change listener not started")
        return
    pubsub = publisher.redis.pubsub()
    try:
        await pubsub.psubscribe(f"{_RedisPubSubBase.CHANNEL_PREFIX}:*")
        logger.info("Subscribed to %s:*", _RedisPubSubBase.CHANNEL_PREFIX)
        async for message in pubsub.listen():
            if message["type"] != "pmessage":
                continue
            parsed = _parse_change(message)
            if parsed is None:
                continue
            collection, origin = parsed
            if origin == publisher.origin:
                continue
            store.wake(collection)
    except asyncio.CancelledError:
        logger.info("Change listener task cancelled")
    except Exception:
        logger.exception("Change listener error")
    finally:
        await pubsub.punsubscribe()
        await pubsub.close()
