"""Messaging: Redis pub/sub change notifications between workers."""

from quickorder.infrastructure.messaging.redis_pubsub import (
    CollectionChangePublisher,
    run_change_listener,
)

__all__ = ["CollectionChangePublisher", "run_change_listener"]
