#!/usr/bin/env python3
"""
Redis client for broadcasting flow changes.
Every graph mutation publishes an event on the flow's channel so that other
editors of the same flow can refetch.
"""

import json
import logging
from datetime import datetime
from typing import Any, Dict, Optional

import redis

from infinity_timeline.core.config import settings

logger = logging.getLogger(__name__)

# Channel prefix, followed by the flow id
FLOW_CHANNEL_PREFIX = "flow:"

NODE_CREATED = "node.created"
NODE_MOVED = "node.moved"
NODE_UPDATED = "node.updated"
NODE_DELETED = "node.deleted"
EDGE_CREATED = "edge.created"
EDGE_DELETED = "edge.deleted"


def flow_channel(flow_id: int) -> str:
    return f"{FLOW_CHANNEL_PREFIX}{flow_id}"


class RedisClient:
    """Redis client for flow event publishing."""

    _instance = None

    @classmethod
    def get_instance(cls):
        """Get or create a singleton instance of the RedisClient."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def set_instance(cls, instance: Optional["RedisClient"]):
        """Replace the singleton, e.g. with a client over a fake connection."""
        cls._instance = instance

    def __init__(self, connection: Optional[redis.Redis] = None):
        """Initialize Redis connection using settings."""
        if connection is not None:
            self.redis = connection
            return

        self.redis = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            password=settings.REDIS_PASSWORD or None,
            decode_responses=True,
        )
        logger.info(
            f"Redis client initialized: {settings.REDIS_HOST}:{settings.REDIS_PORT}/db{settings.REDIS_DB}"
        )

    def publish_flow_event(
        self,
        flow_id: int,
        event_type: str,
        payload: Dict[str, Any],
        actor_id: Optional[int] = None,
    ) -> bool:
        """
        Publish a change event for a flow.

        Args:
            flow_id: Flow the change belongs to
            event_type: One of the node.* / edge.* event names
            payload: JSON serialisable description of the change
            actor_id: User who made the change

        Returns:
            bool: Success status
        """
        message = json.dumps(
            {
                "type": event_type,
                "flow_id": flow_id,
                "actor_id": actor_id,
                "payload": payload,
                "sent_at": datetime.utcnow().isoformat(),
            },
            default=str,
        )
        try:
            receivers = self.redis.publish(flow_channel(flow_id), message)
            logger.debug(
                f"Published {event_type} on flow {flow_id} to {receivers} subscribers"
            )
            return True
        except redis.exceptions.RedisError as e:
            logger.error(f"Error publishing {event_type} for flow {flow_id}: {e}")
            return False
