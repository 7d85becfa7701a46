"""Domain event publisher backed by Redis Streams."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import redis

logger = logging.getLogger(__name__)


class EventPublisher:
    """Publish domain events (``booking.created``, ``booking.completed``...) to a stream.

    Publishing is fire-and-forget: a failed ``XADD`` is logged and never
    undoes the write that produced the event.
    """

    def __init__(self, redis_url: str, stream_name: str, *, maxlen: Optional[int] = 1000) -> None:
        self._stream_name = stream_name
        self._maxlen = maxlen
        self._client = redis.Redis.from_url(redis_url)

    def publish(
        self,
        event_type: str,
        payload: Dict[str, Any],
        *,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Send an event to the configured stream.

        Parameters
        ----------
        event_type:
            Canonical name, e.g. ``booking.completed``.
        payload:
            Serialisable body (JSON dumped).
        metadata:
            Optional envelope metadata (shop slug, actor...).
        """

        event = {
            "event_type": event_type,
            "payload": json.dumps(payload, default=str),
        }
        if metadata:
            event["metadata"] = json.dumps(metadata, default=str)

        try:
            self._client.xadd(
                self._stream_name,
                event,
                maxlen=self._maxlen,
                approximate=bool(self._maxlen),
            )
        except redis.RedisError:
            logger.exception("Failed to publish event '%s' to stream '%s'", event_type, self._stream_name)

    def publish_shop_event(self, event_type: str, shop_slug: str, payload: Dict[str, Any]) -> None:
        """Publish an event scoped to one shop; consumers route by ``shop_slug``."""
        self.publish(
            event_type,
            payload,
            metadata={
                "shop_slug": shop_slug,
                "occurred_at": datetime.now(timezone.utc).isoformat(),
            },
        )
