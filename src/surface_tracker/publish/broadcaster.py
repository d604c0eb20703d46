"""
Event Broadcaster
=================

Fan-out publish channel for downstream consumers (WebSocket clients,
loggers, dashboards).

Design Rules:
    - Each subscriber gets its own bounded asyncio.Queue
    - publish() never blocks; a slow subscriber loses its OLDEST messages
    - Messages are plain JSON-ready dicts
"""

import asyncio
import logging
from typing import Dict, List


logger = logging.getLogger(__name__)


class EventBroadcaster:
    """
    Fan-out of JSON messages to subscriber queues.

    Attributes:
        name: Channel name used in logs
        queue_size: Per-subscriber queue bound

    Example:
        events = EventBroadcaster("events")
        queue = events.subscribe()
        events.publish({"kind": "new-object", ...})
        message = await queue.get()
        events.unsubscribe(queue)
    """

    def __init__(self, name: str, queue_size: int = 100) -> None:
        if queue_size < 1:
            raise ValueError("queue_size must be >= 1")

        self.name = name
        self.queue_size = queue_size
        self._subscribers: List[asyncio.Queue] = []
        self._published: int = 0
        self._dropped: int = 0

    @property
    def subscriber_count(self) -> int:
        """Number of active subscribers."""
        return len(self._subscribers)

    def subscribe(self) -> asyncio.Queue:
        """Register a new subscriber and return its queue."""
        queue: asyncio.Queue = asyncio.Queue(maxsize=self.queue_size)
        self._subscribers.append(queue)
        logger.info(f"[{self.name}] subscriber added ({len(self._subscribers)} total)")
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        """Remove a subscriber queue. Unknown queues are ignored."""
        if queue in self._subscribers:
            self._subscribers.remove(queue)
            logger.info(
                f"[{self.name}] subscriber removed ({len(self._subscribers)} total)"
            )

    def publish(self, message: Dict) -> None:
        """
        Deliver a message to every subscriber.

        Args:
            message: JSON-ready dict
        """
        self._published += 1
        for queue in self._subscribers:
            if queue.full():
                try:
                    queue.get_nowait()
                    self._dropped += 1
                except asyncio.QueueEmpty:
                    pass
            queue.put_nowait(message)

    def metrics(self) -> dict:
        """Get channel metrics for observability."""
        return {
            "subscribers": len(self._subscribers),
            "published": self._published,
            "dropped": self._dropped,
        }
