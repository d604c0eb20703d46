"""
Reading Buffer
==============

Async-safe bounded FIFO between the ingestion boundary and the
processing loop.

Design Rules:
    - Strict arrival order; snapshots are never reordered or batched
    - Default policy is back-pressure: put() waits for space, so the
      tracker sees every accepted reading
    - drop_oldest=True is available for producers that must not block;
      drops are counted and logged
    - Does NOT process or modify snapshots
"""

import asyncio
import logging
from typing import Optional

from surface_tracker.stream.snapshot import Snapshot


logger = logging.getLogger(__name__)


class ReadingBuffer:
    """
    Async-safe bounded queue for snapshots.

    Attributes:
        maxsize: Maximum number of snapshots to buffer
        drop_oldest: Drop the oldest snapshot instead of waiting when full
        dropped_count: Number of snapshots dropped due to overflow

    Example:
        buffer = ReadingBuffer(maxsize=50)

        # Producer
        await buffer.put(snapshot)

        # Consumer
        snapshot = await buffer.get(timeout=1.0)
    """

    def __init__(self, maxsize: int = 50, drop_oldest: bool = False) -> None:
        """
        Initialize reading buffer.

        Args:
            maxsize: Maximum snapshots to buffer. Must be >= 1.
            drop_oldest: Overflow policy (False = back-pressure)
        """
        if maxsize < 1:
            raise ValueError("maxsize must be >= 1")

        self._maxsize = maxsize
        self._drop_oldest = drop_oldest
        self._queue: asyncio.Queue[Snapshot] = asyncio.Queue(maxsize=maxsize)
        self._dropped_count: int = 0
        self._total_put: int = 0

    @property
    def maxsize(self) -> int:
        """Maximum buffer size."""
        return self._maxsize

    @property
    def size(self) -> int:
        """Current number of snapshots in buffer."""
        return self._queue.qsize()

    @property
    def dropped_count(self) -> int:
        """Number of snapshots dropped due to overflow."""
        return self._dropped_count

    @property
    def total_put(self) -> int:
        """Total snapshots ever put into buffer."""
        return self._total_put

    async def put(self, snapshot: Snapshot) -> bool:
        """
        Add snapshot to buffer.

        With back-pressure (default) this waits until there is room.
        With drop_oldest the oldest queued snapshot is discarded instead.

        Args:
            snapshot: Snapshot to add

        Returns:
            True if added without dropping anything, False otherwise.
        """
        self._total_put += 1

        if not self._drop_oldest:
            await self._queue.put(snapshot)
            return True

        dropped = False
        if self._queue.full():
            try:
                self._queue.get_nowait()
                self._dropped_count += 1
                dropped = True
                logger.warning(
                    f"Buffer full, dropped oldest snapshot. "
                    f"Total dropped: {self._dropped_count}"
                )
            except asyncio.QueueEmpty:
                pass

        self._queue.put_nowait(snapshot)
        return not dropped

    async def get(self, timeout: Optional[float] = None) -> Optional[Snapshot]:
        """
        Get next snapshot from buffer.

        Args:
            timeout: Maximum seconds to wait. None = wait forever.

        Returns:
            Next snapshot, or None if timeout occurred.
        """
        try:
            if timeout is not None:
                return await asyncio.wait_for(self._queue.get(), timeout=timeout)
            return await self._queue.get()
        except asyncio.TimeoutError:
            return None

    def get_nowait(self) -> Optional[Snapshot]:
        """
        Get next snapshot without waiting.

        Returns:
            Next snapshot if available, None otherwise.
        """
        try:
            return self._queue.get_nowait()
        except asyncio.QueueEmpty:
            return None

    def metrics(self) -> dict:
        """
        Get buffer metrics for observability.

        Returns:
            Dict with size, maxsize, dropped_count, total_put
        """
        return {
            "size": self.size,
            "maxsize": self._maxsize,
            "dropped_count": self._dropped_count,
            "total_put": self._total_put,
        }
