"""
Snapshot Consumer
=================

WebSocket client for consuming raw grid snapshots from the sensor bridge.

This module provides the SnapshotConsumer class which:
    - Connects to the bridge's snapshot WebSocket
    - Passes every message through a SnapshotValidator
    - Pushes accepted snapshots into a ReadingBuffer in arrival order
    - Reconnects with a fixed backoff on disconnect

Design Rules:
    - Malformed messages are dropped at this boundary (counted, logged)
    - Does NOT run the tracker
    - Exposes metrics for health monitoring
"""

import asyncio
import logging
from typing import Any, Optional

import websockets
from websockets.exceptions import (
    ConnectionClosed,
    ConnectionClosedError,
    ConnectionClosedOK,
)

from surface_tracker.stream.buffer import ReadingBuffer
from surface_tracker.stream.ingest import SnapshotValidator


logger = logging.getLogger(__name__)


class SnapshotConsumerMetrics:
    """Metrics for SnapshotConsumer observability."""

    __slots__ = (
        "messages_received",
        "reconnect_count",
    )

    def __init__(self) -> None:
        self.messages_received: int = 0
        self.reconnect_count: int = 0

    def to_dict(self) -> dict:
        """Export metrics as dict."""
        return {
            "messages_received": self.messages_received,
            "reconnect_count": self.reconnect_count,
        }


class SnapshotConsumer:
    """
    WebSocket consumer for sensor snapshots.

    Attributes:
        url: WebSocket URL to connect to
        validator: Ingestion boundary for raw messages
        buffer: ReadingBuffer to push snapshots into
        connected: Whether currently connected
        metrics: Operational metrics

    Example:
        buffer = ReadingBuffer(maxsize=50)
        consumer = SnapshotConsumer(
            url="ws://localhost:8000/ws/sensor",
            validator=SnapshotValidator(GridShape(8, 8)),
            buffer=buffer,
        )

        task = asyncio.create_task(consumer.run())
        ...
        await consumer.stop()
        await task
    """

    def __init__(
        self,
        url: str,
        validator: SnapshotValidator,
        buffer: ReadingBuffer,
        reconnect_backoff_ms: int = 500,
        max_reconnect_attempts: int = 0,
    ) -> None:
        """
        Initialize snapshot consumer.

        Args:
            url: WebSocket URL of the sensor bridge
            validator: Validator that owns the ingestion counters
            buffer: ReadingBuffer to push accepted snapshots into
            reconnect_backoff_ms: Backoff between reconnect attempts
            max_reconnect_attempts: Max attempts (0 = unlimited)
        """
        self.url = url
        self.validator = validator
        self.buffer = buffer
        self.reconnect_backoff_ms = reconnect_backoff_ms
        self.max_reconnect_attempts = max_reconnect_attempts

        self._websocket: Optional[Any] = None
        self._connected: bool = False
        self._running: bool = False
        self._stop_event: asyncio.Event = asyncio.Event()

        self.metrics = SnapshotConsumerMetrics()

    @property
    def connected(self) -> bool:
        """Whether currently connected to the sensor bridge."""
        return self._connected

    async def run(self) -> None:
        """
        Start consuming snapshots.

        Runs until stop() is called or the reconnect limit is reached.
        """
        self._running = True
        self._stop_event.clear()

        logger.info(f"SnapshotConsumer starting, connecting to {self.url}")

        while self._running:
            try:
                await self._connect_and_consume()
            except Exception as e:
                if not self._running:
                    break
                logger.error(f"Connection error: {e}")
                self._connected = False

            if not self._running:
                break

            if (
                self.max_reconnect_attempts > 0
                and self.metrics.reconnect_count >= self.max_reconnect_attempts
            ):
                logger.error(
                    f"Max reconnect attempts ({self.max_reconnect_attempts}) exceeded"
                )
                break

            self.metrics.reconnect_count += 1
            backoff_sec = self.reconnect_backoff_ms / 1000.0
            logger.info(
                f"Reconnecting in {backoff_sec:.1f}s "
                f"(attempt {self.metrics.reconnect_count})"
            )

            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=backoff_sec)
                break
            except asyncio.TimeoutError:
                pass

        self._running = False
        logger.info("SnapshotConsumer stopped")

    async def stop(self) -> None:
        """Stop consuming and close the connection."""
        logger.info("SnapshotConsumer stopping...")
        self._running = False
        self._stop_event.set()

        if self._websocket is not None:
            try:
                await self._websocket.close()
            except ConnectionClosed:
                pass

        self._connected = False

    async def handle_message(self, message: Any) -> bool:
        """
        Validate one raw message and buffer it if accepted.

        Args:
            message: Raw WebSocket message (text or bytes)

        Returns:
            True if the message was accepted
        """
        self.metrics.messages_received += 1
        result = self.validator.validate(message)
        if result.accepted:
            await self.buffer.put(result.snapshot)
        return result.accepted

    async def _connect_and_consume(self) -> None:
        """Connect to WebSocket and consume messages until disconnect."""
        async with websockets.connect(
            self.url,
            ping_interval=20,
            ping_timeout=10,
            close_timeout=5,
        ) as ws:
            self._websocket = ws
            self._connected = True
            logger.info(f"Connected to sensor bridge: {self.url}")

            try:
                async for message in ws:
                    if not self._running:
                        break
                    await self.handle_message(message)

            except ConnectionClosedOK:
                logger.info("Connection closed normally")
            except ConnectionClosedError as e:
                logger.warning(f"Connection closed with error: {e}")
                raise
            finally:
                self._connected = False
                self._websocket = None
