"""
Stream Module
=============

Ingestion layer for the surface tracker.

This module provides:
    - Snapshot: Typed, validated snapshot (internal representation)
    - SnapshotValidator: Shape/weight validation with explicit counters
    - ReadingBuffer: Async-safe bounded FIFO (back-pressure by default)
    - SnapshotConsumer: WebSocket client with reconnection
    - MockSensorSource: Deterministic synthetic surface

Example:
    from surface_tracker.stream import ReadingBuffer, SnapshotConsumer, SnapshotValidator

    buffer = ReadingBuffer(maxsize=50)
    consumer = SnapshotConsumer(
        url="ws://localhost:8000/ws/sensor",
        validator=SnapshotValidator(GridShape(8, 8)),
        buffer=buffer,
    )

    task = asyncio.create_task(consumer.run())

    while True:
        snapshot = await buffer.get()
        process(snapshot)
"""

from surface_tracker.stream.snapshot import Snapshot
from surface_tracker.stream.ingest import (
    IngestionStats,
    IngestResult,
    RejectReason,
    SnapshotValidator,
)
from surface_tracker.stream.buffer import ReadingBuffer
from surface_tracker.stream.consumer import SnapshotConsumer, SnapshotConsumerMetrics
from surface_tracker.stream.mock_source import MockSensorSource


__all__ = [
    "Snapshot",
    "IngestionStats",
    "IngestResult",
    "RejectReason",
    "SnapshotValidator",
    "ReadingBuffer",
    "SnapshotConsumer",
    "SnapshotConsumerMetrics",
    "MockSensorSource",
]
