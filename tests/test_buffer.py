"""
Reading Buffer Tests
====================
"""

import asyncio

import pytest

from surface_tracker.stream import ReadingBuffer, Snapshot
from surface_tracker.tracking import GridReading


def make_snapshot(sequence):
    return Snapshot(
        sequence=sequence,
        timestamp=float(sequence),
        reading=GridReading([[float(sequence)]]),
    )


class TestReadingBuffer:
    """Tests for ordering and overflow policy."""

    def test_fifo_order(self):
        async def scenario():
            buffer = ReadingBuffer(maxsize=5)
            for i in range(1, 4):
                await buffer.put(make_snapshot(i))
            return [(await buffer.get()).sequence for _ in range(3)]

        assert asyncio.run(scenario()) == [1, 2, 3]

    def test_get_timeout_returns_none(self):
        async def scenario():
            buffer = ReadingBuffer(maxsize=1)
            return await buffer.get(timeout=0.01)

        assert asyncio.run(scenario()) is None

    def test_back_pressure_waits_for_space(self):
        async def scenario():
            buffer = ReadingBuffer(maxsize=1)
            await buffer.put(make_snapshot(1))

            pending = asyncio.create_task(buffer.put(make_snapshot(2)))
            await asyncio.sleep(0.01)
            blocked = not pending.done()

            first = await buffer.get()
            await pending
            second = await buffer.get()
            return blocked, first.sequence, second.sequence, buffer.dropped_count

        assert asyncio.run(scenario()) == (True, 1, 2, 0)

    def test_drop_oldest(self):
        async def scenario():
            buffer = ReadingBuffer(maxsize=2, drop_oldest=True)
            results = [await buffer.put(make_snapshot(i)) for i in range(1, 4)]
            remaining = [buffer.get_nowait().sequence, buffer.get_nowait().sequence]
            return results, remaining, buffer.metrics()

        results, remaining, metrics = asyncio.run(scenario())

        assert results == [True, True, False]
        assert remaining == [2, 3]
        assert metrics["dropped_count"] == 1
        assert metrics["total_put"] == 3

    def test_get_nowait_empty(self):
        async def scenario():
            return ReadingBuffer(maxsize=1).get_nowait()

        assert asyncio.run(scenario()) is None

    def test_invalid_maxsize(self):
        with pytest.raises(ValueError):
            ReadingBuffer(maxsize=0)
