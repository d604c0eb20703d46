"""
Processing Loop Tests
=====================

Drives main.process_readings() directly with in-memory components.
"""

import asyncio
import json

import numpy as np
import pytest

from surface_tracker import main
from surface_tracker.agent import SurfaceAgentGraph
from surface_tracker.publish import EventBroadcaster
from surface_tracker.stream import ReadingBuffer, Snapshot
from surface_tracker.tracking import GridReading

from conftest import BASELINE_LEVEL


@pytest.fixture
def pipeline(monkeypatch, shape, small_thresholds):
    """Install a fresh agent and channels into the service globals."""
    agent = SurfaceAgentGraph(shape, small_thresholds)
    monkeypatch.setattr(main, "_agent", agent)
    monkeypatch.setattr(main, "_event_channel", EventBroadcaster("events"))
    monkeypatch.setattr(main, "_reading_channel", EventBroadcaster("readings"))
    monkeypatch.setattr(main, "_shutdown_flag", False)
    monkeypatch.setattr(main, "_is_running", False)
    monkeypatch.setattr(main, "_processing_error", None)
    monkeypatch.setattr(main, "_current_reading", None)
    monkeypatch.setattr(main, "_event_count", 0)
    return agent


def run_loop(monkeypatch, readings):
    """Queue readings, run the loop until it halts, collect reading updates."""

    async def scenario():
        buffer = ReadingBuffer(maxsize=len(readings))
        monkeypatch.setattr(main, "_buffer", buffer)
        queue = main._reading_channel.subscribe()

        for sequence, reading in enumerate(readings, start=1):
            await buffer.put(Snapshot(sequence=sequence, timestamp=float(sequence), reading=reading))

        await asyncio.wait_for(main.process_readings(), timeout=5.0)

        published = []
        while not queue.empty():
            published.append(queue.get_nowait())
        return published

    return asyncio.run(scenario())


class TestProcessReadings:
    """Tests for the single in-order processing loop."""

    def test_tracker_failure_halts_processing(self, monkeypatch, pipeline, make_reading):
        mismatched = GridReading(np.zeros((2, 2)))

        published = run_loop(monkeypatch, [make_reading(BASELINE_LEVEL), mismatched])

        assert len(published) == 1
        assert published[0]["phase"] == "CALIBRATING"
        assert main._processing_error is not None
        assert main._processing_error.startswith("ShapeMismatchError")
        assert main._is_running is False
        assert pipeline.processed == 1

    def test_ready_reports_failure(self, monkeypatch, pipeline, make_reading):
        readings = [make_reading(BASELINE_LEVEL)] * 5 + [GridReading(np.zeros((2, 2)))]

        run_loop(monkeypatch, readings)
        response = asyncio.run(main.ready())
        body = json.loads(response.body)

        assert pipeline.phase.value == "STEADY"
        assert response.status_code == 503
        assert body["status"] == "not_ready"
        assert body["processing"] is False
        assert body["error"].startswith("ShapeMismatchError")

    def test_events_are_published(self, monkeypatch, pipeline, make_reading):
        placed = make_reading(BASELINE_LEVEL, blocks=[(slice(1, 3), slice(1, 3), 125.0)])
        readings = [make_reading(BASELINE_LEVEL)] * 5 + [placed] * 4
        readings.append(GridReading(np.zeros((2, 2))))
        events = main._event_channel.subscribe()

        published = run_loop(monkeypatch, readings)

        assert len(published) == 9
        assert main._event_count == 1
        assert events.get_nowait()["kind"] == "new-object"
        assert len(main._current_reading.objects) == 1
