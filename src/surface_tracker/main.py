"""
Surface Tracker Main Application
================================

FastAPI entry point for the load-cell surface object tracker.

Pipeline:
    Source (WebSocket bridge or mock) → SnapshotValidator → ReadingBuffer
        → SurfaceAgentGraph (Tracker) → EventBroadcaster channels

Endpoints:
    GET  /            - Service information
    GET  /health      - Liveness probe (is process alive?)
    GET  /ready       - Readiness probe (calibrated + processing?)
    GET  /metrics     - Ingestion, buffer, tracker and channel metrics
    GET  /objects     - Current tracked-object snapshot
    GET  /reading     - Latest reading update
    WS   /ws/events   - Lifecycle events (new-object / delete-object)
    WS   /ws/readings - Reading updates for display refresh
"""

import asyncio
import logging
import os
import signal
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Union

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import JSONResponse

from surface_tracker.config import settings
from surface_tracker.agent import SurfaceAgentGraph
from surface_tracker.models.output import ReadingUpdate
from surface_tracker.models.state import TrackerPhase
from surface_tracker.publish import EventBroadcaster
from surface_tracker.stream import (
    MockSensorSource,
    ReadingBuffer,
    SnapshotConsumer,
    SnapshotValidator,
)
from surface_tracker.tracking import GridShape, TrackerThresholds


logger = logging.getLogger(__name__)


# =============================================================================
# Global State
# =============================================================================

# Shutdown flag
_shutdown_flag: bool = False

# Ingestion
_validator: Optional[SnapshotValidator] = None
_buffer: Optional[ReadingBuffer] = None
_source: Optional[Union[SnapshotConsumer, MockSensorSource]] = None
_source_task: Optional[asyncio.Task] = None

# Tracking
_agent: Optional[SurfaceAgentGraph] = None
_processing_task: Optional[asyncio.Task] = None

# Publish channels
_event_channel: Optional[EventBroadcaster] = None
_reading_channel: Optional[EventBroadcaster] = None

# Current state
_current_reading: Optional[ReadingUpdate] = None
_event_count: int = 0
_startup_time: float = 0.0
_is_running: bool = False
_processing_error: Optional[str] = None


# =============================================================================
# Signal Handlers
# =============================================================================

def _handle_sigterm(signum, frame):
    """Handle SIGTERM for graceful shutdown."""
    global _shutdown_flag
    logger.info("Received SIGTERM, initiating graceful shutdown...")
    _shutdown_flag = True


# =============================================================================
# Source Factory
# =============================================================================

def create_snapshot_source(
    validator: SnapshotValidator,
    buffer: ReadingBuffer,
) -> Union[SnapshotConsumer, MockSensorSource]:
    """Create the snapshot source selected in config."""
    backend = settings.source.backend

    if backend == "websocket":
        logger.info(f"Using SnapshotConsumer: {settings.source.url}")
        return SnapshotConsumer(
            url=settings.source.url,
            validator=validator,
            buffer=buffer,
            reconnect_backoff_ms=settings.source.reconnect_backoff_ms,
            max_reconnect_attempts=settings.source.max_reconnect_attempts,
        )

    elif backend == "mock":
        mock = settings.source.mock
        logger.info("Using MockSensorSource")
        return MockSensorSource(
            validator=validator,
            buffer=buffer,
            interval_seconds=mock.interval_seconds,
            noise_amplitude=mock.noise_amplitude,
            object_weight=mock.object_weight,
            place_after=mock.place_after,
            remove_after=mock.remove_after,
            seed=mock.seed,
        )

    else:
        raise ValueError(f"Unknown snapshot source backend: {backend}")


# =============================================================================
# Processing Pipeline
# =============================================================================

async def process_readings() -> None:
    """Single processing loop: snapshots are handled strictly in order."""
    global _current_reading, _event_count, _is_running, _processing_error

    if (
        _buffer is None or
        _agent is None or
        _event_channel is None or
        _reading_channel is None
    ):
        logger.error("Processing pipeline not initialized")
        return

    logger.info("Reading processing pipeline started")
    _is_running = True

    while not _shutdown_flag:
        try:
            snapshot = await _buffer.get(timeout=1.0)
            if snapshot is None:
                continue

            result = _agent.process(snapshot)

            _current_reading = result.reading_update
            _reading_channel.publish(result.reading_update.model_dump(mode="json"))

            if result.event is not None:
                _event_count += 1
                _event_channel.publish(result.event.model_dump(mode="json"))

        except asyncio.CancelledError:
            logger.info("Reading processing pipeline cancelled")
            break
        except Exception as e:
            # Tracker failures under validated input are programming errors
            _processing_error = f"{type(e).__name__}: {e}"
            logger.exception("Tracker failure, halting processing")
            break

    _is_running = False
    logger.info("Reading processing pipeline stopped")


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager with graceful shutdown."""
    global _validator, _buffer, _source, _source_task
    global _agent, _processing_task, _event_channel, _reading_channel
    global _startup_time

    signal.signal(signal.SIGTERM, _handle_sigterm)

    _startup_time = time.time()
    logger.info(f"Starting {settings.agent.name} {settings.agent.version}")

    shape = GridShape(height=settings.sensor.height, width=settings.sensor.width)

    # Ingestion
    _validator = SnapshotValidator(shape)
    _buffer = ReadingBuffer(maxsize=settings.source.max_queue_size)
    _source = create_snapshot_source(_validator, _buffer)
    _source_task = asyncio.create_task(_source.run(), name="snapshot_source")

    # Tracking
    thresholds = TrackerThresholds(
        new_object_threshold=settings.tracking.new_object_threshold,
        delete_object_threshold=settings.tracking.delete_object_threshold,
        calibration_window=settings.tracking.calibration_window,
        test_window=settings.tracking.test_window,
    )
    _agent = SurfaceAgentGraph(
        shape=shape,
        thresholds=thresholds,
        log_every_n_readings=settings.tracking.log_every_n_readings,
    )

    # Publish channels
    _event_channel = EventBroadcaster(
        "events", queue_size=settings.publish.subscriber_queue_size
    )
    _reading_channel = EventBroadcaster(
        "readings", queue_size=settings.publish.subscriber_queue_size
    )

    _processing_task = asyncio.create_task(process_readings(), name="reading_processing")

    logger.info("All components started")

    yield

    # Shutdown
    logger.info("Shutting down gracefully...")

    global _shutdown_flag
    _shutdown_flag = True

    if _processing_task:
        _processing_task.cancel()
        try:
            await _processing_task
        except asyncio.CancelledError:
            pass

    if _source:
        await _source.stop()

    if _source_task:
        try:
            await asyncio.wait_for(_source_task, timeout=5.0)
        except asyncio.TimeoutError:
            _source_task.cancel()
            try:
                await _source_task
            except asyncio.CancelledError:
                pass

    logger.info("Shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="SurfaceTracker",
    description="Object placement/removal tracking for load-cell surfaces",
    version=settings.agent.version,
    lifespan=lifespan,
)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/")
async def root() -> JSONResponse:
    """Service information endpoint."""
    return JSONResponse({
        "service": "SurfaceTracker",
        "version": settings.agent.version,
        "name": settings.agent.name,
        "status": "running",
        "source_backend": settings.source.backend,
        "grid": [settings.sensor.height, settings.sensor.width],
    })


@app.get("/health")
async def health() -> JSONResponse:
    """
    Liveness probe - is the process alive?

    Always returns 200 if the service is running.
    """
    return JSONResponse({
        "status": "healthy",
        "uptime_seconds": round(time.time() - _startup_time, 1),
    })


@app.get("/ready")
async def ready() -> JSONResponse:
    """
    Readiness probe - is the tracker calibrated and processing?

    Returns 200 once calibration has finished and the processing loop is
    running. Returns 503 otherwise.
    """
    phase = _agent.phase if _agent else None
    calibrated = phase is not None and phase != TrackerPhase.CALIBRATING

    if _is_running and calibrated:
        return JSONResponse({
            "status": "ready",
            "phase": phase.value,
            "readings_processed": _agent.processed,
        })

    return JSONResponse(
        {
            "status": "not_ready",
            "phase": phase.value if phase else None,
            "processing": _is_running,
            "error": _processing_error,
        },
        status_code=503,
    )


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Detailed metrics for observability."""
    source_metrics = {}
    if isinstance(_source, SnapshotConsumer):
        source_metrics = {
            "source_connected": _source.connected,
            **_source.metrics.to_dict(),
        }

    return JSONResponse({
        "uptime_seconds": round(time.time() - _startup_time, 1),
        "source_backend": settings.source.backend,
        "events_emitted": _event_count,
        "processing_error": _processing_error,
        "ingestion": _validator.stats.to_dict() if _validator else {},
        "buffer": _buffer.metrics() if _buffer else {},
        "tracker": _agent.get_metrics() if _agent else {},
        "channels": {
            "events": _event_channel.metrics() if _event_channel else {},
            "readings": _reading_channel.metrics() if _reading_channel else {},
        },
        **source_metrics,
    })


@app.get("/objects")
async def objects() -> JSONResponse:
    """Current tracked-object snapshot."""
    if _current_reading is None:
        return JSONResponse({"objects": []})

    return JSONResponse({
        "objects": [
            obj.model_dump(mode="json") for obj in _current_reading.objects
        ],
    })


@app.get("/reading")
async def reading() -> JSONResponse:
    """Latest reading update."""
    if _current_reading is None:
        return JSONResponse(
            {"error": "No reading available yet"},
            status_code=503,
        )

    return JSONResponse(_current_reading.model_dump(mode="json"))


# =============================================================================
# WebSocket Endpoints
# =============================================================================

async def _stream_channel(websocket: WebSocket, channel: Optional[EventBroadcaster]) -> None:
    """Forward a broadcaster channel to one WebSocket client."""
    await websocket.accept()
    if channel is None:
        await websocket.close(code=1013)
        return

    queue = channel.subscribe()
    try:
        while not _shutdown_flag:
            message = await queue.get()
            await websocket.send_json(message)
    except WebSocketDisconnect:
        logger.info(f"Client disconnected from {channel.name}")
    except Exception as e:
        logger.warning(f"WebSocket error on {channel.name}: {e}")
    finally:
        channel.unsubscribe(queue)


@app.websocket("/ws/events")
async def event_stream(websocket: WebSocket) -> None:
    """WebSocket endpoint for object lifecycle events."""
    await _stream_channel(websocket, _event_channel)


@app.websocket("/ws/readings")
async def reading_stream(websocket: WebSocket) -> None:
    """WebSocket endpoint for per-reading display updates."""
    await _stream_channel(websocket, _reading_channel)


# =============================================================================
# Main Entry Point
# =============================================================================

def run() -> None:
    """Run the service with uvicorn."""
    import uvicorn

    port = int(os.environ.get("PORT", settings.server.port))

    uvicorn.run(
        "surface_tracker.main:app",
        host=settings.server.host,
        port=port,
        reload=False,
    )


if __name__ == "__main__":
    run()
