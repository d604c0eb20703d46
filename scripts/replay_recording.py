#!/usr/bin/env python3
"""
Recording Replay Script
=======================

Standalone script to replay a recorded snapshot stream through the tracker.

This script:
    1. Reads a JSON-lines file (one snapshot message per line)
    2. Validates each line at the ingestion boundary
    3. Feeds accepted readings through a Tracker in order
    4. Prints every lifecycle event as JSON
    5. Reports a final summary

Each line is either a bare matrix or {"cells": [...], "timestamp": ...}.

Usage:
    python scripts/replay_recording.py --input recording.jsonl
    python scripts/replay_recording.py --input rec.jsonl --height 16 --width 16
"""

import argparse
import json
import logging
import os
import sys

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from surface_tracker.models.output import ObjectEvent
from surface_tracker.stream import SnapshotValidator
from surface_tracker.tracking import GridShape, Tracker, TrackerThresholds


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%S",
)
logger = logging.getLogger(__name__)


def replay(
    path: str,
    shape: GridShape,
    thresholds: TrackerThresholds,
) -> dict:
    """
    Replay a recording.

    Args:
        path: JSON-lines recording
        shape: Grid shape of the recording
        thresholds: Tracker thresholds

    Returns:
        Final summary dict
    """
    validator = SnapshotValidator(shape)
    tracker = Tracker(shape, thresholds)
    events = 0

    with open(path, "r") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue

            result = validator.validate(line)
            if not result.accepted:
                continue

            update = tracker.observe(result.snapshot.reading)
            if update.event is None:
                continue

            events += 1
            event = ObjectEvent.from_object(
                update.event.kind,
                update.event.obj,
                result.snapshot.timestamp,
            )
            print(json.dumps(event.model_dump(mode="json")))

    stats = validator.stats
    logger.info("=" * 60)
    logger.info("REPLAY SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Messages read: {stats.received}")
    logger.info(f"Accepted: {stats.accepted}")
    logger.info(f"Rejected: {stats.rejected}")
    logger.info(f"Lifecycle events: {events}")
    logger.info(f"Final phase: {tracker.phase.value}")
    logger.info(f"Objects remaining: {len(tracker.objects)}")
    logger.info("=" * 60)

    return {
        "accepted": stats.accepted,
        "rejected": stats.rejected,
        "events": events,
        "objects_remaining": len(tracker.objects),
    }


def main():
    parser = argparse.ArgumentParser(
        description="Replay a recorded snapshot stream through the object tracker"
    )
    parser.add_argument(
        "--input",
        type=str,
        required=True,
        help="JSON-lines recording, one snapshot per line",
    )
    parser.add_argument("--height", type=int, default=8, help="Grid rows (default: 8)")
    parser.add_argument("--width", type=int, default=8, help="Grid columns (default: 8)")
    parser.add_argument(
        "--new-threshold",
        type=float,
        default=140.0,
        help="New-object threshold (default: 140)",
    )
    parser.add_argument(
        "--delete-threshold",
        type=float,
        default=80.0,
        help="Delete-object threshold (default: 80)",
    )
    parser.add_argument(
        "--calibration-window",
        type=int,
        default=100,
        help="Calibration readings (default: 100)",
    )
    parser.add_argument(
        "--test-window",
        type=int,
        default=20,
        help="Transient test readings (default: 20)",
    )

    args = parser.parse_args()

    result = replay(
        path=args.input,
        shape=GridShape(height=args.height, width=args.width),
        thresholds=TrackerThresholds(
            new_object_threshold=args.new_threshold,
            delete_object_threshold=args.delete_threshold,
            calibration_window=args.calibration_window,
            test_window=args.test_window,
        ),
    )

    sys.exit(0 if result["accepted"] > 0 else 1)


if __name__ == "__main__":
    main()
