"""
Agent Graph Definition
======================

LangGraph workflow that drives the object tracker one snapshot at a time.

LangGraph is used for CONTROL FLOW only. All tracking decisions live in
the Tracker; the graph sequences them and packages the outbound models.

Graph Structure:
    START → observe → package → END

    observe: Feeds the snapshot's raw reading into the Tracker
    package: Builds the ReadingUpdate (always) and ObjectEvent (at most one)

Design Philosophy:
    - Deterministic: same snapshot sequence, same outputs
    - One Tracker per graph; state is never shared between instances
    - Calls must be serialized by the caller (single processing loop)
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, TypedDict

from langgraph.graph import END, StateGraph

from surface_tracker.models.output import ObjectEvent, ReadingUpdate, TrackedObjectView
from surface_tracker.models.state import TrackerPhase
from surface_tracker.stream.snapshot import Snapshot
from surface_tracker.tracking.reading import GridShape
from surface_tracker.tracking.tracker import Tracker, TrackerThresholds, TrackerUpdate


logger = logging.getLogger(__name__)


class SurfaceGraphState(TypedDict):
    """
    State passed through the agent graph.

    Attributes:
        snapshot: Snapshot being processed
        update: Raw Tracker result for this snapshot
        reading_update: Display payload for this snapshot
        event: Lifecycle event payload, if one fired
        processed: Total snapshots processed
    """

    snapshot: Optional[Snapshot]
    update: Optional[TrackerUpdate]
    reading_update: Optional[ReadingUpdate]
    event: Optional[ObjectEvent]
    processed: int


def create_initial_state() -> SurfaceGraphState:
    """Create initial graph state."""
    return {
        "snapshot": None,
        "update": None,
        "reading_update": None,
        "event": None,
        "processed": 0,
    }


@dataclass(frozen=True)
class ProcessResult:
    """Outputs of one processed snapshot."""

    update: TrackerUpdate
    reading_update: ReadingUpdate
    event: Optional[ObjectEvent]


class SurfaceAgentGraph:
    """
    LangGraph-based driver for the object tracker.

    Receives validated snapshots, runs them through the Tracker and emits
    a ReadingUpdate for every snapshot plus at most one ObjectEvent.
    """

    def __init__(
        self,
        shape: GridShape,
        thresholds: Optional[TrackerThresholds] = None,
        log_every_n_readings: int = 100,
    ) -> None:
        """
        Initialize the agent graph.

        Args:
            shape: Fixed grid shape
            thresholds: Tracker thresholds (uses defaults if None)
            log_every_n_readings: Log a summary every N readings
        """
        self.tracker = Tracker(shape, thresholds)
        self.log_every_n_readings = log_every_n_readings

        self._graph = self._build_graph()
        self._state: SurfaceGraphState = create_initial_state()

        logger.info("SurfaceAgentGraph initialized")

    def _build_graph(self) -> Any:
        """Build the LangGraph workflow."""
        workflow = StateGraph(SurfaceGraphState)

        workflow.add_node("observe", self._observe_node)
        workflow.add_node("package", self._package_node)

        workflow.set_entry_point("observe")
        workflow.add_edge("observe", "package")
        workflow.add_edge("package", END)

        return workflow.compile()

    def _observe_node(self, state: SurfaceGraphState) -> Dict[str, Any]:
        """Run the tracker on the current snapshot."""
        snapshot = state["snapshot"]
        previous_phase = self.tracker.phase

        update = self.tracker.observe(snapshot.reading)

        if update.phase != previous_phase:
            logger.info(
                f"Tracker phase: {previous_phase.value} → {update.phase.value} "
                f"(snapshot {snapshot.sequence})"
            )

        return {
            "update": update,
            "processed": state["processed"] + 1,
        }

    def _package_node(self, state: SurfaceGraphState) -> Dict[str, Any]:
        """Build outbound payloads from the tracker result."""
        snapshot = state["snapshot"]
        update = state["update"]

        reading_update = ReadingUpdate(
            timestamp=snapshot.timestamp,
            phase=update.phase,
            weight=update.reading.weight,
            peak=update.reading.peak,
            cells=update.reading.to_list(),
            objects=[TrackedObjectView.from_object(obj) for obj in update.objects],
        )

        event: Optional[ObjectEvent] = None
        if update.event is not None:
            event = ObjectEvent.from_object(
                update.event.kind,
                update.event.obj,
                update.event.timestamp,
            )
            logger.warning(
                f"OBJECT EVENT: {event.kind.value} id={event.object_id[:8]} "
                f"weight={event.weight:.2f} position={event.position}"
            )

        processed = state["processed"]
        if processed % self.log_every_n_readings == 0:
            logger.info(
                f"Agent [reading {processed}]: phase={update.phase.value}, "
                f"weight={update.reading.weight:.2f}, "
                f"objects={len(update.objects)}"
            )

        return {
            "reading_update": reading_update,
            "event": event,
        }

    def process(self, snapshot: Snapshot) -> ProcessResult:
        """
        Process one validated snapshot.

        This is the main entry point for reading-by-reading processing.

        Args:
            snapshot: Validated snapshot from the ingestion boundary

        Returns:
            ProcessResult with the tracker update, display payload and
            optional lifecycle event
        """
        self._state["snapshot"] = snapshot

        result = self._graph.invoke(self._state)
        self._state = result

        return ProcessResult(
            update=result["update"],
            reading_update=result["reading_update"],
            event=result["event"],
        )

    @property
    def phase(self) -> TrackerPhase:
        """Current tracker phase."""
        return self.tracker.phase

    @property
    def processed(self) -> int:
        """Total snapshots processed."""
        return self._state["processed"]

    def get_metrics(self) -> Dict[str, Any]:
        """Get agent metrics for observability."""
        return {
            "processed": self._state["processed"],
            **self.tracker.get_metrics(),
        }
