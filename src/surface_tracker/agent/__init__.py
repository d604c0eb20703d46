"""
Agent Module
============

LangGraph workflow around the object tracker.

    - graph.py: Workflow definition, state channels and payload packaging

Key Design Decisions:
    - LangGraph is used for STRUCTURE, not LLM reasoning
    - Tracking logic lives in surface_tracker.tracking
    - One graph (and one Tracker) per process, driven by a single loop
"""

from surface_tracker.agent.graph import ProcessResult, SurfaceAgentGraph

__all__ = [
    "ProcessResult",
    "SurfaceAgentGraph",
]
