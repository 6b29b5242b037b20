"""
Graph package exports for the routing state machine.
"""

from cardiac_assistant.graph.builder import build_graph, build_nodes
from cardiac_assistant.graph.nodes import OrchestrationNodes, is_adequate
from cardiac_assistant.graph.edges import (
    route_after_classify,
    route_after_primary,
    route_after_cascade,
)

__all__ = [
    "build_graph",
    "build_nodes",
    "OrchestrationNodes",
    "is_adequate",
    "route_after_classify",
    "route_after_primary",
    "route_after_cascade",
]
