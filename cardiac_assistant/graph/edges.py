"""
Graph edge conditions for routing between nodes.
Contains all conditional logic for graph traversal.
"""

from cardiac_assistant.models.domain import OrchestrationState
from cardiac_assistant.utils.logger import get_logger

logger = get_logger(__name__)


def route_after_classify(state: OrchestrationState) -> str:
    """
    Routes to the targeted specialist, or straight to the cascade.

    Returns:
        "primary" if a specialist was selected, "cascade" otherwise
    """
    if state.get("specialist"):
        return "primary"
    logger.info("direct_routing_skipped", action="starting_cascade")
    return "cascade"


def route_after_primary(state: OrchestrationState) -> str:
    """
    Ends on a successful primary reply, otherwise falls back to the cascade.

    Returns:
        "end" or "cascade"
    """
    response = state.get("response")
    if response is not None and response.success:
        return "end"
    return "cascade"


def route_after_cascade(state: OrchestrationState) -> str:
    """
    Decides whether the cascade is done.

    Returns:
        "end" if a reply was accepted, "cascade" while specialists remain,
        "exhausted" otherwise
    """
    if state.get("agent_used"):
        return "end"
    if state.get("cascade_exhausted"):
        return "exhausted"
    return "cascade"
