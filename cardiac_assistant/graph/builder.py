"""
Graph builder for the routing workflow.
Assembles nodes, edges, and services into an executable graph.
"""

from langgraph.graph import StateGraph, END

from cardiac_assistant import config
from cardiac_assistant.clients.agent_platform import (
    AgentPlatformClient,
    AzureAgentPlatformClient,
)
from cardiac_assistant.models.domain import OrchestrationState
from cardiac_assistant.services.agent_registry import AgentRegistry
from cardiac_assistant.services.classifier_service import QueryClassifier
from cardiac_assistant.services.invoker_service import AgentInvoker
from cardiac_assistant.services.thread_service import ThreadManager
from cardiac_assistant.graph.nodes import OrchestrationNodes
from cardiac_assistant.graph.edges import (
    route_after_classify,
    route_after_primary,
    route_after_cascade,
)
from cardiac_assistant.utils.logger import get_logger

logger = get_logger(__name__)


def build_graph(nodes: OrchestrationNodes):
    """
    Builds and compiles the routing state machine.

    Args:
        nodes: Node container wired with services

    Returns:
        Compiled graph ready for execution
    """
    logger.info("graph_workflow_building")
    workflow = StateGraph(OrchestrationState)

    workflow.add_node("classify", nodes.classify_node)
    workflow.add_node("try_primary", nodes.primary_node)
    workflow.add_node("cascade", nodes.cascade_node)
    workflow.add_node("exhausted", nodes.exhausted_node)

    workflow.set_entry_point("classify")

    workflow.add_conditional_edges(
        "classify",
        route_after_classify,
        {"primary": "try_primary", "cascade": "cascade"},
    )

    workflow.add_conditional_edges(
        "try_primary",
        route_after_primary,
        {"end": END, "cascade": "cascade"},
    )

    workflow.add_conditional_edges(
        "cascade",
        route_after_cascade,
        {"end": END, "cascade": "cascade", "exhausted": "exhausted"},
    )

    workflow.add_edge("exhausted", END)

    logger.info("graph_compiling")
    return workflow.compile()


def build_nodes(
    settings: config.Settings,
    client: AgentPlatformClient,
    registry: AgentRegistry | None = None,
) -> OrchestrationNodes:
    """
    Wires classifier, registry, thread manager and invoker from settings.

    Raises:
        ConfigurationError: If any specialist id is missing
    """
    logger.info("graph_components_initializing")

    return OrchestrationNodes(
        classifier=QueryClassifier(),
        registry=registry or AgentRegistry.from_settings(settings),
        thread_manager=ThreadManager(client, ttl_seconds=settings.thread_ttl_seconds),
        invoker=AgentInvoker(
            client,
            poll_interval=settings.poll_interval_seconds,
            max_poll_attempts=settings.max_poll_attempts,
        ),
        confidence_threshold=settings.confidence_threshold,
        adequacy_min_length=settings.adequacy_min_length,
    )


def build_platform_client(settings: config.Settings) -> AgentPlatformClient:
    return AzureAgentPlatformClient(settings.azure_ai_foundry_project_endpoint)
