"""
Orchestration service: the single public entry point of the core.
Classifies a patient message, routes it to a specialist, falls back through
every specialist and always returns a patient-safe AgentResponse.
"""

import time
import uuid

from cardiac_assistant import config
from cardiac_assistant.clients.agent_platform import AgentPlatformClient
from cardiac_assistant.graph.builder import build_graph, build_nodes, build_platform_client
from cardiac_assistant.graph.nodes import OrchestrationNodes
from cardiac_assistant.models.domain import (
    AgentResponse,
    OrchestrationState,
    PatientContext,
    RoutingOutcome,
)
from cardiac_assistant.utils.metrics import MetricsTracker
from cardiac_assistant.utils.prompts import load_prompts
from cardiac_assistant.utils.logger import (
    conversation_context,
    correlation_context,
    get_logger,
)

logger = get_logger(__name__)
PROMPTS = load_prompts()

# Loop headroom on top of one step per specialist
_RECURSION_HEADROOM = 10

SYSTEM_ERROR = "system_error"


class OrchestrationService:
    """
    Routes patient messages through the classify / primary / cascade graph.
    Usable as an async context manager to release the platform client.
    """

    def __init__(
        self,
        nodes: OrchestrationNodes,
        client: AgentPlatformClient | None = None,
    ):
        """
        Initialize orchestration service.

        Args:
            nodes: Graph nodes wired with classifier, registry, threads and invoker
            client: Platform client owned by this service and closed by aclose()
        """
        self.nodes = nodes
        self.client = client
        self.graph = build_graph(nodes)
        self.recursion_limit = len(nodes.registry) + _RECURSION_HEADROOM
        logger.info(
            "orchestration_service_initialized",
            specialists=[agent.name for agent in nodes.registry.agents],
        )

    @classmethod
    def from_settings(
        cls,
        settings: config.Settings | None = None,
        client: AgentPlatformClient | None = None,
    ) -> "OrchestrationService":
        """
        Builds the full service from configuration.
        A client passed in stays the caller's; one built here is owned.

        Raises:
            ConfigurationError: If the endpoint or any specialist id is missing
        """
        settings = settings or config.get_settings()
        if client is not None:
            return cls(build_nodes(settings, client))

        owned = build_platform_client(settings)
        return cls(build_nodes(settings, owned), client=owned)

    async def aclose(self) -> None:
        """Closes the platform client if this service owns one."""
        if self.client is None:
            return
        client, self.client = self.client, None
        await client.close()
        logger.info("orchestration_service_closed")

    async def __aenter__(self) -> "OrchestrationService":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def route(
        self,
        message: str,
        patient_context: PatientContext | None = None,
        conversation_id: str | None = None,
    ) -> AgentResponse:
        """
        Answers a patient message.

        Args:
            message: Patient message
            patient_context: Optional patient details for the prompt
            conversation_id: Keeps the remote thread across turns when given

        Returns:
            AgentResponse; an exhausted cascade is success=True with the
            protocol message
        """
        outcome = await self.route_with_details(message, patient_context, conversation_id)
        return outcome.response

    async def route_with_details(
        self,
        message: str,
        patient_context: PatientContext | None = None,
        conversation_id: str | None = None,
    ) -> RoutingOutcome:
        """Same as route(), plus classification, agent used and attempts."""
        start_time = time.perf_counter()
        tracker = MetricsTracker()

        with correlation_context(str(uuid.uuid4())), conversation_context(conversation_id):
            logger.info(
                "routing_started",
                message_length=len(message),
                patient=patient_context.patient_id if patient_context else None,
            )

            inputs: OrchestrationState = {
                "message": message,
                "patient_context": patient_context,
                "conversation_id": conversation_id,
                "attempts": [],
            }

            try:
                result = await self.graph.ainvoke(
                    inputs, config={"recursion_limit": self.recursion_limit}
                )
            except Exception as e:
                logger.error("routing_failed", exc_info=True, error=str(e))
                tracker.finalize()
                return RoutingOutcome(
                    response=AgentResponse(
                        success=False,
                        message=PROMPTS["orchestration"]["system_error"],
                        error=f"{SYSTEM_ERROR}: {e}",
                    ),
                    elapsed=time.perf_counter() - start_time,
                )

            tracker.finalize()
            outcome = RoutingOutcome(
                response=result["response"],
                classification=result.get("classification"),
                agent_used=result.get("agent_used") or "none",
                attempts=tuple(result.get("attempts", [])),
                elapsed=time.perf_counter() - start_time,
            )
            logger.info(
                "routing_completed",
                success=outcome.response.success,
                agent_used=outcome.agent_used,
                attempts=len(outcome.attempts),
                elapsed=outcome.elapsed,
            )
            return outcome

    async def get_status(self) -> dict[str, str]:
        """Static health descriptor; makes no remote call."""
        return {
            "status": "active",
            "message": PROMPTS["orchestration"]["status_message"],
        }
