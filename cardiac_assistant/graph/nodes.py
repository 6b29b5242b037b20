"""
Graph nodes implementing the routing state machine.
Each node is thin and delegates the remote work to services.
"""

import time

from cardiac_assistant.models.domain import (
    AgentResponse,
    Category,
    OrchestrationState,
    SpecializedAgent,
)
from cardiac_assistant.services.agent_registry import AgentRegistry
from cardiac_assistant.services.classifier_service import QueryClassifier
from cardiac_assistant.services.invoker_service import AgentInvoker, failure_response
from cardiac_assistant.services.thread_service import ThreadManager
from cardiac_assistant.utils.metrics import get_metrics
from cardiac_assistant.utils.prompts import build_patient_prompt, load_prompts
from cardiac_assistant.utils.logger import get_logger

logger = get_logger(__name__)
PROMPTS = load_prompts()


def is_adequate(response: AgentResponse | None, min_length: int) -> bool:
    """A cascade reply counts only if it succeeded and is longer than min_length."""
    return (
        response is not None
        and response.success
        and len(response.message) > min_length
    )


class OrchestrationNodes:
    """
    Container for the routing graph nodes.
    States: classify -> try_primary -> cascade -> exhausted.
    """

    def __init__(
        self,
        classifier: QueryClassifier,
        registry: AgentRegistry,
        thread_manager: ThreadManager,
        invoker: AgentInvoker,
        confidence_threshold: float = 0.05,
        adequacy_min_length: int = 50,
    ):
        self.classifier = classifier
        self.registry = registry
        self.thread_manager = thread_manager
        self.invoker = invoker
        self.confidence_threshold = confidence_threshold
        self.adequacy_min_length = adequacy_min_length

    async def classify_node(self, state: OrchestrationState) -> dict:
        """Classifies the message and decides whether to target a specialist."""
        logger.info("node_started", node="classify")

        classification = self.classifier.classify(state["message"])
        specialist = None
        if (
            classification.category != Category.GENERAL
            and classification.confidence > self.confidence_threshold
        ):
            agent = self.registry.specialist_for(classification.category)
            specialist = agent.name if agent else None

        logger.info(
            "query_classified",
            category=classification.category.value,
            confidence=classification.confidence,
            keywords=sorted(classification.matched_keywords),
            specialist=specialist,
        )

        return {
            "classification": classification,
            "prompt": build_patient_prompt(
                state["message"], state.get("patient_context")
            ),
            "specialist": specialist,
            "cascade_index": 0,
            "cascade_exhausted": False,
        }

    async def primary_node(self, state: OrchestrationState) -> dict:
        """Invokes the classified specialist once."""
        agent = next(a for a in self.registry.agents if a.name == state["specialist"])
        logger.info("node_started", node="try_primary", agent=agent.name)

        response, attempt = await self._consult(agent, state, phase="primary")
        update = {"response": response, "attempts": [attempt]}
        if response.success:
            update["agent_used"] = agent.name
        else:
            logger.warning(
                "primary_specialist_failed", agent=agent.name, error=response.error
            )
        return update

    async def cascade_node(self, state: OrchestrationState) -> dict:
        """Invokes the next specialist in registration order."""
        index = state.get("cascade_index", 0)
        agent = self.registry.agents[index]
        logger.info(
            "node_started", node="cascade", agent=agent.name, position=index + 1,
            total=len(self.registry),
        )

        response, attempt = await self._consult(agent, state, phase="cascade")
        adequate = is_adequate(response, self.adequacy_min_length)

        update = {
            "response": response,
            "attempts": [attempt],
            "cascade_index": index + 1,
            "cascade_exhausted": index + 1 >= len(self.registry),
        }
        if adequate:
            logger.info("cascade_reply_accepted", agent=agent.name)
            update["agent_used"] = agent.name
        else:
            logger.info(
                "cascade_reply_rejected",
                agent=agent.name,
                success=response.success,
                reply_length=len(response.message),
            )
        return update

    async def exhausted_node(self, state: OrchestrationState) -> dict:
        """Answers with the protocol message once no specialist could."""
        logger.warning("cascade_exhausted", attempts=len(state.get("attempts", [])))
        return {
            "response": AgentResponse(
                success=True,
                message=PROMPTS["orchestration"]["protocol_message"],
            ),
            "agent_used": "none",
        }

    async def _consult(
        self, agent: SpecializedAgent, state: OrchestrationState, phase: str
    ) -> tuple[AgentResponse, dict]:
        metrics = get_metrics()
        if metrics is not None:
            metrics.start_step(phase)
        start = time.perf_counter()

        try:
            thread_id = await self.thread_manager.thread_for(state.get("conversation_id"))
        except Exception as e:
            logger.error(
                "thread_acquisition_failed", exc_info=True, agent=agent.name, error=str(e)
            )
            response = failure_response(e)
        else:
            response = await self.invoker.invoke(thread_id, agent.id, state["prompt"])

        attempt = {
            "agent": agent.name,
            "phase": phase,
            "success": response.success,
            "elapsed": time.perf_counter() - start,
            "error": response.error,
        }
        if metrics is not None:
            metrics.end_step(phase)
            metrics.record_attempt(**attempt)
        return response, attempt
