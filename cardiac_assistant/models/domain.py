"""
Domain models for the orchestration core.
OrchestrationState is the state object carried through the routing graph.
"""

import operator
from enum import Enum
from typing import Annotated, Any
from typing_extensions import TypedDict
from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Routing categories produced by the keyword classifier."""

    EXERCISE = "exercise"
    DIET = "diet"
    MEDICATION = "medication"
    NURSING = "nursing"
    GENERAL = "general"


class PatientContext(BaseModel):
    """Read-only patient details used to enrich outbound prompts."""

    model_config = ConfigDict(frozen=True)

    patient_id: str
    name: str
    email: str | None = None
    mobile: str | None = None
    medical_history: tuple[str, ...] = ()


class SpecializedAgent(BaseModel):
    """
    A domain-scoped remote agent.

    Attributes:
        id: Opaque remote agent identifier
        name: Symbolic key, e.g. "cardiac_exercise_agent"
        description: Free-text summary of the agent's domain
        category: Classification category this agent answers
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    category: Category


class ConversationThread(BaseModel):
    """Link between a local conversation and its remote thread."""

    conversation_id: str
    thread_id: str
    last_used: float


class ClassificationResult(BaseModel):
    """Outcome of classifying one message; recomputed on every call."""

    model_config = ConfigDict(frozen=True)

    category: Category
    confidence: float = Field(ge=0, le=1)
    matched_keywords: frozenset[str] = frozenset()


class AgentResponse(BaseModel):
    """Terminal output of an agent invocation or a full routing request."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
    error: str | None = None


class RoutingOutcome(BaseModel):
    """AgentResponse plus the routing details a persistence layer records."""

    model_config = ConfigDict(frozen=True)

    response: AgentResponse
    classification: ClassificationResult | None = None
    agent_used: str = "none"
    attempts: tuple[dict[str, Any], ...] = ()
    elapsed: float = 0.0


class OrchestrationState(TypedDict, total=False):
    """
    State of one routing request inside the orchestration graph.

    Attributes:
        message: Raw patient message.
        patient_context: Optional patient details.
        conversation_id: Conversation to keep the remote thread for, if any.
        prompt: Message wrapped with patient context.
        classification: Result of the keyword classifier.
        specialist: Name of the directly targeted specialist, if any.
        cascade_index: Position of the next specialist to try in the cascade.
        cascade_exhausted: True once every specialist has been tried.
        response: Final or latest AgentResponse.
        agent_used: Name of the agent whose reply was accepted.
        attempts: Ordered record of every specialist attempt.
    """

    message: str
    patient_context: PatientContext | None
    conversation_id: str | None
    prompt: str
    classification: ClassificationResult
    specialist: str | None
    cascade_index: int
    cascade_exhausted: bool
    response: AgentResponse | None
    agent_used: str
    attempts: Annotated[list[dict[str, Any]], operator.add]
