"""
Models package exports for domain, platform schemas, and conversations.
"""

from cardiac_assistant.models.domain import (
    AgentResponse,
    Category,
    ClassificationResult,
    ConversationThread,
    OrchestrationState,
    PatientContext,
    RoutingOutcome,
    SpecializedAgent,
)
from cardiac_assistant.models.schemas import (
    OtherContent,
    PlatformMessage,
    RunState,
    TextContent,
    narrow_content,
)
from cardiac_assistant.models.conversation import (
    ChatReply,
    Conversation,
    ConversationHistory,
    Exchange,
)

__all__ = [
    "AgentResponse",
    "Category",
    "ClassificationResult",
    "ConversationThread",
    "OrchestrationState",
    "PatientContext",
    "RoutingOutcome",
    "SpecializedAgent",
    "OtherContent",
    "PlatformMessage",
    "RunState",
    "TextContent",
    "narrow_content",
    "ChatReply",
    "Conversation",
    "ConversationHistory",
    "Exchange",
]
