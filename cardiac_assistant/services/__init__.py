"""
Services package exports for the routing building blocks.
OrchestrationService and ConversationService depend on the graph package
and are imported from their own modules.
"""

from cardiac_assistant.services.classifier_service import QueryClassifier
from cardiac_assistant.services.agent_registry import AgentRegistry
from cardiac_assistant.services.thread_service import ThreadManager
from cardiac_assistant.services.invoker_service import (
    AgentInvoker,
    ErrorKind,
    classify_error,
    failure_response,
)

__all__ = [
    "QueryClassifier",
    "AgentRegistry",
    "ThreadManager",
    "AgentInvoker",
    "ErrorKind",
    "classify_error",
    "failure_response",
]
