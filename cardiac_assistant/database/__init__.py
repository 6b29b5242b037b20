"""
Database package exports for conversation persistence.
"""

from cardiac_assistant.database.conversation_store import (
    ConversationStore,
    InMemoryConversationStore,
    DocumentNotFoundError,
)

__all__ = ["ConversationStore", "InMemoryConversationStore", "DocumentNotFoundError"]
