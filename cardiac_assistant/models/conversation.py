"""
Persisted conversation documents.
One document per conversation holds the ordered, append-only exchange list.
"""

from typing import Literal
from pydantic import BaseModel, Field


class UserMessage(BaseModel):
    content: str
    timestamp: str
    message_length: int


class AIResponse(BaseModel):
    content: str
    timestamp: str
    message_length: int
    processing_time_ms: int
    agent_used: str
    success: bool
    error: str | None = None


class ExchangeMetadata(BaseModel):
    patient_context: dict | None = None
    tags: list[str] = Field(default_factory=list)
    summary: str | None = None
    importance: Literal["low", "medium", "high"] | None = None


class Exchange(BaseModel):
    """One user message paired with the agent reply."""

    exchange_id: str
    exchange_number: int = Field(ge=1)
    timestamp: str
    user_message: UserMessage
    ai_response: AIResponse
    metadata: ExchangeMetadata | None = None


class Conversation(BaseModel):
    """
    Conversation document keyed by (patient_id, id).
    id and conversation_id are the same value.
    """

    id: str
    patient_id: str
    conversation_id: str
    title: str
    start_time: str
    last_message_time: str
    exchange_count: int = 0
    status: Literal["active", "archived", "completed"] = "active"
    tags: list[str] = Field(default_factory=list)
    summary: str | None = None
    type: Literal["conversation"] = "conversation"
    exchanges: list[Exchange] = Field(default_factory=list)
    created_at: str
    updated_at: str


class ConversationHistory(BaseModel):
    conversation: Conversation
    exchanges: list[Exchange]
    total_exchanges: int
    last_activity: str


class ChatReply(BaseModel):
    """What a chat handler returns to the patient UI."""

    success: bool
    message: str
    timestamp: str
    conversation_id: str | None = None
    exchange_number: int | None = None
    error: str | None = None
