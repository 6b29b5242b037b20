"""
Conversation service: the calling layer around the orchestration core.
Routes each patient message and appends the resulting exchange to the
patient's conversation document.
"""

import re
import secrets
import string
from datetime import datetime, timezone
from typing import Callable

from cardiac_assistant.database.conversation_store import ConversationStore
from cardiac_assistant.models.conversation import (
    AIResponse,
    ChatReply,
    Conversation,
    ConversationHistory,
    Exchange,
    ExchangeMetadata,
    UserMessage,
)
from cardiac_assistant.models.domain import PatientContext, RoutingOutcome
from cardiac_assistant.services.orchestration_service import OrchestrationService
from cardiac_assistant.utils.prompts import load_prompts
from cardiac_assistant.utils.logger import get_logger

logger = get_logger(__name__)
PROMPTS = load_prompts()

TITLE_MAX_LENGTH = 50
_GREETING_PREFIX = re.compile(
    r"^(hi|hello|hey|good morning|good afternoon|good evening)\b[,\s]*", re.IGNORECASE
)
_ID_ALPHABET = string.ascii_uppercase + string.digits
UPDATABLE_FIELDS = frozenset({"title", "status", "tags", "summary"})


class InvalidMessageError(ValueError):
    """Raised when a chat message is missing or blank."""


class ConversationNotFoundError(LookupError):
    """Raised when a conversation does not exist for the patient."""


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _random_suffix(length: int) -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


def generate_conversation_id(now: datetime | None = None) -> str:
    millis = int((now or _utcnow()).timestamp() * 1000)
    return f"CONV-{millis}-{_random_suffix(6)}"


def generate_exchange_id(now: datetime | None = None) -> str:
    millis = int((now or _utcnow()).timestamp() * 1000)
    return f"EXC-{millis}-{_random_suffix(4)}"


def public_error(error: str | None) -> str | None:
    """
    Reduces an internal error to its kind for the patient UI and history.

    "authentication: <SDK message>" becomes "authentication"; bare kinds
    such as "timeout" or a run status pass through.
    """
    if not error:
        return None
    return error.split(":", 1)[0].strip()


def generate_conversation_title(first_message: str) -> str:
    """
    Derives a conversation title from its first message.

    Greetings are stripped; long messages are cut at the last word
    boundary past character 20 and suffixed with "...".
    """
    title = _GREETING_PREFIX.sub("", first_message.strip())

    if len(title) > TITLE_MAX_LENGTH:
        title = title[:TITLE_MAX_LENGTH].strip()
        last_space = title.rfind(" ")
        if last_space > 20:
            title = title[:last_space]
        title += "..."

    return title or PROMPTS["conversations"]["default_title"]


class ConversationService:
    """
    Persists conversations as single documents with an embedded,
    append-only exchange list.

    Exchange numbers are assigned by read-modify-write of the whole
    document, so concurrent appends to one conversation can lose an update.
    """

    def __init__(
        self,
        orchestrator: OrchestrationService,
        store: ConversationStore,
        clock: Callable[[], datetime] = _utcnow,
    ):
        """
        Args:
            orchestrator: Routes messages to specialist agents
            store: Document store for conversations
            clock: Source of aware datetimes for timestamps
        """
        self.orchestrator = orchestrator
        self.store = store
        self.clock = clock

    def _timestamp(self) -> str:
        return self.clock().isoformat()

    async def start_conversation(
        self,
        patient_id: str,
        title: str | None = None,
        initial_message: str | None = None,
    ) -> Conversation:
        """Creates an empty conversation for a patient."""
        now = self.clock()
        timestamp = now.isoformat()
        conversation_id = generate_conversation_id(now)

        conversation = Conversation(
            id=conversation_id,
            patient_id=patient_id,
            conversation_id=conversation_id,
            title=title or generate_conversation_title(initial_message or ""),
            start_time=timestamp,
            last_message_time=timestamp,
            created_at=timestamp,
            updated_at=timestamp,
        )
        await self.store.upsert(conversation.model_dump())

        logger.info(
            "conversation_created",
            patient_id=patient_id,
            conversation_id=conversation_id,
            title=conversation.title,
        )
        return conversation

    async def get_conversation(self, patient_id: str, conversation_id: str) -> Conversation:
        """
        Raises:
            ConversationNotFoundError: If the patient has no such conversation
        """
        document = await self.store.get(patient_id, conversation_id)
        if document is None or document.get("type") != "conversation":
            raise ConversationNotFoundError(
                f"Conversation {conversation_id} not found for patient {patient_id}"
            )
        return Conversation.model_validate(document)

    async def send_message(
        self,
        patient_id: str,
        message: str,
        patient_context: PatientContext | None = None,
        conversation_id: str | None = None,
    ) -> ChatReply:
        """
        Answers a patient message and records the exchange.

        Without a conversation ID the question is one-off: it gets a fresh
        remote thread and nothing is persisted.

        Args:
            patient_id: Owner of the conversation
            message: Patient message
            patient_context: Optional patient details for the prompt
            conversation_id: Existing conversation to continue

        Returns:
            ChatReply for the patient UI

        Raises:
            InvalidMessageError: If message is missing or blank
            ConversationNotFoundError: If conversation_id is unknown
        """
        if not isinstance(message, str) or not message.strip():
            raise InvalidMessageError("Message is required and must be a non-empty string")

        if conversation_id:
            await self.get_conversation(patient_id, conversation_id)

        user_timestamp = self._timestamp()
        outcome = await self.orchestrator.route_with_details(
            message, patient_context, conversation_id
        )
        reply_timestamp = self._timestamp()

        if outcome.response.error:
            # Full detail stays in the logs; the reply carries only the kind
            logger.warning(
                "reply_error",
                patient_id=patient_id,
                conversation_id=conversation_id,
                agent_used=outcome.agent_used,
                error=outcome.response.error,
            )

        exchange_number = None
        if conversation_id:
            try:
                exchange = await self.append_exchange(
                    patient_id,
                    conversation_id,
                    message,
                    outcome,
                    user_timestamp=user_timestamp,
                    reply_timestamp=reply_timestamp,
                    patient_context=patient_context,
                )
                exchange_number = exchange.exchange_number
            except Exception as e:
                # The patient still gets the answer; the history misses one turn
                logger.error(
                    "exchange_persist_failed",
                    exc_info=True,
                    patient_id=patient_id,
                    conversation_id=conversation_id,
                    error=str(e),
                )

        return ChatReply(
            success=outcome.response.success,
            message=outcome.response.message,
            timestamp=reply_timestamp,
            conversation_id=conversation_id,
            exchange_number=exchange_number,
            error=public_error(outcome.response.error),
        )

    async def append_exchange(
        self,
        patient_id: str,
        conversation_id: str,
        user_message: str,
        outcome: RoutingOutcome,
        user_timestamp: str | None = None,
        reply_timestamp: str | None = None,
        patient_context: PatientContext | None = None,
    ) -> Exchange:
        """
        Appends one exchange to a conversation document.

        Returns:
            The stored exchange, numbered len(exchanges) + 1

        Raises:
            ConversationNotFoundError: If the conversation does not exist
        """
        conversation = await self.get_conversation(patient_id, conversation_id)
        now = self._timestamp()
        user_timestamp = user_timestamp or now
        reply_timestamp = reply_timestamp or now
        response = outcome.response

        tags = []
        if outcome.classification is not None:
            tags.append(outcome.classification.category.value)

        exchange = Exchange(
            exchange_id=generate_exchange_id(self.clock()),
            exchange_number=len(conversation.exchanges) + 1,
            timestamp=user_timestamp,
            user_message=UserMessage(
                content=user_message,
                timestamp=user_timestamp,
                message_length=len(user_message),
            ),
            ai_response=AIResponse(
                content=response.message,
                timestamp=reply_timestamp,
                message_length=len(response.message),
                processing_time_ms=round(outcome.elapsed * 1000),
                agent_used=outcome.agent_used,
                success=response.success,
                error=public_error(response.error),
            ),
            metadata=ExchangeMetadata(
                patient_context=(
                    patient_context.model_dump(exclude={"patient_id"})
                    if patient_context
                    else None
                ),
                tags=tags,
            ),
        )

        conversation.exchanges.append(exchange)
        conversation.exchange_count = exchange.exchange_number
        conversation.last_message_time = reply_timestamp
        conversation.updated_at = now
        for tag in tags:
            if tag not in conversation.tags:
                conversation.tags.append(tag)

        await self.store.upsert(conversation.model_dump())

        logger.info(
            "exchange_saved",
            conversation_id=conversation_id,
            exchange_id=exchange.exchange_id,
            exchange_number=exchange.exchange_number,
            processing_time_ms=exchange.ai_response.processing_time_ms,
        )
        return exchange

    async def get_exchanges(
        self,
        patient_id: str,
        conversation_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Exchange], int]:
        """
        Returns a page of exchanges in conversation order and the total count.
        """
        conversation = await self.get_conversation(patient_id, conversation_id)
        exchanges = conversation.exchanges
        return exchanges[offset:offset + limit], len(exchanges)

    async def get_history(self, patient_id: str, conversation_id: str) -> ConversationHistory:
        conversation = await self.get_conversation(patient_id, conversation_id)
        return ConversationHistory(
            conversation=conversation,
            exchanges=conversation.exchanges,
            total_exchanges=len(conversation.exchanges),
            last_activity=conversation.last_message_time,
        )

    async def list_conversations(self, patient_id: str) -> list[ConversationHistory]:
        """All conversations of a patient, most recently active first."""
        conversations = [
            Conversation.model_validate(document)
            for document in await self.store.query(patient_id)
            if document.get("type") == "conversation"
        ]
        conversations.sort(key=lambda c: c.last_message_time, reverse=True)
        return [
            ConversationHistory(
                conversation=conversation,
                exchanges=conversation.exchanges,
                total_exchanges=len(conversation.exchanges),
                last_activity=conversation.last_message_time,
            )
            for conversation in conversations
        ]

    async def get_all_exchanges(self, patient_id: str) -> list[Exchange]:
        """Every exchange of a patient, highest exchange number first."""
        exchanges = [
            exchange
            for history in await self.list_conversations(patient_id)
            for exchange in history.exchanges
        ]
        exchanges.sort(key=lambda e: e.exchange_number, reverse=True)
        return exchanges

    async def update_conversation(
        self, patient_id: str, conversation_id: str, **updates
    ) -> Conversation:
        """
        Updates title, status, tags or summary of a conversation.

        Raises:
            ValueError: If a field outside title/status/tags/summary is given
            ConversationNotFoundError: If the conversation does not exist
        """
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        conversation = await self.get_conversation(patient_id, conversation_id)
        updated = Conversation.model_validate(
            {**conversation.model_dump(), **updates, "updated_at": self._timestamp()}
        )
        await self.store.upsert(updated.model_dump())

        logger.info(
            "conversation_updated",
            conversation_id=conversation_id,
            fields=sorted(updates),
        )
        return updated

    async def delete_conversation(self, patient_id: str, conversation_id: str) -> None:
        """
        Raises:
            ConversationNotFoundError: If the conversation does not exist
        """
        await self.get_conversation(patient_id, conversation_id)
        await self.store.delete(patient_id, conversation_id)
        logger.info("conversation_deleted", conversation_id=conversation_id)
