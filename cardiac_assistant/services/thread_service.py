"""
Conversation thread management.
Keeps one remote thread per conversation so agents see earlier turns.
"""

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator, Callable

from cardiac_assistant.clients.agent_platform import AgentPlatformClient
from cardiac_assistant.models.domain import ConversationThread
from cardiac_assistant.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_THREAD_TTL = 30 * 60


@dataclass
class _LockEntry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class ThreadManager:
    """
    Maps conversation IDs to remote thread IDs with idle expiry.

    Calls for the same conversation are serialized, so concurrent turns
    never create two threads for one conversation.
    """

    def __init__(
        self,
        client: AgentPlatformClient,
        ttl_seconds: float = DEFAULT_THREAD_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            client: Remote agent platform client
            ttl_seconds: Idle time after which a mapping is dropped
            clock: Source of the current time in seconds
        """
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._threads: dict[str, ConversationThread] = {}
        self._locks: dict[str, _LockEntry] = {}

    @property
    def active_threads(self) -> int:
        return len(self._threads)

    def sweep_expired(self) -> int:
        """
        Drops every mapping idle for longer than the TTL.
        Remote threads are not deleted; the platform expires them itself.

        Returns:
            Number of mappings dropped
        """
        now = self.clock()
        expired = [
            conversation_id
            for conversation_id, thread in self._threads.items()
            if now - thread.last_used > self.ttl_seconds
        ]
        for conversation_id in expired:
            thread = self._threads.pop(conversation_id)
            logger.info(
                "thread_expired",
                conversation_id=conversation_id,
                thread_id=thread.thread_id,
                idle_seconds=now - thread.last_used,
            )
        return len(expired)

    async def thread_for(self, conversation_id: str | None = None) -> str:
        """
        Returns the remote thread for a conversation, creating it if needed.

        Args:
            conversation_id: Conversation ID, or None for a one-off question

        Returns:
            Remote thread ID

        Raises:
            Exception: Thread creation errors are propagated unchanged
        """
        self.sweep_expired()

        if not conversation_id:
            thread_id = await self.client.create_thread()
            logger.info("ephemeral_thread_created", thread_id=thread_id)
            return thread_id

        async with self._conversation_lock(conversation_id):
            tracked = self._threads.get(conversation_id)
            if tracked is not None:
                tracked.last_used = self.clock()
                logger.info(
                    "thread_reused",
                    conversation_id=conversation_id,
                    thread_id=tracked.thread_id,
                )
                return tracked.thread_id

            thread_id = await self.client.create_thread()
            self._threads[conversation_id] = ConversationThread(
                conversation_id=conversation_id,
                thread_id=thread_id,
                last_used=self.clock(),
            )
            logger.info(
                "thread_created",
                conversation_id=conversation_id,
                thread_id=thread_id,
                active_threads=len(self._threads),
            )
            return thread_id

    @asynccontextmanager
    async def _conversation_lock(self, conversation_id: str) -> AsyncIterator[None]:
        entry = self._locks.get(conversation_id)
        if entry is None:
            entry = self._locks[conversation_id] = _LockEntry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                del self._locks[conversation_id]
