"""
Remote agent platform integration.
Defines the five operations the orchestration core consumes and an
Azure AI Foundry implementation of them.
"""

from typing import Protocol

from azure.ai.agents.aio import AgentsClient
from azure.ai.agents.models import ListSortOrder
from azure.core.credentials_async import AsyncTokenCredential
from azure.identity.aio import DefaultAzureCredential

from cardiac_assistant.config import ConfigurationError
from cardiac_assistant.models.schemas import (
    PlatformMessage,
    RunState,
    enum_value,
    narrow_content,
)
from cardiac_assistant.utils.logger import get_logger

logger = get_logger(__name__)


class AgentPlatformClient(Protocol):
    """Operations the orchestration core needs from an agent platform."""

    async def create_thread(self) -> str: ...

    async def post_message(self, thread_id: str, role: str, text: str) -> None: ...

    async def create_run(self, thread_id: str, agent_id: str) -> str: ...

    async def get_run(self, thread_id: str, run_id: str) -> RunState: ...

    async def list_messages(self, thread_id: str) -> list[PlatformMessage]:
        """Messages of a thread, newest first."""
        ...

    async def close(self) -> None: ...


class AzureAgentPlatformClient:
    """
    AgentPlatformClient backed by the Azure AI Agents SDK.
    Errors raised by the SDK are propagated unchanged.
    """

    def __init__(
        self, endpoint: str, credential: AsyncTokenCredential | None = None
    ):
        """
        Initialize the Azure client.

        Args:
            endpoint: Azure AI Foundry project endpoint
            credential: Opaque credential provider; DefaultAzureCredential if omitted

        Raises:
            ConfigurationError: If endpoint is blank
        """
        if not endpoint or not endpoint.strip():
            raise ConfigurationError(
                "Azure AI Foundry project endpoint is required. "
                "Set AZURE_AI_FOUNDRY_PROJECT_ENDPOINT."
            )
        # A caller-supplied credential stays open for the caller to close
        self._owns_credential = credential is None
        self._credential = credential or DefaultAzureCredential()
        self._client = AgentsClient(endpoint=endpoint, credential=self._credential)
        logger.info("agent_platform_client_initialized", endpoint=endpoint)

    async def create_thread(self) -> str:
        thread = await self._client.threads.create()
        logger.info("remote_thread_created", thread_id=thread.id)
        return thread.id

    async def post_message(self, thread_id: str, role: str, text: str) -> None:
        await self._client.messages.create(
            thread_id=thread_id, role=role, content=text
        )

    async def create_run(self, thread_id: str, agent_id: str) -> str:
        run = await self._client.runs.create(thread_id=thread_id, agent_id=agent_id)
        return run.id

    async def get_run(self, thread_id: str, run_id: str) -> RunState:
        run = await self._client.runs.get(thread_id=thread_id, run_id=run_id)
        last_error = getattr(run, "last_error", None)
        return RunState(
            run_id=run.id,
            status=str(enum_value(run.status)),
            last_error=str(last_error) if last_error else None,
        )

    async def list_messages(self, thread_id: str) -> list[PlatformMessage]:
        messages = []
        async for message in self._client.messages.list(
            thread_id=thread_id, order=ListSortOrder.DESCENDING
        ):
            messages.append(
                PlatformMessage(
                    role=str(enum_value(message.role)),
                    run_id=getattr(message, "run_id", None) or None,
                    content=tuple(
                        narrow_content(block) for block in (message.content or [])
                    ),
                )
            )
        return messages

    async def close(self) -> None:
        """Closes the SDK client, and the credential if this adapter created it."""
        await self._client.close()
        if self._owns_credential:
            await self._credential.close()
        logger.info("agent_platform_client_closed")
