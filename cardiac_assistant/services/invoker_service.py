"""
Agent invocation service.
Runs one request/response cycle against a single remote agent: post the
prompt, start a run, poll it to completion and extract the reply text.
"""

import asyncio
import time
from enum import Enum
from typing import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from cardiac_assistant.clients.agent_platform import AgentPlatformClient
from cardiac_assistant.models.domain import AgentResponse
from cardiac_assistant.models.schemas import (
    ASSISTANT_ROLE,
    RUN_COMPLETED,
    USER_ROLE,
    PlatformMessage,
    RunState,
)
from cardiac_assistant.utils.prompts import load_prompts
from cardiac_assistant.utils.logger import get_logger

logger = get_logger(__name__)
PROMPTS = load_prompts()

TIMEOUT_ERROR = "timeout"
EMPTY_RESPONSE_ERROR = "empty_response"


class ErrorKind(str, Enum):
    """User-facing classes of remote failures."""

    AUTHENTICATION = "authentication"
    NOT_FOUND = "not_found"
    PERMISSION = "permission"
    TIMEOUT = "timeout"
    UNKNOWN = "unknown"


# Checked in order; first hit wins
ERROR_MARKERS: tuple[tuple[ErrorKind, tuple[str, ...]], ...] = (
    (ErrorKind.AUTHENTICATION, ("401", "unauthorized", "authentication")),
    (ErrorKind.NOT_FOUND, ("404", "not found", "notfound")),
    (ErrorKind.PERMISSION, ("403", "forbidden", "permission")),
    (ErrorKind.TIMEOUT, ("timeout", "timed out")),
)


def classify_error(error: BaseException) -> ErrorKind:
    """
    Classifies a remote failure by sniffing its type name and message.

    Args:
        error: Exception raised by the platform client

    Returns:
        Matching ErrorKind, UNKNOWN if nothing matched
    """
    text = f"{type(error).__name__}: {error}".lower()
    for kind, markers in ERROR_MARKERS:
        if any(marker in text for marker in markers):
            return kind
    return ErrorKind.UNKNOWN


def failure_response(error: BaseException) -> AgentResponse:
    """Converts a remote failure into a patient-safe AgentResponse."""
    kind = classify_error(error)
    return AgentResponse(
        success=False,
        message=PROMPTS["error_responses"][kind.value],
        error=f"{kind.value}: {error}",
    )


def latest_assistant_text(
    messages: list[PlatformMessage], run_id: str | None = None
) -> str | None:
    """
    Finds the newest assistant message that holds a text block.

    Args:
        messages: Thread messages, newest first
        run_id: Only consider messages written by this run; a reused
            thread also holds replies from earlier turns and agents

    Returns:
        Text of that block, or None
    """
    for message in messages:
        if message.role != ASSISTANT_ROLE:
            continue
        if run_id is not None and message.run_id != run_id:
            continue
        text = message.first_text()
        if text is not None:
            return text
    return None


class AgentInvoker:
    """
    Performs a single agent invocation with bounded run polling.
    Never raises for remote failures; every outcome is an AgentResponse.
    """

    def __init__(
        self,
        client: AgentPlatformClient,
        poll_interval: float = 1.0,
        max_poll_attempts: int = 30,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize agent invoker.

        Args:
            client: Remote agent platform client
            poll_interval: Fixed seconds between run status checks
            max_poll_attempts: Status checks allowed after the initial one
            sleep: Awaitable sleep used between checks
        """
        self.client = client
        self.poll_interval = poll_interval
        self.max_poll_attempts = max_poll_attempts
        self.sleep = sleep

    async def invoke(self, thread_id: str, agent_id: str, prompt: str) -> AgentResponse:
        """
        Sends a prompt to an agent on a thread and waits for its reply.

        Args:
            thread_id: Remote thread to post on
            agent_id: Remote agent to run
            prompt: Text of the user turn

        Returns:
            AgentResponse; success only when the agent produced text
        """
        start_time = time.perf_counter()
        logger.info(
            "agent_invocation_started",
            agent_id=agent_id,
            thread_id=thread_id,
            prompt_length=len(prompt),
        )

        try:
            await self.client.post_message(thread_id, USER_ROLE, prompt)
            run_id = await self.client.create_run(thread_id, agent_id)
            logger.info("agent_run_started", agent_id=agent_id, run_id=run_id)

            try:
                run = await self._wait_for_run(thread_id, run_id)
            except RetryError:
                logger.warning(
                    "agent_run_timeout",
                    agent_id=agent_id,
                    run_id=run_id,
                    attempts=self.max_poll_attempts,
                    elapsed=time.perf_counter() - start_time,
                )
                return AgentResponse(
                    success=False,
                    message=PROMPTS["agent_responses"]["timeout"],
                    error=TIMEOUT_ERROR,
                )

            if run.status != RUN_COMPLETED:
                logger.warning(
                    "agent_run_failed",
                    agent_id=agent_id,
                    run_id=run_id,
                    status=run.status,
                    last_error=run.last_error,
                )
                return AgentResponse(
                    success=False,
                    message=PROMPTS["agent_responses"]["run_failed"],
                    error=run.status,
                )

            messages = await self.client.list_messages(thread_id)
            text = latest_assistant_text(messages, run_id)
            if text is None:
                logger.warning(
                    "agent_reply_missing",
                    agent_id=agent_id,
                    run_id=run_id,
                    messages=len(messages),
                )
                return AgentResponse(
                    success=False,
                    message=PROMPTS["agent_responses"]["empty_response"],
                    error=EMPTY_RESPONSE_ERROR,
                )

            logger.info(
                "agent_invocation_completed",
                agent_id=agent_id,
                run_id=run_id,
                reply_length=len(text),
                elapsed=time.perf_counter() - start_time,
            )
            return AgentResponse(success=True, message=text)

        except Exception as e:
            response = failure_response(e)
            logger.error(
                "agent_invocation_error",
                exc_info=True,
                agent_id=agent_id,
                thread_id=thread_id,
                error_kind=classify_error(e).value,
                error=str(e),
                elapsed=time.perf_counter() - start_time,
            )
            return response

    async def _wait_for_run(self, thread_id: str, run_id: str) -> RunState:
        """
        Polls a run until it leaves the queued/in_progress states.

        Raises:
            RetryError: If the run is still pending after the polling budget
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_poll_attempts + 1),
            wait=wait_fixed(self.poll_interval),
            retry=retry_if_result(lambda run: run.pending),
            before_sleep=self._log_poll,
            sleep=self.sleep,
        )
        return await retrying(self.client.get_run, thread_id, run_id)

    def _log_poll(self, retry_state: RetryCallState) -> None:
        run = retry_state.outcome.result()
        logger.debug(
            "agent_run_polled",
            run_id=run.run_id,
            status=run.status,
            attempt=retry_state.attempt_number,
            max_attempts=self.max_poll_attempts,
        )
