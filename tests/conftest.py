"""
Shared test fixtures and configuration.
"""

import time
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from cardiac_assistant.config import Settings
from cardiac_assistant.graph.nodes import OrchestrationNodes
from cardiac_assistant.models.domain import PatientContext
from cardiac_assistant.models.schemas import PlatformMessage, RunState, TextContent
from cardiac_assistant.services.agent_registry import AgentRegistry
from cardiac_assistant.services.classifier_service import QueryClassifier
from cardiac_assistant.services.invoker_service import AgentInvoker
from cardiac_assistant.services.orchestration_service import OrchestrationService
from cardiac_assistant.services.thread_service import ThreadManager


NURSING_ID = "asst_nursing"
EXERCISE_ID = "asst_exercise"
DIET_ID = "asst_diet"
MEDICATION_ID = "asst_medication"

LONG_EXERCISE_REPLY = (
    "After bypass surgery, start with short daily walks and build up slowly "
    "as your cardiac rehab team advises."
)
LONG_NURSING_REPLY = (
    "Hello! I am here to help with any questions about your heart health, "
    "symptoms, or recovery."
)


class FakeAgentPlatform:
    """
    In-memory agent platform.

    Behaviour per agent id:
        replies: reply text, an Exception to raise on create_run, or None
            for a run that completes without any assistant text
        statuses: sequence of run statuses returned by get_run; the last
            one repeats forever
    """

    def __init__(self, replies=None, statuses=None):
        self.replies = dict(replies or {})
        self.statuses = dict(statuses or {})
        self.threads: list[str] = []
        self.messages: dict[str, list[PlatformMessage]] = {}
        self.posted: list[tuple[str, str, str]] = []
        self.invocations: list[tuple[str, str]] = []
        self.create_thread_error: Exception | None = None
        self.closed = False
        self._runs: dict[str, dict] = {}

    async def create_thread(self) -> str:
        if self.create_thread_error is not None:
            raise self.create_thread_error
        thread_id = f"thread-{len(self.threads) + 1}"
        self.threads.append(thread_id)
        self.messages[thread_id] = []
        return thread_id

    async def post_message(self, thread_id: str, role: str, text: str) -> None:
        self.posted.append((thread_id, role, text))
        self.messages[thread_id].append(
            PlatformMessage(role=role, content=(TextContent(value=text),))
        )

    async def create_run(self, thread_id: str, agent_id: str) -> str:
        self.invocations.append((thread_id, agent_id))
        reply = self.replies.get(agent_id)
        if isinstance(reply, Exception):
            raise reply
        run_id = f"run-{len(self._runs) + 1}"
        self._runs[run_id] = {
            "thread_id": thread_id,
            "reply": reply,
            "statuses": list(self.statuses.get(agent_id, ["completed"])),
            "polls": 0,
            "answered": False,
        }
        return run_id

    async def get_run(self, thread_id: str, run_id: str) -> RunState:
        run = self._runs[run_id]
        statuses = run["statuses"]
        status = statuses[min(run["polls"], len(statuses) - 1)]
        run["polls"] += 1
        if status == "completed" and not run["answered"]:
            run["answered"] = True
            if run["reply"] is not None:
                self.messages[thread_id].append(
                    PlatformMessage(
                        role="assistant",
                        content=(TextContent(value=run["reply"]),),
                        run_id=run_id,
                    )
                )
        return RunState(run_id=run_id, status=status)

    async def list_messages(self, thread_id: str) -> list[PlatformMessage]:
        return list(reversed(self.messages[thread_id]))

    async def close(self) -> None:
        self.closed = True

    @property
    def invoked_agents(self) -> list[str]:
        return [agent_id for _, agent_id in self.invocations]


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class TickingClock:
    """Aware datetime clock that moves forward one second per call."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current += timedelta(seconds=1)
        return self.current


@pytest.fixture
def settings() -> Settings:
    """Fully configured settings, independent of the environment."""
    return Settings(
        _env_file=None,
        azure_ai_foundry_project_endpoint="https://cardiac.example.test/api/projects/care",
        azure_ai_nursing_agent_id=NURSING_ID,
        azure_ai_exercise_agent_id=EXERCISE_ID,
        azure_ai_diet_agent_id=DIET_ID,
        azure_ai_medication_agent_id=MEDICATION_ID,
    )


@pytest.fixture
def registry(settings) -> AgentRegistry:
    return AgentRegistry.from_settings(settings)


@pytest.fixture
def fake_platform() -> FakeAgentPlatform:
    return FakeAgentPlatform()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def ticking_clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Replaces asyncio.sleep in run polling."""
    return AsyncMock()


@pytest.fixture
def build_orchestrator(registry, settings, no_sleep):
    """Factory building an OrchestrationService over a given platform."""

    def _build(client, clock=None, **overrides) -> OrchestrationService:
        nodes = OrchestrationNodes(
            classifier=QueryClassifier(),
            registry=registry,
            thread_manager=ThreadManager(
                client,
                ttl_seconds=settings.thread_ttl_seconds,
                clock=clock or time.monotonic,
            ),
            invoker=AgentInvoker(
                client,
                poll_interval=settings.poll_interval_seconds,
                max_poll_attempts=settings.max_poll_attempts,
                sleep=no_sleep,
            ),
            confidence_threshold=overrides.get(
                "confidence_threshold", settings.confidence_threshold
            ),
            adequacy_min_length=overrides.get(
                "adequacy_min_length", settings.adequacy_min_length
            ),
        )
        return OrchestrationService(nodes)

    return _build


@pytest.fixture
def patient() -> PatientContext:
    return PatientContext(
        patient_id="PAT-001",
        name="Maria Lopez",
        email="maria@example.test",
        mobile="+1-555-0100",
        medical_history=["CABG 2023", "Hypertension"],
    )
