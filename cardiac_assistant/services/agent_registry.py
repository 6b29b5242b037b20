"""
Static registry of the specialist agents.
"""

from cardiac_assistant.config import ConfigurationError, Settings
from cardiac_assistant.models.domain import Category, SpecializedAgent
from cardiac_assistant.utils.logger import get_logger

logger = get_logger(__name__)


class AgentRegistry:
    """
    Ordered, immutable set of specialists.
    Registration order is also the cascade order.
    """

    def __init__(self, agents: list[SpecializedAgent]):
        """
        Args:
            agents: Specialists in registration order

        Raises:
            ConfigurationError: If no agents are given or any id is blank
        """
        if not agents:
            raise ConfigurationError("At least one specialized agent must be configured.")

        missing = [agent.name for agent in agents if not agent.id.strip()]
        if missing:
            raise ConfigurationError(
                f"Missing agent IDs for: {', '.join(missing)}. "
                "Please configure the corresponding environment variables."
            )

        self.agents: tuple[SpecializedAgent, ...] = tuple(agents)
        self._by_category = {agent.category: agent for agent in self.agents}

        logger.info(
            "agent_registry_initialized",
            agents=[agent.name for agent in self.agents],
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "AgentRegistry":
        return cls(
            [
                SpecializedAgent(
                    id=settings.azure_ai_nursing_agent_id,
                    name="cardiac_nursing_agent",
                    description="Cardiac nursing care and patient support",
                    category=Category.NURSING,
                ),
                SpecializedAgent(
                    id=settings.azure_ai_exercise_agent_id,
                    name="cardiac_exercise_agent",
                    description="Cardiac exercise and rehabilitation guidance",
                    category=Category.EXERCISE,
                ),
                SpecializedAgent(
                    id=settings.azure_ai_diet_agent_id,
                    name="cardiac_diet_agent",
                    description="Cardiac diet and nutrition advice",
                    category=Category.DIET,
                ),
                SpecializedAgent(
                    id=settings.azure_ai_medication_agent_id,
                    name="cardiac_medication_agent",
                    description="Cardiac medication management and guidance",
                    category=Category.MEDICATION,
                ),
            ]
        )

    def specialist_for(self, category: Category) -> SpecializedAgent | None:
        """Returns the specialist for a category; general has none."""
        if category == Category.GENERAL:
            return None
        return self._by_category.get(category)

    def __len__(self) -> int:
        return len(self.agents)
