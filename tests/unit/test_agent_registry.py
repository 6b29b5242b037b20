"""
Unit tests for AgentRegistry and settings validation.
"""

import pytest
from pydantic import ValidationError

from cardiac_assistant.config import ConfigurationError, Settings
from cardiac_assistant.models.domain import Category, SpecializedAgent
from cardiac_assistant.services.agent_registry import AgentRegistry


class TestSpecialistLookup:
    """Tests for category to specialist mapping."""

    @pytest.mark.parametrize(
        "category, name",
        [
            (Category.EXERCISE, "cardiac_exercise_agent"),
            (Category.DIET, "cardiac_diet_agent"),
            (Category.MEDICATION, "cardiac_medication_agent"),
            (Category.NURSING, "cardiac_nursing_agent"),
        ],
    )
    def test_each_category_has_a_specialist(self, registry, category, name):
        agent = registry.specialist_for(category)

        assert agent is not None
        assert agent.name == name
        assert agent.category == category

    def test_general_has_no_specialist(self, registry):
        assert registry.specialist_for(Category.GENERAL) is None

    def test_registration_order(self, registry):
        """Should keep nursing, exercise, diet, medication order for the cascade."""
        assert [agent.name for agent in registry.agents] == [
            "cardiac_nursing_agent",
            "cardiac_exercise_agent",
            "cardiac_diet_agent",
            "cardiac_medication_agent",
        ]
        assert len(registry) == 4

    def test_ids_come_from_settings(self, registry):
        agent = registry.specialist_for(Category.DIET)

        assert agent.id == "asst_diet"


class TestRegistryValidation:
    """Tests for fatal misconfiguration."""

    def test_missing_ids_are_fatal(self, settings):
        """Should name every agent with a blank id."""
        # Arrange
        broken = settings.model_copy(
            update={"azure_ai_diet_agent_id": "", "azure_ai_medication_agent_id": "  "}
        )

        # Act / Assert
        with pytest.raises(ConfigurationError) as exc_info:
            AgentRegistry.from_settings(broken)

        assert "cardiac_diet_agent" in str(exc_info.value)
        assert "cardiac_medication_agent" in str(exc_info.value)
        assert "cardiac_exercise_agent" not in str(exc_info.value)

    def test_empty_registry_is_fatal(self):
        with pytest.raises(ConfigurationError):
            AgentRegistry([])

    def test_agents_are_immutable(self, registry):
        with pytest.raises(ValidationError):
            registry.agents[0].id = "other"

    def test_custom_agent_list(self):
        agent = SpecializedAgent(
            id="asst_x", name="solo", description="Only agent", category=Category.DIET
        )

        registry = AgentRegistry([agent])

        assert registry.specialist_for(Category.DIET) == agent
        assert registry.specialist_for(Category.EXERCISE) is None


class TestSettings:
    """Tests for environment-driven configuration."""

    def test_defaults(self, settings):
        assert settings.thread_ttl_seconds == 1800
        assert settings.poll_interval_seconds == 1.0
        assert settings.max_poll_attempts == 30
        assert settings.confidence_threshold == 0.05
        assert settings.adequacy_min_length == 50

    def test_endpoint_is_required(self, monkeypatch):
        monkeypatch.delenv("AZURE_AI_FOUNDRY_PROJECT_ENDPOINT", raising=False)

        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("AZURE_AI_FOUNDRY_PROJECT_ENDPOINT", "https://env.example.test")
        monkeypatch.setenv("AZURE_AI_EXERCISE_AGENT_ID", "asst_env_exercise")
        monkeypatch.setenv("ADEQUACY_MIN_LENGTH", "80")

        settings = Settings(_env_file=None)

        assert settings.azure_ai_foundry_project_endpoint == "https://env.example.test"
        assert settings.azure_ai_exercise_agent_id == "asst_env_exercise"
        assert settings.adequacy_min_length == 80

    def test_rejects_out_of_range_threshold(self):
        with pytest.raises(ValidationError):
            Settings(
                _env_file=None,
                azure_ai_foundry_project_endpoint="https://x.test",
                confidence_threshold=1.5,
            )
