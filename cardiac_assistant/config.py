import os
from pydantic_settings import BaseSettings
from pydantic import Field


class ConfigurationError(Exception):
    """Raised when the service is missing configuration it cannot run without."""


class Settings(BaseSettings):
    """
    Application settings with validation.
    Uses Pydantic Settings for automatic env var loading and type validation.
    """

    # --- Remote Agent Platform ---
    azure_ai_foundry_project_endpoint: str = Field(
        ..., description="Azure AI Foundry project endpoint"
    )

    # --- Specialist Agents ---
    # Blank ids are rejected by AgentRegistry with the names of every missing agent
    azure_ai_nursing_agent_id: str = Field(
        default="", description="Cardiac nursing specialist agent id"
    )
    azure_ai_exercise_agent_id: str = Field(
        default="", description="Cardiac exercise specialist agent id"
    )
    azure_ai_diet_agent_id: str = Field(
        default="", description="Cardiac diet specialist agent id"
    )
    azure_ai_medication_agent_id: str = Field(
        default="", description="Cardiac medication specialist agent id"
    )

    # --- Thread Management ---
    thread_ttl_seconds: float = Field(
        default=1800,
        description="Idle time after which a conversation thread is forgotten",
        gt=0,
    )

    # --- Run Polling ---
    poll_interval_seconds: float = Field(
        default=1.0,
        description="Fixed delay between run status checks",
        gt=0,
        le=10,
    )
    max_poll_attempts: int = Field(
        default=30,
        description="Status checks allowed before a run is reported as timed out",
        ge=1,
        le=120,
    )

    # --- Routing ---
    confidence_threshold: float = Field(
        default=0.05,
        description="Minimum classifier confidence for direct specialist routing",
        ge=0,
        le=1,
    )
    adequacy_min_length: int = Field(
        default=50,
        description="Cascade replies must be longer than this to be accepted",
        ge=0,
    )

    # --- Logging ---
    log_level: str = Field(default="INFO", description="Root log level")
    structured_logs: bool = Field(
        default=True, description="Emit JSON logs instead of plain text"
    )

    class Config:
        """Pydantic config."""

        env_file = os.getenv("DOTENV_PATH", ".env")
        case_sensitive = False
        extra = "ignore"


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """
    Get or create settings instance.

    Returns:
        Settings instance

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Drops the cached settings so the next call re-reads the environment."""
    global _settings
    _settings = None


def check_env_vars():
    """
    Validates that all necessary environment variables are loaded.

    Raises:
        ValidationError: If required variables are missing
    """
    try:
        get_settings()
        print("✅ All necessary environment variables are loaded and validated.")
    except Exception as e:
        print(f"❌ Configuration error: {e}")
        raise
