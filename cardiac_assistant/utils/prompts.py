"""
Centralized prompt and reply-text loading with caching.
Also builds the patient-enriched prompt sent to specialist agents.
"""

import yaml
from pathlib import Path
from functools import lru_cache

from cardiac_assistant.models.domain import PatientContext


@lru_cache(maxsize=1)
def load_prompts() -> dict:
    """
    Loads prompts from the bundled YAML file with LRU cache.

    Returns:
        Dictionary containing all prompt configurations

    Raises:
        FileNotFoundError: If prompts.yaml is not found
    """
    config_path = Path(__file__).parent.parent / "prompts.yaml"
    with open(config_path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f)


def build_patient_prompt(
    message: str, patient_context: PatientContext | None = None
) -> str:
    """
    Wraps a patient question with advisory context for the remote agent.

    Args:
        message: Raw patient message
        patient_context: Optional patient details

    Returns:
        Prompt text, or the bare message when there is no context
    """
    if patient_context is None:
        return message

    header = f"Patient: {patient_context.name}"
    if patient_context.medical_history:
        header += f" (Medical History: {', '.join(patient_context.medical_history)})"

    return f"{header}\n\nQuestion: {message}"
