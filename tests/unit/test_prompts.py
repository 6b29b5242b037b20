"""
Unit tests for prompt loading and patient prompt construction.
"""

from cardiac_assistant.models.domain import PatientContext
from cardiac_assistant.utils.prompts import build_patient_prompt, load_prompts


class TestBuildPatientPrompt:
    """Tests for wrapping a question with patient context."""

    def test_name_and_history(self, patient):
        """Should prefix the question with name and medical history."""
        # Act
        prompt = build_patient_prompt("Can I climb stairs?", patient)

        # Assert
        assert prompt == (
            "Patient: Maria Lopez (Medical History: CABG 2023, Hypertension)"
            "\n\nQuestion: Can I climb stairs?"
        )

    def test_empty_history_omits_parenthetical(self):
        context = PatientContext(patient_id="PAT-002", name="Sam Reed")

        prompt = build_patient_prompt("Is coffee ok?", context)

        assert prompt == "Patient: Sam Reed\n\nQuestion: Is coffee ok?"

    def test_no_context_is_bare_message(self):
        assert build_patient_prompt("hello") == "hello"
        assert build_patient_prompt("hello", None) == "hello"

    def test_contact_details_are_not_sent(self, patient):
        prompt = build_patient_prompt("hello", patient)

        assert patient.email not in prompt
        assert patient.mobile not in prompt


class TestLoadPrompts:
    """Tests for the bundled reply texts."""

    def test_is_cached(self):
        assert load_prompts() is load_prompts()

    def test_has_every_reply_text(self):
        prompts = load_prompts()

        assert set(prompts["error_responses"]) == {
            "authentication",
            "not_found",
            "permission",
            "timeout",
            "unknown",
        }
        assert prompts["orchestration"]["protocol_message"].startswith(
            "Sorry, this question cannot be answered at this moment."
        )
        assert prompts["conversations"]["default_title"] == "New Conversation"
