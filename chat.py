"""
Console entry point for the cardiac care assistant.
Keeps one conversation (and so one remote thread) for the whole session.
"""

import asyncio
import argparse

from cardiac_assistant import config
from cardiac_assistant.database.conversation_store import InMemoryConversationStore
from cardiac_assistant.models.domain import PatientContext
from cardiac_assistant.services.conversation_service import ConversationService
from cardiac_assistant.services.orchestration_service import OrchestrationService
from cardiac_assistant.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


async def run_console_chat(patient: PatientContext, one_off: bool = False) -> None:
    """Async main loop for console chat interaction."""
    config.check_env_vars()
    settings = config.get_settings()
    configure_logging(level=settings.log_level, use_structured=False)

    async with OrchestrationService.from_settings(settings) as orchestrator:
        await _chat_session(orchestrator, patient, one_off)

    print("\nGoodbye! Take care of your heart.")


async def _chat_session(
    orchestrator: OrchestrationService, patient: PatientContext, one_off: bool
) -> None:
    conversations = ConversationService(orchestrator, InMemoryConversationStore())

    conversation_id = None
    if not one_off:
        conversation = await conversations.start_conversation(patient.patient_id)
        conversation_id = conversation.conversation_id

    status = await orchestrator.get_status()
    logger.info("console_mode_started", conversation_id=conversation_id)

    print("\n" + "=" * 60)
    print(status["message"])
    print("Type 'exit' or 'quit' to stop")
    print("=" * 60 + "\n")

    while True:
        try:
            question = input("\nYour question: ")
            if question.lower() in ["exit", "quit"]:
                break
            if not question.strip():
                continue

            print("\n--- Consulting specialists... ---")
            reply = await conversations.send_message(
                patient.patient_id,
                question,
                patient_context=patient,
                conversation_id=conversation_id,
            )
            print(f"\nAssistant:\n{reply.message}")

        except KeyboardInterrupt:
            logger.info("conversation_interrupted_by_user")
            break

    if conversation_id:
        history = await conversations.get_history(patient.patient_id, conversation_id)
        logger.info(
            "conversation_ended",
            conversation_id=conversation_id,
            exchanges=history.total_exchanges,
        )


def main() -> int:
    parser = argparse.ArgumentParser(description="Chat with the cardiac care assistant")
    parser.add_argument("--patient-id", default="console-patient")
    parser.add_argument("--name", default="Console Patient")
    parser.add_argument(
        "--history",
        action="append",
        default=[],
        help="Medical history entry (repeatable)",
    )
    parser.add_argument(
        "--one-off",
        action="store_true",
        help="Do not keep a conversation thread between questions",
    )
    args = parser.parse_args()

    patient = PatientContext(
        patient_id=args.patient_id, name=args.name, medical_history=args.history
    )
    asyncio.run(run_console_chat(patient, one_off=args.one_off))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
