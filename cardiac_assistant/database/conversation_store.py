"""
Keyed document store for conversation documents.
Documents are read and written whole; there is no partial update.
"""

import asyncio
import copy
from typing import Protocol

from cardiac_assistant.utils.logger import get_logger

logger = get_logger(__name__)


class DocumentNotFoundError(LookupError):
    """Raised when a document to delete does not exist."""


class ConversationStore(Protocol):
    """Async document store partitioned by patient ID."""

    async def get(self, patient_id: str, doc_id: str) -> dict | None: ...

    async def upsert(self, document: dict) -> dict: ...

    async def query(self, patient_id: str) -> list[dict]: ...

    async def delete(self, patient_id: str, doc_id: str) -> None: ...


class InMemoryConversationStore:
    """
    ConversationStore held in process memory.
    Hands out deep copies so callers must write back to persist changes.
    """

    def __init__(self):
        self._documents: dict[tuple[str, str], dict] = {}
        self._lock = asyncio.Lock()

    async def get(self, patient_id: str, doc_id: str) -> dict | None:
        document = self._documents.get((patient_id, doc_id))
        return copy.deepcopy(document) if document is not None else None

    async def upsert(self, document: dict) -> dict:
        """
        Inserts or replaces a document.

        Raises:
            ValueError: If the document lacks "patient_id" or "id"
        """
        try:
            key = (document["patient_id"], document["id"])
        except KeyError as e:
            raise ValueError(f"Document is missing key field {e}") from e

        async with self._lock:
            self._documents[key] = copy.deepcopy(document)
        logger.debug("document_upserted", patient_id=key[0], doc_id=key[1])
        return copy.deepcopy(document)

    async def query(self, patient_id: str) -> list[dict]:
        return [
            copy.deepcopy(document)
            for (owner, _), document in self._documents.items()
            if owner == patient_id
        ]

    async def delete(self, patient_id: str, doc_id: str) -> None:
        async with self._lock:
            if self._documents.pop((patient_id, doc_id), None) is None:
                raise DocumentNotFoundError(
                    f"Document {doc_id} not found for patient {patient_id}"
                )
        logger.debug("document_deleted", patient_id=patient_id, doc_id=doc_id)
