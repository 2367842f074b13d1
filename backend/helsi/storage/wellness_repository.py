"""
Wellness Repository - Persistent storage for the user, logs and medical documents.

Each collection is one JSON document under a fixed namespace key. Reads of a
missing key yield "no record" (None or an empty list), never an error.
"""

import asyncio
import json
import logging
from typing import Any, List, Optional

from pydantic import TypeAdapter

from ..models import Log, MedicalDocument, User
from .interface import StorageInterface

logger = logging.getLogger(__name__)

USER_KEY = "helsi_user"
LOGS_KEY = "helsi_logs"
MEDICAL_DOCUMENTS_KEY = "helsi_medical_documents"
TERMINAL_STATUSES = ("completed", "failed")

_logs_adapter = TypeAdapter(List[Log])
_documents_adapter = TypeAdapter(List[MedicalDocument])


class WellnessRepository:
    """
    Manages persistent storage of the three record collections.
    Read-modify-write operations are serialized with a lock, so concurrent
    callers in the same process cannot lose each other's updates.
    """

    def __init__(self, storage: StorageInterface):
        """
        Initialize the repository.

        Args:
            storage: StorageInterface implementation (LocalStorage or MemoryStorage)
        """
        self.storage = storage
        self._lock = asyncio.Lock()

    @staticmethod
    def _path(key: str) -> str:
        return f"{key}.json"

    async def _read(self, key: str) -> Optional[Any]:
        content = await self.storage.load(self._path(key))
        if content is None:
            return None
        return json.loads(content.decode('utf-8'))

    async def _write(self, key: str, value: Any) -> None:
        content = json.dumps(value, indent=2, ensure_ascii=False)
        if not await self.storage.save(self._path(key), content):
            raise OSError(f"Failed to write {key}")

    # User

    async def get_user(self) -> Optional[User]:
        """Return the current user, or None if the survey has not been completed."""
        data = await self._read(USER_KEY)
        return User.model_validate(data) if data is not None else None

    async def save_user(self, user: User) -> User:
        """Replace the stored user."""
        async with self._lock:
            await self._write(USER_KEY, user.to_storage())
        return user

    # Logs

    async def get_logs(self) -> List[Log]:
        """All logs in insertion (chronological) order."""
        data = await self._read(LOGS_KEY)
        return _logs_adapter.validate_python(data) if data else []

    async def append_log(self, log: Log) -> Log:
        """Append one log to the end of the collection."""
        async with self._lock:
            data = await self._read(LOGS_KEY) or []
            data.append(log.to_storage())
            await self._write(LOGS_KEY, data)
        return log

    async def save_logs(self, logs: List[Log]) -> None:
        """Replace the whole log collection (demo seeding)."""
        async with self._lock:
            await self._write(LOGS_KEY, [log.to_storage() for log in logs])

    # Medical documents

    async def get_medical_documents(self) -> List[MedicalDocument]:
        data = await self._read(MEDICAL_DOCUMENTS_KEY)
        return _documents_adapter.validate_python(data) if data else []

    async def get_medical_document(self, doc_id: str) -> Optional[MedicalDocument]:
        for document in await self.get_medical_documents():
            if document.id == doc_id:
                return document
        return None

    async def add_medical_document(self, document: MedicalDocument) -> MedicalDocument:
        async with self._lock:
            data = await self._read(MEDICAL_DOCUMENTS_KEY) or []
            data.append(document.to_storage())
            await self._write(MEDICAL_DOCUMENTS_KEY, data)
        return document

    async def update_medical_document(self, doc_id: str, **changes: Any) -> Optional[MedicalDocument]:
        """
        Apply field changes to one document.

        Args:
            doc_id: Document ID
            **changes: snake_case field names and their new values

        Returns:
            Optional[MedicalDocument]: Updated document, or None if not found

        Raises:
            ValueError: If the document already finished and the change would
                move it to another status
        """
        async with self._lock:
            documents = _documents_adapter.validate_python(
                await self._read(MEDICAL_DOCUMENTS_KEY) or []
            )
            updated = None
            for index, document in enumerate(documents):
                if document.id == doc_id:
                    status = changes.get("processing_status", document.processing_status)
                    if document.processing_status in TERMINAL_STATUSES and status != document.processing_status:
                        raise ValueError(
                            f"Document {doc_id} is already {document.processing_status}"
                        )
                    updated = MedicalDocument.model_validate(
                        {**document.model_dump(), **changes}
                    )
                    documents[index] = updated
                    break

            if updated is None:
                return None

            await self._write(MEDICAL_DOCUMENTS_KEY, [d.to_storage() for d in documents])
        return updated

    async def reset(self) -> None:
        """Remove the user, all logs and all medical documents."""
        async with self._lock:
            for key in (USER_KEY, LOGS_KEY, MEDICAL_DOCUMENTS_KEY):
                await self.storage.delete(self._path(key))
        logger.info("All wellness data cleared")


# Global repository instance
_repository: Optional[WellnessRepository] = None


def init_repository(storage: Optional[StorageInterface] = None) -> WellnessRepository:
    """
    Initialize the global repository instance.

    Args:
        storage: Optional StorageInterface implementation. If None, creates LocalStorage.
    """
    global _repository
    if storage is None:
        from .local_storage import LocalStorage
        storage = LocalStorage()
    _repository = WellnessRepository(storage)
    return _repository


def get_repository() -> WellnessRepository:
    """
    Get the global repository instance.

    Raises:
        RuntimeError: If the repository has not been initialized
    """
    if _repository is None:
        raise RuntimeError("Repository not initialized. Call init_repository() first.")
    return _repository
