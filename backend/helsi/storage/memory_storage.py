"""
In-Memory Storage Implementation.
Used for tests and for ephemeral sessions (``STORAGE_TYPE=memory``).
"""

from typing import Dict, Optional

from .interface import StorageInterface


class MemoryStorage(StorageInterface):
    """Dict-backed storage; values live as long as the instance."""

    def __init__(self):
        self._data: Dict[str, bytes] = {}

    async def save(self, path: str, content: bytes | str) -> bool:
        self._data[path] = content.encode('utf-8') if isinstance(content, str) else bytes(content)
        return True

    async def load(self, path: str) -> Optional[bytes]:
        return self._data.get(path)

    async def exists(self, path: str) -> bool:
        return path in self._data

    async def delete(self, path: str) -> bool:
        return self._data.pop(path, None) is not None
