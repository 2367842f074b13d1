"""
Storage Interface - Abstract base class for all storage implementations.
The repository only relies on this contract, so the backing medium can change.
"""

from abc import ABC, abstractmethod
from typing import Optional


class StorageInterface(ABC):
    """
    Abstract key/path addressed blob storage.
    Every ``save`` replaces the whole value; readers never observe a partial write.
    """

    @abstractmethod
    async def save(self, path: str, content: bytes | str) -> bool:
        """
        Save content to the specified path, replacing any previous value.

        Args:
            path: Relative path, e.g. "helsi_user.json"
            content: Bytes or text (text is stored as UTF-8)

        Returns:
            bool: True if the save was successful
        """
        pass

    @abstractmethod
    async def load(self, path: str) -> Optional[bytes]:
        """
        Load content from the specified path.

        Returns:
            Optional[bytes]: Stored content, or None if nothing is stored there
        """
        pass

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if a value is stored at the specified path."""
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete the value at the specified path.

        Returns:
            bool: True if something was deleted, False if nothing was there
        """
        pass
