"""
Local Filesystem Storage Implementation.
Stores every value as one file below a base directory.
"""

import logging
import os
import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from .interface import StorageInterface

logger = logging.getLogger(__name__)


class LocalStorage(StorageInterface):
    """
    Local filesystem storage implementation.
    Writes go to a temporary sibling file which is then renamed over the target.
    """

    def __init__(self, base_dir: str = "./data"):
        """
        Initialize local storage with a base directory.

        Args:
            base_dir: Base directory for all stored files
        """
        self.base_dir = Path(base_dir).resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def _get_full_path(self, path: str) -> Path:
        """Convert relative path to full absolute path within base directory."""
        full_path = (self.base_dir / path).resolve()

        # Reject anything that escapes the base directory
        if full_path != self.base_dir and self.base_dir not in full_path.parents:
            raise ValueError(f"Invalid path: {path} - path traversal detected")

        return full_path

    async def save(self, path: str, content: bytes | str) -> bool:
        """Save content to local filesystem."""
        full_path = self._get_full_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode('utf-8') if isinstance(content, str) else content
        tmp_path = full_path.with_name(f".{full_path.name}.{uuid.uuid4().hex}.tmp")

        try:
            async with aiofiles.open(tmp_path, 'wb') as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, full_path)
            return True
        except OSError as e:
            logger.error(f"Error saving file {path}: {e}", exc_info=True)
            if tmp_path.exists():
                os.unlink(tmp_path)
            return False

    async def load(self, path: str) -> Optional[bytes]:
        """Load content from local filesystem."""
        full_path = self._get_full_path(path)
        if not full_path.exists():
            return None

        async with aiofiles.open(full_path, 'rb') as f:
            return await f.read()

    async def exists(self, path: str) -> bool:
        """Check if file exists."""
        return self._get_full_path(path).exists()

    async def delete(self, path: str) -> bool:
        """Delete file from local filesystem."""
        full_path = self._get_full_path(path)
        if not full_path.exists():
            return False
        await aiofiles.os.remove(full_path)
        return True
