"""Storage module - provides interface and implementations for data persistence."""

from .interface import StorageInterface
from .local_storage import LocalStorage
from .memory_storage import MemoryStorage
from .wellness_repository import WellnessRepository, init_repository, get_repository

__all__ = [
    'StorageInterface', 'LocalStorage', 'MemoryStorage',
    'WellnessRepository', 'init_repository', 'get_repository',
]
