"""Core module - session context, scoring engine and insights aggregation."""

from .exceptions import (
    HelsiError, NoUserFoundError, InvalidMedicalDataError, DocumentProcessingError,
    LLMUnavailableError, RateLimitExceededError, OCRUnavailableError,
)
from .session import WellnessSession
from .insights import compute_insights

__all__ = [
    'HelsiError', 'NoUserFoundError', 'InvalidMedicalDataError', 'DocumentProcessingError',
    'LLMUnavailableError', 'RateLimitExceededError', 'OCRUnavailableError',
    'WellnessSession', 'compute_insights',
]
