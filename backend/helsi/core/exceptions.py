"""
Domain exceptions shared by the scoring engine, the document pipeline and the API layer.
"""


class HelsiError(Exception):
    """Base class for all application errors."""


class NoUserFoundError(HelsiError):
    """Raised when an operation needs the current user and none exists."""

    def __init__(self, message: str = "No user found"):
        super().__init__(message)


class InvalidMedicalDataError(HelsiError, ValueError):
    """Raised when extracted medical data does not have the required shape."""


class DocumentProcessingError(HelsiError):
    """Raised to callers when a medical document could not be processed."""

    def __init__(self, message: str = "Failed to process medical document. Please try again."):
        super().__init__(message)


class LLMUnavailableError(HelsiError):
    """Raised when a remote model call is attempted without a configured provider."""


class RateLimitExceededError(HelsiError):
    """Raised when the remote model request ceiling has been reached."""


class OCRUnavailableError(HelsiError):
    """Raised when image text extraction cannot be performed."""
