"""
LLM Provider Base - Abstract base for chat-completion style model APIs.
Messages may carry images for document text extraction.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List, Union
from dataclasses import dataclass, field

from .rate_limit import RequestRateLimiter


@dataclass
class LLMMessage:
    """
    Represents a message in a conversation.
    Content is either plain text or a list of content blocks.
    """
    role: str  # "system", "user", "assistant"
    content: Union[str, List[Dict[str, Any]]]

    @staticmethod
    def text(role: str, text: str) -> "LLMMessage":
        """Create a text-only message."""
        return LLMMessage(role=role, content=text)

    @staticmethod
    def with_images(role: str, text: str, images: List[Dict[str, str]]) -> "LLMMessage":
        """
        Create a message with base64 images followed by text.

        Args:
            role: Message role
            text: Instruction text
            images: List of dicts with 'data' (base64 string) and 'media_type'
        """
        content_parts: List[Dict[str, Any]] = [
            {
                "type": "image_url",
                "image_url": {"url": f"data:{img['media_type']};base64,{img['data']}"}
            }
            for img in images
        ]
        content_parts.append({"type": "text", "text": text})
        return LLMMessage(role=role, content=content_parts)


@dataclass
class LLMResponse:
    """Response from an LLM API call."""
    content: str
    model: str = ""
    usage: Dict[str, int] = field(default_factory=dict)
    raw: Optional[Dict[str, Any]] = None


class LLMProvider(ABC):
    """
    Abstract base class for LLM API providers.
    A provider may carry a rate limiter; it is consulted before each request.
    """

    def __init__(self, api_key: str, model: str, base_url: Optional[str] = None,
                 default_temperature: float = 0.1, default_max_tokens: int = 2000,
                 rate_limiter: Optional[RequestRateLimiter] = None):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url
        self.default_temperature = default_temperature
        self.default_max_tokens = default_max_tokens
        self.rate_limiter = rate_limiter

    @abstractmethod
    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: Conversation messages
            temperature: Sampling temperature override
            max_tokens: Max tokens override
            **kwargs: Additional provider-specific parameters (e.g. response_format)

        Returns:
            LLMResponse with the generated content

        Raises:
            RateLimitExceededError: If the request ceiling has been reached
            httpx.HTTPError: On transport or HTTP status errors
        """
        pass

    def _format_messages(self, messages: List[LLMMessage]) -> List[Dict[str, Any]]:
        """Convert LLMMessage list to API-compatible format."""
        return [{"role": m.role, "content": m.content} for m in messages]
