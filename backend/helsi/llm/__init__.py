"""LLM module - provides a unified interface for the remote model API."""

from .base import LLMProvider, LLMMessage, LLMResponse
from .openai_provider import OpenAIProvider
from .rate_limit import RequestRateLimiter
from .factory import (
    create_llm_provider, provider_from_settings, init_llm_provider, get_llm_provider
)

__all__ = [
    'LLMProvider',
    'LLMMessage',
    'LLMResponse',
    'OpenAIProvider',
    'RequestRateLimiter',
    'create_llm_provider',
    'provider_from_settings',
    'init_llm_provider',
    'get_llm_provider',
]
