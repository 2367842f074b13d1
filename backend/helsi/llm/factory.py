"""
LLM Provider Factory - Creates the configured LLM provider instance.
"""

from typing import Any, Optional

from ..config import PLACEHOLDER_API_KEY
from .base import LLMProvider
from .openai_provider import OpenAIProvider
from .rate_limit import RequestRateLimiter


def create_llm_provider(
    provider: str = "openai",
    api_key: Optional[str] = "",
    model: Optional[str] = None,
    base_url: Optional[str] = None,
    max_requests_per_minute: Optional[int] = None,
    **kwargs
) -> Optional[LLMProvider]:
    """
    Create an LLM provider instance based on configuration.

    Args:
        provider: Provider name (only "openai" compatible endpoints are supported)
        api_key: API key for the provider
        model: Model name (uses provider default if not specified)
        base_url: Custom base URL (uses provider default if not specified)
        max_requests_per_minute: Optional request ceiling
        **kwargs: Additional provider-specific parameters

    Returns:
        LLMProvider instance, or None when no usable api_key is configured (demo mode)
    """
    if not api_key or api_key == PLACEHOLDER_API_KEY:
        return None

    if provider != "openai":
        raise ValueError(f"Unsupported LLM provider: {provider}")

    params: dict[str, Any] = {"api_key": api_key}
    if model:
        params["model"] = model
    if base_url:
        params["base_url"] = base_url
    if max_requests_per_minute:
        params["rate_limiter"] = RequestRateLimiter(max_requests_per_minute)
    params.update(kwargs)
    return OpenAIProvider(**params)


def provider_from_settings(config: Any) -> Optional[LLMProvider]:
    """Build the provider described by a Settings object, or None in demo mode."""
    return create_llm_provider(
        provider=config.llm_provider,
        api_key=config.resolved_api_key,
        model=config.llm_model,
        base_url=config.llm_base_url,
        max_requests_per_minute=config.llm_max_requests_per_minute,
        default_temperature=config.llm_temperature,
    )


# Global provider instance; shared so the request ceiling spans all requests
_llm_provider: Optional[LLMProvider] = None


def init_llm_provider(config: Any) -> Optional[LLMProvider]:
    """
    Initialize the global provider from settings.

    Returns:
        The provider, or None in demo mode
    """
    global _llm_provider
    _llm_provider = provider_from_settings(config)
    return _llm_provider


def get_llm_provider() -> Optional[LLMProvider]:
    """The global provider; None in demo mode or before init_llm_provider()."""
    return _llm_provider
