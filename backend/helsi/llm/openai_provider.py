"""
OpenAI-compatible LLM Provider.
Talks to any endpoint that implements /chat/completions with bearer auth.
"""

import httpx
import logging
import time
from typing import Optional, List, Dict, Any

from .base import LLMProvider, LLMMessage, LLMResponse
from .rate_limit import RequestRateLimiter

logger = logging.getLogger(__name__)


class OpenAIProvider(LLMProvider):
    """
    Provider for the OpenAI Chat Completions API.
    Default base_url points to api.openai.com.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        default_temperature: float = 0.1,
        default_max_tokens: int = 2000,
        timeout: float = 60.0,
        rate_limiter: Optional[RequestRateLimiter] = None,
    ):
        super().__init__(api_key, model, base_url, default_temperature, default_max_tokens, rate_limiter)
        self.timeout = timeout

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def chat_completion(
        self,
        messages: List[LLMMessage],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        **kwargs
    ) -> LLMResponse:
        """Send request to the Chat Completions endpoint."""
        if self.rate_limiter is not None:
            self.rate_limiter.acquire()

        start_time = time.time()
        url = f"{self.base_url}/chat/completions"
        payload: Dict[str, Any] = {
            "model": kwargs.get("model", self.model),
            "messages": self._format_messages(messages),
            "temperature": temperature if temperature is not None else self.default_temperature,
            "max_tokens": max_tokens or self.default_max_tokens,
        }
        if kwargs.get("response_format"):
            payload["response_format"] = kwargs["response_format"]

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"LLM API call starting: provider=openai, model={payload['model']}, "
                f"temperature={payload['temperature']}, {len(messages)} messages"
            )

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(url, json=payload, headers=self._get_headers())
                resp.raise_for_status()
                data = resp.json()

            choice = data["choices"][0]
            usage = data.get("usage", {})
            duration_ms = (time.time() - start_time) * 1000

            logger.info(
                "LLM API call completed",
                extra={"extra_fields": {
                    "provider": "openai",
                    "model": data.get("model", self.model),
                    "prompt_tokens": usage.get("prompt_tokens", 0),
                    "completion_tokens": usage.get("completion_tokens", 0),
                    "total_tokens": usage.get("total_tokens", 0),
                    "duration_ms": round(duration_ms, 2),
                }}
            )

            return LLMResponse(
                content=choice["message"].get("content") or "",
                model=data.get("model", self.model),
                usage=usage,
                raw=data,
            )
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.warning(
                f"LLM API call failed: {str(e)}",
                extra={"extra_fields": {
                    "provider": "openai",
                    "model": payload.get("model"),
                    "duration_ms": round(duration_ms, 2),
                    "error": str(e),
                }}
            )
            raise
