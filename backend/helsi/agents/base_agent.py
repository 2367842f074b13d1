"""
Base Agent Class - Shared plumbing for agents backed by the remote model.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional

from ..core.exceptions import LLMUnavailableError
from ..core.logging_config import truncate_large_data
from ..llm.base import LLMProvider, LLMMessage

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class BaseAgent:
    """
    Holds a system prompt and an optional LLM provider.
    Unlike a chat assistant, failures are raised so callers can fall back.
    """

    def __init__(self, name: str, system_prompt: str, llm_provider: Optional[LLMProvider] = None):
        """
        Initialize base agent.

        Args:
            name: Agent name (used in logs)
            system_prompt: System prompt for the agent
            llm_provider: Provider used by call_llm; None disables remote calls
        """
        self.name = name
        self.system_prompt = system_prompt
        self._llm_provider = llm_provider

    @property
    def has_llm(self) -> bool:
        return self._llm_provider is not None

    async def call_llm(
        self,
        prompt: str,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        images: Optional[List[Dict[str, str]]] = None,
        **kwargs: Any,
    ) -> str:
        """
        Send the system prompt and one user message.

        Args:
            prompt: User message text
            temperature: Temperature override (provider default if None)
            max_tokens: Max tokens override
            images: Optional list of dicts with 'data' (base64) and 'media_type'

        Returns:
            LLM response text

        Raises:
            LLMUnavailableError: If no provider is configured
            Exception: Whatever the provider raised
        """
        if self._llm_provider is None:
            raise LLMUnavailableError(f"LLM not configured for {self.name}")

        user_message = (
            LLMMessage.with_images("user", prompt, images) if images
            else LLMMessage.text("user", prompt)
        )
        messages = [LLMMessage.text("system", self.system_prompt), user_message]

        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Agent {self.name} calling LLM: prompt_length={len(prompt)}, "
                f"has_images={bool(images)}, prompt={truncate_large_data(prompt, max_length=500)}"
            )

        try:
            response = await self._llm_provider.chat_completion(
                messages, temperature=temperature, max_tokens=max_tokens, **kwargs
            )
        except Exception as e:
            logger.warning(
                f"Agent {self.name} LLM call failed: {str(e)}",
                extra={"extra_fields": {"agent": self.name, "error": str(e)}}
            )
            raise

        return response.content

    @staticmethod
    def parse_json(content: str) -> Dict[str, Any]:
        """
        Parse a JSON object from model output, tolerating a markdown code fence.

        Raises:
            ValueError: If the content is not a JSON object
        """
        cleaned = _CODE_FENCE.sub("", content.strip())
        data = json.loads(cleaned)
        if not isinstance(data, dict):
            raise ValueError("Expected a JSON object")
        return data
