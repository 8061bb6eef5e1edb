from __future__ import annotations

import logging
from typing import Protocol

from groq import AsyncGroq

from .config import DEFAULT_LLM_CONFIG, LLMConfig

logger = logging.getLogger(__name__)


class LLMError(Exception):
    """Base class for failures talking to the language model."""


class LLMUnavailableError(LLMError):
    """Raised when the model is disabled or has no API key."""


class LLMResponseError(LLMError):
    """Raised when the model reply cannot be used."""


class TextModel(Protocol):
    async def generate(self, prompt: str) -> str: ...


class GroqTextModel:
    """
    Thin async wrapper around the Groq chat completion API.

    One instance is built at startup and shared by all requests; the
    underlying ``AsyncGroq`` client is created on first use.
    """

    def __init__(self, config: LLMConfig = DEFAULT_LLM_CONFIG) -> None:
        self.config = config
        self._client: AsyncGroq | None = None

    @property
    def available(self) -> bool:
        return self.config.enabled and bool(self.config.api_key)

    def _get_client(self) -> AsyncGroq:
        if not self.available:
            raise LLMUnavailableError("Groq LLM is disabled or GROQ_API_KEY is not set")
        if self._client is None:
            self._client = AsyncGroq(api_key=self.config.api_key, timeout=self.config.timeout)
        return self._client

    async def generate(self, prompt: str) -> str:
        """Send ``prompt`` as a single user message and return the reply text."""
        client = self._get_client()
        response = await client.chat.completions.create(
            model=self.config.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

        content = response.choices[0].message.content or ""
        logger.debug("Raw Groq response: %s", content)
        return content

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
