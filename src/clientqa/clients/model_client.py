"""
Generative model client.

This module provides a thin async client over any OpenAI-compatible chat
completion endpoint (Gemini's compatibility endpoint by default), with retry
logic for transient transport failures.
"""

from typing import Optional
from openai import APIConnectionError, AsyncOpenAI, RateLimitError
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)
import structlog

from clientqa.config.settings import AssistantConfig

logger = structlog.get_logger(__name__)


class ModelError(Exception):
    """The generative model could not produce an answer."""


class ModelTimeoutError(ModelError):
    """The model did not answer within the configured timeout."""


class ModelResponseError(ModelError):
    """The model answered with an empty or malformed response."""


class GenerativeModelClient:
    """
    Chat completion client for the configured model provider.

    This client handles:
    - API key authentication against an OpenAI-compatible endpoint
    - Retry logic for connection errors and rate limits
    - Extraction of the answer text from the completion
    """

    def __init__(self, config: AssistantConfig):
        """
        Initialize the model client.

        Args:
            config: Immutable assistant configuration
        """
        self.config = config
        self._client: Optional[AsyncOpenAI] = None

        logger.info(
            "Initializing generative model client",
            base_url=config.base_url,
            model=config.model_name,
        )

    def _get_client(self) -> AsyncOpenAI:
        """Get or create the underlying SDK client."""
        if self._client is None:
            api_key = self.config.model_api_key.get_secret_value() if self.config.model_api_key else None
            # Bounded by the answer timeout; retries are left to tenacity
            self._client = AsyncOpenAI(
                api_key=api_key,
                base_url=self.config.base_url,
                timeout=self.config.timeout_ms / 1000,
                max_retries=0,
            )
        return self._client

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.2, min=0.2, max=1),
        retry=retry_if_exception_type((APIConnectionError, RateLimitError)),
        reraise=True,
    )
    async def generate(self, prompt: str) -> str:
        """
        Send a single-turn prompt and return the completion text.

        Args:
            prompt: Full prompt text

        Returns:
            Completion text

        Raises:
            ModelResponseError: If the completion carries no text
        """
        client = self._get_client()
        response = await client.chat.completions.create(
            model=self.config.model_name,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.config.temperature,
            max_tokens=self.config.max_tokens,
        )

        if not response.choices or not response.choices[0].message.content:
            raise ModelResponseError("Model returned an empty response")

        logger.debug(
            "Chat completion created",
            model=self.config.model_name,
            usage=response.usage.model_dump() if response.usage else None,
        )
        return response.choices[0].message.content

    async def ping(self) -> str:
        """Send a minimal prompt to verify connectivity."""
        return await self.generate("Hi")

    async def close(self):
        """Close the client and clean up resources."""
        if self._client:
            await self._client.close()
            self._client = None

        logger.info("Generative model client closed")
