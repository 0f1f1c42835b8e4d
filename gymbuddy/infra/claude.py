"""
Anthropic client for the conversational fallback.

Only messages the classifier cannot place (general_chat) reach the LLM.
Rate limits and connection drops are retried with exponential backoff;
if the primary model still fails, the fallback model gets one more try.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Optional

from anthropic import APIConnectionError, APIError, AsyncAnthropic, RateLimitError

from gymbuddy.config import settings

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (RateLimitError, APIConnectionError)


class ClaudeClientError(Exception):
    """Raised when no model produced a reply."""
    pass


@dataclass
class ChatReply:
    """Text reply plus usage numbers for logging."""
    text: str
    model: str
    input_tokens: int
    output_tokens: int
    latency_ms: float


class ClaudeClient:
    """
    Async wrapper around AsyncAnthropic.

    Features:
    - Retries with exponential backoff on rate limits and connection errors
    - One fallback model when the primary model fails
    """

    _instance: Optional["ClaudeClient"] = None

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        fallback_model: Optional[str] = None,
        max_retries: int = 3,
    ):
        """Initialize client.

        Args:
            api_key: Anthropic API key (defaults to settings)
            model: Primary model (defaults to settings.chat_model)
            fallback_model: Model tried after the primary fails
            max_retries: Attempts per model for retryable errors
        """
        self.api_key = api_key or settings.anthropic_api_key
        if not self.api_key:
            raise ValueError("Anthropic API key is required")

        self._client = AsyncAnthropic(api_key=self.api_key)
        self.model = model or settings.chat_model
        self.fallback_model = fallback_model or settings.chat_fallback_model
        self.max_retries = max_retries

        logger.info(f"ClaudeClient initialized with model={self.model}")

    @classmethod
    def get_instance(cls) -> "ClaudeClient":
        """Get singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton instance (useful for testing)."""
        cls._instance = None

    async def chat(
        self,
        message: str,
        system: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> ChatReply:
        """
        Get a reply to one user message.

        Args:
            message: User message text
            system: System prompt
            max_tokens: Reply token limit (defaults to settings)
            temperature: Sampling temperature (defaults to settings)

        Returns:
            ChatReply with the reply text

        Raises:
            ClaudeClientError: If every model failed
        """
        kwargs: dict[str, Any] = {
            "max_tokens": max_tokens or settings.chat_max_tokens,
            "temperature": settings.chat_temperature if temperature is None else temperature,
            "messages": [{"role": "user", "content": message}],
        }
        if system:
            kwargs["system"] = system

        models = [self.model]
        if self.fallback_model and self.fallback_model != self.model:
            models.append(self.fallback_model)

        last_error: Optional[Exception] = None
        for model in models:
            start_time = time.time()
            try:
                response = await self._create_with_retry(model=model, **kwargs)
            except APIError as e:
                last_error = e
                logger.warning(f"Model {model} failed: {e}")
                continue

            text = "".join(
                block.text for block in response.content if getattr(block, "type", None) == "text"
            )
            return ChatReply(
                text=text.strip(),
                model=model,
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
                latency_ms=(time.time() - start_time) * 1000,
            )

        raise ClaudeClientError(f"Claude API call failed: {last_error}") from last_error

    async def _create_with_retry(self, **kwargs: Any) -> Any:
        """Call messages.create, backing off on retryable errors."""
        for attempt in range(self.max_retries):
            try:
                return await self._client.messages.create(**kwargs)
            except RETRYABLE_ERRORS as e:
                if attempt + 1 == self.max_retries:
                    raise
                wait_time = 2 ** attempt
                logger.warning(
                    f"{type(e).__name__} from {kwargs['model']}, "
                    f"retrying in {wait_time}s (attempt {attempt + 1})"
                )
                await asyncio.sleep(wait_time)

    async def close(self) -> None:
        """Close the client."""
        await self._client.close()


def get_claude_client() -> Optional[ClaudeClient]:
    """Get Claude client singleton, or None when no API key is configured."""
    if not settings.chat_enabled:
        return None
    return ClaudeClient.get_instance()
