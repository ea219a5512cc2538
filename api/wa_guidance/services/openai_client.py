"""
OpenAI client wrapper.

Handles chat completions for the guidance assistant. The client's built-in
retries are disabled: a failed call surfaces once as ProviderError and the
caller owns any retry policy.
"""

import logging

from openai import AsyncOpenAI, OpenAIError

from wa_guidance.core.config import Settings
from wa_guidance.core.errors import CredentialMissingError, ProviderError
from wa_guidance.core.telemetry import get_tracer

logger = logging.getLogger(__name__)


class OpenAIService:
    """Wrapper around the OpenAI chat completions API."""

    def __init__(self, settings: Settings, api_key: str | None = None) -> None:
        api_key = api_key or settings.openai_api_key
        if not api_key:
            raise CredentialMissingError()

        self.model = settings.openai_chat_model
        self._tracer = get_tracer()
        self._client = AsyncOpenAI(
            api_key=api_key,
            base_url=settings.openai_base_url,
            max_retries=0,
        )

    async def chat_completion(
        self,
        messages: list[dict[str, str]],
        json_mode: bool = True,
    ) -> str | None:
        """
        Generate a chat completion.

        Args:
            messages: The conversation messages (system + history).
            json_mode: Ask the model for a JSON object reply.

        Returns:
            The content of the first choice, or None when there is none.

        Raises:
            ProviderError: The request failed (network, auth, rate limit, server).
        """
        with self._tracer.start_as_current_span("openai.chat") as span:
            span.set_attribute("openai.model", self.model)
            span.set_attribute("openai.message_count", len(messages))

            request = {"model": self.model, "messages": messages}
            if json_mode:
                request["response_format"] = {"type": "json_object"}

            try:
                response = await self._client.chat.completions.create(**request)
            except OpenAIError as exc:
                logger.error("Chat completion failed: %s", exc)
                raise ProviderError(f"Chat completion failed: {exc}") from exc

            if response.usage:
                span.set_attribute("openai.prompt_tokens", response.usage.prompt_tokens)
                span.set_attribute(
                    "openai.completion_tokens", response.usage.completion_tokens
                )
                logger.info("Chat completion: %d tokens used", response.usage.total_tokens)

            if not response.choices:
                return None
            return response.choices[0].message.content
