"""
Guidance chat service: core question-answering pipeline.

Coordinates one conversational turn:
1. Validate the topic and the caller's message history.
2. Keep the most recent messages and trim their content.
3. Assemble the guidance context for the topic.
4. Build the system prompt around that context.
5. Call the model for a JSON reply.
6. Validate and normalize the reply into a ChatResponse.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path

from opentelemetry import trace
from opentelemetry.trace import Span

from wa_guidance.core.config import DEFAULT_MAX_CONTEXT_CHARS, Settings
from wa_guidance.core.errors import (
    EmptyConversationError,
    EmptyProviderResponseError,
    GuidanceServiceError,
    InvalidMessageShapeError,
    InvalidTopicError,
    MalformedMessageError,
    MalformedProviderResponseError,
    MissingAnswerError,
)
from wa_guidance.core.telemetry import get_tracer, record_failure
from wa_guidance.models.chat import MAX_SUGGESTED_QUESTIONS, ChatMessage, ChatResponse
from wa_guidance.services.guidance_loader import load_guidance_for_topic
from wa_guidance.services.guidance_map import TopicId, is_valid_topic
from wa_guidance.services.openai_client import OpenAIService
from wa_guidance.services.prompts import build_system_prompt

logger = logging.getLogger(__name__)

MAX_HISTORY_MESSAGES = 8
CONTEXT_SEPARATOR = "\n\n---\n\n"
PLACEHOLDER_CONTEXT = "[Guidance documents would be loaded here]"


class GuidanceChatService:
    """
    Answers questions about Washington ESSB 5814 guidance for one topic.

    Configuration is fixed at construction; each call to converse() is
    independent and may run concurrently with others.
    """

    def __init__(
        self,
        openai_service: OpenAIService,
        max_context_chars: int = DEFAULT_MAX_CONTEXT_CHARS,
        guidance_dir: str | Path | None = None,
    ) -> None:
        if max_context_chars <= 0:
            raise ValueError("max_context_chars must be positive")
        self._openai = openai_service
        self._max_context_chars = max_context_chars
        self._guidance_dir = guidance_dir or None
        self._tracer = get_tracer()

    @classmethod
    def from_settings(cls, settings: Settings) -> "GuidanceChatService":
        return cls(
            OpenAIService(settings),
            max_context_chars=settings.max_context_chars,
            guidance_dir=settings.guidance_dir,
        )

    @property
    def guidance_dir(self) -> str | Path | None:
        return self._guidance_dir

    async def converse(self, topic: object, messages: object) -> ChatResponse:
        """
        Answer the latest question in a conversation about one topic.

        Args:
            topic: Service category id, e.g. "software". Matched exactly.
            messages: Conversation history, oldest first, as a list of
                {"role": "user" | "assistant", "content": str} mappings.

        Returns:
            ChatResponse with a non-empty answer and up to two follow-up questions.

        Raises:
            InvalidInputError: Bad topic or messages. Nothing is loaded or sent.
            DocumentUnavailableError: A topic guidance document could not be read.
            ProviderError: The model call failed.
            ProviderResponseError: The model reply was empty, not JSON, or had no answer.
        """
        with self._tracer.start_as_current_span("chat.converse") as span:
            try:
                return await self._converse(span, topic, messages)
            except GuidanceServiceError as exc:
                record_failure(span, exc)
                raise

    async def _converse(self, span: Span, topic: object, messages: object) -> ChatResponse:
        if not is_valid_topic(topic):
            raise InvalidTopicError(topic)
        span.set_attribute("chat.topic", topic)

        validated = self.validate_messages(messages)
        if not validated:
            raise EmptyConversationError()
        history = self._window_history(validated)
        span.set_attribute("chat.history_length", len(validated))
        span.set_attribute("chat.window_length", len(history))

        context = await self.build_context(topic)
        span.set_attribute("chat.context_length", len(context))

        llm_messages = self._build_messages(build_system_prompt(context), history)
        raw_content = await self._openai.chat_completion(llm_messages)

        response = self._parse_response(raw_content)
        span.set_attribute("chat.suggested_count", len(response.suggested_questions))
        return response

    async def build_context(self, topic: TopicId) -> str:
        """Join the topic's guidance documents and cap the result at max_context_chars."""
        if self._guidance_dir is None:
            return PLACEHOLDER_CONTEXT

        sections = await load_guidance_for_topic(topic, self._guidance_dir)
        joined = CONTEXT_SEPARATOR.join(sections)
        truncated = len(joined) > self._max_context_chars
        trace.get_current_span().set_attribute("chat.context_truncated", truncated)
        if truncated:
            logger.debug(
                "Guidance context for '%s' truncated from %d to %d chars",
                topic,
                len(joined),
                self._max_context_chars,
            )
            joined = joined[: self._max_context_chars]
        return joined

    @staticmethod
    def validate_messages(messages: object) -> list[ChatMessage]:
        """Check untyped caller input and return typed messages in the same order."""
        if not isinstance(messages, (list, tuple)):
            raise MalformedMessageError("Messages must be a list")

        validated: list[ChatMessage] = []
        for entry in messages:
            if isinstance(entry, ChatMessage):
                entry = entry.model_dump()
            if (
                not isinstance(entry, Mapping)
                or "role" not in entry
                or "content" not in entry
            ):
                raise MalformedMessageError("Invalid message format")

            role, content = entry["role"], entry["content"]
            if role not in ("user", "assistant") or not isinstance(content, str):
                raise InvalidMessageShapeError(
                    'Invalid message: role must be "user" or "assistant", '
                    "content must be string"
                )
            validated.append(ChatMessage(role=role, content=content))

        return validated

    @staticmethod
    def _window_history(messages: list[ChatMessage]) -> list[ChatMessage]:
        """Keep the last few messages, oldest first, with trimmed content."""
        return [
            ChatMessage(role=message.role, content=message.content.strip())
            for message in messages[-MAX_HISTORY_MESSAGES:]
        ]

    @staticmethod
    def _build_messages(
        system_prompt: str,
        history: list[ChatMessage],
    ) -> list[dict[str, str]]:
        """Assemble the LLM message array: system + history."""
        messages = [{"role": "system", "content": system_prompt}]
        for msg in history:
            messages.append({"role": msg.role, "content": msg.content})
        return messages

    @staticmethod
    def _parse_response(raw_content: object) -> ChatResponse:
        """Validate the model's JSON reply field by field."""
        content = raw_content.strip() if isinstance(raw_content, str) else ""
        if not content:
            raise EmptyProviderResponseError()

        try:
            parsed = json.loads(content)
        except (ValueError, RecursionError) as exc:
            logger.error("Failed to parse model response as JSON: %s; content=%r", exc, content)
            raise MalformedProviderResponseError() from exc

        if not isinstance(parsed, dict):
            raise MissingAnswerError()

        answer = parsed.get("answer")
        answer = answer.strip() if isinstance(answer, str) else ""
        if not answer:
            raise MissingAnswerError()

        raw_questions = parsed.get("suggestedQuestions")
        suggested: list[str] = []
        if isinstance(raw_questions, list):
            for question in raw_questions:
                if isinstance(question, str) and question.strip():
                    suggested.append(question.strip())
            suggested = suggested[:MAX_SUGGESTED_QUESTIONS]

        return ChatResponse(answer=answer, suggested_questions=suggested)
