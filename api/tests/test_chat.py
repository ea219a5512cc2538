"""
Unit tests for the guidance chat service.

Tests the core pipeline logic with a mocked OpenAI service.
"""

import json
from unittest.mock import MagicMock

import pytest
from opentelemetry import trace

from wa_guidance.core.errors import (
    DocumentUnavailableError,
    EmptyConversationError,
    EmptyProviderResponseError,
    InvalidMessageShapeError,
    InvalidTopicError,
    MalformedMessageError,
    MalformedProviderResponseError,
    MissingAnswerError,
    ProviderError,
)
from wa_guidance.models.chat import ChatMessage
from wa_guidance.services.chat import (
    CONTEXT_SEPARATOR,
    PLACEHOLDER_CONTEXT,
    GuidanceChatService,
)
from wa_guidance.services.prompts import WA_CHAT_DISCLAIMER


class MockOpenAIService:
    """Mock OpenAI service that records every request."""

    def __init__(self, content=None, error=None):
        self._content = content
        self._error = error
        self.calls = []

    async def chat_completion(self, messages, json_mode=True):
        self.calls.append(messages)
        if self._error is not None:
            raise self._error
        return self._content


def reply(payload):
    return json.dumps(payload)


@pytest.fixture
def openai_ok():
    return MockOpenAIService(
        content=reply({"answer": "Test answer", "suggestedQuestions": ["Q1", "Q2"]})
    )


@pytest.fixture
def guidance_dir(tmp_path):
    software = tmp_path / "wa-guidance" / "software"
    software.mkdir(parents=True)
    (software / "guidance.txt").write_text("\n  Custom software is a digital automated service.  \n")
    shared = tmp_path / "wa-guidance" / "shared" / "das-retail"
    shared.mkdir(parents=True)
    (shared / "guidance.txt").write_text("Retail sale includes DAS.")
    return tmp_path


USER_QUESTION = [{"role": "user", "content": "What is ESSB 5814?"}]


class TestTopicValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("topic", ["invalid-tile", "", "WEBDEV", " software", None, 123])
    async def test_rejects_unknown_topic_without_calling_provider(self, openai_ok, topic):
        service = GuidanceChatService(openai_ok)
        with pytest.raises(InvalidTopicError) as exc_info:
            await service.converse(topic, USER_QUESTION)
        assert exc_info.value.value == topic
        assert openai_ok.calls == []

    @pytest.mark.asyncio
    async def test_topic_checked_before_messages(self, openai_ok):
        service = GuidanceChatService(openai_ok)
        with pytest.raises(InvalidTopicError, match="Invalid or missing topic"):
            await service.converse("invalid-tile", [])

    @pytest.mark.asyncio
    @pytest.mark.parametrize("topic", ["it", "software", "webdev", "contracts", "professional-services"])
    async def test_accepts_valid_topics(self, openai_ok, topic):
        service = GuidanceChatService(openai_ok)
        response = await service.converse(topic, [{"role": "user", "content": "test"}])
        assert response.answer == "Test answer"


class TestMessageValidation:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "messages",
        [{"role": "user", "content": "test"}, "hello", None, 42],
    )
    async def test_rejects_non_list(self, openai_ok, messages):
        service = GuidanceChatService(openai_ok)
        with pytest.raises(MalformedMessageError, match="Messages must be a list"):
            await service.converse("software", messages)
        assert openai_ok.calls == []

    @pytest.mark.asyncio
    async def test_rejects_empty_list(self, openai_ok):
        service = GuidanceChatService(openai_ok)
        with pytest.raises(EmptyConversationError, match="At least one message is required"):
            await service.converse("software", [])
        assert openai_ok.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "entry",
        [{"content": "test"}, {"role": "user"}, {}, "user", None],
    )
    async def test_rejects_missing_role_or_content(self, openai_ok, entry):
        service = GuidanceChatService(openai_ok)
        with pytest.raises(MalformedMessageError, match="Invalid message format"):
            await service.converse("software", [entry])
        assert openai_ok.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "entry",
        [
            {"role": "system", "content": "test"},
            {"role": "tool", "content": "test"},
            {"role": "User", "content": "test"},
            {"role": "user", "content": 123},
            {"role": "assistant", "content": ["a"]},
            {"role": "user", "content": None},
            {"role": None, "content": "x"},
        ],
    )
    async def test_rejects_bad_role_or_content_type(self, openai_ok, entry):
        service = GuidanceChatService(openai_ok)
        with pytest.raises(InvalidMessageShapeError, match='role must be "user" or "assistant"'):
            await service.converse("software", [entry])
        assert openai_ok.calls == []

    def test_validate_preserves_order_and_allows_empty_content(self):
        validated = GuidanceChatService.validate_messages(
            (
                {"role": "user", "content": ""},
                {"role": "assistant", "content": "Line 1\nLine 2"},
                ChatMessage(role="user", content="next"),
            )
        )
        assert [m.role for m in validated] == ["user", "assistant", "user"]
        assert [m.content for m in validated] == ["", "Line 1\nLine 2", "next"]


class TestHistory:
    @pytest.mark.asyncio
    async def test_system_prompt_then_history(self, openai_ok):
        service = GuidanceChatService(openai_ok)
        history = [
            {"role": "user", "content": "What is ESSB 5814?"},
            {"role": "assistant", "content": "ESSB 5814 is a Washington State law..."},
            {"role": "user", "content": "When does it take effect?"},
        ]
        await service.converse("software", history)

        sent = openai_ok.calls[0]
        assert sent[0]["role"] == "system"
        assert PLACEHOLDER_CONTEXT in sent[0]["content"]
        assert sent[1:] == history

    @pytest.mark.asyncio
    async def test_keeps_last_eight_messages_in_order(self, openai_ok):
        service = GuidanceChatService(openai_ok)
        history = [
            {"role": "user" if i % 2 == 0 else "assistant", "content": f"message {i}"}
            for i in range(11)
        ]
        await service.converse("software", history)

        sent = openai_ok.calls[0][1:]
        assert len(sent) == 8
        assert [m["content"] for m in sent] == [f"message {i}" for i in range(3, 11)]
        assert [m["role"] for m in sent] == [m["role"] for m in history[3:]]

    @pytest.mark.asyncio
    async def test_trims_message_content(self, openai_ok):
        service = GuidanceChatService(openai_ok)
        await service.converse("software", [{"role": "user", "content": "  \n  test  \n  "}])
        assert openai_ok.calls[0][1] == {"role": "user", "content": "test"}


class TestResponseHandling:
    @pytest.mark.asyncio
    async def test_successful_response(self):
        openai = MockOpenAIService(
            content=reply(
                {
                    "answer": "ESSB 5814 is a Washington law...",
                    "suggestedQuestions": ["When does it apply?", "Who must comply?"],
                }
            )
        )
        service = GuidanceChatService(openai)

        response = await service.converse("software", USER_QUESTION)

        assert response.answer == "ESSB 5814 is a Washington law..."
        assert response.suggested_questions == ["When does it apply?", "Who must comply?"]
        assert len(openai.calls) == 1

    @pytest.mark.asyncio
    async def test_trims_answer(self):
        openai = MockOpenAIService(content=reply({"answer": "  \n  X  \n  ", "suggestedQuestions": []}))
        response = await GuidanceChatService(openai).converse("software", USER_QUESTION)
        assert response.answer == "X"

    @pytest.mark.asyncio
    async def test_caps_suggested_questions_at_two(self):
        openai = MockOpenAIService(
            content=reply({"answer": "Test", "suggestedQuestions": ["", 7, " Q1 ", "  ", "Q2", "Q3", "Q4"]})
        )
        response = await GuidanceChatService(openai).converse("software", USER_QUESTION)
        assert response.suggested_questions == ["Q1", "Q2"]

    @pytest.mark.asyncio
    async def test_fewer_than_two_questions_is_not_an_error(self):
        openai = MockOpenAIService(content=reply({"answer": "Test", "suggestedQuestions": ["Only one"]}))
        response = await GuidanceChatService(openai).converse("software", USER_QUESTION)
        assert response.suggested_questions == ["Only one"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("payload", [{"answer": "Test answer"}, {"answer": "Test answer", "suggestedQuestions": "Q1"}])
    async def test_missing_or_non_list_questions_default_to_empty(self, payload):
        openai = MockOpenAIService(content=reply(payload))
        response = await GuidanceChatService(openai).converse("software", USER_QUESTION)
        assert response.answer == "Test answer"
        assert response.suggested_questions == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("content", [None, "", "   \n "])
    async def test_empty_response(self, content):
        service = GuidanceChatService(MockOpenAIService(content=content))
        with pytest.raises(EmptyProviderResponseError):
            await service.converse("software", USER_QUESTION)

    @pytest.mark.asyncio
    async def test_non_json_response(self):
        service = GuidanceChatService(MockOpenAIService(content="This is not JSON"))
        with pytest.raises(MalformedProviderResponseError, match="invalid JSON"):
            await service.converse("software", USER_QUESTION)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [
            '{"answer": "ok", "n": ' + "1" * 5000 + "}",
            "[" * 100000 + "]" * 100000,
        ],
    )
    async def test_unparsable_json_reply_is_malformed(self, content):
        service = GuidanceChatService(MockOpenAIService(content=content))
        with pytest.raises(MalformedProviderResponseError) as exc_info:
            await service.converse("software", USER_QUESTION)
        assert isinstance(exc_info.value.__cause__, (ValueError, RecursionError))

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "content",
        [
            reply({"suggestedQuestions": ["Q1"]}),
            reply({"answer": "   "}),
            reply({"answer": 42}),
            reply(["answer"]),
        ],
    )
    async def test_missing_answer(self, content):
        service = GuidanceChatService(MockOpenAIService(content=content))
        with pytest.raises(MissingAnswerError):
            await service.converse("software", USER_QUESTION)

    @pytest.mark.asyncio
    async def test_provider_error_propagates_once(self):
        error = ProviderError("rate limited")
        openai = MockOpenAIService(error=error)
        service = GuidanceChatService(openai)

        with pytest.raises(ProviderError) as exc_info:
            await service.converse("software", USER_QUESTION)
        assert exc_info.value is error
        assert len(openai.calls) == 1


class TestContext:
    @pytest.mark.asyncio
    async def test_placeholder_without_guidance_dir(self, openai_ok):
        service = GuidanceChatService(openai_ok)
        assert await service.build_context("software") == PLACEHOLDER_CONTEXT

    @pytest.mark.asyncio
    async def test_loads_topic_then_shared_documents(self, openai_ok, guidance_dir):
        service = GuidanceChatService(openai_ok, guidance_dir=guidance_dir)

        context = await service.build_context("software")

        topic_section, shared_section = context.split(CONTEXT_SEPARATOR)
        assert topic_section == (
            "Source: Interim Guidance — Custom Software (ESSB 5814)\n\n"
            "Custom software is a digital automated service."
        )
        assert shared_section.startswith("Source: Interim Guidance — DAS exclusions")
        assert shared_section.endswith("Retail sale includes DAS.")

    @pytest.mark.asyncio
    async def test_context_truncated_to_max_chars(self, openai_ok, guidance_dir):
        service = GuidanceChatService(openai_ok, max_context_chars=50, guidance_dir=guidance_dir)
        full = await GuidanceChatService(openai_ok, guidance_dir=guidance_dir).build_context("software")

        context = await service.build_context("software")

        assert context == full[:50]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_chars, truncated", [(50, True), (18000, False)])
    async def test_truncation_flag_recorded_on_span(
        self, openai_ok, guidance_dir, monkeypatch, max_chars, truncated
    ):
        span = MagicMock()
        monkeypatch.setattr(trace, "get_current_span", lambda: span)
        service = GuidanceChatService(openai_ok, max_context_chars=max_chars, guidance_dir=guidance_dir)

        await service.build_context("software")

        span.set_attribute.assert_any_call("chat.context_truncated", truncated)

    @pytest.mark.asyncio
    async def test_context_embedded_in_system_prompt(self, openai_ok, guidance_dir):
        service = GuidanceChatService(openai_ok, guidance_dir=str(guidance_dir))
        await service.converse("software", USER_QUESTION)

        system_prompt = openai_ok.calls[0][0]["content"]
        assert system_prompt.endswith("Retail sale includes DAS.")
        assert WA_CHAT_DISCLAIMER in system_prompt

    @pytest.mark.asyncio
    async def test_missing_topic_document_fails_call(self, openai_ok, tmp_path):
        service = GuidanceChatService(openai_ok, guidance_dir=tmp_path)
        with pytest.raises(DocumentUnavailableError):
            await service.converse("software", USER_QUESTION)
        assert openai_ok.calls == []

    def test_rejects_non_positive_max_context_chars(self, openai_ok):
        with pytest.raises(ValueError):
            GuidanceChatService(openai_ok, max_context_chars=0)
