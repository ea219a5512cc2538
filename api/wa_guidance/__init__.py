"""
Washington ESSB 5814 guidance service.

Example:
    service = GuidanceChatService.from_settings(Settings(guidance_dir="public"))
    response = await service.converse(
        "software", [{"role": "user", "content": "What is ESSB 5814?"}]
    )
    print(response.answer)
"""

from wa_guidance.core.config import Settings
from wa_guidance.core.errors import (
    CredentialMissingError,
    DocumentUnavailableError,
    EmptyConversationError,
    EmptyProviderResponseError,
    GuidanceServiceError,
    InvalidInputError,
    InvalidMessageShapeError,
    InvalidTopicError,
    MalformedMessageError,
    MalformedProviderResponseError,
    MissingAnswerError,
    ProviderError,
    ProviderResponseError,
)
from wa_guidance.models.chat import ChatMessage, ChatRequest, ChatResponse
from wa_guidance.models.guidance import GuidanceEntry, GuidanceMetadata
from wa_guidance.services.chat import GuidanceChatService
from wa_guidance.services.guidance_loader import (
    get_guidance_metadata,
    load_guidance_for_topic,
)
from wa_guidance.services.guidance_map import (
    GUIDANCE_BY_TOPIC,
    GUIDANCE_SHARED,
    TopicId,
    entries_for,
    is_valid_topic,
)
from wa_guidance.services.openai_client import OpenAIService
from wa_guidance.services.prompts import WA_CHAT_DISCLAIMER, build_system_prompt

__all__ = [
    "GUIDANCE_BY_TOPIC",
    "GUIDANCE_SHARED",
    "WA_CHAT_DISCLAIMER",
    "ChatMessage",
    "ChatRequest",
    "ChatResponse",
    "CredentialMissingError",
    "DocumentUnavailableError",
    "EmptyConversationError",
    "EmptyProviderResponseError",
    "GuidanceChatService",
    "GuidanceEntry",
    "GuidanceMetadata",
    "GuidanceServiceError",
    "InvalidInputError",
    "InvalidMessageShapeError",
    "InvalidTopicError",
    "MalformedMessageError",
    "MalformedProviderResponseError",
    "MissingAnswerError",
    "OpenAIService",
    "ProviderError",
    "ProviderResponseError",
    "Settings",
    "TopicId",
    "build_system_prompt",
    "entries_for",
    "get_guidance_metadata",
    "is_valid_topic",
    "load_guidance_for_topic",
]
