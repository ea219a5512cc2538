"""
Pydantic models for the Chat API request/response contracts.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MAX_SUGGESTED_QUESTIONS = 2


class ChatMessage(BaseModel):
    """A single message in the conversation history."""

    role: Literal["user", "assistant"] = Field(
        ..., description="Message role: 'user' or 'assistant'"
    )
    content: str = Field(..., description="Message content")


class ChatRequest(BaseModel):
    """
    Request body for the POST /chat endpoint.

    Both fields are accepted as-is; the chat service validates them so that
    callers get the same errors over HTTP as they do in-process.
    """

    topic: Any = Field(None, description="Service category, e.g. 'software'")
    messages: Any = Field(
        None, description="Conversation history (latest message last)"
    )


class ChatResponse(BaseModel):
    """Response body from the POST /chat endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    answer: str = Field(..., min_length=1, description="The assistant's answer")
    suggested_questions: list[str] = Field(
        default_factory=list,
        alias="suggestedQuestions",
        max_length=MAX_SUGGESTED_QUESTIONS,
        description="Up to two follow-up questions",
    )
