"""
Chat router: POST /chat endpoint.

Receives a topic and conversation history, runs the guidance chat
pipeline, and returns the answer with suggested follow-up questions.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status

from wa_guidance.core.errors import (
    DocumentUnavailableError,
    InvalidInputError,
    ProviderError,
    ProviderResponseError,
)
from wa_guidance.models.chat import ChatRequest, ChatResponse
from wa_guidance.services.chat import GuidanceChatService

router = APIRouter(tags=["chat"])


def get_chat_service(request: Request) -> GuidanceChatService:
    """
    Dependency injection for the chat service.
    Initialized once in main.py and stored in app.state.
    """
    return request.app.state.chat_service


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    service: GuidanceChatService = Depends(get_chat_service),
) -> ChatResponse:
    """
    Ask the guidance assistant a question about one service category.

    Input errors map to 400, unreadable guidance to 500, and provider
    failures or unusable provider replies to 502.
    """
    try:
        return await service.converse(request.topic, request.messages)
    except InvalidInputError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except DocumentUnavailableError as exc:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Guidance documents are unavailable",
        ) from exc
    except (ProviderError, ProviderResponseError) as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
