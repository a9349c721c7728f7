"""Shared request parsing and event-to-frame relay for the HTTP and WebSocket transports."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, AsyncIterator, Dict, List, Optional

from pydantic import BaseModel, Field

from agent import get_llm_service
from agent.service.errors import (
    LLMConfigurationError,
    LLMError,
    LLMPolicyDenied,
    LLMProviderError,
    LLMTimeoutError,
)
from agent.service.llm_service import LLMService
from agent.service.policies import resolve_model
from agent.types.context import RunContext
from agent.types.conversation import Conversation, UIMessage, to_model_messages
from agent.types.requests import ChatRequest

from .protocol import encode_error, encode_event

logger = logging.getLogger(__name__)


class ChatBody(BaseModel):
    """``{"messages": [...], "model": "..."}`` as posted by the chat UI."""

    messages: List[UIMessage] = Field(min_length=1)
    model: Optional[str] = None


class InvalidChatRequest(ValueError):
    def __init__(self, message: str, status: int = 400) -> None:
        super().__init__(message)
        self.status = status


def public_error_message(exc: BaseException) -> str:
    """User-facing text for a failure; internals stay in the logs."""
    if isinstance(exc, LLMConfigurationError):
        return "AI service is not configured. Please contact support."
    if isinstance(exc, LLMPolicyDenied):
        return "This request is not allowed by the current policy."
    if isinstance(exc, LLMTimeoutError):
        return "The AI service timed out. Please try again."
    if isinstance(exc, LLMProviderError):
        return "The AI service encountered an error. Please try again."
    return "Failed to get AI response."


def build_chat_request(
    pipeline_id: str,
    payload: Dict[str, Any],
    service: Optional[LLMService] = None,
) -> ChatRequest:
    """Validate the posted body and replay it as a model request.

    Raises InvalidChatRequest with status 404 for an unknown pipeline and
    400 for a malformed body or a disallowed model.
    """
    service = service or get_llm_service()
    if not service.has_pipeline(pipeline_id):
        raise InvalidChatRequest(f"Unknown chat endpoint: {pipeline_id}", status=404)
    try:
        body = ChatBody.model_validate(payload)
    except ValueError as e:
        raise InvalidChatRequest(f"Invalid request body: {e}") from e
    try:
        model = resolve_model(body.model)
    except LLMError as e:
        raise InvalidChatRequest(str(e)) from e

    pipeline = service.pipeline(pipeline_id)
    conversation = Conversation(messages=body.messages)
    return ChatRequest(
        messages=to_model_messages(conversation, getattr(pipeline, "tool_registry", None)),
        model=model,
        context=RunContext.create(conversation_id=body.messages[-1].id),
    )


async def relay_frames(
    pipeline_id: str,
    request: ChatRequest,
    service: Optional[LLMService] = None,
) -> AsyncIterator[str]:
    """Frame lines for one run, one at a time.

    A failure ends the stream with a single error frame. When the consumer
    goes away the run's cancel flag is set so no further tools start.
    """
    service = service or get_llm_service()
    context = request.context
    try:
        async for event in service.astream(pipeline_id, request):
            frame = encode_event(event)
            if frame is not None:
                yield frame
    except asyncio.CancelledError:
        logger.info("Relay cancelled pipeline=%s run_id=%s", pipeline_id, context.run_id)
        raise
    except Exception as exc:
        logger.exception("Relay failed pipeline=%s run_id=%s", pipeline_id, context.run_id)
        yield encode_error(public_error_message(exc))
    finally:
        context.cancel()


__all__ = [
    "ChatBody",
    "InvalidChatRequest",
    "public_error_message",
    "build_chat_request",
    "relay_frames",
]
