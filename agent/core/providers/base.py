"""Base class for LangChain-backed ChatModel implementations.

Encapsulates the shared generate/stream logic so provider subclasses only
need to supply a configured LangChain chat model client.
"""

from __future__ import annotations

import os
from typing import Iterator, Sequence

from agent.core.interfaces import ChatModel
from agent.core.langchain_utils import (
    content_text,
    parse_tool_calls_from_ai_message,
    to_langchain_messages,
    usage_from_message,
)
from agent.service.errors import LLMConfigurationError, LLMProviderError
from agent.types.messages import Message
from agent.types.requests import ChatRequest
from agent.types.responses import ChatResponse
from agent.types.streaming import StreamEvent


class BaseLangChainChatModel(ChatModel):
    """Shared generate/stream logic for all LangChain-backed providers.

    Subclasses implement ``_build_client`` returning the LangChain chat model
    (e.g. ``ChatOpenAI``). ``api_key_env`` lists the environment variables
    any one of which must be set.
    """

    name: str
    _client: object  # LangChain BaseChatModel instance
    _provider_label: str = "LLM"
    api_model_prefix: str = ""
    api_key_env: Sequence[str] = ()

    def __init__(self, model_name: str) -> None:
        if self.api_key_env and not any(os.getenv(var) for var in self.api_key_env):
            raise LLMConfigurationError(
                f"{' or '.join(self.api_key_env)} is not set; "
                f"cannot initialize {type(self).__name__}."
            )
        self.name = model_name
        # API expects the model id without our provider prefix (gpt-4o, not openai/gpt-4o).
        api_model = model_name
        if self.api_model_prefix and model_name.startswith(self.api_model_prefix):
            api_model = model_name[len(self.api_model_prefix):]
        self._client = self._build_client(api_model)

    def _build_client(self, api_model: str) -> object:
        raise NotImplementedError

    def _bound_client(self, request: ChatRequest):
        client = self._client
        if request.tool_schemas:
            client = client.bind_tools(request.tool_schemas)
        return client

    def generate(self, request: ChatRequest) -> ChatResponse:
        lc_messages = to_langchain_messages(request.messages)
        client = self._bound_client(request)
        try:
            result = client.invoke(lc_messages)
        except Exception as exc:
            raise LLMProviderError(
                f"{self._provider_label} generate failed for model={self.name}"
            ) from exc

        message = Message(
            role="assistant",
            content=content_text(getattr(result, "content", "")),
            tool_calls=parse_tool_calls_from_ai_message(result),
        )
        return ChatResponse(
            message=message,
            model=self.name,
            usage=usage_from_message(result),
            finish_reason="tool-calls" if message.tool_calls else "stop",
        )

    def stream(self, request: ChatRequest) -> Iterator[StreamEvent]:
        lc_messages = to_langchain_messages(request.messages)
        client = self._bound_client(request)
        run_id = request.context.run_id if request.context else ""
        sequence = 1

        yield StreamEvent(
            event_type="message_start",
            data={"model": self.name},
            sequence=sequence,
            run_id=run_id,
        )
        sequence += 1

        # Chunks are summed so tool-call fragments merge into complete calls.
        gathered = None
        try:
            for chunk in client.stream(lc_messages):
                gathered = chunk if gathered is None else gathered + chunk
                text = content_text(getattr(chunk, "content", ""))
                if not text:
                    continue
                yield StreamEvent(
                    event_type="token",
                    data={"text": text},
                    sequence=sequence,
                    run_id=run_id,
                )
                sequence += 1
        except Exception as exc:
            yield StreamEvent(
                event_type="error",
                data={"message": f"{self._provider_label} streaming failure", "details": str(exc)},
                sequence=sequence,
                run_id=run_id,
            )
            return

        tool_calls = parse_tool_calls_from_ai_message(gathered) or []
        usage = usage_from_message(gathered)
        yield StreamEvent(
            event_type="message_end",
            data={
                "model": self.name,
                "tool_calls": [tc.model_dump() for tc in tool_calls],
                "usage": usage.model_dump() if usage else None,
            },
            sequence=sequence,
            run_id=run_id,
        )


__all__ = ["BaseLangChainChatModel"]
