from __future__ import annotations

from typing import Iterator, Protocol, runtime_checkable

from agent.types.requests import ChatRequest
from agent.types.responses import ChatResponse
from agent.types.streaming import StreamEvent


@runtime_checkable
class ChatModel(Protocol):
    """
    Provider-agnostic chat model interface.

    Concrete implementations wrap LangChain chat models
    (ChatOpenAI, ChatAnthropic, ChatGoogleGenerativeAI) rather than
    calling provider SDKs directly.

    ``stream`` yields ``message_start``, any number of ``token`` events and
    then ``message_end`` whose data carries the aggregated ``tool_calls``
    and ``usage``. A provider failure mid-stream is reported as a single
    ``error`` event instead of an exception.
    """

    name: str

    def generate(self, request: ChatRequest) -> ChatResponse:
        """Run a single non-streaming chat completion."""

        ...

    def stream(self, request: ChatRequest) -> Iterator[StreamEvent]:
        """Stream one chat completion as events."""

        ...


__all__ = ["ChatModel"]
