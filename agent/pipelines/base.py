"""Base pipeline interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, Iterator

from agent.types.requests import ChatRequest
from agent.types.responses import ChatResponse
from agent.types.streaming import StreamEvent


class BasePipeline(ABC):
    """Abstract base for agent pipelines.

    Streaming is the primary interface; ``run`` drains ``stream`` unless a
    pipeline has a cheaper non-streaming path.
    """

    id: str
    capabilities: Dict[str, bool]  # e.g. {"streaming": True, "tools": True}

    @abstractmethod
    def stream(self, request: ChatRequest) -> Iterator[StreamEvent]:
        """Stream completion events."""
        ...

    def run(self, request: ChatRequest) -> ChatResponse:
        """Run to completion and return the assembled response."""
        from agent.service.logger import assemble_stream_response

        return assemble_stream_response(list(self.stream(request)), model=request.model or "")


__all__ = ["BasePipeline"]
