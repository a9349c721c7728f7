"""Test utilities for the agent app."""

from __future__ import annotations

import os
import unittest
from typing import Any, Dict, Iterator, List, Optional

from agent.core.registry import ModelRegistry
from agent.types.messages import Message
from agent.types.requests import ChatRequest
from agent.types.responses import ChatResponse
from agent.types.streaming import StreamEvent


def require_test_apis(reason: str = "Set TEST_APIS=True in the environment to run live API tests."):
    """
    Decorator to skip a test unless TEST_APIS is set to True (case-insensitive).

    Use for tests that call real provider APIs (OpenAI, Anthropic, Gemini).
    """
    test_apis = os.environ.get("TEST_APIS", "").strip().lower() == "true"
    return unittest.skipUnless(test_apis, reason)


def turn(text: str = "", tool_calls: Optional[List[Dict[str, Any]]] = None, usage: Optional[Dict[str, int]] = None):
    """One scripted model turn: streamed text, then the proposed tool calls."""
    return {"text": text, "tool_calls": tool_calls or [], "usage": usage}


def call(call_id: str, name: str, **arguments) -> Dict[str, Any]:
    return {"id": call_id, "name": name, "arguments": arguments}


class ScriptedChatModel:
    """ChatModel double that replays scripted turns and records each request.

    A turn of ``"error"`` reports a provider failure the way real providers do.
    When the script runs out the model answers with plain text.
    """

    def __init__(self, turns: List[Any], name: str = "fake/scripted") -> None:
        self.name = name
        self.turns = list(turns)
        self.requests: List[ChatRequest] = []

    def _next(self) -> Any:
        return self.turns.pop(0) if self.turns else turn("Done.")

    def generate(self, request: ChatRequest) -> ChatResponse:
        self.requests.append(request)
        scripted = self._next()
        return ChatResponse(message=Message(role="assistant", content=scripted["text"]), model=self.name)

    def stream(self, request: ChatRequest) -> Iterator[StreamEvent]:
        self.requests.append(request)
        scripted = self._next()
        run_id = request.context.run_id if request.context else ""
        yield StreamEvent(event_type="message_start", data={"model": self.name}, sequence=1, run_id=run_id)
        if scripted == "error":
            yield StreamEvent(
                event_type="error",
                data={"message": "Fake streaming failure", "details": "scripted"},
                sequence=2,
                run_id=run_id,
            )
            return
        sequence = 2
        if scripted["text"]:
            yield StreamEvent(event_type="token", data={"text": scripted["text"]}, sequence=sequence, run_id=run_id)
            sequence += 1
        yield StreamEvent(
            event_type="message_end",
            data={"model": self.name, "tool_calls": scripted["tool_calls"], "usage": scripted["usage"]},
            sequence=sequence,
            run_id=run_id,
        )


def registry_for(model: ScriptedChatModel) -> ModelRegistry:
    """A ModelRegistry that hands out ``model`` for every ``fake/`` name."""
    registry = ModelRegistry()
    registry.register_model_prefix("fake/", lambda name: model)
    return registry
