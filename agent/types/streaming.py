from __future__ import annotations

from typing import Any, Dict, Literal

from pydantic import BaseModel, Field


StreamEventType = Literal[
    "message_start",
    "step_start",
    "token",
    "tool_start",
    "tool_end",
    "step_end",
    "message_end",
    "error",
    "meta",
]

# Finish reasons follow the client SDK's vocabulary.
FinishReason = Literal["stop", "tool-calls", "length", "error", "other"]


class StreamEvent(BaseModel):
    """Single streaming event emitted during a chat run."""

    event_type: StreamEventType
    data: Dict[str, Any] = Field(default_factory=dict)
    sequence: int
    run_id: str


__all__ = ["StreamEventType", "FinishReason", "StreamEvent"]
