from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .messages import Message


class Usage(BaseModel):
    """Token accounting for a single model call or a whole run."""

    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None

    def __add__(self, other: "Usage") -> "Usage":
        def _sum(a: Optional[int], b: Optional[int]) -> Optional[int]:
            if a is None and b is None:
                return None
            return (a or 0) + (b or 0)

        return Usage(
            prompt_tokens=_sum(self.prompt_tokens, other.prompt_tokens),
            completion_tokens=_sum(self.completion_tokens, other.completion_tokens),
            total_tokens=_sum(self.total_tokens, other.total_tokens),
        )


class ChatResponse(BaseModel):
    """Normalized response from a chat model or pipeline."""

    message: Message
    model: str
    usage: Optional[Usage] = None
    finish_reason: str = "stop"
    metadata: Dict[str, Any] = Field(default_factory=dict)


__all__ = ["Usage", "ChatResponse"]
