from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from .context import RunContext
from .messages import Message


class ChatRequest(BaseModel):
    """One assistant turn: the replayed conversation, the resolved model, and its run context."""

    messages: List[Message]
    model: Optional[str] = None
    tool_schemas: Optional[List[Dict[str, Any]]] = None  # set by the tool loop for bind_tools()
    context: Optional[RunContext] = None


__all__ = ["ChatRequest"]
