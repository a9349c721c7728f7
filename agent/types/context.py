from __future__ import annotations

import threading
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


class RunContext(BaseModel):
    """Per-run context for log correlation and cancellation.

    ``cancel_event`` is set by the transport when the client goes away; the
    tool loop checks it before starting another tool executor.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    run_id: str = Field(default_factory=lambda: str(uuid4()))
    conversation_id: Optional[str] = None
    cancel_event: threading.Event = Field(default_factory=threading.Event, exclude=True, repr=False)

    @classmethod
    def create(cls, conversation_id: Any | None = None) -> "RunContext":
        return cls(conversation_id=str(conversation_id) if conversation_id is not None else None)

    def cancel(self) -> None:
        self.cancel_event.set()

    def is_cancelled(self) -> bool:
        return self.cancel_event.is_set()


__all__ = ["RunContext"]
