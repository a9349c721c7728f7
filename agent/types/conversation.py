"""Client-facing conversation model and its replay into model messages.

The server is stateless between requests: the client sends the whole
conversation every time. These models accept and emit the client SDK's
camelCase wire shape so a parsed conversation serializes back unchanged.
"""

from __future__ import annotations

import json
import logging
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from agent.service.errors import DuplicateToolResult, UnknownToolCall

from .messages import Message, ToolCall

if TYPE_CHECKING:
    from agent.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ToolInvocationState(str, Enum):
    """Lifecycle of a tool invocation. CALL -> RESULT is the only transition."""

    CALL = "call"
    RESULT = "result"


class ToolInvocation(_WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    tool_call_id: str
    tool_name: str
    state: ToolInvocationState = ToolInvocationState.CALL
    args: Dict[str, Any] = Field(default_factory=dict)
    result: Optional[Any] = None
    step: Optional[int] = None

    @field_validator("state", mode="before")
    @classmethod
    def _partial_call_is_call(cls, value: Any) -> Any:
        # The client SDK reports args still being streamed as "partial-call".
        if value == "partial-call":
            return ToolInvocationState.CALL
        return value

    @model_validator(mode="after")
    def _result_only_when_resolved(self) -> "ToolInvocation":
        if self.state is ToolInvocationState.CALL and self.result is not None:
            raise ValueError("result is only allowed when state is 'result'")
        return self

    @property
    def is_resolved(self) -> bool:
        return self.state is ToolInvocationState.RESULT

    def resolve(self, result: Any) -> "ToolInvocation":
        """Return a copy in RESULT state. A second transition is an error."""
        if self.is_resolved:
            raise DuplicateToolResult(f"Tool call {self.tool_call_id} already has a result")
        return self.model_copy(update={"state": ToolInvocationState.RESULT, "result": result})


class TextPart(_WireModel):
    type: Literal["text"] = "text"
    text: str


class ToolInvocationPart(_WireModel):
    type: Literal["tool-invocation"] = "tool-invocation"
    tool_invocation: ToolInvocation


class StepStartPart(_WireModel):
    type: Literal["step-start"] = "step-start"


MessagePart = Annotated[
    Union[TextPart, ToolInvocationPart, StepStartPart],
    Field(discriminator="type"),
]


class UIMessage(_WireModel):
    id: str = Field(default_factory=lambda: uuid4().hex)
    role: Literal["user", "assistant"]
    content: str = ""
    parts: List[MessagePart] = Field(default_factory=list)

    @model_validator(mode="after")
    def _parts_from_content(self) -> "UIMessage":
        if not self.parts and self.content:
            self.parts = [TextPart(text=self.content)]
        return self

    @property
    def text(self) -> str:
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))

    def invocations(self) -> List[ToolInvocation]:
        return [p.tool_invocation for p in self.parts if isinstance(p, ToolInvocationPart)]


class Conversation(_WireModel):
    """Ordered, append-only transcript round-tripped on every request."""

    messages: List[UIMessage] = Field(default_factory=list)

    def find_invocation(self, tool_call_id: str) -> Optional[ToolInvocation]:
        for message in self.messages:
            for invocation in message.invocations():
                if invocation.tool_call_id == tool_call_id:
                    return invocation
        return None

    def add_tool_result(self, tool_call_id: str, result: Any) -> bool:
        """Resolve a pending invocation in place of its part.

        Returns False when the invocation already has a result, so client
        retries are a no-op. Raises UnknownToolCall for ids not in the
        conversation.
        """
        for message in self.messages:
            for index, part in enumerate(message.parts):
                if not isinstance(part, ToolInvocationPart):
                    continue
                if part.tool_invocation.tool_call_id != tool_call_id:
                    continue
                if part.tool_invocation.is_resolved:
                    logger.info("Ignoring duplicate result for tool call %s", tool_call_id)
                    return False
                message.parts[index] = ToolInvocationPart(
                    tool_invocation=part.tool_invocation.resolve(result)
                )
                return True
        raise UnknownToolCall(f"No tool call with id {tool_call_id} in this conversation")


MISSING_RESULT = {"error": "No result was provided for this tool call."}


def _checked_result(invocation: ToolInvocation, tool_registry: Optional["ToolRegistry"]) -> Any:
    """Result as the model should see it, validating client-submitted payloads."""
    if not invocation.is_resolved:
        return MISSING_RESULT
    if tool_registry is None:
        return invocation.result
    definition = tool_registry.get_tool(invocation.tool_name)
    if definition is None:
        return {"error": f"Unknown tool: {invocation.tool_name}"}
    if definition.is_client_side and definition.result_model is not None:
        try:
            definition.result_model.model_validate(invocation.result)
        except ValidationError as e:
            logger.warning(
                "Invalid client result for %s (%s): %s",
                invocation.tool_name,
                invocation.tool_call_id,
                e,
            )
            return {"error": f"Invalid result for {invocation.tool_name}: {e}"}
    return invocation.result


def _flush(
    text: List[str],
    invocations: List[ToolInvocation],
    tool_registry: Optional["ToolRegistry"],
    out: List[Message],
) -> None:
    content = "".join(text)
    if not content and not invocations:
        return
    tool_calls = [
        ToolCall(id=inv.tool_call_id, name=inv.tool_name, arguments=inv.args) for inv in invocations
    ]
    out.append(Message(role="assistant", content=content, tool_calls=tool_calls or None))
    for inv in invocations:
        out.append(
            Message(
                role="tool",
                content=json.dumps(_checked_result(inv, tool_registry)),
                tool_call_id=inv.tool_call_id,
                name=inv.tool_name,
            )
        )


def to_model_messages(
    conversation: Conversation,
    tool_registry: Optional["ToolRegistry"] = None,
) -> List[Message]:
    """Replay a client conversation as model messages.

    Assistant parts are grouped into steps: each step becomes one assistant
    message carrying its tool calls, followed by one tool message per call.
    The first occurrence of a toolCallId wins; later duplicates are dropped.
    """
    out: List[Message] = []
    seen: set[str] = set()

    for message in conversation.messages:
        if message.role == "user":
            out.append(Message(role="user", content=message.text))
            continue

        text: List[str] = []
        invocations: List[ToolInvocation] = []
        for part in message.parts:
            if isinstance(part, StepStartPart):
                _flush(text, invocations, tool_registry, out)
                text, invocations = [], []
            elif isinstance(part, TextPart):
                if invocations:
                    _flush(text, invocations, tool_registry, out)
                    text, invocations = [], []
                text.append(part.text)
            else:
                invocation = part.tool_invocation
                if invocation.tool_call_id in seen:
                    logger.warning(
                        "Dropping duplicate tool invocation %s in message %s",
                        invocation.tool_call_id,
                        message.id,
                    )
                    continue
                seen.add(invocation.tool_call_id)
                invocations.append(invocation)
        _flush(text, invocations, tool_registry, out)

    return out


__all__ = [
    "ToolInvocationState",
    "ToolInvocation",
    "TextPart",
    "ToolInvocationPart",
    "StepStartPart",
    "MessagePart",
    "UIMessage",
    "Conversation",
    "MISSING_RESULT",
    "to_model_messages",
]
