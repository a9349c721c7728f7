"""Data stream framing: stream events to ``<code>:<json>\\n`` lines and back.

Frames follow the client SDK's data stream convention:

    f  step start          0  text token
    9  tool call           a  tool result
    2  data (annotations)  3  error
    e  step finish         d  message finish
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from agent.types.conversation import (
    StepStartPart,
    TextPart,
    ToolInvocation,
    ToolInvocationPart,
    UIMessage,
)
from agent.types.streaming import StreamEvent

DATA_STREAM_HEADERS = {
    "Content-Type": "text/plain; charset=utf-8",
    "X-Vercel-AI-Data-Stream": "v1",
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
}

FRAME_CODES = {
    "step_start": "f",
    "token": "0",
    "tool_start": "9",
    "tool_end": "a",
    "meta": "2",
    "error": "3",
    "step_end": "e",
    "message_end": "d",
}
FRAME_EVENTS = {code: event_type for event_type, code in FRAME_CODES.items()}


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)


def _usage(usage: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    usage = usage or {}
    return {
        "promptTokens": usage.get("prompt_tokens") or 0,
        "completionTokens": usage.get("completion_tokens") or 0,
    }


def _payload(event: StreamEvent) -> Any:
    data = event.data
    kind = event.event_type
    if kind == "step_start":
        return {"messageId": data.get("message_id")}
    if kind == "token":
        return data.get("text", "")
    if kind == "tool_start":
        return {
            "toolCallId": data["tool_call_id"],
            "toolName": data["tool_name"],
            "args": data.get("arguments") or {},
        }
    if kind == "tool_end":
        return {"toolCallId": data["tool_call_id"], "result": data.get("result")}
    if kind == "meta":
        annotation = {k: v for k, v in data.items() if k != "max_steps"}
        if "max_steps" in data:
            annotation["maxSteps"] = data["max_steps"]
        return [annotation]
    if kind == "error":
        return data.get("message") or "An error occurred"
    if kind == "step_end":
        return {
            "finishReason": data.get("finish_reason", "stop"),
            "usage": _usage(data.get("usage")),
            "isContinued": bool(data.get("is_continued", False)),
        }
    return {"finishReason": data.get("finish_reason", "stop"), "usage": _usage(data.get("usage"))}


def encode_event(event: StreamEvent) -> Optional[str]:
    """One frame line for ``event``; None for events with no wire form (``message_start``)."""
    code = FRAME_CODES.get(event.event_type)
    if code is None:
        return None
    return f"{code}:{_dumps(_payload(event))}\n"


def encode_error(message: str) -> str:
    return f"3:{_dumps(message)}\n"


@dataclass(frozen=True)
class Frame:
    code: str
    value: Any

    @property
    def event_type(self) -> Optional[str]:
        return FRAME_EVENTS.get(self.code)


def parse_frame(line: str) -> Frame:
    """Decode a single frame line. Raises ValueError on malformed input."""
    line = line.rstrip("\r\n")
    code, sep, payload = line.partition(":")
    if not sep or not code:
        raise ValueError(f"Malformed frame: {line!r}")
    try:
        value = json.loads(payload)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed frame payload for code {code!r}: {e.msg}") from e
    return Frame(code=code, value=value)


def iter_frames(chunks: Iterable[Union[str, bytes]]) -> Iterator[Frame]:
    """Frames from arbitrarily split chunks; a trailing partial line is held until complete."""
    buffer = ""
    for chunk in chunks:
        buffer += chunk.decode("utf-8") if isinstance(chunk, bytes) else chunk
        while "\n" in buffer:
            line, buffer = buffer.split("\n", 1)
            if line.strip():
                yield parse_frame(line)
    if buffer.strip():
        yield parse_frame(buffer)


class StreamAccumulator:
    """Folds frames into the assistant ``UIMessage`` the client would hold."""

    def __init__(self, message_id: Optional[str] = None) -> None:
        self.message = UIMessage(role="assistant", **({"id": message_id} if message_id else {}))
        self.step = 0
        self.finish_reason: Optional[str] = None
        self.errors: List[str] = []
        self.annotations: List[Any] = []
        self._started = False

    def feed(self, frame: Frame) -> None:
        handler = getattr(self, f"_on_{frame.event_type}", None)
        if handler is not None:
            handler(frame.value)

    def feed_all(self, frames: Iterable[Frame]) -> UIMessage:
        for frame in frames:
            self.feed(frame)
        return self.message

    @property
    def pending_invocations(self) -> List[ToolInvocation]:
        return [inv for inv in self.message.invocations() if not inv.is_resolved]

    def _on_step_start(self, value: Dict[str, Any]) -> None:
        if not self._started and value.get("messageId"):
            self.message.id = value["messageId"]
        self._started = True
        self.message.parts.append(StepStartPart())

    def _on_token(self, text: str) -> None:
        parts = self.message.parts
        if parts and isinstance(parts[-1], TextPart):
            parts[-1] = TextPart(text=parts[-1].text + text)
        else:
            parts.append(TextPart(text=text))
        self.message.content += text

    def _on_tool_start(self, value: Dict[str, Any]) -> None:
        invocation = ToolInvocation(
            tool_call_id=value["toolCallId"],
            tool_name=value["toolName"],
            args=value.get("args") or {},
            step=self.step,
        )
        self.message.parts.append(ToolInvocationPart(tool_invocation=invocation))

    def _on_tool_end(self, value: Dict[str, Any]) -> None:
        for index, part in enumerate(self.message.parts):
            if isinstance(part, ToolInvocationPart) and part.tool_invocation.tool_call_id == value["toolCallId"]:
                resolved = part.tool_invocation.resolve(value.get("result"))
                self.message.parts[index] = ToolInvocationPart(tool_invocation=resolved)
                return
        raise ValueError(f"Result for unknown tool call {value['toolCallId']}")

    def _on_meta(self, value: List[Any]) -> None:
        self.annotations.extend(value)

    def _on_error(self, message: str) -> None:
        self.errors.append(message)

    def _on_step_end(self, value: Dict[str, Any]) -> None:
        self.step += 1

    def _on_message_end(self, value: Dict[str, Any]) -> None:
        self.finish_reason = value.get("finishReason")


__all__ = [
    "DATA_STREAM_HEADERS",
    "FRAME_CODES",
    "encode_event",
    "encode_error",
    "Frame",
    "parse_frame",
    "iter_frames",
    "StreamAccumulator",
]
