"""
Call logging helpers.

One record per service call: a start line, then a completion or an error
line carrying the run_id. Streaming calls are summarized from their events
after the stream finishes (text from token events, tool calls paired from
tool_start/tool_end, termination reason from message_end).

These helpers never raise; a logging failure must not surface to the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, List

from agent.types.messages import Message, ToolCall
from agent.types.responses import ChatResponse, Usage

if TYPE_CHECKING:
    from agent.types.requests import ChatRequest
    from agent.types.streaming import StreamEvent

logger = logging.getLogger(__name__)


def _run_id(request: "ChatRequest") -> str:
    return request.context.run_id if request.context else ""


def pair_tool_events(events: "List[StreamEvent]") -> List[Dict[str, Any]]:
    """Pair tool_start with tool_end by tool_call_id, in start order.

    A call with no tool_end (client-side, still pending) keeps result None.
    """
    tool_by_id: Dict[str, Dict[str, Any]] = {}
    for e in events:
        tid = e.data.get("tool_call_id") or ""
        if e.event_type == "tool_start":
            tool_by_id[tid] = {
                "tool_call_id": tid,
                "tool_name": e.data.get("tool_name", ""),
                "arguments": e.data.get("arguments", {}),
                "result": None,
            }
        elif e.event_type == "tool_end":
            entry = tool_by_id.setdefault(
                tid,
                {
                    "tool_call_id": tid,
                    "tool_name": e.data.get("tool_name", ""),
                    "arguments": {},
                    "result": None,
                },
            )
            entry["result"] = e.data.get("result")
    return list(tool_by_id.values())


def assemble_stream_response(events: "List[StreamEvent]", model: str = "") -> ChatResponse:
    """Build a single ChatResponse from the events of a finished stream."""
    content = "".join(e.data.get("text", "") for e in events if e.event_type == "token")
    tools = pair_tool_events(events)

    usage = None
    finish_reason = "stop"
    errors = []
    for e in events:
        if e.event_type == "step_end" and e.data.get("usage"):
            step_usage = Usage(**e.data["usage"])
            usage = step_usage if usage is None else usage + step_usage
        elif e.event_type == "message_end":
            finish_reason = e.data.get("finish_reason") or finish_reason
        elif e.event_type == "error":
            finish_reason = "error"
            errors.append(e.data.get("message", ""))

    message = Message(
        role="assistant",
        content=content,
        tool_calls=[
            ToolCall(id=t["tool_call_id"], name=t["tool_name"], arguments=t["arguments"])
            for t in tools
        ]
        or None,
    )
    metadata: Dict[str, Any] = {"tool_results": {t["tool_call_id"]: t["result"] for t in tools}}
    if errors:
        metadata["errors"] = errors
    return ChatResponse(
        message=message,
        model=model,
        usage=usage,
        finish_reason=finish_reason,
        metadata=metadata,
    )


def log_start(request: "ChatRequest", pipeline_id: str, *, is_stream: bool) -> None:
    try:
        logger.info(
            "agent call start pipeline=%s model=%s run_id=%s conversation=%s stream=%s messages=%d",
            pipeline_id,
            request.model or "",
            _run_id(request),
            request.context.conversation_id if request.context else None,
            is_stream,
            len(request.messages),
        )
    except Exception:
        logger.exception("Failed to write agent start log")


def log_call(request: "ChatRequest", response: ChatResponse, duration_ms: int) -> None:
    """Completion record for a non-streaming call."""
    try:
        usage = response.usage
        logger.info(
            "agent call done run_id=%s model=%s duration_ms=%d finish=%s tool_calls=%d tokens=%s",
            _run_id(request),
            response.model or request.model or "",
            duration_ms,
            response.finish_reason,
            len(response.message.tool_calls or []),
            usage.total_tokens if usage else None,
        )
    except Exception:
        logger.exception("Failed to write agent call log (non-streaming)")


def log_stream(request: "ChatRequest", events: "List[StreamEvent]", duration_ms: int) -> None:
    """Completion record for a streaming call, summarized from its events."""
    try:
        response = assemble_stream_response(events, model=request.model or "")
        termination = "step_ceiling" if any(
            e.event_type == "meta" and e.data.get("type") == "truncated" for e in events
        ) else response.finish_reason
        level = logging.WARNING if termination in ("step_ceiling", "error") else logging.INFO
        logger.log(
            level,
            "agent stream done run_id=%s model=%s duration_ms=%d events=%d tool_calls=%d termination=%s",
            _run_id(request),
            request.model or "",
            duration_ms,
            len(events),
            len(response.message.tool_calls or []),
            termination,
        )
    except Exception:
        logger.exception("Failed to write agent call log (streaming)")


def log_error(
    request: "ChatRequest",
    exc: BaseException,
    duration_ms: int,
    *,
    is_stream: bool = False,
) -> None:
    try:
        logger.error(
            "agent call failed run_id=%s model=%s stream=%s duration_ms=%d error_type=%s error=%s",
            _run_id(request),
            request.model or "",
            is_stream,
            duration_ms,
            type(exc).__name__,
            exc,
        )
    except Exception:
        logger.exception("Failed to write agent error log")


__all__ = [
    "pair_tool_events",
    "assemble_stream_response",
    "log_start",
    "log_call",
    "log_stream",
    "log_error",
]
