"""LangChain message conversion shared by all providers."""

from __future__ import annotations

from typing import Any, List, Optional

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage, ToolMessage

from agent.types.messages import Message, ToolCall
from agent.types.responses import Usage


def _normalize_tool_call(tc: object) -> ToolCall:
    """Convert a LangChain tool call (dict or object) to our ToolCall."""
    if isinstance(tc, dict):
        return ToolCall(
            id=tc.get("id") or "",
            name=tc["name"],
            arguments=tc.get("args") or {},
        )
    return ToolCall(
        id=getattr(tc, "id", "") or "",
        name=getattr(tc, "name", ""),
        arguments=getattr(tc, "args", None) or {},
    )


def parse_tool_calls_from_ai_message(ai_message: object) -> list[ToolCall] | None:
    """Extract our ToolCall list from a LangChain AIMessage or aggregated AIMessageChunk."""
    raw = getattr(ai_message, "tool_calls", None) or []
    if not raw:
        return None
    return [_normalize_tool_call(tc) for tc in raw]


def content_text(content: Any) -> str:
    """Text of a message or chunk ``content``.

    Anthropic and Gemini return a list of content blocks; only text blocks
    are kept.
    """
    if not content:
        return ""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        pieces = []
        for block in content:
            if isinstance(block, str):
                pieces.append(block)
            elif isinstance(block, dict) and block.get("type") == "text":
                pieces.append(block.get("text") or "")
        return "".join(pieces)
    return str(content)


def usage_from_message(message: object) -> Optional[Usage]:
    usage_meta = getattr(message, "usage_metadata", None)
    if not isinstance(usage_meta, dict):
        return None
    return Usage(
        prompt_tokens=usage_meta.get("input_tokens"),
        completion_tokens=usage_meta.get("output_tokens"),
        total_tokens=usage_meta.get("total_tokens"),
    )


def to_langchain_messages(messages: List[Message]):
    """Convert internal Message objects to LangChain message types.

    Role mapping:
        system    → SystemMessage
        assistant → AIMessage (with optional tool_calls)
        user      → HumanMessage
        tool      → ToolMessage (requires tool_call_id)
    """
    lc_messages = []
    for m in messages:
        if m.role == "system":
            lc_messages.append(SystemMessage(content=m.content))
        elif m.role == "assistant":
            tool_calls_lc = [
                {"id": tc.id, "name": tc.name, "args": tc.arguments}
                for tc in (m.tool_calls or [])
            ]
            lc_messages.append(AIMessage(content=m.content, tool_calls=tool_calls_lc))
        elif m.role == "tool":
            if not m.tool_call_id:
                raise ValueError("tool messages require tool_call_id")
            lc_messages.append(ToolMessage(content=m.content, tool_call_id=m.tool_call_id, name=m.name))
        else:
            lc_messages.append(HumanMessage(content=m.content))
    return lc_messages


__all__ = [
    "parse_tool_calls_from_ai_message",
    "content_text",
    "usage_from_message",
    "to_langchain_messages",
]
