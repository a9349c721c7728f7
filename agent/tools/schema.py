"""Convert tool definitions to LangChain/OpenAI-compatible tool schemas for bind_tools()."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from agent.tools.interfaces import ToolDefinition


def tools_to_langchain_schemas(tools: Iterable[ToolDefinition]) -> List[Dict[str, Any]]:
    """Convert tool definitions to OpenAI-format dicts accepted by LangChain bind_tools().

    Returns a list of dicts: {"type": "function", "function": {"name": ..., "description": ..., "parameters": ...}}
    """
    result = []
    for tool in tools:
        parameters = tool.parameters_schema()
        parameters.pop("title", None)
        result.append({
            "type": "function",
            "function": {
                "name": tool.name,
                "description": tool.description,
                "parameters": parameters,
            },
        })
    return result


__all__ = ["tools_to_langchain_schemas"]
