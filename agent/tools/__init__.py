from .interfaces import ToolDefinition, ToolParams
from .registry import ToolRegistry, ToolSummary
from .schema import tools_to_langchain_schemas
from .dispatch import ToolOutcome, dispatch_tool_call

__all__ = [
    "ToolDefinition",
    "ToolParams",
    "ToolRegistry",
    "ToolSummary",
    "tools_to_langchain_schemas",
    "ToolOutcome",
    "dispatch_tool_call",
]
