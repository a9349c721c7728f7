"""Registry for tools by name."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from agent.service.errors import ToolNotFound
from agent.tools.interfaces import ToolDefinition


@dataclass(frozen=True)
class ToolSummary:
    """Prompt-facing projection of a tool."""

    name: str
    description: str
    parameters: Dict[str, Any]


@dataclass
class ToolRegistry:
    """Holds tool definitions by name, in registration order."""

    _tools: Dict[str, ToolDefinition] = field(default_factory=dict)

    def register_tool(self, tool: ToolDefinition) -> None:
        """Register a tool by its name. Duplicate names are rejected."""
        if not tool.name:
            raise ValueError("Tool name must be non-empty")
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")
        self._tools[tool.name] = tool

    def register_tools(self, tools: List[ToolDefinition]) -> None:
        for tool in tools:
            self.register_tool(tool)

    def get_tool(self, name: str) -> Optional[ToolDefinition]:
        """Return the tool with the given name, or None if not registered."""
        return self._tools.get(name)

    def resolve(self, name: str) -> ToolDefinition:
        """Return the tool with the given name; raise ToolNotFound otherwise."""
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFound(f"Unknown tool: {name}", tool_name=name)
        return tool

    def list_tools(self) -> List[ToolDefinition]:
        """Return the registered tools in registration order."""
        return list(self._tools.values())

    def list_for_prompt(self) -> List[ToolSummary]:
        """Stable, registration-ordered projection for the system prompt."""
        return [
            ToolSummary(name=t.name, description=t.description, parameters=t.parameters_schema())
            for t in self._tools.values()
        ]

    def names(self) -> List[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


__all__ = ["ToolSummary", "ToolRegistry"]
