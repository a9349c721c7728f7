"""Tool definitions shared by the orchestrator and the widget renderer."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Type

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from agent.types.context import RunContext


class ToolParams(BaseModel):
    """Base for tool parameter and client-result models.

    Fields are snake_case in Python and camelCase on the wire, which is
    what the model and the UI see.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ToolExecutor(Protocol):
    """Server-side implementation of a tool."""

    def __call__(self, params: Any, context: RunContext) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class ToolDefinition:
    """A named, schema-described function the model may invoke.

    Tools without ``execute`` are client-side: the UI supplies the result
    in a later request, shaped by ``result_model``. ``widget`` names the
    component the renderer uses for this tool's results.
    """

    name: str
    description: str
    parameters: Type[BaseModel]
    execute: Optional[ToolExecutor] = None
    result_model: Optional[Type[BaseModel]] = None
    widget: Optional[str] = None
    progress_label: Optional[str] = None

    @property
    def is_client_side(self) -> bool:
        return self.execute is None

    def parameters_schema(self) -> Dict[str, Any]:
        return self.parameters.model_json_schema()

    def describe_progress(self, args: Dict[str, Any]) -> str:
        """In-progress label for a pending call, e.g. "Querying employees..."."""
        if not self.progress_label:
            return f"Running {self.name}..."
        try:
            return self.progress_label.format(**args)
        except (KeyError, IndexError, ValueError):
            return self.progress_label


__all__ = ["ToolParams", "ToolExecutor", "ToolDefinition"]
