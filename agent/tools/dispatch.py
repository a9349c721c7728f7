"""Resolve, validate and execute a single model-proposed tool call."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional

from pydantic import ValidationError

from agent.service.errors import ToolError, ToolExecutionError, ToolNotFound, ToolValidationError
from agent.tools.registry import ToolRegistry
from agent.types.context import RunContext
from agent.types.messages import ToolCall

logger = logging.getLogger(__name__)


OutcomeStatus = Literal["result", "pending"]


@dataclass(frozen=True)
class ToolOutcome:
    """What happened to one tool call.

    ``pending`` means the tool is client-side and the turn must end with
    this call unresolved. Tool errors are ordinary results carrying an
    ``error`` key; ``error`` keeps the typed exception for logging.
    """

    tool_call: ToolCall
    status: OutcomeStatus
    result: Optional[Dict[str, Any]] = None
    error: Optional[ToolError] = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"

    def result_json(self) -> str:
        return json.dumps(self.result, default=str)


def _failed(call: ToolCall, error: ToolError) -> ToolOutcome:
    return ToolOutcome(tool_call=call, status="result", result=error.to_result(), error=error)


def dispatch_tool_call(registry: ToolRegistry, call: ToolCall, context: RunContext) -> ToolOutcome:
    """Run one tool call. Never raises for tool-level failures."""
    try:
        tool = registry.resolve(call.name)
    except ToolNotFound as e:
        logger.warning("Model proposed unknown tool %r (run_id=%s)", call.name, context.run_id)
        return _failed(call, e)

    try:
        params = tool.parameters.model_validate(call.arguments)
    except ValidationError as e:
        logger.warning("Invalid arguments for tool %s (run_id=%s): %s", call.name, context.run_id, e)
        return _failed(
            call,
            ToolValidationError(f"Invalid arguments for {call.name}: {e}", tool_name=call.name),
        )

    if tool.is_client_side:
        logger.info("Tool %s is client-side; awaiting result for %s", call.name, call.id)
        return ToolOutcome(tool_call=call, status="pending")

    try:
        result = tool.execute(params, context)
    except Exception as e:
        logger.exception("Tool %s failed (run_id=%s)", call.name, context.run_id)
        return _failed(call, ToolExecutionError(str(e) or type(e).__name__, tool_name=call.name))

    if not isinstance(result, dict):
        result = {"value": result}
    return ToolOutcome(tool_call=call, status="result", result=result)


__all__ = ["OutcomeStatus", "ToolOutcome", "dispatch_tool_call"]
