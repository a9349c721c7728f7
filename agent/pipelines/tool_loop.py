"""Multi-step tool loop: model proposes tools, tools resolve, model is re-invoked.

Server-side tools run inline and the loop continues with their results.
A client-side tool ends the turn with its call unresolved; the client
answers it in the next request. The loop also stops when the model asks
for no tools, or when ``max_steps`` model turns have run.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional
from uuid import uuid4

from agent.core.interfaces import ChatModel
from agent.core.registry import ModelRegistry, get_model_registry
from agent.pipelines.base import BasePipeline
from agent.service.errors import StepCeilingExceeded
from agent.tools.dispatch import dispatch_tool_call
from agent.tools.registry import ToolRegistry
from agent.tools.schema import tools_to_langchain_schemas
from agent.types.context import RunContext
from agent.types.messages import Message, ToolCall
from agent.types.requests import ChatRequest
from agent.types.responses import Usage
from agent.types.streaming import FinishReason, StreamEvent

logger = logging.getLogger(__name__)


class _EventSequencer:
    """Numbers events for one run; model events are re-sequenced into it."""

    def __init__(self, run_id: str) -> None:
        self.run_id = run_id
        self.sequence = 0

    def __call__(self, event_type: str, **data: Any) -> StreamEvent:
        self.sequence += 1
        return StreamEvent(event_type=event_type, data=data, sequence=self.sequence, run_id=self.run_id)


class ToolLoopPipeline(BasePipeline):
    """Conversation orchestrator bound to one tool registry and system prompt."""

    capabilities = {"streaming": True, "tools": True}

    def __init__(
        self,
        id: str,
        tool_registry: ToolRegistry,
        system_prompt: str,
        max_steps: int = 5,
        model_registry: Optional[ModelRegistry] = None,
    ) -> None:
        if max_steps < 1:
            raise ValueError("max_steps must be at least 1")
        self.id = id
        self.tool_registry = tool_registry
        self.system_prompt = system_prompt
        self.max_steps = max_steps
        self._model_registry = model_registry

    @property
    def model_registry(self) -> ModelRegistry:
        return self._model_registry or get_model_registry()

    def _prepare(self, request: ChatRequest) -> ChatRequest:
        if not request.model:
            raise ValueError("request.model must be set by the service before calling pipeline")
        messages = list(request.messages)
        if self.system_prompt and not (messages and messages[0].role == "system"):
            messages.insert(0, Message(role="system", content=self.system_prompt))
        return request.model_copy(
            update={
                "messages": messages,
                "tool_schemas": tools_to_langchain_schemas(self.tool_registry.list_tools()) or None,
                "context": request.context or RunContext.create(),
            }
        )

    def stream(self, request: ChatRequest) -> Iterator[StreamEvent]:
        req = self._prepare(request)
        context = req.context
        model = self.model_registry.get_model(req.model)
        emit = _EventSequencer(context.run_id)
        message_id = f"msg-{uuid4().hex}"
        messages = list(req.messages)
        total_usage: Optional[Usage] = None

        yield emit("message_start", model=model.name, message_id=message_id)

        step = 0
        while True:
            yield emit("step_start", message_id=message_id, step=step)

            step_req = req.model_copy(update={"messages": messages})
            text_parts: List[str] = []
            tool_calls: List[ToolCall] = []
            step_usage: Optional[Usage] = None
            for event in model.stream(step_req):
                if event.event_type == "token":
                    text_parts.append(event.data.get("text", ""))
                    yield emit("token", text=event.data.get("text", ""))
                elif event.event_type == "error":
                    logger.error(
                        "Model stream failed pipeline=%s run_id=%s step=%d: %s",
                        self.id,
                        context.run_id,
                        step,
                        event.data.get("details") or event.data.get("message"),
                    )
                    yield emit("error", message=event.data.get("message", "Model call failed"))
                    return
                elif event.event_type == "message_end":
                    tool_calls = [ToolCall(**tc) for tc in event.data.get("tool_calls") or []]
                    if event.data.get("usage"):
                        step_usage = Usage(**event.data["usage"])
            if step_usage is not None:
                total_usage = step_usage if total_usage is None else total_usage + step_usage

            if not tool_calls:
                yield from self._finish(emit, "stop", step_usage, total_usage)
                logger.info(
                    "Run finished pipeline=%s run_id=%s steps=%d termination=stop",
                    self.id,
                    context.run_id,
                    step + 1,
                )
                return

            messages.append(Message(role="assistant", content="".join(text_parts), tool_calls=tool_calls))

            for index, call in enumerate(tool_calls):
                if context.is_cancelled():
                    logger.info(
                        "Run cancelled pipeline=%s run_id=%s before tool %s",
                        self.id,
                        context.run_id,
                        call.name,
                    )
                    return
                yield emit(
                    "tool_start",
                    tool_call_id=call.id,
                    tool_name=call.name,
                    arguments=call.arguments,
                )
                outcome = dispatch_tool_call(self.tool_registry, call, context)
                if outcome.is_pending:
                    skipped = len(tool_calls) - index - 1
                    if skipped:
                        logger.info(
                            "Deferring %d tool call(s) after client-side %s (run_id=%s)",
                            skipped,
                            call.name,
                            context.run_id,
                        )
                    yield from self._finish(emit, "tool-calls", step_usage, total_usage)
                    logger.info(
                        "Run suspended pipeline=%s run_id=%s steps=%d termination=client_tool tool=%s",
                        self.id,
                        context.run_id,
                        step + 1,
                        call.name,
                    )
                    return
                yield emit(
                    "tool_end",
                    tool_call_id=call.id,
                    tool_name=call.name,
                    result=outcome.result,
                )
                messages.append(
                    Message(
                        role="tool",
                        content=outcome.result_json(),
                        tool_call_id=call.id,
                        name=call.name,
                    )
                )

            step += 1
            if step >= self.max_steps:
                logger.warning(
                    "Run stopped pipeline=%s run_id=%s steps=%d termination=step_ceiling (%s)",
                    self.id,
                    context.run_id,
                    step,
                    StepCeilingExceeded.__name__,
                )
                yield emit("meta", type="truncated", max_steps=self.max_steps)
                yield from self._finish(emit, "length", step_usage, total_usage)
                return

            yield emit("step_end", finish_reason="tool-calls", usage=_dump(step_usage), is_continued=False)

    @staticmethod
    def _finish(
        emit: _EventSequencer,
        reason: FinishReason,
        step_usage: Optional[Usage],
        total_usage: Optional[Usage],
    ) -> Iterator[StreamEvent]:
        yield emit("step_end", finish_reason=reason, usage=_dump(step_usage), is_continued=False)
        yield emit("message_end", finish_reason=reason, usage=_dump(total_usage))


def _dump(usage: Optional[Usage]) -> Optional[Dict[str, Any]]:
    return usage.model_dump() if usage else None


__all__ = ["ToolLoopPipeline"]
