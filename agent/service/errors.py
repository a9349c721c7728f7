from __future__ import annotations


class LLMError(Exception):
    """Base error type for all agent failures."""


class LLMPolicyDenied(LLMError):
    """Request violates policy (e.g. disallowed model)."""


class LLMConfigurationError(LLMError):
    """Misconfiguration of settings, models, pipelines, or environment."""


class LLMProviderError(LLMError):
    """The upstream model call failed outright (network, auth, quota, malformed completion)."""


class LLMTimeoutError(LLMError):
    """Timeout while waiting for a model or tool."""


class ToolError(LLMError):
    """Base class for tool failures the model can recover from."""

    def __init__(self, message: str, tool_name: str | None = None) -> None:
        super().__init__(message)
        self.tool_name = tool_name

    def to_result(self) -> dict:
        """Result payload handed back to the model in place of a real result."""
        return {"error": str(self)}


class ToolNotFound(ToolError):
    """The model proposed a tool name that is not registered."""


class ToolValidationError(ToolError):
    """Proposed arguments (or a submitted client result) fail the tool's schema."""


class ToolExecutionError(ToolError):
    """A server-side executor raised."""


class ConversationError(LLMError):
    """Invalid transition on a replayed conversation."""


class DuplicateToolResult(ConversationError):
    """A second result was submitted for an already-resolved toolCallId."""


class UnknownToolCall(ConversationError):
    """A result referenced a toolCallId that the conversation does not contain."""


class StepCeilingExceeded(LLMError):
    """Marker for runs stopped at the step ceiling. Logged, never raised out of a run."""


# Transport failures are provider failures.
ModelTransportError = LLMProviderError


__all__ = [
    "LLMError",
    "LLMPolicyDenied",
    "LLMConfigurationError",
    "LLMProviderError",
    "LLMTimeoutError",
    "ModelTransportError",
    "ToolError",
    "ToolNotFound",
    "ToolValidationError",
    "ToolExecutionError",
    "ConversationError",
    "DuplicateToolResult",
    "UnknownToolCall",
    "StepCeilingExceeded",
]
