from .messages import Message, ToolCall
from .context import RunContext
from .requests import ChatRequest
from .responses import ChatResponse, Usage
from .streaming import FinishReason, StreamEvent
from .conversation import (
    Conversation,
    TextPart,
    ToolInvocation,
    ToolInvocationPart,
    ToolInvocationState,
    UIMessage,
    to_model_messages,
)

__all__ = [
    "Message",
    "ToolCall",
    "RunContext",
    "ChatRequest",
    "ChatResponse",
    "Usage",
    "FinishReason",
    "StreamEvent",
    "Conversation",
    "TextPart",
    "ToolInvocation",
    "ToolInvocationPart",
    "ToolInvocationState",
    "UIMessage",
    "to_model_messages",
]
