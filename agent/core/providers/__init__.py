"""
Provider-specific ChatModel implementations.

These modules wrap LangChain chat model integrations for each vendor.
Prefixes are registered explicitly by ``register_default_providers``.
"""

from agent.core.registry import ModelRegistry

from .base import BaseLangChainChatModel
from .openai import OpenAIChatModel
from .anthropic import AnthropicChatModel
from .gemini import GeminiChatModel

DEFAULT_PREFIXES = (
    ("openai/", OpenAIChatModel),
    ("gpt-", OpenAIChatModel),
    ("o1", OpenAIChatModel),
    ("anthropic/", AnthropicChatModel),
    ("claude-", AnthropicChatModel),
    ("gemini/", GeminiChatModel),
    ("gemini-", GeminiChatModel),
)


def register_default_providers(registry: ModelRegistry) -> None:
    """Register the OpenAI, Anthropic and Gemini prefixes on ``registry``."""
    for prefix, model_cls in DEFAULT_PREFIXES:
        registry.register_model_prefix(prefix, model_cls)


__all__ = [
    "BaseLangChainChatModel",
    "OpenAIChatModel",
    "AnthropicChatModel",
    "GeminiChatModel",
    "DEFAULT_PREFIXES",
    "register_default_providers",
]
