from __future__ import annotations

from langchain_anthropic import ChatAnthropic

from agent import conf
from agent.core.providers.base import BaseLangChainChatModel


class AnthropicChatModel(BaseLangChainChatModel):
    """ChatModel backed by LangChain's ChatAnthropic."""

    _provider_label = "Anthropic"
    api_model_prefix = "anthropic/"
    api_key_env = ("ANTHROPIC_API_KEY",)

    def _build_client(self, api_model: str) -> ChatAnthropic:
        return ChatAnthropic(
            model=api_model,
            timeout=conf.get_request_timeout(),
            max_retries=conf.get_max_retries(),
        )


__all__ = ["AnthropicChatModel"]
