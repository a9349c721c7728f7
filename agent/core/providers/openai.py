from __future__ import annotations

from langchain_openai import ChatOpenAI

from agent import conf
from agent.core.providers.base import BaseLangChainChatModel


class OpenAIChatModel(BaseLangChainChatModel):
    """ChatModel backed by LangChain's ChatOpenAI."""

    _provider_label = "OpenAI"
    api_model_prefix = "openai/"
    api_key_env = ("OPENAI_API_KEY",)

    def _build_client(self, api_model: str) -> ChatOpenAI:
        # Credentials come from the environment; stream_usage reports tokens on the last chunk.
        return ChatOpenAI(
            model=api_model,
            stream_usage=True,
            timeout=conf.get_request_timeout(),
            max_retries=conf.get_max_retries(),
        )


__all__ = ["OpenAIChatModel"]
