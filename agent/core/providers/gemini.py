from __future__ import annotations

import os

from langchain_google_genai import ChatGoogleGenerativeAI

from agent import conf
from agent.core.providers.base import BaseLangChainChatModel


class GeminiChatModel(BaseLangChainChatModel):
    """ChatModel backed by LangChain's ChatGoogleGenerativeAI."""

    _provider_label = "Gemini"
    api_model_prefix = "gemini/"
    api_key_env = ("GEMINI_API_KEY", "GOOGLE_API_KEY")

    def _build_client(self, api_model: str) -> ChatGoogleGenerativeAI:
        return ChatGoogleGenerativeAI(
            model=api_model,
            google_api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
            timeout=conf.get_request_timeout(),
            max_retries=conf.get_max_retries(),
        )


__all__ = ["GeminiChatModel"]
