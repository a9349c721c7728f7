from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable, Dict, List

from agent.core.interfaces import ChatModel
from agent.service.errors import LLMConfigurationError


ModelFactory = Callable[[str], ChatModel]


@dataclass
class ModelRegistry:
    """
    Maps model name prefixes ("openai/", "claude-", ...) to ChatModel factories.

    A factory receives the full model name (e.g. "openai/gpt-4o") and returns
    an initialized ChatModel wrapper.
    """

    _prefix_factories: Dict[str, ModelFactory] = field(default_factory=dict)

    def register_model_prefix(self, prefix: str, factory: ModelFactory) -> None:
        if not prefix:
            raise ValueError("prefix must be non-empty")
        self._prefix_factories[prefix] = factory

    def unregister_model_prefix(self, prefix: str) -> None:
        self._prefix_factories.pop(prefix, None)

    def prefixes(self) -> List[str]:
        return list(self._prefix_factories)

    def get_model(self, model_name: str) -> ChatModel:
        """
        Resolve a ChatModel for the given model name.

        The longest matching prefix wins. Raises LLMConfigurationError if none matches.
        """
        for prefix in sorted(self._prefix_factories, key=len, reverse=True):
            if model_name.startswith(prefix):
                return self._prefix_factories[prefix](model_name)
        raise LLMConfigurationError(
            f"No ChatModel registered for model_name='{model_name}'. "
            f"Configured prefixes: {self.prefixes() or '[]'}"
        )

    def clear(self) -> None:
        self._prefix_factories.clear()


_global_registry: ModelRegistry | None = None
_global_registry_lock = threading.Lock()


def get_model_registry() -> ModelRegistry:
    """Return the process-wide ModelRegistry singleton (thread-safe)."""

    global _global_registry
    if _global_registry is None:
        with _global_registry_lock:
            if _global_registry is None:
                _global_registry = ModelRegistry()
    return _global_registry


__all__ = ["ModelFactory", "ModelRegistry", "get_model_registry"]
