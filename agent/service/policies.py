"""Model resolution and policy helpers (allowed models, default model)."""

from __future__ import annotations

from typing import List, Optional

from agent import conf
from agent.service.errors import LLMConfigurationError, LLMPolicyDenied


def get_allowed_models() -> List[str]:
    """Return the allowed model names; the default model is always allowed."""
    allowed = conf.get_allowed_models()
    default = conf.get_default_model()
    if default and default not in allowed:
        allowed.append(default)
    return allowed


def resolve_model(requested: Optional[str] = None) -> str:
    """
    Resolve the model name to use: validate requested against the allowed list,
    or choose DEFAULT_LLM_MODEL.
    Raises LLMConfigurationError if no model is configured at all.
    Raises LLMPolicyDenied if requested is not in the allowed list.
    """
    allowed = get_allowed_models()
    if not allowed:
        raise LLMConfigurationError(
            "No model configured. Set DEFAULT_LLM_MODEL or LLM_ALLOWED_MODELS."
        )

    if requested is not None:
        if requested not in allowed:
            raise LLMPolicyDenied(
                f"Model '{requested}' is not in LLM_ALLOWED_MODELS. Allowed: {allowed}"
            )
        return requested

    return conf.get_default_model() or allowed[0]


__all__ = ["get_allowed_models", "resolve_model"]
