"""
Agent configuration from Django settings.
"""
from django.conf import settings


def get_default_model() -> str:
    return getattr(settings, "DEFAULT_LLM_MODEL", "openai/gpt-4o")


def get_allowed_models() -> list[str]:
    """Model strings that may be requested. Empty means only the default model."""
    return list(getattr(settings, "LLM_ALLOWED_MODELS", []))


def get_max_concurrent_streams() -> int:
    return int(getattr(settings, "LLM_MAX_CONCURRENT_STREAMS", 8))


def get_step_ceiling(pipeline_id: str, default: int) -> int:
    """Per-pipeline step ceiling, e.g. DATA_ASSISTANT_MAX_STEPS for ``data_assistant``."""
    return int(getattr(settings, f"{pipeline_id.upper()}_MAX_STEPS", default))


def get_request_timeout() -> float:
    """Provider request timeout in seconds."""
    return float(getattr(settings, "LLM_REQUEST_TIMEOUT", 60.0))


def get_max_retries() -> int:
    return int(getattr(settings, "LLM_MAX_RETRIES", 2))
