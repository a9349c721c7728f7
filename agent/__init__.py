"""
Tool-calling agent core: types, tool registry and dispatch, model
providers, the tool loop pipeline, and the service facade.

Public entrypoint:

    from agent import get_llm_service
    service = get_llm_service()
"""

from .service.llm_service import get_llm_service  # noqa: F401

__all__ = ["get_llm_service"]
