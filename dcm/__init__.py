from .tools import build_dcm_toolset

__all__ = ["build_dcm_toolset"]
