"""Composition root: data sources, toolsets and pipelines, wired in order."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from agent import conf
from agent.pipelines.registry import PipelineRegistry, get_pipeline_registry
from agent.pipelines.tool_loop import ToolLoopPipeline
from agent.tools.registry import ToolRegistry
from datasources.registry import DataSourceRegistry, build_datasource_registry
from datasources.tools import build_data_toolset
from dcm.tools import build_dcm_toolset

from .prompts import build_data_system_prompt, build_dcm_system_prompt

logger = logging.getLogger(__name__)

DATA_ASSISTANT = "data_assistant"
DCM_ASSISTANT = "dcm_assistant"


@dataclass(frozen=True)
class Composition:
    datasources: DataSourceRegistry
    data_tools: ToolRegistry
    dcm_tools: ToolRegistry
    pipelines: PipelineRegistry


def bootstrap(pipeline_registry: Optional[PipelineRegistry] = None) -> Composition:
    """Build every registry and register both assistants.

    Safe to call again: pipelines are replaced, not duplicated.
    """
    pipelines = pipeline_registry or get_pipeline_registry()

    datasources = build_datasource_registry()

    data_tools = ToolRegistry()
    data_tools.register_tools(build_data_toolset(datasources))
    dcm_tools = ToolRegistry()
    dcm_tools.register_tools(build_dcm_toolset())

    pipelines.register_pipeline(
        ToolLoopPipeline(
            id=DATA_ASSISTANT,
            tool_registry=data_tools,
            system_prompt=build_data_system_prompt(datasources, data_tools),
            max_steps=conf.get_step_ceiling(DATA_ASSISTANT, 5),
        )
    )
    pipelines.register_pipeline(
        ToolLoopPipeline(
            id=DCM_ASSISTANT,
            tool_registry=dcm_tools,
            system_prompt=build_dcm_system_prompt(dcm_tools),
            max_steps=conf.get_step_ceiling(DCM_ASSISTANT, 10),
        )
    )
    logger.info(
        "Registered pipelines %s (data tools=%d, dcm tools=%d)",
        pipelines.pipeline_ids(),
        len(data_tools),
        len(dcm_tools),
    )
    return Composition(datasources=datasources, data_tools=data_tools, dcm_tools=dcm_tools, pipelines=pipelines)


__all__ = ["DATA_ASSISTANT", "DCM_ASSISTANT", "Composition", "bootstrap"]
