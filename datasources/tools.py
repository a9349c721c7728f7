"""Data-analysis toolset: query any registered source and chart its aggregations."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Literal, Tuple

from pydantic import Field, create_model

from agent.tools.display import ChartResult, ChartType, build_display_tools
from agent.tools.interfaces import ToolDefinition, ToolParams
from agent.types.context import RunContext

from .base import ChartAggregation, DataSource
from .registry import DataSourceRegistry

logger = logging.getLogger(__name__)

DEFAULT_QUERY_LIMIT = 20


def parse_filters_json(raw: str | None) -> Dict[str, Any]:
    """Decode the ``filtersJson`` argument; blank and ``{}`` mean no filters."""
    if not raw or raw.strip() in ("", "{}"):
        return {}
    try:
        filters = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"filtersJson is not valid JSON: {e.msg}") from e
    if not isinstance(filters, dict):
        raise ValueError("filtersJson must be a JSON object")
    return filters


class QueryDataResult(ToolParams):
    data_source: str
    columns: List[str]
    rows: List[Dict[str, Any]]
    total_matches: int
    showing: int
    summary: Dict[str, Any]


class DataToolset:
    """Executors for ``query_data`` and ``show_chart`` bound to one registry."""

    def __init__(self, datasources: DataSourceRegistry) -> None:
        if not len(datasources):
            raise ValueError("No data sources registered")
        self.datasources = datasources

    def _source(self, name: str) -> DataSource:
        source = self.datasources.get(name)
        if source is None:
            raise ValueError(f"Unknown data source: {name}")
        return source

    def _aggregation(self, spec: str) -> Tuple[DataSource, ChartAggregation]:
        source_name, _, kind = spec.partition(":")
        source = self._source(source_name)
        return source, source.get_aggregation(kind)

    def query_data(self, params: Any, context: RunContext) -> Dict[str, Any]:
        source = self._source(params.data_source)
        records = source.query(parse_filters_json(params.filters_json))
        limited = records[: params.limit or DEFAULT_QUERY_LIMIT]
        logger.debug(
            "query_data %s matched %d records (run_id=%s)", source.name, len(records), context.run_id
        )
        return {
            "dataSource": source.name,
            "columns": [c.label for c in source.columns],
            "rows": source.to_rows(limited),
            "totalMatches": len(records),
            "showing": len(limited),
            "summary": source.summary(records),
        }

    def show_chart(self, params: Any, context: RunContext) -> Dict[str, Any]:
        source, aggregation = self._aggregation(params.aggregation)
        records = source.query(parse_filters_json(params.filters_json))
        return {
            "title": params.title,
            "type": params.type,
            "data": source.aggregate(records, aggregation.key),
            "xKey": aggregation.x_key,
            "yKey": aggregation.y_key,
            "yLabel": aggregation.label,
            "summary": source.summary(records),
        }

    # -- tool descriptions --------------------------------------------------

    def query_description(self) -> str:
        sources = "\n".join(f'- "{s.name}": {s.description}' for s in self.datasources.all())
        return (
            "Query data from available sources.\n\n"
            f"Available data sources:\n{sources}\n\n"
            "Returns matching records as a table. Pass filters as a JSON string."
        )

    def chart_description(self) -> str:
        lines = []
        for s in self.datasources.all():
            options = ", ".join(
                f'"{s.name}:{a.key}" ({a.label}, {a.recommended_type})' for a in s.chart_aggregations
            )
            lines.append(f"- {s.name}: {options}")
        return (
            "Display a chart from available data sources.\n\n"
            "Available chart aggregations:\n" + "\n".join(lines) + "\n\n"
            'Specify aggregation as "dataSource:aggregationType" (e.g., "employees:byDepartment").'
        )


def _query_params_model(names: List[str]):
    return create_model(
        "QueryDataParams",
        __base__=ToolParams,
        data_source=(Literal[tuple(names)], Field(description="Which data source to query")),
        filters_json=(
            str,
            Field(
                default="{}",
                description=(
                    'Filter criteria as JSON string, e.g. {"department":"Engineering"} '
                    'or "{}" for no filters'
                ),
            ),
        ),
        limit=(
            int,
            Field(default=DEFAULT_QUERY_LIMIT, ge=0, description="Maximum number of results to return"),
        ),
    )


class ShowAggregationParams(ToolParams):
    title: str = Field(description="Chart title")
    type: ChartType = Field(description="Chart type")
    aggregation: str = Field(
        description='Aggregation in format "dataSource:type" (e.g., "employees:byDepartment")'
    )
    filters_json: str = Field(default="{}", description='Filters as JSON string, or "{}" for no filters')


def build_data_toolset(datasources: DataSourceRegistry) -> List[ToolDefinition]:
    """Tools for the data assistant: query_data, show_chart, then the shared display tools."""
    toolset = DataToolset(datasources)
    display = [t for t in build_display_tools() if t.name != "show_chart"]
    return [
        ToolDefinition(
            name="query_data",
            description=toolset.query_description(),
            parameters=_query_params_model(datasources.names()),
            execute=toolset.query_data,
            result_model=QueryDataResult,
            widget="TableCard",
            progress_label="Querying {dataSource}...",
        ),
        ToolDefinition(
            name="show_chart",
            description=toolset.chart_description(),
            parameters=ShowAggregationParams,
            execute=toolset.show_chart,
            result_model=ChartResult,
            widget="ChartCard",
            progress_label="Building chart...",
        ),
        *display,
    ]


__all__ = [
    "DEFAULT_QUERY_LIMIT",
    "parse_filters_json",
    "QueryDataResult",
    "DataToolset",
    "ShowAggregationParams",
    "build_data_toolset",
]
