"""Display and interactive tools shared by every assistant.

``show_table`` and ``show_chart`` render data the model already has.
``collect_filters`` and ``confirm_action`` are client-side: they have no
executor and the UI submits their result in the next request.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field, model_validator

from agent.tools.interfaces import ToolDefinition, ToolParams
from agent.types.context import RunContext

ChartType = Literal["bar", "line", "pie", "area"]


def parse_json_array(raw: str, field_name: str) -> List[Any]:
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"{field_name} is not valid JSON: {e.msg}") from e
    if not isinstance(value, list):
        raise ValueError(f"{field_name} must be a JSON array")
    return value


# --- show_table ---------------------------------------------------------------


class ShowTableParams(ToolParams):
    title: str = Field(description="The title of the table")
    columns: List[str] = Field(description="Column headers")
    rows_json: str = Field(
        description='Table data rows as JSON array string, e.g. [{"col1":"val1","col2":"val2"}]'
    )


class TableResult(ToolParams):
    title: str
    columns: List[str]
    rows: List[Dict[str, Any]]


def show_table(params: ShowTableParams, context: RunContext) -> Dict[str, Any]:
    rows = parse_json_array(params.rows_json, "rowsJson")
    return {"title": params.title, "columns": params.columns, "rows": rows}


# --- show_chart ---------------------------------------------------------------


class ShowChartParams(ToolParams):
    title: str = Field(description="Chart title")
    type: ChartType = Field(description="Chart type")
    data_json: str = Field(
        description='Chart data as JSON array string, e.g. [{"label":"A","value":10},{"label":"B","value":20}]'
    )
    x_key: str = Field(description="Key for x-axis values in the data objects")
    y_key: str = Field(description="Key for y-axis values in the data objects")
    y_label: Optional[str] = Field(default=None, description="Label for y-axis")


class ChartResult(ToolParams):
    title: str
    type: ChartType
    data: List[Dict[str, Any]]
    x_key: str
    y_key: str
    y_label: Optional[str] = None
    summary: Optional[Dict[str, Any]] = None


def show_chart(params: ShowChartParams, context: RunContext) -> Dict[str, Any]:
    data = parse_json_array(params.data_json, "dataJson")
    return {
        "title": params.title,
        "type": params.type,
        "data": data,
        "xKey": params.x_key,
        "yKey": params.y_key,
        "yLabel": params.y_label or params.y_key,
    }


# --- collect_filters (client-side) -------------------------------------------


class FormField(ToolParams):
    key: str = Field(description="Unique identifier for this field")
    label: str = Field(description="Display label for the field")
    type: Literal["text", "select", "date"] = Field(description="The input type")
    options: List[str] = Field(
        default_factory=list,
        description="Options for select type (use empty array [] if not select)",
    )
    default_value: str = Field(default="", description='Default value (use empty string "" if none)')


class CollectFiltersParams(ToolParams):
    title: str = Field(description="The title of the form")
    fields: List[FormField] = Field(description="The form fields to display")


class CollectFiltersResult(ToolParams):
    values: Dict[str, str]


# --- confirm_action (client-side) --------------------------------------------


class ActionButton(ToolParams):
    id: str = Field(description="Unique action identifier")
    label: str = Field(description="Button label")


class ConfirmActionParams(ToolParams):
    summary: str = Field(description="Description or question to present")
    risk: Literal["low", "medium", "high"] = Field(
        description='Risk level (use "low" for simple choices)'
    )
    actions: List[ActionButton] = Field(description="Available action buttons")


class ConfirmActionResult(ToolParams):
    """Either ``{approvedActionId, cancelled: false}`` or ``{cancelled: true}``."""

    approved_action_id: Optional[str] = None
    cancelled: bool = False

    @model_validator(mode="after")
    def _approved_or_cancelled(self) -> "ConfirmActionResult":
        if self.cancelled and self.approved_action_id is not None:
            raise ValueError("a cancelled confirmation cannot carry approvedActionId")
        if not self.cancelled and not self.approved_action_id:
            raise ValueError("approvedActionId is required unless cancelled is true")
        return self


def build_display_tools() -> List[ToolDefinition]:
    """Fresh definitions of the four shared display tools, in prompt order."""
    return [
        ToolDefinition(
            name="show_table",
            description=(
                "Display data in a table format. Use this when the user asks to see data as a "
                "table. Pass the rows as a JSON array string."
            ),
            parameters=ShowTableParams,
            execute=show_table,
            result_model=TableResult,
            widget="TableCard",
            progress_label="Loading table...",
        ),
        ToolDefinition(
            name="show_chart",
            description=(
                "Display data as a chart (bar, line, pie, or area). Pass the data as a JSON "
                "array string."
            ),
            parameters=ShowChartParams,
            execute=show_chart,
            result_model=ChartResult,
            widget="ChartCard",
            progress_label="Rendering chart...",
        ),
        ToolDefinition(
            name="collect_filters",
            description=(
                "Display a form to collect input from the user. Use for multi-field input or "
                "selections."
            ),
            parameters=CollectFiltersParams,
            result_model=CollectFiltersResult,
            widget="FilterForm",
        ),
        ToolDefinition(
            name="confirm_action",
            description=(
                "Present action buttons to the user. Use for confirmations, choices, or "
                "next-step options."
            ),
            parameters=ConfirmActionParams,
            result_model=ConfirmActionResult,
            widget="ApprovalCard",
        ),
    ]


__all__ = [
    "ChartType",
    "parse_json_array",
    "ShowTableParams",
    "TableResult",
    "ShowChartParams",
    "ChartResult",
    "FormField",
    "CollectFiltersParams",
    "CollectFiltersResult",
    "ActionButton",
    "ConfirmActionParams",
    "ConfirmActionResult",
    "build_display_tools",
]
