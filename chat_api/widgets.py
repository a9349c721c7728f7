"""Tool invocation -> widget mapping, the server-side half of the UI renderer.

Each ToolDefinition names its component in ``widget``; ``WIDGET_RENDERERS``
maps that component to the function building its props. Rendering never
raises: bad payloads fall back to ``GenericResult``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from agent.service.errors import ToolValidationError, UnknownToolCall
from agent.tools.interfaces import ToolParams
from agent.tools.registry import ToolRegistry
from agent.types.conversation import Conversation, ToolInvocation

logger = logging.getLogger(__name__)

Props = Dict[str, Any]


@dataclass(frozen=True)
class Widget:
    component: str
    tool_call_id: str
    tool_name: str
    state: str
    props: Props = field(default_factory=dict)
    interactive: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "component": self.component,
            "toolCallId": self.tool_call_id,
            "toolName": self.tool_name,
            "state": self.state,
            "props": self.props,
            "interactive": self.interactive,
        }


@dataclass(frozen=True)
class WidgetRenderer:
    """``render(args, result)`` builds props; ``result`` is None while a client tool is pending."""

    render: Callable[[Dict[str, Any], Optional[Dict[str, Any]]], Props]
    result_model: Optional[Type[BaseModel]] = None


# --- result shapes for tools that do not declare one --------------------------


class EntityMatches(ToolParams):
    query: str
    confidence: str
    matches: List[Dict[str, Any]]


class IssuerDeals(ToolParams):
    issuer: Dict[str, Any]
    deals: List[Dict[str, Any]]
    summary: Dict[str, Any]


class PeerComparison(ToolParams):
    issuer: Dict[str, Any]
    issuer_deals: List[Dict[str, Any]]
    peers: List[Dict[str, Any]]
    comparison: Dict[str, Any]


class DealAllocations(ToolParams):
    deal: Dict[str, Any]
    allocations: List[Dict[str, Any]]
    breakdown: Dict[str, List[Dict[str, Any]]]
    summary: Dict[str, Any]


class BondPerformance(ToolParams):
    bond: Dict[str, Any]
    performance: List[Dict[str, Any]]
    analysis: Dict[str, Any]


class Participations(ToolParams):
    issuer_id: str
    participations: List[Dict[str, Any]]
    summary: Dict[str, Any]


class MandateBrief(ToolParams):
    brief: Dict[str, Any]
    export_formats: List[str]


class MarketDeals(ToolParams):
    deals: List[Dict[str, Any]]
    summary: Dict[str, Any]
    filters: Dict[str, Any]


# --- renderers ----------------------------------------------------------------


def _table(args, result):
    title = result.get("title")
    if not title and result.get("dataSource"):
        title = f"{result['dataSource'].replace('_', ' ').title()} Results"
    props = {"title": title or "Results", "columns": result["columns"], "rows": result["rows"]}
    if "totalMatches" in result:
        props["footer"] = f"Showing {result['showing']} of {result['totalMatches']}"
        props["summary"] = result.get("summary")
    return props


def _chart(args, result):
    return {
        "title": result["title"],
        "type": result["type"],
        "data": result["data"],
        "xKey": result["xKey"],
        "yKey": result["yKey"],
        "yLabel": result.get("yLabel") or result["yKey"],
        "summary": result.get("summary"),
    }


def _filter_form(args, result):
    props = {"title": args.get("title", ""), "fields": args.get("fields", [])}
    if result is not None:
        props["submitted"] = result.get("values", {})
    return props


def _approval_card(args, result):
    props = {
        "summary": args.get("summary", ""),
        "risk": args.get("risk", "low"),
        "actions": args.get("actions", []),
    }
    if result is not None:
        props["approvedActionId"] = result.get("approvedActionId")
        props["cancelled"] = bool(result.get("cancelled"))
    return props


def _entity_picker(args, result):
    return {
        "query": result["query"],
        "confidence": result["confidence"],
        "candidates": [
            {"id": m["id"], "name": m["shortName"], "sector": m.get("sector"), "country": m.get("country")}
            for m in result["matches"]
        ],
    }


def _investor_list(args, result):
    if "topInvestors" in result:
        return {"issuerId": result["issuerId"], "investors": result["topInvestors"], "ranked": True}
    return {"investors": result["investors"], "total": result["total"], "ranked": False}


def _passthrough(*keys: str):
    def render(args, result):
        return {key: result.get(key) for key in keys}

    return render


WIDGET_RENDERERS: Dict[str, WidgetRenderer] = {
    "TableCard": WidgetRenderer(_table),
    "ChartCard": WidgetRenderer(_chart),
    "FilterForm": WidgetRenderer(_filter_form),
    "ApprovalCard": WidgetRenderer(_approval_card),
    "EntityPicker": WidgetRenderer(_entity_picker, EntityMatches),
    "IssuerTimeline": WidgetRenderer(_passthrough("issuer", "deals", "summary"), IssuerDeals),
    "ComparableDealsPanel": WidgetRenderer(
        _passthrough("issuer", "issuerDeals", "issuerSummary", "peers", "comparison"), PeerComparison
    ),
    "AllocationBreakdown": WidgetRenderer(
        _passthrough("deal", "allocations", "breakdown", "summary"), DealAllocations
    ),
    "SecondaryPerformanceView": WidgetRenderer(
        _passthrough("bond", "performance", "summary", "analysis"), BondPerformance
    ),
    "ParticipationHistory": WidgetRenderer(
        _passthrough("issuerId", "participations", "summary"), Participations
    ),
    "ExportPanel": WidgetRenderer(_passthrough("brief", "exportFormats"), MandateBrief),
    "InvestorList": WidgetRenderer(_investor_list),
    "MarketIssuance": WidgetRenderer(
        _passthrough("deals", "summary", "filters", "availableFilters"), MarketDeals
    ),
}


def _widget(invocation: ToolInvocation, component: str, props: Props, interactive: bool = False) -> Widget:
    return Widget(
        component=component,
        tool_call_id=invocation.tool_call_id,
        tool_name=invocation.tool_name,
        state=invocation.state.value,
        props=props,
        interactive=interactive,
    )


def _generic(invocation: ToolInvocation) -> Widget:
    return _widget(invocation, "GenericResult", {"toolName": invocation.tool_name, "result": invocation.result})


def render_invocation(invocation: ToolInvocation, tool_registry: ToolRegistry) -> Widget:
    """Widget for one tool invocation in its current state."""
    definition = tool_registry.get_tool(invocation.tool_name)
    if definition is None:
        return _widget(
            invocation, "UnknownTool", {"toolName": invocation.tool_name, "state": invocation.state.value}
        )

    renderer = WIDGET_RENDERERS.get(definition.widget or "")

    if not invocation.is_resolved:
        if definition.is_client_side and renderer is not None:
            return _widget(
                invocation, definition.widget, renderer.render(invocation.args, None), interactive=True
            )
        return _widget(invocation, "ToolProgress", {"label": definition.describe_progress(invocation.args)})

    result = invocation.result
    if isinstance(result, dict) and result.get("error"):
        return _widget(invocation, "ToolError", {"message": str(result["error"])})
    if renderer is None or not isinstance(result, dict):
        return _generic(invocation)

    result_model = definition.result_model or renderer.result_model
    try:
        if result_model is not None:
            result_model.model_validate(result)
        props = renderer.render(invocation.args, result)
    except (ValidationError, KeyError, TypeError) as e:
        logger.warning(
            "Falling back to GenericResult for %s (%s): %s", invocation.tool_name, invocation.tool_call_id, e
        )
        return _generic(invocation)
    return _widget(invocation, definition.widget, props)


def render_conversation(conversation: Conversation, tool_registry: ToolRegistry) -> List[Widget]:
    return [
        render_invocation(invocation, tool_registry)
        for message in conversation.messages
        for invocation in message.invocations()
    ]


def _check_offered_action(invocation: ToolInvocation, result: Dict[str, Any]) -> None:
    """An approval must name one of the actions the card offered."""
    approved = result.get("approvedActionId")
    actions = invocation.args.get("actions")
    if approved is None or not isinstance(actions, list):
        return
    offered = [a.get("id") for a in actions if isinstance(a, dict)]
    if approved not in offered:
        raise ToolValidationError(
            f"Action {approved!r} was not offered for {invocation.tool_name}; expected one of {offered}",
            tool_name=invocation.tool_name,
        )


def submit_interaction(
    conversation: Conversation,
    tool_call_id: str,
    result: Dict[str, Any],
    tool_registry: ToolRegistry,
) -> bool:
    """Record the user's answer to a pending client-side tool.

    Returns False when the call already has a result (a re-render that
    submits again is a no-op). Raises UnknownToolCall for ids not in the
    conversation and ToolValidationError when the payload does not match
    the tool's result shape or approves an action the card did not offer.
    """
    invocation = conversation.find_invocation(tool_call_id)
    if invocation is None:
        raise UnknownToolCall(f"No tool call with id {tool_call_id} in this conversation")
    if invocation.is_resolved:
        logger.info("Ignoring repeated submission for tool call %s", tool_call_id)
        return False

    definition = tool_registry.resolve(invocation.tool_name)
    if definition.result_model is not None:
        try:
            parsed = definition.result_model.model_validate(result)
        except ValidationError as e:
            raise ToolValidationError(
                f"Invalid result for {definition.name}: {e}", tool_name=definition.name
            ) from e
        result = parsed.model_dump(by_alias=True, exclude_none=True)
    _check_offered_action(invocation, result)
    return conversation.add_tool_result(tool_call_id, result)


__all__ = [
    "Widget",
    "WidgetRenderer",
    "WIDGET_RENDERERS",
    "render_invocation",
    "render_conversation",
    "submit_interaction",
]
