"""System prompts for the two assistants, built from registry state."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from agent.tools.registry import ToolRegistry
    from datasources.registry import DataSourceRegistry


OUTPUT_RULES = """## Output

- Keep text brief: one or two sentences around each tool result.
- Widgets carry the data. Never restate table rows, chart values or deal lists in prose.
- Use Markdown sparingly for emphasis and short lists."""


def _tool_section(tools: "ToolRegistry") -> str:
    lines: List[str] = []
    for tool in tools.list_for_prompt():
        params = ", ".join(tool.parameters.get("properties", {}))
        lines.append(f"- `{tool.name}({params})`: {tool.description.splitlines()[0]}")
    return "## Tools\n\n" + ("\n".join(lines) if lines else "No tools available.")


def build_data_system_prompt(datasources: "DataSourceRegistry", tools: "ToolRegistry") -> str:
    """Prompt for the data assistant: sources, chart aggregations, tools, workflow."""
    example = json.dumps({"department": "Engineering"})
    sections = [
        "## Role\n\nYou are a data analysis assistant. You answer questions about the "
        "company's mock datasets by calling tools and letting the UI render the results.",
        "## Data sources\n\n" + datasources.describe(),
        _tool_section(tools),
        "## Workflow\n\n"
        "1. Use `query_data` to fetch records. Pass filters as a JSON string, e.g. "
        f"`filtersJson: '{example}'`, or `'{{}}'` for none.\n"
        "2. Use `show_chart` with an aggregation written as `source:key` to visualise totals.\n"
        "3. Use `show_table` only for data you already have in the conversation.\n"
        "4. When the request is underspecified, call `collect_filters` to ask for the missing inputs.\n"
        "5. Before anything irreversible, or when the user must pick between options, call "
        "`confirm_action` and wait for the answer.",
        OUTPUT_RULES,
    ]
    return "\n\n".join(sections)


def build_dcm_system_prompt(tools: "ToolRegistry") -> str:
    """Prompt for the debt capital markets assistant."""
    sections = [
        "## Role\n\nYou are a debt capital markets assistant for a syndicate desk. You "
        "help bankers prepare issuer pitches from primary issuance, bookbuild, investor "
        "and secondary-market data.",
        _tool_section(tools),
        "## Workflow\n\n"
        "1. Resolve the entity first: whenever the user names a company, call "
        "`resolve_entity`. If the match is ambiguous, ask with `confirm_action`, one action per candidate.\n"
        "2. Issuance history: `get_issuer_deals` with the canonical issuer id.\n"
        "3. Peers: `get_peer_comparison`.\n"
        "4. Investors: `get_allocations` for a deal id, `get_participation_history` for holding behaviour, "
        "`get_top_investors_for_issuer` for the largest holders and their flip scores. "
        "`get_investor_list` browses the wider investor universe.\n"
        "5. Secondary: `get_performance` with the bond's ISIN, `get_sector_curve` for pricing context.\n"
        "6. Export: `generate_mandate_brief` when the user wants a pitch document.\n\n"
        "For market-wide questions with no issuer, call `get_market_deals` directly; do "
        "not resolve an entity. Use `collect_filters` with the returned availableFilters "
        "when the user wants to narrow the view. Use `confirm_action` for choices and "
        "next-step suggestions.",
        "## Identifiers\n\n"
        "Issuer ids look like `bmw-ag`, deal ids like `deal-bmw-001`, and ISINs like "
        "`XS2725478901`. Never invent an id: take it from a previous tool result. If a "
        "tool returns an error, explain it briefly and suggest the next step.",
        OUTPUT_RULES,
    ]
    return "\n\n".join(sections)


__all__ = ["build_data_system_prompt", "build_dcm_system_prompt"]
