"""DCM assistant toolset: entity resolution, issuance, bookbuild, investor and secondary tools."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from agent.tools.display import build_display_tools
from agent.tools.interfaces import ToolDefinition, ToolParams
from agent.types.context import RunContext

from .deals import (
    available_filters,
    deal_label,
    deals_for_issuer,
    get_deal_by_isin,
    list_deals,
    market_summary,
    peer_deals,
    require_deal,
    summarize_deals,
)
from .investors import (
    INVESTORS,
    allocation_breakdown,
    allocations_for_deal,
    flip_score,
    participation_history,
)
from .issuers import get_issuer, issuers_in_sector, require_issuer, search_issuers
from .secondary import (
    MAX_PERFORMANCE_DAYS,
    drift_trend,
    performance_summary,
    secondary_performance,
    sector_curve,
    spread_drift,
)
from .seeded import round_half_up

logger = logging.getLogger(__name__)

MARKET_DEALS_DEFAULT_LIMIT = 10
MARKET_DEALS_MAX_LIMIT = 50
TOP_INVESTORS_DEFAULT_LIMIT = 10
PERFORMANCE_TREND_THRESHOLD_BPS = 5
PARTICIPATION_PAGE_SIZE = 15

BRIEF_SECTIONS = [
    "overview",
    "issuance_history",
    "peer_comparison",
    "investor_analysis",
    "secondary_performance",
]
EXPORT_FORMATS = ["pdf", "pptx", "xlsx", "email"]


# --- resolve_entity -----------------------------------------------------------


class ResolveEntityParams(ToolParams):
    query: str = Field(description='The entity name to resolve (e.g., "BMW", "Volkswagen")')
    type: Literal["issuer", "bond"] = Field(
        default="issuer", description="The type of entity to resolve"
    )


def resolve_entity(params: ResolveEntityParams, context: RunContext) -> Dict[str, Any]:
    """Canonical issuer(s) for a name, or for a bond ISIN when ``type`` is ``bond``.

    Confidence is ``exact`` for a single strong match (or a strong match
    with no close runner-up), ``ambiguous`` otherwise, ``fuzzy`` when
    nothing matched.
    """
    if params.type == "bond":
        deal = get_deal_by_isin(params.query.strip().upper())
        if deal is None:
            return {"matches": [], "confidence": "fuzzy", "query": params.query}
        return {"matches": [get_issuer(deal["issuerId"])], "confidence": "exact", "query": params.query}

    matches = search_issuers(params.query)
    if not matches:
        return {"matches": [], "confidence": "fuzzy", "query": params.query}
    top = matches[0]
    if top["score"] >= 0.9 and (len(matches) == 1 or matches[1]["score"] < 0.7):
        return {"matches": [top["issuer"]], "confidence": "exact", "query": params.query}
    return {
        "matches": [m["issuer"] for m in matches[:5]],
        "confidence": "ambiguous",
        "query": params.query,
    }


# --- get_market_deals ---------------------------------------------------------


class MarketDealsParams(ToolParams):
    limit: Optional[int] = Field(
        default=None, ge=1, description="Number of deals to return (default: 10, max: 50)"
    )
    sector: Optional[str] = Field(
        default=None, description='Filter by sector (e.g., "Automobiles", "Energy", "Industrials")'
    )
    currency: Optional[str] = Field(default=None, description='Filter by currency (e.g., "EUR", "USD")')
    issuer: Optional[str] = Field(default=None, description='Filter by issuer name (e.g., "BMW AG")')


def _filter_value(value: Optional[str]) -> Optional[str]:
    # Filter forms submit "All" for an unconstrained dropdown.
    if value is None or value.strip().lower() in ("", "all"):
        return None
    return value


def get_market_deals(params: MarketDealsParams, context: RunContext) -> Dict[str, Any]:
    sector = _filter_value(params.sector)
    currency = _filter_value(params.currency)
    issuer = _filter_value(params.issuer)
    limit = min(params.limit or MARKET_DEALS_DEFAULT_LIMIT, MARKET_DEALS_MAX_LIMIT)
    deals = list_deals(limit=limit, sector=sector, currency=currency, issuer=issuer, sort_by="date")
    return {
        "deals": deals,
        "summary": market_summary(deals),
        "filters": {
            "sector": sector or "All",
            "currency": currency or "All",
            "issuer": issuer or "All",
            "showing": len(deals),
        },
        "availableFilters": available_filters(),
    }


# --- get_issuer_deals ---------------------------------------------------------


class IssuerDealsParams(ToolParams):
    issuer_id: str = Field(description='The canonical issuer ID (e.g., "bmw-ag")')
    limit: Optional[int] = Field(default=None, ge=1, description="Maximum number of deals to return")


def get_issuer_deals(params: IssuerDealsParams, context: RunContext) -> Dict[str, Any]:
    issuer = require_issuer(params.issuer_id)
    deals = deals_for_issuer(issuer["id"], params.limit)
    return {
        "issuer": {
            "id": issuer["id"],
            "name": issuer["shortName"],
            "fullName": issuer["name"],
            "sector": issuer["sector"],
            "ratings": issuer["ratings"],
        },
        "deals": deals,
        "summary": summarize_deals(deals),
    }


# --- get_peer_comparison ------------------------------------------------------


class PeerComparisonParams(ToolParams):
    issuer_id: str = Field(description="The canonical issuer ID to compare")
    sector: Optional[str] = Field(default=None, description="Override sector for comparison")


def _nip_versus_peers(issuer_nip: float, peer_nip: float) -> str:
    if issuer_nip < peer_nip:
        return f"{round_half_up(peer_nip - issuer_nip)}bps tighter than peers"
    if issuer_nip > peer_nip:
        return f"{round_half_up(issuer_nip - peer_nip)}bps wider than peers"
    return "In line with peers"


def get_peer_comparison(params: PeerComparisonParams, context: RunContext) -> Dict[str, Any]:
    issuer = require_issuer(params.issuer_id)
    sector = params.sector or issuer["sector"]
    issuer_deals = deals_for_issuer(issuer["id"])
    issuer_summary = summarize_deals(issuer_deals)

    peers = []
    for peer in issuers_in_sector(sector, exclude_id=issuer["id"]):
        their_deals = deals_for_issuer(peer["id"])
        peers.append({
            "issuerId": peer["id"],
            "issuerName": peer["shortName"],
            "deals": their_deals[:3],
            "summary": summarize_deals(their_deals),
        })
    peer_nip = sum(p["summary"]["avgNip"] for p in peers) / len(peers) if peers else 0

    return {
        "issuer": {"id": issuer["id"], "name": issuer["shortName"], "sector": sector},
        "issuerDeals": issuer_deals[:5],
        "issuerSummary": issuer_summary,
        "peers": peers,
        "comparison": {"nipVsPeers": _nip_versus_peers(issuer_summary["avgNip"], peer_nip)},
    }


# --- get_allocations ----------------------------------------------------------


class AllocationsParams(ToolParams):
    deal_id: str = Field(description='The deal ID to get allocations for (e.g., "deal-bmw-001")')


def get_allocations(params: AllocationsParams, context: RunContext) -> Dict[str, Any]:
    deal = require_deal(params.deal_id)
    allocations = allocations_for_deal(deal["id"], deal["size"])
    avg_fill = sum(a["fillRate"] for a in allocations) / len(allocations)
    return {
        "deal": {
            "id": deal["id"],
            "issuer": deal["issuerName"],
            "size": deal["size"],
            "oversubscription": deal["oversubscription"],
        },
        "allocations": [{**a, "dealId": deal["id"]} for a in allocations],
        "breakdown": {
            "byType": allocation_breakdown(allocations, "investorType", "type"),
            "byGeography": allocation_breakdown(allocations, "geography", "geography"),
        },
        "summary": {
            "totalInvestors": len(allocations),
            "totalAllocated": sum(a["allocatedSize"] for a in allocations),
            "avgFillRate": round_half_up(avg_fill * 100),
        },
    }


# --- get_performance ----------------------------------------------------------


class PerformanceParams(ToolParams):
    isin: str = Field(description="The ISIN of the bond")
    days: int = Field(
        default=30, ge=0, description="Number of days of performance data (default: 30, max: 90)"
    )


_INTERPRETATION = {
    "Tightening": "Bond has performed well post-issuance, spreads have tightened",
    "Widening": "Bond has underperformed post-issuance, spreads have widened",
    "Stable": "Bond trading close to issue levels",
}


def get_performance(params: PerformanceParams, context: RunContext) -> Dict[str, Any]:
    deal = get_deal_by_isin(params.isin)
    if deal is None:
        raise LookupError(f"Bond not found: {params.isin}")
    drift = spread_drift(deal["isin"])
    trend = drift_trend(drift, PERFORMANCE_TREND_THRESHOLD_BPS)
    return {
        "bond": {
            "isin": deal["isin"],
            "issuer": deal["issuerName"],
            "coupon": deal["coupon"],
            "tenor": deal["tenor"],
            "pricingDate": deal["pricingDate"],
            "issueSpread": deal["spread"],
            "issuePrice": deal["reoffer"],
        },
        "performance": secondary_performance(deal["isin"], min(params.days, MAX_PERFORMANCE_DAYS)),
        "drift": drift,
        "summary": performance_summary(deal["isin"]),
        "analysis": {"trend": trend, "driftBps": drift, "interpretation": _INTERPRETATION[trend]},
    }


# --- get_participation_history ------------------------------------------------


class ParticipationParams(ToolParams):
    issuer_id: str = Field(description="The issuer ID to get investor participation for")


def get_participation_history(params: ParticipationParams, context: RunContext) -> Dict[str, Any]:
    issuer = require_issuer(params.issuer_id)
    history = participation_history(issuer_id=issuer["id"])
    total = len(history)

    def share(behaviour: str) -> int:
        if not total:
            return 0
        return round_half_up(sum(1 for p in history if p["behaviour"] == behaviour) / total * 100)

    return {
        "issuerId": issuer["id"],
        "participations": history[:PARTICIPATION_PAGE_SIZE],
        "summary": {
            "totalParticipations": total,
            "holdPercentage": share("hold"),
            "flipPercentage": share("flip"),
        },
    }


# --- generate_mandate_brief ---------------------------------------------------


class MandateBriefParams(ToolParams):
    issuer_id: str = Field(description="The issuer ID to generate the brief for")
    sections: Optional[List[str]] = Field(
        default=None,
        description=(
            'Sections: "overview", "issuance_history", "peer_comparison", '
            '"investor_analysis", "secondary_performance"'
        ),
    )


def _brief_sections(issuer: Dict[str, Any], wanted: List[str]):
    """Yield ``(sources, section)`` for each requested section with data behind it."""
    deals = deals_for_issuer(issuer["id"])
    summary = summarize_deals(deals)
    name = issuer["shortName"]

    if "overview" in wanted:
        ratings = ", ".join(f"{r['agency']}: {r['rating']}" for r in issuer["ratings"])
        yield ["mcp-entity-resolution"], {
            "title": "Issuer Overview",
            "content": (
                f"{issuer['name']} ({name}) is a {issuer['sector']} company based in "
                f"{issuer['country']}. Credit ratings: {ratings}."
            ),
            "dataPoints": [
                {"field": "Legal Name", "value": issuer["name"]},
                {"field": "LEI", "value": issuer["lei"]},
                {"field": "Sector", "value": issuer["sector"]},
                {"field": "Country", "value": issuer["country"]},
            ],
        }
    if "issuance_history" in wanted:
        yield ["mcp-issuance"], {
            "title": "Issuance History",
            "content": (
                f"{name} has completed {summary['totalDeals']} bond issuances, raising "
                f"€{summary['totalRaised']:,}M. Average NIP: {summary['avgNip']}bps."
            ),
            "dataPoints": [
                {
                    "deal": f"{d['coupon']:g}% {d['tenor']}",
                    "date": d["pricingDate"],
                    "size": f"€{d['size']}M",
                    "spread": f"{d['spread']}bps",
                }
                for d in deals[:5]
            ],
        }
    if "peer_comparison" in wanted:
        by_peer: Dict[str, List[Dict[str, Any]]] = {}
        for deal in peer_deals(issuer["id"]):
            by_peer.setdefault(deal["issuerId"], []).append(deal)
        peer_points = []
        for peer_id, their_deals in list(by_peer.items())[:4]:
            peer_summary = summarize_deals(their_deals)
            peer_points.append({
                "issuer": (get_issuer(peer_id) or {}).get("shortName", peer_id),
                "deals": peer_summary["totalDeals"],
                "avgNip": f"{peer_summary['avgNip']}bps",
                "avgOversubscription": f"{peer_summary['avgOversubscription']}x",
            })
        yield ["mcp-issuance"], {
            "title": "Peer Comparison",
            "content": (
                f"Compared to {issuer['sector']} sector peers, {name}'s average NIP of "
                f"{summary['avgNip']}bps and oversubscription of {summary['avgOversubscription']}x "
                "reflects strong investor demand."
            ),
            "dataPoints": peer_points,
        }
    if not deals:
        return
    latest = deals[0]
    if "investor_analysis" in wanted:
        investors = len(allocations_for_deal(latest["id"], latest["size"]))
        yield ["mcp-bookbuild", "mcp-investor"], {
            "title": "Investor Analysis",
            "content": (
                f"Most recent deal ({deal_label(latest)}) attracted {investors} institutional "
                f"investors with {latest['oversubscription']}x oversubscription."
            ),
        }
    if "secondary_performance" in wanted:
        drift = spread_drift(latest["isin"])
        yield ["mcp-secondary"], {
            "title": "Secondary Performance",
            "content": (
                f"{name}'s most recent bond has moved {drift:+d}bps since pricing "
                f"({drift_trend(drift, PERFORMANCE_TREND_THRESHOLD_BPS).lower()})."
            ),
        }


def generate_mandate_brief(params: MandateBriefParams, context: RunContext) -> Dict[str, Any]:
    issuer = require_issuer(params.issuer_id)
    wanted = params.sections or BRIEF_SECTIONS
    now = datetime.now(timezone.utc).isoformat()

    sources: List[str] = []
    sections = []
    for section_sources, section in _brief_sections(issuer, wanted):
        sources.extend(s for s in section_sources if s not in sources)
        sections.append(section)

    logger.info(
        "Generated mandate brief for %s with %d sections (run_id=%s)",
        issuer["id"], len(sections), context.run_id,
    )
    return {
        "brief": {
            "issuerId": issuer["id"],
            "issuerName": issuer["shortName"],
            "generatedAt": now,
            "sections": sections,
            "provenance": {
                "sources": sources,
                "timestamp": now,
                "queryContext": f"Mandate brief for {issuer['shortName']}",
            },
        },
        "exportFormats": list(EXPORT_FORMATS),
    }


# --- get_sector_curve ---------------------------------------------------------


class SectorCurveParams(ToolParams):
    sector: str = Field(description='The sector (e.g., "Automobiles", "Industrials", "Energy")')
    rating: str = Field(description='The credit rating (e.g., "A", "BBB+", "AA-")')


def get_sector_curve(params: SectorCurveParams, context: RunContext) -> Dict[str, Any]:
    """Indicative credit curve, shaped so the chart widget can draw it directly."""
    curve = sector_curve(params.sector, params.rating)
    return {
        "title": f"{params.sector} {params.rating} curve vs {curve['benchmark']}",
        "type": "line",
        "data": curve["curve"],
        "xKey": "tenor",
        "yKey": "spread",
        "yLabel": "Spread (bps)",
        "sector": params.sector,
        "rating": params.rating,
        "benchmark": curve["benchmark"],
        "asOf": date.today().isoformat(),
    }


# --- investors ----------------------------------------------------------------


class InvestorListParams(ToolParams):
    type: Optional[str] = Field(
        default=None, description='Filter by investor type (e.g., "Asset Manager", "Insurance")'
    )
    geography: Optional[str] = Field(default=None, description='Filter by geography (e.g., "US", "Germany")')


def get_investor_list(params: InvestorListParams, context: RunContext) -> Dict[str, Any]:
    investors = [
        i for i in INVESTORS
        if (not params.type or i["type"] == params.type)
        and (not params.geography or i["geography"] == params.geography)
    ]
    return {
        "investors": [{**i, "flipScore": flip_score(i["id"])} for i in investors],
        "total": len(investors),
    }


class TopInvestorsParams(ToolParams):
    issuer_id: str = Field(description="The issuer ID")
    limit: int = Field(
        default=TOP_INVESTORS_DEFAULT_LIMIT, ge=1, description="Maximum number of investors to return (default: 10)"
    )


def _dominant_behaviour(behaviours: List[str]) -> str:
    for behaviour in ("hold", "flip"):
        if behaviours.count(behaviour) > len(behaviours) / 2:
            return behaviour
    return "mixed"


def get_top_investors_for_issuer(params: TopInvestorsParams, context: RunContext) -> Dict[str, Any]:
    """Investors in an issuer's deals ranked by total allocation, with flip scores."""
    issuer = require_issuer(params.issuer_id)
    by_investor: Dict[str, Dict[str, Any]] = {}
    for p in participation_history(issuer_id=issuer["id"]):
        entry = by_investor.setdefault(p["investorId"], {
            "investorId": p["investorId"],
            "investorName": p["investorName"],
            "participationCount": 0,
            "totalAllocated": 0,
            "fillRates": [],
            "behaviours": [],
        })
        entry["participationCount"] += 1
        entry["totalAllocated"] += p["allocatedSize"]
        entry["fillRates"].append(p["fillRate"])
        entry["behaviours"].append(p["behaviour"])

    ranked = sorted(by_investor.values(), key=lambda e: e["totalAllocated"], reverse=True)
    top = []
    for entry in ranked[: params.limit]:
        fill_rates = entry.pop("fillRates")
        behaviours = entry.pop("behaviours")
        top.append({
            **entry,
            "avgFillRate": round_half_up(sum(fill_rates) / len(fill_rates) * 100),
            "flipScore": flip_score(entry["investorId"]),
            "dominantBehaviour": _dominant_behaviour(behaviours),
        })
    return {"issuerId": issuer["id"], "topInvestors": top}


# --- toolset ------------------------------------------------------------------


def build_dcm_toolset() -> List[ToolDefinition]:
    """The DCM server tools followed by the shared display tools."""
    dcm_tools = [
        ToolDefinition(
            name="resolve_entity",
            description=(
                "Resolve an entity name (issuer) to canonical identifiers. Returns "
                "disambiguation options when multiple matches are found. ALWAYS call this "
                "first when the user mentions a company name."
            ),
            parameters=ResolveEntityParams,
            execute=resolve_entity,
            widget="EntityPicker",
            progress_label='Resolving "{query}"...',
        ),
        ToolDefinition(
            name="get_issuer_deals",
            description=(
                "Get all bond deals for a specific issuer, including summary statistics. "
                "Use after resolving the issuer."
            ),
            parameters=IssuerDealsParams,
            execute=get_issuer_deals,
            widget="IssuerTimeline",
            progress_label="Loading deals for {issuerId}...",
        ),
        ToolDefinition(
            name="get_peer_comparison",
            description="Compare an issuer's issuance metrics against sector peers.",
            parameters=PeerComparisonParams,
            execute=get_peer_comparison,
            widget="ComparableDealsPanel",
            progress_label="Comparing {issuerId} with peers...",
        ),
        ToolDefinition(
            name="get_allocations",
            description=(
                "Get the allocation breakdown for a specific deal, including investor type "
                "and geography distribution. Pass the deal's id field, e.g. deal-bmw-001."
            ),
            parameters=AllocationsParams,
            execute=get_allocations,
            widget="AllocationBreakdown",
            progress_label="Loading allocations for {dealId}...",
        ),
        ToolDefinition(
            name="get_performance",
            description="Get secondary market performance for a bond (price, spread, volume over time).",
            parameters=PerformanceParams,
            execute=get_performance,
            widget="SecondaryPerformanceView",
            progress_label="Loading secondary performance for {isin}...",
        ),
        ToolDefinition(
            name="get_participation_history",
            description="Get participation history for investors in an issuer's deals.",
            parameters=ParticipationParams,
            execute=get_participation_history,
            widget="ParticipationHistory",
            progress_label="Loading investor participation...",
        ),
        ToolDefinition(
            name="generate_mandate_brief",
            description=(
                "Generate a mandate brief for an issuer with full data provenance. Use this "
                "when the user wants to export or create a pitch document."
            ),
            parameters=MandateBriefParams,
            execute=generate_mandate_brief,
            widget="ExportPanel",
            progress_label="Drafting mandate brief...",
        ),
        ToolDefinition(
            name="get_market_deals",
            description=(
                "Get recent bond deals across all issuers. Use for market overview, all "
                "issuance, supply data, or recent deals WITHOUT a specific issuer. Does NOT "
                "require an issuer name. The response lists availableFilters."
            ),
            parameters=MarketDealsParams,
            execute=get_market_deals,
            widget="MarketIssuance",
            progress_label="Loading market deals...",
        ),
        ToolDefinition(
            name="get_sector_curve",
            description=(
                "Get the indicative credit curve (spread by tenor) for a sector and rating. "
                "Use for new-issue pricing context."
            ),
            parameters=SectorCurveParams,
            execute=get_sector_curve,
            widget="ChartCard",
            progress_label="Loading {sector} {rating} curve...",
        ),
        ToolDefinition(
            name="get_investor_list",
            description=(
                "List investors, optionally filtered by type or geography, with each "
                "investor's flip score (0 always holds, 100 always flips)."
            ),
            parameters=InvestorListParams,
            execute=get_investor_list,
            widget="InvestorList",
            progress_label="Loading investors...",
        ),
        ToolDefinition(
            name="get_top_investors_for_issuer",
            description=(
                "Get the investors with the largest allocations across an issuer's deals, "
                "with flip scores and dominant holding behaviour."
            ),
            parameters=TopInvestorsParams,
            execute=get_top_investors_for_issuer,
            widget="InvestorList",
            progress_label="Ranking investors for {issuerId}...",
        ),
    ]
    return dcm_tools + build_display_tools()


__all__ = [
    "BRIEF_SECTIONS",
    "EXPORT_FORMATS",
    "resolve_entity",
    "get_market_deals",
    "get_issuer_deals",
    "get_peer_comparison",
    "get_allocations",
    "get_performance",
    "get_participation_history",
    "generate_mandate_brief",
    "get_sector_curve",
    "get_investor_list",
    "get_top_investors_for_issuer",
    "build_dcm_toolset",
]
