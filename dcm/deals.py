"""Primary bond issuance: the deal book and its summaries."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from .issuers import get_issuer
from .seeded import round_half_up

Deal = Dict[str, Any]
SortKey = Literal["date", "size", "spread"]


def _deal(
    deal_id, issuer_id, issuer_name, isin, announced, priced, settled, currency, size, tenor,
    coupon, reoffer, spread, nip, fmt, leads, co_leads, oversubscription,
) -> Deal:
    return {
        "id": deal_id,
        "issuerId": issuer_id,
        "issuerName": issuer_name,
        "isin": isin,
        "announceDate": announced,
        "pricingDate": priced,
        "settleDate": settled,
        "currency": currency,
        "size": size,
        "tenor": tenor,
        "coupon": coupon,
        "reoffer": reoffer,
        "spread": spread,
        "nip": nip,
        "format": fmt,
        "seniority": "Senior",
        "leads": leads,
        "coLeads": co_leads,
        "oversubscription": oversubscription,
    }


# Sizes are in millions of the deal currency; spread and NIP in basis points.
DEALS: List[Deal] = [
    _deal("deal-bmw-001", "bmw-ag", "BMW AG", "XS2725478901", "2025-11-05", "2025-11-07", "2025-11-14",
          "EUR", 1000, "5Y", 3.25, 99.75, 85, 5, "RegS",
          ["Deutsche Bank", "BNP Paribas"], ["HSBC", "Societe Generale"], 3.2),
    _deal("deal-bmw-002", "bmw-ag", "BMW AG", "XS2698234567", "2025-06-12", "2025-06-14", "2025-06-21",
          "EUR", 750, "7Y", 3.50, 99.50, 95, 8, "RegS",
          ["Goldman Sachs", "Deutsche Bank"], ["Credit Agricole", "ING"], 2.8),
    _deal("deal-bmw-003", "bmw-ag", "BMW AG", "XS2654321098", "2025-02-20", "2025-02-22", "2025-03-01",
          "USD", 1500, "10Y", 4.125, 99.25, 120, 10, "RegS/144A",
          ["JP Morgan", "Morgan Stanley"], ["Citibank", "Bank of America"], 4.1),
    _deal("deal-bmw-004", "bmw-ag", "BMW AG", "XS2598765432", "2024-09-10", "2024-09-12", "2024-09-19",
          "EUR", 500, "3Y", 2.875, 99.90, 65, 3, "RegS",
          ["Barclays", "HSBC"], ["Santander"], 2.5),
    _deal("deal-vw-001", "volkswagen-ag", "Volkswagen AG", "XS2712345678", "2025-10-15", "2025-10-17", "2025-10-24",
          "EUR", 1250, "5Y", 3.50, 99.60, 105, 8, "RegS",
          ["Deutsche Bank", "Goldman Sachs"], ["BNP Paribas", "Credit Agricole"], 2.6),
    _deal("deal-vw-002", "volkswagen-ag", "Volkswagen AG", "XS2687654321", "2025-05-08", "2025-05-10", "2025-05-17",
          "EUR", 1000, "10Y", 4.00, 99.40, 135, 12, "RegS",
          ["JP Morgan", "Barclays"], ["HSBC", "ING"], 2.2),
    _deal("deal-vw-003", "volkswagen-ag", "Volkswagen AG", "XS2623456789", "2024-12-01", "2024-12-03", "2024-12-10",
          "USD", 2000, "7Y", 4.375, 99.50, 145, 15, "RegS/144A",
          ["Morgan Stanley", "Citibank"], ["Bank of America", "Wells Fargo"], 2.9),
    _deal("deal-mb-001", "mercedes-benz-ag", "Mercedes-Benz", "XS2734567890", "2025-12-02", "2025-12-04", "2025-12-11",
          "EUR", 1500, "5Y", 3.125, 99.80, 80, 4, "RegS",
          ["BNP Paribas", "Deutsche Bank"], ["Barclays", "HSBC"], 3.5),
    _deal("deal-mb-002", "mercedes-benz-ag", "Mercedes-Benz", "XS2701234567", "2025-07-20", "2025-07-22", "2025-07-29",
          "EUR", 1000, "8Y", 3.625, 99.55, 100, 7, "RegS",
          ["Goldman Sachs", "JP Morgan"], ["Credit Suisse", "UBS"], 3.0),
    _deal("deal-mb-003", "mercedes-benz-ag", "Mercedes-Benz", "XS2645678901", "2025-03-15", "2025-03-17", "2025-03-24",
          "USD", 1750, "10Y", 4.00, 99.30, 115, 9, "RegS/144A",
          ["Morgan Stanley", "Bank of America"], ["Citibank", "TD Securities"], 3.8),
    _deal("deal-porsche-001", "porsche-ag", "Porsche AG", "XS2756789012", "2025-09-25", "2025-09-27", "2025-10-04",
          "EUR", 750, "5Y", 3.375, 99.70, 90, 6, "RegS",
          ["Deutsche Bank", "Goldman Sachs"], ["BNP Paribas"], 4.2),
    _deal("deal-porsche-002", "porsche-ag", "Porsche AG", "XS2689012345", "2025-04-10", "2025-04-12", "2025-04-19",
          "EUR", 500, "7Y", 3.75, 99.45, 110, 10, "RegS",
          ["JP Morgan", "Barclays"], ["HSBC", "Credit Agricole"], 3.6),
    _deal("deal-siemens-001", "siemens-ag", "Siemens AG", "XS2767890123", "2025-11-18", "2025-11-20", "2025-11-27",
          "EUR", 1000, "10Y", 3.00, 99.85, 55, 3, "RegS",
          ["Deutsche Bank", "BNP Paribas"], ["Societe Generale", "Credit Agricole"], 4.5),
    _deal("deal-siemens-002", "siemens-ag", "Siemens AG", "XS2634567890", "2025-01-22", "2025-01-24", "2025-01-31",
          "EUR", 750, "5Y", 2.75, 99.90, 45, 2, "RegS",
          ["Goldman Sachs", "JP Morgan"], ["Barclays", "HSBC"], 5.0),
    _deal("deal-basf-001", "basf-se", "BASF", "XS2778901234", "2025-08-05", "2025-08-07", "2025-08-14",
          "EUR", 1250, "7Y", 3.25, 99.65, 75, 5, "RegS",
          ["Deutsche Bank", "Barclays"], ["BNP Paribas", "ING"], 3.1),
    _deal("deal-total-001", "totalenergies-se", "TotalEnergies", "XS2789012345", "2025-10-01", "2025-10-03", "2025-10-10",
          "EUR", 2000, "10Y", 2.875, 99.90, 50, 2, "RegS",
          ["BNP Paribas", "Societe Generale"], ["Credit Agricole", "HSBC"], 4.8),
    _deal("deal-shell-001", "shell-plc", "Shell", "XS2790123456", "2025-09-08", "2025-09-10", "2025-09-17",
          "USD", 2500, "10Y", 4.25, 99.75, 65, 4, "RegS/144A",
          ["JP Morgan", "Citibank"], ["Bank of America", "Goldman Sachs"], 4.0),
    _deal("deal-lvmh-001", "lvmh-se", "LVMH", "XS2801234567", "2025-11-25", "2025-11-27", "2025-12-04",
          "EUR", 1500, "8Y", 2.625, 99.85, 40, 2, "RegS",
          ["BNP Paribas", "Goldman Sachs"], ["Societe Generale", "Credit Agricole"], 5.5),
]

_BY_ID = {deal["id"]: deal for deal in DEALS}
_BY_ISIN = {deal["isin"]: deal for deal in DEALS}


def deal_label(deal: Deal) -> str:
    """Market shorthand, e.g. ``BMW AG 3.25% 5Y``."""
    return f"{deal['issuerName']} {deal['coupon']:g}% {deal['tenor']}"


def newest_first(deals: List[Deal]) -> List[Deal]:
    return sorted(deals, key=lambda d: d["pricingDate"], reverse=True)


def recent_deals(count: int) -> List[Deal]:
    return newest_first(DEALS)[:count]


def get_deal(deal_id: str) -> Optional[Deal]:
    return _BY_ID.get(deal_id)


def require_deal(deal_id: str) -> Deal:
    deal = _BY_ID.get(deal_id)
    if deal is None:
        raise LookupError(f"Deal not found: {deal_id}")
    return deal


def get_deal_by_isin(isin: str) -> Optional[Deal]:
    return _BY_ISIN.get(isin)


def deals_for_issuer(issuer_id: str, limit: int | None = None) -> List[Deal]:
    deals = newest_first([d for d in DEALS if d["issuerId"] == issuer_id])
    return deals[:limit] if limit else deals


def _tenor_years(tenor: str) -> int:
    return int(tenor.rstrip("Y"))


def summarize_deals(deals: List[Deal]) -> Dict[str, Any]:
    if not deals:
        return {"totalDeals": 0, "totalRaised": 0, "avgTenor": "N/A", "avgNip": 0, "avgOversubscription": 0}
    n = len(deals)
    avg_tenor = sum(_tenor_years(d["tenor"]) for d in deals) / n
    return {
        "totalDeals": n,
        "totalRaised": sum(d["size"] for d in deals),
        "avgTenor": f"{round_half_up(avg_tenor, 1):.1f}Y",
        "avgNip": round_half_up(sum(d["nip"] for d in deals) / n, 1),
        "avgOversubscription": round_half_up(sum(d["oversubscription"] for d in deals) / n, 1),
    }


def sector_of(deal: Deal) -> str:
    issuer = get_issuer(deal["issuerId"])
    return issuer["sector"] if issuer else "Unknown"


def peer_deals(issuer_id: str, sector: str | None = None) -> List[Deal]:
    """Deals by other issuers in the same (or the given) sector, newest first."""
    issuer = get_issuer(issuer_id)
    if issuer is None:
        return []
    target = sector or issuer["sector"]
    return newest_first(
        [d for d in DEALS if d["issuerId"] != issuer_id and sector_of(d) == target]
    )


def _issuer_matches(deal: Deal, wanted: str) -> bool:
    wanted = wanted.strip().lower()
    issuer = get_issuer(deal["issuerId"]) or {}
    candidates = [deal["issuerId"], deal["issuerName"], issuer.get("name", "")]
    candidates += issuer.get("aliases", [])
    return any(wanted == c.lower() for c in candidates)


def list_deals(
    limit: int | None = None,
    sector: str | None = None,
    currency: str | None = None,
    sort_by: SortKey = "date",
    issuer: str | None = None,
) -> List[Deal]:
    """Deals across all issuers, filtered case-insensitively and sorted descending."""
    deals = list(DEALS)
    if sector:
        deals = [d for d in deals if sector_of(d).lower() == sector.lower()]
    if currency:
        deals = [d for d in deals if d["currency"].lower() == currency.lower()]
    if issuer:
        deals = [d for d in deals if _issuer_matches(d, issuer)]

    if sort_by == "size":
        deals.sort(key=lambda d: d["size"], reverse=True)
    elif sort_by == "spread":
        deals.sort(key=lambda d: d["spread"], reverse=True)
    else:
        deals = newest_first(deals)
    return deals[:limit] if limit else deals


def _grouped(deals: List[Deal], label: str, key) -> List[Dict[str, Any]]:
    groups: Dict[str, Dict[str, int]] = {}
    for deal in deals:
        group = groups.setdefault(key(deal), {"count": 0, "volume": 0})
        group["count"] += 1
        group["volume"] += deal["size"]
    rows = [{label: name, **totals} for name, totals in groups.items()]
    return sorted(rows, key=lambda r: r["volume"], reverse=True)


def market_summary(deals: List[Deal]) -> Dict[str, Any]:
    if not deals:
        return {"totalDeals": 0, "totalVolume": 0, "avgSpread": 0, "avgNip": 0, "bySector": [], "byCurrency": []}
    n = len(deals)
    return {
        "totalDeals": n,
        "totalVolume": sum(d["size"] for d in deals),
        "avgSpread": round_half_up(sum(d["spread"] for d in deals) / n),
        "avgNip": round_half_up(sum(d["nip"] for d in deals) / n, 1),
        "bySector": _grouped(deals, "sector", sector_of),
        "byCurrency": _grouped(deals, "currency", lambda d: d["currency"]),
    }


def available_filters() -> Dict[str, List[str]]:
    """Distinct filter values present in the deal book, for building filter forms."""
    return {
        "sectors": sorted({sector_of(d) for d in DEALS}),
        "currencies": sorted({d["currency"] for d in DEALS}),
        "issuers": sorted({d["issuerName"] for d in DEALS}),
    }


__all__ = [
    "Deal",
    "DEALS",
    "deal_label",
    "newest_first",
    "recent_deals",
    "get_deal",
    "require_deal",
    "get_deal_by_isin",
    "deals_for_issuer",
    "summarize_deals",
    "sector_of",
    "peer_deals",
    "list_deals",
    "market_summary",
    "available_filters",
]
