"""Investor universe, book allocations and post-allocation behaviour."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from .deals import DEALS, deal_label
from .seeded import char_seed, make_rng, round_half_up

Investor = Dict[str, Any]
Behaviour = Literal["hold", "partial_flip", "flip"]


def _investor(investor_id, name, kind, geography, aum, sectors) -> Investor:
    return {
        "id": investor_id,
        "name": name,
        "type": kind,
        "geography": geography,
        "aum": aum,
        "focusSectors": sectors,
    }


# AUM in millions.
INVESTORS: List[Investor] = [
    _investor("blackrock", "BlackRock", "Asset Manager", "US", 9_500_000,
              ["Automobiles", "Industrials", "Energy", "Consumer Goods"]),
    _investor("pimco", "PIMCO", "Asset Manager", "US", 1_800_000, ["Automobiles", "Industrials", "Energy"]),
    _investor("amundi", "Amundi", "Asset Manager", "France", 2_100_000,
              ["Automobiles", "Industrials", "Chemicals", "Consumer Goods"]),
    _investor("dws", "DWS Group", "Asset Manager", "Germany", 900_000, ["Automobiles", "Industrials", "Chemicals"]),
    _investor("fidelity", "Fidelity Investments", "Asset Manager", "US", 4_200_000,
              ["Automobiles", "Energy", "Consumer Goods"]),
    _investor("schroders", "Schroders", "Asset Manager", "UK", 750_000,
              ["Automobiles", "Industrials", "Consumer Goods"]),
    _investor("allianz-im", "Allianz Global Investors", "Insurance", "Germany", 680_000,
              ["Automobiles", "Industrials", "Energy"]),
    _investor("axa-im", "AXA Investment Managers", "Insurance", "France", 850_000,
              ["Automobiles", "Industrials", "Consumer Goods"]),
    _investor("prudential", "Prudential Financial", "Insurance", "US", 1_500_000,
              ["Automobiles", "Energy", "Industrials"]),
    _investor("swiss-re", "Swiss Re", "Insurance", "Switzerland", 220_000, ["Energy", "Industrials"]),
    _investor("calpers", "CalPERS", "Pension", "US", 450_000, ["Automobiles", "Industrials", "Energy"]),
    _investor("abp", "ABP", "Pension", "Netherlands", 530_000, ["Automobiles", "Industrials", "Consumer Goods"]),
    _investor("gpif", "GPIF", "Pension", "Japan", 1_600_000, ["Automobiles", "Energy"]),
    _investor("deutsche-am", "Deutsche Bank Wealth Management", "Bank", "Germany", 450_000,
              ["Automobiles", "Industrials"]),
    _investor("ubs-am", "UBS Asset Management", "Bank", "Switzerland", 1_100_000,
              ["Automobiles", "Consumer Goods", "Energy"]),
    _investor("bridgewater", "Bridgewater Associates", "Hedge Fund", "US", 150_000, ["Automobiles", "Energy"]),
    _investor("citadel", "Citadel", "Hedge Fund", "US", 62_000, ["Automobiles", "Industrials"]),
    _investor("norges-bank", "Norges Bank Investment Management", "Central Bank", "Norway", 1_400_000,
              ["Automobiles", "Industrials", "Energy", "Consumer Goods"]),
]

_BY_ID = {investor["id"]: investor for investor in INVESTORS}

# Share of the deal an investor type orders: base + weight * rng(i * stride).
ORDER_PROFILE = {
    "Asset Manager": (0.08, 0.12, 2),
    "Insurance": (0.05, 0.08, 3),
    "Pension": (0.04, 0.06, 4),
    "Bank": (0.03, 0.05, 5),
    "Hedge Fund": (0.02, 0.04, 6),
    "Central Bank": (0.06, 0.10, 7),
}


def get_investor(investor_id: str) -> Optional[Investor]:
    return _BY_ID.get(investor_id)


def allocations_for_deal(deal_id: str, deal_size: float) -> List[Dict[str, Any]]:
    """Eight to twelve investors' orders and fills for one deal, stable per ``deal_id``."""
    rng = make_rng(char_seed(deal_id))
    count = 8 + int(rng(1) * 5)
    selected = sorted(INVESTORS, key=lambda inv: rng(len(inv["id"])))[:count]

    allocations = []
    for i, investor in enumerate(selected):
        base, weight, stride = ORDER_PROFILE.get(investor["type"], (0.05, 0.0, 1))
        order_size = round_half_up(deal_size * (base + rng(i * stride) * weight))
        fill_rate = 0.3 + rng(i * 8) * 0.5
        allocations.append({
            "investorId": investor["id"],
            "investorName": investor["name"],
            "investorType": investor["type"],
            "geography": investor["geography"],
            "orderSize": order_size,
            "allocatedSize": round_half_up(order_size * fill_rate),
            "fillRate": round_half_up(fill_rate, 2),
        })
    return allocations


def allocation_breakdown(allocations: List[Dict[str, Any]], key: str, label: str) -> List[Dict[str, Any]]:
    """Allocated amount and share per ``key`` value, largest first."""
    total = sum(a["allocatedSize"] for a in allocations)
    amounts: Dict[str, int] = {}
    for alloc in allocations:
        amounts[alloc[key]] = amounts.get(alloc[key], 0) + alloc["allocatedSize"]
    rows = [
        {label: name, "amount": amount, "percentage": round_half_up(amount / total * 100) if total else 0}
        for name, amount in amounts.items()
    ]
    return sorted(rows, key=lambda r: r["amount"], reverse=True)


def _behaviour(sold_percentage: int) -> Behaviour:
    if sold_percentage == 0:
        return "hold"
    if sold_percentage < 50:
        return "partial_flip"
    return "flip"


def participation_history(investor_id: str | None = None, issuer_id: str | None = None) -> List[Dict[str, Any]]:
    """Every allocation across the deal book, with holding behaviour, newest first."""
    participations = []
    for deal in DEALS:
        if issuer_id and deal["issuerId"] != issuer_id:
            continue
        for alloc in allocations_for_deal(deal["id"], deal["size"]):
            if investor_id and alloc["investorId"] != investor_id:
                continue
            roll = make_rng(char_seed(deal["id"] + alloc["investorId"]))(0)
            if roll < 0.6:
                sold = 0
            elif roll < 0.8:
                sold = int(roll * 50)
            else:
                sold = int(50 + roll * 50)
            participations.append({
                "dealId": deal["id"],
                "dealName": deal_label(deal),
                "issuerName": deal["issuerName"],
                "investorId": alloc["investorId"],
                "investorName": alloc["investorName"],
                "date": deal["pricingDate"],
                "orderSize": alloc["orderSize"],
                "allocatedSize": alloc["allocatedSize"],
                "fillRate": alloc["fillRate"],
                "heldDays": int(30 + roll * 150),
                "soldPercentage": sold,
                "behaviour": _behaviour(sold),
            })
    return sorted(participations, key=lambda p: p["date"], reverse=True)


def flip_score(investor_id: str) -> int:
    """0 (always holds) to 100 (always flips); 50 when the investor has no history."""
    history = participation_history(investor_id=investor_id)
    if not history:
        return 50
    weights = {"hold": 0.0, "partial_flip": 0.5, "flip": 1.0}
    return round_half_up(sum(weights[p["behaviour"]] for p in history) / len(history) * 100)


__all__ = [
    "Investor",
    "INVESTORS",
    "ORDER_PROFILE",
    "get_investor",
    "allocations_for_deal",
    "allocation_breakdown",
    "participation_history",
    "flip_score",
]
