"""Secondary-market performance after pricing, and sector credit curves."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Literal, Optional

from .deals import get_deal_by_isin
from .seeded import char_seed, make_rng, round_half_up

Trend = Literal["Tightening", "Widening", "Stable"]

MAX_PERFORMANCE_DAYS = 90

BASE_SPREAD_BY_RATING = {
    "AAA": 20, "AA+": 30, "AA": 35, "AA-": 45, "A+": 55,
    "A": 70, "A-": 85, "BBB+": 100, "BBB": 120, "BBB-": 150,
}

SECTOR_ADJUSTMENT = {
    "Automobiles": 15,
    "Industrials": 5,
    "Energy": 10,
    "Chemicals": 8,
    "Consumer Goods": -5,
}

CURVE_TENORS = ["1Y", "2Y", "3Y", "5Y", "7Y", "10Y", "15Y", "20Y", "30Y"]
TENOR_MULTIPLIERS = [0.6, 0.7, 0.8, 1.0, 1.15, 1.3, 1.45, 1.55, 1.65]


def secondary_performance(isin: str, days: int = 30) -> List[Dict[str, Any]]:
    """Daily prints for the first ``days`` calendar days after pricing, weekends skipped.

    Unknown ISINs give an empty list. The window is capped at 90 days.
    """
    deal = get_deal_by_isin(isin)
    if deal is None:
        return []

    rng = make_rng(char_seed(isin), shift=0.5)
    priced = date.fromisoformat(deal["pricingDate"])
    price = deal["reoffer"]
    spread = deal["spread"]
    base_volume = deal["size"] * 0.02
    prints = []

    for i in range(min(days, MAX_PERFORMANCE_DAYS) + 1):
        day = priced + timedelta(days=i)
        if day.weekday() >= 5:
            continue
        # New issues tend to tighten in the first week.
        price = round_half_up(price + rng(i) * 0.3 + (0.05 if i < 7 else 0), 2)
        spread = max(10, round_half_up(spread + rng(i + 100) * 2 - (1 if i < 7 else 0)))
        multiplier = 3 if i < 7 else (2 if i < 14 else 1)
        prints.append({
            "isin": isin,
            "date": day.isoformat(),
            "price": price,
            "spread": spread,
            "yieldToMaturity": round_half_up(deal["coupon"] + (100 - price) / 5, 2),
            "volumeTraded": round_half_up(base_volume * multiplier * (0.5 + rng(i + 200))),
            "daysFromPricing": i,
        })
    return prints


def spread_drift(isin: str) -> int:
    """Latest 30-day spread minus issue spread, in bp; 0 when there is no history."""
    deal = get_deal_by_isin(isin)
    prints = secondary_performance(isin, 30)
    if deal is None or not prints:
        return 0
    return prints[-1]["spread"] - deal["spread"]


def drift_trend(drift: float, threshold: float) -> Trend:
    if drift < -threshold:
        return "Tightening"
    if drift > threshold:
        return "Widening"
    return "Stable"


def performance_summary(isin: str) -> Optional[Dict[str, Any]]:
    deal = get_deal_by_isin(isin)
    prints = secondary_performance(isin, 30)
    if deal is None or not prints:
        return None
    latest = prints[-1]
    return {
        "currentSpread": latest["spread"],
        "issueSpread": deal["spread"],
        "drift": latest["spread"] - deal["spread"],
        "currentPrice": latest["price"],
        "issuePrice": deal["reoffer"],
        "priceChange": round_half_up(latest["price"] - deal["reoffer"], 2),
        "avgDailyVolume": round_half_up(sum(p["volumeTraded"] for p in prints) / len(prints)),
    }


def sector_curve(sector: str, rating: str) -> Dict[str, Any]:
    """Indicative spread and yield by tenor for a sector and rating bucket."""
    rng = make_rng(char_seed(sector + rating))
    base = BASE_SPREAD_BY_RATING.get(rating, 80) + SECTOR_ADJUSTMENT.get(sector, 0)
    curve = [
        {
            "tenor": tenor,
            "spread": round_half_up(base * multiplier + rng(i) * 10),
            "yield": round_half_up(3.0 + i * 0.15 + rng(i + 10) * 0.2, 2),
        }
        for i, (tenor, multiplier) in enumerate(zip(CURVE_TENORS, TENOR_MULTIPLIERS))
    ]
    return {
        "curve": curve,
        "benchmark": "EUR Mid-Swap" if rating.startswith("A") else "EUR Bund",
    }


__all__ = [
    "Trend",
    "MAX_PERFORMANCE_DAYS",
    "secondary_performance",
    "spread_drift",
    "drift_trend",
    "performance_summary",
    "sector_curve",
]
