"""Mock bond trade blotter."""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any, Dict, List, Literal, Optional

from pydantic import Field

from .base import ChartAggregation, Column, DataSource, FilterModel, Record, as_points, count_by, format_money

COUNTERPARTIES = [
    "Goldman Sachs", "JP Morgan", "Morgan Stanley", "Citibank", "Bank of America",
    "Deutsche Bank", "Barclays", "Credit Suisse", "UBS", "HSBC",
    "BNP Paribas", "Societe Generale", "RBC Capital", "TD Securities", "Wells Fargo",
]

TRADERS = [
    "John Smith", "Sarah Johnson", "Michael Chen", "Emily Davis", "Robert Wilson",
    "Jennifer Brown", "David Lee", "Lisa Anderson", "James Taylor", "Maria Garcia",
]

# (name, isin, cusip, base price, base yield)
BONDS = [
    ("US Treasury 10Y", "US912810TM17", "912810TM1", 98.5, 4.25),
    ("US Treasury 5Y", "US91282CGV27", "91282CGV2", 99.2, 4.10),
    ("US Treasury 2Y", "US91282CHD27", "91282CHD2", 99.8, 4.50),
    ("US Treasury 30Y", "US912810TQ31", "912810TQ3", 95.5, 4.45),
    ("Germany Bund 10Y", "DE0001102580", "D01102580", 97.2, 2.35),
    ("UK Gilt 10Y", "GB00BDRHNP05", "G00BDRHP0", 96.8, 4.15),
    ("Japan JGB 10Y", "JP1103551M19", "J11035519", 99.5, 0.75),
    ("Apple Inc 3.85% 2043", "US037833DT49", "037833DT4", 92.3, 4.55),
    ("Microsoft 2.4% 2026", "US594918BW92", "594918BW9", 97.8, 3.20),
    ("Amazon 3.15% 2027", "US023135BT85", "023135BT8", 96.5, 3.95),
    ("Google 1.1% 2025", "US02079KAE47", "02079KAE4", 98.9, 2.85),
    ("JPM 4.125% 2026", "US46625HRL05", "46625HRL0", 99.1, 4.35),
    ("Goldman Sachs 3.5% 2025", "US38141GWK93", "38141GWK9", 98.2, 4.15),
    ("Verizon 4.5% 2033", "US92343VGH60", "92343VGH6", 94.5, 5.10),
    ("AT&T 3.65% 2028", "US00206RKH49", "00206RKH4", 95.8, 4.45),
]

CURRENCY_BY_ISIN_PREFIX = {"US": "USD", "DE": "EUR", "GB": "GBP", "JP": "JPY"}

# Settled trades are three times as common as any other status.
STATUSES = ["PENDING", "SETTLED", "SETTLED", "SETTLED", "CANCELLED", "FAILED"]

TradeStatus = Literal["PENDING", "SETTLED", "CANCELLED", "FAILED"]


def generate_trades(count: int = 100, seed: int = 2002, as_of: Optional[date] = None) -> List[Record]:
    """Trades over the 30 days up to ``as_of`` (today by default), newest first."""
    rng = random.Random(seed)
    as_of = as_of or date.today()
    trades: List[Record] = []

    for i in range(1, count + 1):
        name, isin, cusip, base_price, base_yield = rng.choice(BONDS)
        trade_date = as_of - timedelta(days=rng.randrange(30))
        price = round(base_price + (rng.random() - 0.5) * 2, 3)
        quantity = rng.randint(1, 50) * 100_000
        trades.append({
            "id": f"TRD-{i:05d}",
            "tradeDate": trade_date.isoformat(),
            "settlementDate": (trade_date + timedelta(days=2)).isoformat(),
            "bondName": name,
            "isin": isin,
            "cusip": cusip,
            "direction": "BUY" if rng.random() > 0.5 else "SELL",
            "quantity": quantity,
            "price": price,
            "yield": round(base_yield + (rng.random() - 0.5) * 0.2, 3),
            "counterparty": rng.choice(COUNTERPARTIES),
            "trader": rng.choice(TRADERS),
            "status": rng.choice(STATUSES),
            "currency": CURRENCY_BY_ISIN_PREFIX.get(isin[:2], "USD"),
            "notionalValue": round(quantity * price / 100),
        })

    trades.sort(key=lambda t: t["tradeDate"], reverse=True)
    return trades


class TradeFilters(FilterModel):
    bond_name: Optional[str] = Field(default=None, description="Filter by bond name (partial match)")
    isin: Optional[str] = Field(default=None, description="Filter by exact ISIN")
    direction: Optional[Literal["BUY", "SELL"]] = Field(default=None, description="Filter by trade direction")
    counterparty: Optional[str] = Field(default=None, description="Filter by counterparty name")
    trader: Optional[str] = Field(default=None, description="Filter by trader name")
    status: Optional[TradeStatus] = Field(default=None, description="Filter by status")
    from_date: Optional[str] = Field(default=None, description="Filter from date (YYYY-MM-DD)")
    to_date: Optional[str] = Field(default=None, description="Filter to date (YYYY-MM-DD)")
    min_notional: Optional[float] = Field(default=None, description="Minimum notional value")
    max_notional: Optional[float] = Field(default=None, description="Maximum notional value")


class BondTradesDataSource(DataSource):
    name = "bond_trades"
    description = (
        "Bond trading data including Treasury, corporate, and sovereign bonds with "
        "counterparty and status information"
    )
    filter_model = TradeFilters
    columns = [
        Column("id", "ID"),
        Column("tradeDate", "Trade Date"),
        Column("bondName", "Bond"),
        Column("direction", "Dir"),
        Column("quantity", "Qty"),
        Column("price", "Price"),
        Column("yield", "Yield"),
        Column("counterparty", "Counterparty"),
        Column("status", "Status"),
        Column("notionalValue", "Notional", money=True),
    ]
    chart_aggregations = [
        ChartAggregation("byCounterparty", "Trades by Counterparty", "name", "count", "bar"),
        ChartAggregation("byBond", "Trades by Bond", "name", "count", "bar"),
        ChartAggregation("byStatus", "Trades by Status", "name", "count", "pie"),
        ChartAggregation("dailyVolume", "Daily Volume", "date", "volume", "line"),
        ChartAggregation("buyVsSell", "Buy vs Sell", "name", "count", "pie"),
    ]

    contains_filters = ("bondName", "counterparty", "trader")
    exact_filters = ("isin", "direction", "status")
    # ISO dates compare correctly as strings.
    bound_filters = {
        "fromDate": ("tradeDate", "min"),
        "toDate": ("tradeDate", "max"),
        "minNotional": ("notionalValue", "min"),
        "maxNotional": ("notionalValue", "max"),
    }
    aggregations = {
        "byCounterparty": "_by_counterparty",
        "byBond": "_by_bond",
        "byStatus": "_by_status",
        "dailyVolume": "_daily_volume",
        "buyVsSell": "_buy_vs_sell",
    }

    def _by_counterparty(self, records: List[Record]) -> List[Record]:
        return as_points(count_by(records, "counterparty"), top=10)

    def _by_bond(self, records: List[Record]) -> List[Record]:
        return as_points(count_by(records, "bondName"), top=10)

    def _by_status(self, records: List[Record]) -> List[Record]:
        return as_points(count_by(records, "status"), sort=False)

    def _daily_volume(self, records: List[Record]) -> List[Record]:
        """Notional traded per day, in millions, oldest first."""
        volume: Dict[str, int] = {}
        for r in records:
            volume[r["tradeDate"]] = volume.get(r["tradeDate"], 0) + r["notionalValue"]
        return [{"date": d, "volume": round(v / 1_000_000)} for d, v in sorted(volume.items())]

    def _buy_vs_sell(self, records: List[Record]) -> List[Record]:
        buys = sum(1 for r in records if r["direction"] == "BUY")
        return [{"name": "Buy", "count": buys}, {"name": "Sell", "count": len(records) - buys}]

    def summary(self, records: List[Record]) -> Dict[str, Any]:
        n = len(records)
        buys = sum(1 for r in records if r["direction"] == "BUY")
        avg_price = round(sum(r["price"] for r in records) / n, 2) if n else 0
        avg_yield = round(sum(r["yield"] for r in records) / n, 2) if n else 0
        return {
            "totalTrades": n,
            "totalNotional": format_money(sum(r["notionalValue"] for r in records)),
            "buyCount": buys,
            "sellCount": n - buys,
            "avgPrice": avg_price,
            "avgYield": f"{avg_yield:.2f}%",
        }


__all__ = ["generate_trades", "TradeFilters", "BondTradesDataSource"]
