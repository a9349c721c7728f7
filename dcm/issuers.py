"""Issuer reference data and name resolution."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

Issuer = Dict[str, Any]


def _ratings(*pairs: Tuple[str, str]) -> List[Dict[str, str]]:
    return [{"agency": agency, "rating": rating} for agency, rating in pairs]


ISSUERS: List[Issuer] = [
    {
        "id": "bmw-ag",
        "lei": "5299006WR3LK4LFVJG62",
        "name": "Bayerische Motoren Werke Aktiengesellschaft",
        "shortName": "BMW AG",
        "aliases": ["BMW", "BMW Group", "Bayerische Motoren Werke"],
        "sector": "Automobiles",
        "country": "Germany",
        "ratings": _ratings(("S&P", "A"), ("Moody's", "A2"), ("Fitch", "A")),
    },
    {
        "id": "volkswagen-ag",
        "lei": "529900R8Z2H4L8W9NH85",
        "name": "Volkswagen Aktiengesellschaft",
        "shortName": "Volkswagen AG",
        "aliases": ["VW", "Volkswagen", "VW Group"],
        "sector": "Automobiles",
        "country": "Germany",
        "ratings": _ratings(("S&P", "BBB+"), ("Moody's", "A3"), ("Fitch", "BBB+")),
    },
    {
        "id": "mercedes-benz-ag",
        "lei": "529900R27DL06UVNT076",
        "name": "Mercedes-Benz Group AG",
        "shortName": "Mercedes-Benz",
        "aliases": ["Mercedes", "Daimler", "Mercedes-Benz Group", "Daimler AG"],
        "sector": "Automobiles",
        "country": "Germany",
        "ratings": _ratings(("S&P", "A"), ("Moody's", "A2"), ("Fitch", "A-")),
    },
    {
        "id": "porsche-ag",
        "lei": "529900P3G9Z4YYDQQ854",
        "name": "Dr. Ing. h.c. F. Porsche AG",
        "shortName": "Porsche AG",
        "aliases": ["Porsche", "Porsche Automobil"],
        "sector": "Automobiles",
        "country": "Germany",
        "ratings": _ratings(("S&P", "A-"), ("Moody's", "A3")),
    },
    {
        "id": "audi-ag",
        "lei": "529900G2YW1GHYF3BT23",
        "name": "AUDI Aktiengesellschaft",
        "shortName": "Audi AG",
        "aliases": ["Audi", "Audi Group"],
        "sector": "Automobiles",
        "country": "Germany",
        "ratings": _ratings(("S&P", "BBB+"), ("Moody's", "A3")),
    },
    {
        "id": "siemens-ag",
        "lei": "529900DR2VXHGXZC1A23",
        "name": "Siemens Aktiengesellschaft",
        "shortName": "Siemens AG",
        "aliases": ["Siemens", "Siemens Group"],
        "sector": "Industrials",
        "country": "Germany",
        "ratings": _ratings(("S&P", "A+"), ("Moody's", "A1"), ("Fitch", "A+")),
    },
    {
        "id": "basf-se",
        "lei": "529900PM64WH8AF1E917",
        "name": "BASF SE",
        "shortName": "BASF",
        "aliases": ["BASF", "BASF SE"],
        "sector": "Chemicals",
        "country": "Germany",
        "ratings": _ratings(("S&P", "A"), ("Moody's", "A2")),
    },
    {
        "id": "totalenergies-se",
        "lei": "529900S21EQ7XV0JVV45",
        "name": "TotalEnergies SE",
        "shortName": "TotalEnergies",
        "aliases": ["Total", "TotalEnergies", "Total SA"],
        "sector": "Energy",
        "country": "France",
        "ratings": _ratings(("S&P", "AA-"), ("Moody's", "Aa3"), ("Fitch", "AA-")),
    },
    {
        "id": "shell-plc",
        "lei": "21380068P1DRHMJ8KU70",
        "name": "Shell plc",
        "shortName": "Shell",
        "aliases": ["Shell", "Royal Dutch Shell"],
        "sector": "Energy",
        "country": "United Kingdom",
        "ratings": _ratings(("S&P", "AA-"), ("Moody's", "Aa3")),
    },
    {
        "id": "lvmh-se",
        "lei": "IOG4E947OATN0K7VS2V9",
        "name": "LVMH Moët Hennessy Louis Vuitton SE",
        "shortName": "LVMH",
        "aliases": ["LVMH", "Louis Vuitton", "Moet Hennessy"],
        "sector": "Consumer Goods",
        "country": "France",
        "ratings": _ratings(("S&P", "A+"), ("Moody's", "A1")),
    },
]

_BY_ID = {issuer["id"]: issuer for issuer in ISSUERS}


def get_issuer(issuer_id: str) -> Optional[Issuer]:
    return _BY_ID.get(issuer_id)


def require_issuer(issuer_id: str) -> Issuer:
    issuer = _BY_ID.get(issuer_id)
    if issuer is None:
        raise LookupError(f"Issuer not found: {issuer_id}")
    return issuer


def _score(issuer: Issuer, query: str) -> Optional[Tuple[float, str]]:
    names = [issuer["shortName"].lower(), issuer["name"].lower()]
    aliases = [a.lower() for a in issuer["aliases"]]
    if names[0] == query:
        return 1.0, "exact"
    if names[1] == query:
        return 0.95, "exact"
    if query in aliases:
        return 0.9, "alias"
    if any(query in candidate for candidate in names + aliases):
        return 0.7, "fuzzy"
    return None


def search_issuers(query: str) -> List[Dict[str, Any]]:
    """Scored matches, best first: ``[{"issuer", "score", "matchType"}]``.

    Short name 1.0, legal name 0.95, alias 0.9, substring of any of them 0.7.
    """
    normalized = query.strip().lower()
    if not normalized:
        return []
    results = []
    for issuer in ISSUERS:
        scored = _score(issuer, normalized)
        if scored is not None:
            results.append({"issuer": issuer, "score": scored[0], "matchType": scored[1]})
    results.sort(key=lambda r: r["score"], reverse=True)
    return results


def issuers_in_sector(sector: str, exclude_id: str | None = None) -> List[Issuer]:
    return [i for i in ISSUERS if i["sector"] == sector and i["id"] != exclude_id]


__all__ = [
    "Issuer",
    "ISSUERS",
    "get_issuer",
    "require_issuer",
    "search_issuers",
    "issuers_in_sector",
]
