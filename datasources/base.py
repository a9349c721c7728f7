"""DataSource contract: a read-only dataset with query, aggregate and summary.

Records are plain JSON-ready dicts with camelCase keys. The orchestration
core never looks inside them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Dict, Iterable, List, Literal, Mapping, Tuple, Type

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

Record = Dict[str, Any]
ChartKind = Literal["bar", "line", "pie", "area"]


class FilterModel(BaseModel):
    """Base for per-source filter schemas. Unknown filter keys are rejected."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    money: bool = False

    def format(self, value: Any) -> Any:
        if not self.money or not isinstance(value, (int, float)):
            return value
        return format_money(value)


@dataclass(frozen=True)
class ChartAggregation:
    key: str
    label: str
    x_key: str
    y_key: str
    recommended_type: ChartKind


def format_money(value: float) -> str:
    if isinstance(value, int) or float(value).is_integer():
        return f"${int(value):,}"
    return f"${value:,.2f}"


def count_by(records: Iterable[Record], key: str) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for record in records:
        counts[record[key]] = counts.get(record[key], 0) + 1
    return counts


def as_points(counts: Mapping[str, Any], y_key: str = "count", *, sort: bool = True, top: int | None = None) -> List[Record]:
    points = [{"name": name, y_key: value} for name, value in counts.items()]
    if sort:
        points.sort(key=lambda p: p[y_key], reverse=True)
    return points[:top] if top else points


class DataSource:
    """Base class for in-memory datasets.

    Subclasses declare how filters apply: ``contains_filters`` match
    case-insensitive substrings, ``exact_filters`` match exactly, and
    ``bound_filters`` map a filter key to ``(record_key, "min" | "max")``.
    ``aggregations`` maps each chart aggregation key to a method name.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    filter_model: ClassVar[Type[FilterModel]]
    columns: ClassVar[List[Column]]
    chart_aggregations: ClassVar[List[ChartAggregation]]

    contains_filters: ClassVar[Tuple[str, ...]] = ()
    exact_filters: ClassVar[Tuple[str, ...]] = ()
    bound_filters: ClassVar[Dict[str, Tuple[str, str]]] = {}
    aggregations: ClassVar[Dict[str, str]] = {}

    def __init__(self, records: List[Record]) -> None:
        self._records = records

    @property
    def records(self) -> List[Record]:
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def parse_filters(self, filters: Mapping[str, Any] | None) -> Dict[str, Any]:
        """Validate raw filters and return the non-empty ones keyed by wire name."""
        parsed = self.filter_model.model_validate(dict(filters or {}))
        return {
            k: v
            for k, v in parsed.model_dump(by_alias=True, exclude_none=True).items()
            if v != ""
        }

    def _matches(self, record: Record, filters: Mapping[str, Any]) -> bool:
        for key, wanted in filters.items():
            if key in self.contains_filters:
                if str(wanted).lower() not in str(record[key]).lower():
                    return False
            elif key in self.exact_filters:
                if record[key] != wanted:
                    return False
            elif key in self.bound_filters:
                field, kind = self.bound_filters[key]
                if kind == "min" and record[field] < wanted:
                    return False
                if kind == "max" and record[field] > wanted:
                    return False
        return True

    def query(self, filters: Mapping[str, Any] | None = None) -> List[Record]:
        """Records matching ``filters``. Raises pydantic.ValidationError on bad filters."""
        parsed = self.parse_filters(filters)
        return [r for r in self._records if self._matches(r, parsed)]

    def get_aggregation(self, kind: str) -> ChartAggregation:
        for aggregation in self.chart_aggregations:
            if aggregation.key == kind:
                return aggregation
        raise ValueError(f"Unknown aggregation type: {kind} for {self.name}")

    def aggregate(self, records: List[Record], kind: str) -> List[Record]:
        self.get_aggregation(kind)
        handler: Callable[[List[Record]], List[Record]] = getattr(self, self.aggregations[kind])
        return handler(records)

    def summary(self, records: List[Record]) -> Dict[str, Any]:
        raise NotImplementedError

    def to_rows(self, records: Iterable[Record]) -> List[Record]:
        """Records as table rows keyed by column label, money columns formatted."""
        return [{col.label: col.format(r.get(col.key)) for col in self.columns} for r in records]

    def describe(self) -> str:
        filters = ", ".join(
            field.alias or name for name, field in self.filter_model.model_fields.items()
        )
        aggregations = ", ".join(f"{self.name}:{a.key}" for a in self.chart_aggregations)
        return (
            f"- **{self.name}**: {self.description}\n"
            f"  Filters: {filters or 'none'}\n"
            f"  Chart aggregations: {aggregations or 'none'}"
        )


__all__ = [
    "Record",
    "ChartKind",
    "FilterModel",
    "Column",
    "ChartAggregation",
    "format_money",
    "count_by",
    "as_points",
    "DataSource",
]
