"""Registry of the mock data sources, in registration order."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from .base import DataSource
from .bond_trades import BondTradesDataSource, generate_trades
from .employees import EmployeesDataSource, generate_employees
from .products import ProductsDataSource, generate_products


@dataclass
class DataSourceRegistry:
    _sources: Dict[str, DataSource] = field(default_factory=dict)

    def register(self, source: DataSource) -> None:
        if source.name in self._sources:
            raise ValueError(f"Data source '{source.name}' is already registered")
        self._sources[source.name] = source

    def get(self, name: str) -> Optional[DataSource]:
        return self._sources.get(name)

    def all(self) -> List[DataSource]:
        return list(self._sources.values())

    def names(self) -> List[str]:
        return list(self._sources)

    def __contains__(self, name: object) -> bool:
        return name in self._sources

    def __len__(self) -> int:
        return len(self._sources)

    def describe(self) -> str:
        """Markdown list of sources with their filters and aggregations, for the system prompt."""
        if not self._sources:
            return "No data sources available."
        return "\n\n".join(source.describe() for source in self._sources.values())


def build_datasource_registry(as_of: date | None = None) -> DataSourceRegistry:
    """Generate the three datasets and register them: employees, bond_trades, products."""
    registry = DataSourceRegistry()
    registry.register(EmployeesDataSource(generate_employees()))
    registry.register(BondTradesDataSource(generate_trades(as_of=as_of)))
    registry.register(ProductsDataSource(generate_products(as_of=as_of)))
    return registry


__all__ = ["DataSourceRegistry", "build_datasource_registry"]
