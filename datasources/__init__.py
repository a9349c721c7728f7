from .base import ChartAggregation, Column, DataSource, FilterModel
from .registry import DataSourceRegistry, build_datasource_registry

__all__ = [
    "ChartAggregation",
    "Column",
    "DataSource",
    "FilterModel",
    "DataSourceRegistry",
    "build_datasource_registry",
]
