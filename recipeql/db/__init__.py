"""Data source abstraction layer."""

from recipeql.db.base import BaseDataSource
from recipeql.db.dialect import DialectDataSource

__all__ = ["BaseDataSource", "DialectDataSource"]


def __getattr__(name):
    """Lazy import data sources to avoid importing optional drivers."""
    if name == "DuckDBDataSource":
        from recipeql.db.duckdb import DuckDBDataSource

        return DuckDBDataSource
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
