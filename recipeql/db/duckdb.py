"""DuckDB data source."""

from typing import Any

import duckdb

from recipeql.db.base import BaseDataSource
from recipeql.validation import InvalidInputError


class DuckDBDataSource(BaseDataSource):
    """DuckDB data source.

    Wraps a DuckDB connection; discovery describes queries with DESCRIBE.
    """

    dialect = "duckdb"

    def __init__(
        self,
        path: str = ":memory:",
        database: str | None = None,
        schema_name: str | None = None,
        connection: Any = None,
    ):
        """Initialize DuckDB data source.

        Args:
            path: Database file path or ":memory:" for in-memory database
            database: Default database for table targets
            schema_name: Default schema for table targets
            connection: Existing DuckDB connection to use instead of opening path
        """
        super().__init__(database=database, schema_name=schema_name)
        self.conn = connection if connection is not None else duckdb.connect(path)

    def describe_query(self, sql: str) -> dict[str, str]:
        # Each call gets its own cursor so discovery can run from worker threads
        cursor = self.conn.cursor()
        try:
            rows = cursor.execute(f"DESCRIBE {sql}").fetchall()
        except duckdb.Error as e:
            raise InvalidInputError(f"Unable to describe query: {e}") from e
        finally:
            cursor.close()
        return {row[0]: row[1] for row in rows}

    def close(self) -> None:
        """Close database connection."""
        self.conn.close()

    @classmethod
    def from_url(cls, url: str, **kwargs) -> "DuckDBDataSource":
        """Create data source from connection URL.

        Args:
            url: Connection URL (e.g., "duckdb:///:memory:" or "duckdb:///path/to/db.duckdb")

        Returns:
            DuckDBDataSource instance
        """
        if not url.startswith("duckdb://"):
            raise ValueError(f"Invalid DuckDB URL: {url}")

        # duckdb:///:memory: -> :memory:
        # duckdb:///tmp/app.db -> /tmp/app.db
        db_path = url[len("duckdb://") :]
        if db_path in ("/:memory:", ":memory:", "", "/"):
            db_path = ":memory:"

        return cls(db_path, **kwargs)
