"""Connectionless data source for generating SQL in any SQLGlot dialect."""

from recipeql.db.base import BaseDataSource
from recipeql.validation import InvalidInputError


class DialectDataSource(BaseDataSource):
    """Data source that only knows its dialect.

    Useful for compiling SQL for a warehouse the process cannot reach.
    Field-type discovery is unavailable.
    """

    def __init__(self, dialect: str, database: str | None = None, schema_name: str | None = None):
        super().__init__(database=database, schema_name=schema_name)
        self.dialect = dialect

    def describe_query(self, sql: str) -> dict[str, str]:
        raise InvalidInputError(
            f"Field type discovery is not supported for the {self.dialect} dialect without a connection"
        )
