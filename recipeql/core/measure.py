"""Measure definitions."""

from typing import Literal

from pydantic import BaseModel, Field

from recipeql.validation import InvalidInputError

Aggregation = Literal[
    "count",
    "count_unique",
    "sum",
    "minimum",
    "maximum",
    "average",
    "approximate_unique",
]

_AGGREGATION_FUNCTIONS = {
    "count": "COUNT({})",
    "count_unique": "COUNT(DISTINCT {})",
    "sum": "SUM({})",
    "minimum": "MIN({})",
    "maximum": "MAX({})",
    "average": "AVG({})",
    "approximate_unique": "APPROX_COUNT_DISTINCT({})",
}


class Measure(BaseModel):
    """Measure (aggregation) definition.

    Column measures aggregate a column of the model's target; sql measures
    render a template that is already an aggregate expression.
    """

    name: str = Field(..., description="Unique measure name within model")
    type: Literal["column", "sql"] = Field("column", description="How the measure value is produced")
    aggregation: Aggregation | None = Field(None, description="Aggregation applied to column measures")
    column: str | None = Field(None, description="Aggregated column (COUNT(*) when omitted for count)")
    sql: str | None = Field(None, description="SQL template for sql measures")
    filters: list[str] | None = Field(None, description="Row-level conditions applied before aggregation")
    description: str | None = Field(None, description="Human-readable description")
    label: str | None = Field(None, description="Display label")
    hidden: bool = Field(False, description="Hide from catalogs")

    def __hash__(self) -> int:
        return hash((self.name, self.type, self.aggregation, self.column, self.sql))

    @property
    def needs_column(self) -> bool:
        """Whether a column measure has nothing to aggregate but is not a row count."""
        if self.type != "column" or self.column is not None or self.filters:
            return False
        return (self.aggregation or "count") != "count"

    def aggregate(self, value_sql: str | None) -> str:
        """Wrap a value expression with the measure's aggregation.

        Args:
            value_sql: Rendered value expression, None for a bare row count

        Returns:
            SQL aggregation expression (e.g. "SUM(\"orders\".\"amount\")", "COUNT(*)")

        Raises:
            InvalidInputError: If a non-count aggregation has no value to aggregate
        """
        aggregation = self.aggregation or "count"
        if value_sql is None:
            if aggregation != "count":
                raise InvalidInputError(f"Measure `{self.name}` needs a column for {aggregation}")
            return "COUNT(*)"
        return _AGGREGATION_FUNCTIONS[aggregation].format(value_sql)


# Row count available on every model without declaration
TOTAL_ROWS_MEASURE = Measure(name="$total_rows", type="column", aggregation="count", label="Total rows")
