"""Base data source interface: warehouse dialect rules used by query generation."""

from abc import ABC, abstractmethod
from collections.abc import Callable

from sqlglot import exp
from sqlglot.errors import SqlglotError

from recipeql.core.dimension import FieldType
from recipeql.core.model import SQLTarget, TableTarget
from recipeql.core.post_operation import Timeframe

_DATE_TIMEFRAMES = [
    Timeframe.DAY,
    Timeframe.WEEK,
    Timeframe.MONTH,
    Timeframe.QUARTER,
    Timeframe.YEAR,
    Timeframe.DAY_OF_WEEK,
    Timeframe.DAY_OF_MONTH,
    Timeframe.WEEK_OF_YEAR,
    Timeframe.MONTH_OF_YEAR,
    Timeframe.QUARTER_OF_YEAR,
]

DEFAULT_TIMEFRAMES: dict[FieldType, list[Timeframe]] = {
    FieldType.TIMESTAMP: [Timeframe.HOUR, *_DATE_TIMEFRAMES[:5], Timeframe.HOUR_OF_DAY, *_DATE_TIMEFRAMES[5:]],
    FieldType.DATE: _DATE_TIMEFRAMES,
    FieldType.TIME: [Timeframe.MINUTE, Timeframe.HOUR],
}

_ARRAY_FIELD_TYPES = {
    FieldType.STRING: FieldType.ARRAY_STRING,
    FieldType.INTEGER: FieldType.ARRAY_INTEGER,
    FieldType.LONG: FieldType.ARRAY_INTEGER,
    FieldType.DOUBLE: FieldType.ARRAY_DOUBLE,
    FieldType.DECIMAL: FieldType.ARRAY_DOUBLE,
}

_BINARY_TYPES = {exp.DataType.Type.BINARY, exp.DataType.Type.VARBINARY}
_DATE_TYPES = {exp.DataType.Type.DATE, exp.DataType.Type.DATE32}
_TIME_TYPES = {exp.DataType.Type.TIME, exp.DataType.Type.TIMETZ}


class BaseDataSource(ABC):
    """Abstract base class for warehouse data sources.

    A data source knows how to quote and qualify identifiers in its SQLGlot
    dialect, how to reference a model target, and how to describe the
    columns a query returns (used for field-type discovery).
    """

    dialect: str = "duckdb"
    supported_timeframes: dict[FieldType, list[Timeframe]] = DEFAULT_TIMEFRAMES

    def __init__(self, database: str | None = None, schema_name: str | None = None):
        """Initialize data source.

        Args:
            database: Default database for table targets that do not set one
            schema_name: Default schema for table targets that do not set one
        """
        self.database = database
        self.schema_name = schema_name

    def quote_identifier(self, name: str) -> str:
        """Quote a single identifier (dots are part of the name)."""
        return exp.to_identifier(name, quoted=True).sql(dialect=self.dialect)

    def sql_reference_for_column(self, target: TableTarget | SQLTarget, alias: str, column: str) -> str:
        """Reference a column of a model target through its alias."""
        return exp.column(column, table=alias, quoted=True).sql(dialect=self.dialect)

    def sql_reference_for_target(
        self,
        target: TableTarget | SQLTarget,
        alias: str,
        render: Callable[[str], str],
    ) -> str:
        """Reference a model target as a relation.

        Args:
            target: Model target
            alias: Alias the target is exposed under
            render: Renders the target's SQL template

        Returns:
            Qualified table with alias for table targets, rendered SQL for SQL targets
        """
        if isinstance(target, TableTarget):
            table = exp.table_(target.table, db=target.schema_name, catalog=target.database, quoted=True)
            return exp.alias_(table, alias, table=True, quoted=True).sql(dialect=self.dialect)
        return render(target.sql)

    def needs_alias(self, target: TableTarget | SQLTarget) -> bool:
        """Whether the target's reference carries its own alias.

        SQL targets are exposed as named views instead.
        """
        return isinstance(target, TableTarget)

    def fill_defaults_to_target(self, target: TableTarget | SQLTarget) -> TableTarget | SQLTarget:
        """Fill the default database and schema into table targets."""
        if not isinstance(target, TableTarget):
            return target
        return target.model_copy(
            update={
                "database": target.database or self.database,
                "schema_name": target.schema_name or self.schema_name,
            }
        )

    def default_post_operations(self, field_type: FieldType | None) -> list[str] | None:
        """Timeframe names supported for a field type, None for non-temporal types."""
        if field_type is None or not field_type.is_temporal:
            return None
        timeframes = self.supported_timeframes.get(field_type)
        if timeframes is None:
            return None
        return [timeframe.name.lower() for timeframe in timeframes]

    def to_field_type(self, database_type: str) -> FieldType:
        """Map a warehouse type name onto a FieldType.

        Args:
            database_type: Type as reported by the warehouse (e.g. "VARCHAR", "DECIMAL(18,3)")

        Returns:
            Matching FieldType, UNKNOWN when the type cannot be parsed
        """
        try:
            data_type = exp.DataType.build(database_type, dialect=self.dialect)
        except (SqlglotError, ValueError):
            return FieldType.UNKNOWN
        return self._field_type_of(data_type)

    def _field_type_of(self, data_type: exp.DataType) -> FieldType:
        kind = data_type.this
        if kind == exp.DataType.Type.ARRAY:
            if not data_type.expressions:
                return FieldType.UNKNOWN
            element = self._field_type_of(data_type.expressions[0])
            return _ARRAY_FIELD_TYPES.get(element, FieldType.UNKNOWN)
        if kind == exp.DataType.Type.BOOLEAN:
            return FieldType.BOOLEAN
        if kind in exp.DataType.TEXT_TYPES:
            return FieldType.STRING
        if kind == exp.DataType.Type.BIGINT:
            return FieldType.LONG
        if kind in exp.DataType.INTEGER_TYPES:
            return FieldType.INTEGER
        if kind == exp.DataType.Type.DECIMAL:
            return FieldType.DECIMAL
        if kind in exp.DataType.REAL_TYPES:
            return FieldType.DOUBLE
        if kind in _DATE_TYPES:
            return FieldType.DATE
        if kind in _TIME_TYPES:
            return FieldType.TIME
        if kind in exp.DataType.TEMPORAL_TYPES:
            return FieldType.TIMESTAMP
        if kind in _BINARY_TYPES:
            return FieldType.BINARY
        return FieldType.UNKNOWN

    @abstractmethod
    def describe_query(self, sql: str) -> dict[str, str]:
        """Describe the columns a query returns without running it.

        Args:
            sql: SELECT statement

        Returns:
            Column name to warehouse type name, in select order

        Raises:
            InvalidInputError: If the query cannot be described
        """
        raise NotImplementedError
