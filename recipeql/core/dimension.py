"""Dimension definitions."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class FieldType(str, Enum):
    """Value type of a dimension as reported by the warehouse."""

    STRING = "string"
    INTEGER = "integer"
    DECIMAL = "decimal"
    DOUBLE = "double"
    LONG = "long"
    BOOLEAN = "boolean"
    DATE = "date"
    TIME = "time"
    TIMESTAMP = "timestamp"
    BINARY = "binary"
    ARRAY_STRING = "array_string"
    ARRAY_INTEGER = "array_integer"
    ARRAY_DOUBLE = "array_double"
    UNKNOWN = "unknown"

    @property
    def is_temporal(self) -> bool:
        return self in (FieldType.DATE, FieldType.TIME, FieldType.TIMESTAMP)


class Dimension(BaseModel):
    """Dimension (attribute) definition.

    A dimension is either a physical column of the model's target or a SQL
    template rendered against the model.
    """

    name: str = Field(..., description="Unique dimension name within model")
    type: Literal["column", "sql"] = Field("column", description="How the dimension value is produced")
    column: str | None = Field(None, description="Column name (defaults to name for column dimensions)")
    sql: str | None = Field(None, description="SQL template for sql dimensions")
    field_type: FieldType | None = Field(None, description="Value type, discovered when not declared")
    post_operations: list[str] | None = Field(None, description="Timeframes supported for temporal dimensions")
    description: str | None = Field(None, description="Human-readable description")
    label: str | None = Field(None, description="Display label")
    primary: bool = Field(False, description="Whether the dimension is the model's primary key")
    hidden: bool = Field(False, description="Hide from catalogs")

    def __hash__(self) -> int:
        return hash((self.name, self.type, self.column, self.sql))

    @property
    def column_name(self) -> str:
        """Column referenced by a column dimension, defaulting to name."""
        return self.column or self.name
