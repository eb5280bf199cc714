"""Model definitions."""

from dataclasses import dataclass
from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field

from recipeql.core.dimension import Dimension
from recipeql.core.mapping import CommonMapping
from recipeql.core.measure import Measure
from recipeql.core.relation import Relation


class TableTarget(BaseModel):
    """Physical table a model reads from."""

    model_config = {"frozen": True, "populate_by_name": True}

    type: Literal["table"] = "table"
    database: str | None = Field(None, description="Catalog / project / database")
    schema_name: str | None = Field(None, alias="schema", description="Schema / dataset")
    table: str = Field(..., description="Table name")


class SQLTarget(BaseModel):
    """SQL template a model reads from (a derived table)."""

    model_config = {"frozen": True}

    type: Literal["sql"] = "sql"
    sql: str = Field(..., description="SQL template rendered at query time")


Target = Annotated[TableTarget | SQLTarget, Field(discriminator="type")]


class Materialize(BaseModel):
    """Pre-aggregated table definition attached to a model."""

    name: str = Field(..., description="Materialization name")
    report_type: str = Field(..., description="Report type the aggregate answers (e.g. segmentation)")
    value: dict[str, Any] = Field(default_factory=dict, description="Report-specific aggregate definition")


class Model(BaseModel):
    """Model (dataset) definition.

    Models map logical dimensions, measures and relations onto a physical
    table or a SQL template. Installed models are treated as immutable:
    updates produce a new instance that replaces the old one by name.
    """

    name: str = Field(..., description="Unique model name")
    target: Target = Field(..., description="Table or SQL the model reads from")
    description: str | None = Field(None, description="Human-readable description")
    label: str | None = Field(None, description="Display label")
    hidden: bool = Field(False, description="Hide from catalogs")

    dimensions: list[Dimension] = Field(default_factory=list, description="Dimension definitions")
    measures: list[Measure] = Field(default_factory=list, description="Measure definitions")
    relations: list[Relation] = Field(default_factory=list, description="Relations to other models")
    mappings: dict[CommonMapping, str] = Field(
        default_factory=dict, description="Canonical mapping name to dimension name"
    )
    materializes: list[Materialize] | None = Field(None, description="Pre-aggregated tables")

    def __hash__(self) -> int:
        return hash(self.name)

    def get_dimension(self, name: str) -> Dimension | None:
        """Get dimension by name."""
        for dimension in self.dimensions:
            if dimension.name == name:
                return dimension
        return None

    def get_measure(self, name: str) -> Measure | None:
        """Get measure by name."""
        for measure in self.measures:
            if measure.name == name:
                return measure
        return None

    def get_relation(self, name: str) -> Relation | None:
        """Get relation by name."""
        for relation in self.relations:
            if relation.name == name:
                return relation
        return None


@dataclass(frozen=True)
class ModelDimension:
    """Dimension resolved against its model."""

    model_name: str
    target: TableTarget | SQLTarget
    dimension: Dimension


@dataclass(frozen=True)
class ModelMeasure:
    """Measure resolved against its model."""

    model_name: str
    target: TableTarget | SQLTarget
    measure: Measure


@dataclass(frozen=True)
class ModelRelation:
    """Relation resolved against both of its endpoints."""

    source_target: TableTarget | SQLTarget
    source_model_name: str
    target_target: TableTarget | SQLTarget
    target_model_name: str
    relation: Relation
