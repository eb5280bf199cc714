"""Relation definitions between models."""

from typing import Literal

from pydantic import BaseModel, Field


class Relation(BaseModel):
    """Named link from one model to another.

    Relation types:
    - one_to_one: each source row matches at most one target row and vice versa
    - one_to_many: a source row matches many target rows
    - many_to_one: many source rows share one target row (foreign key on source)
    - many_to_many: rows on both sides match many rows on the other
    """

    name: str = Field(..., description="Unique relation name within model")
    model_name: str = Field(..., alias="model", description="Name of the target model")
    relation_type: Literal["one_to_one", "one_to_many", "many_to_one", "many_to_many"] = Field(
        "many_to_one", description="Cardinality of the relation"
    )
    join_type: Literal["left_join", "inner_join", "right_join", "full_join"] = Field(
        "left_join", description="Join used when the relation is traversed"
    )
    source_column: str | None = Field(None, description="Join column on the source model")
    target_column: str | None = Field(None, description="Join column on the target model")
    sql: str | None = Field(None, description="Custom join condition template (uses TABLE and TARGET)")
    description: str | None = Field(None, description="Human-readable description")
    hidden: bool = Field(False, description="Hide from catalogs")

    model_config = {"populate_by_name": True, "protected_namespaces": ()}

    def __hash__(self) -> int:
        return hash((self.name, self.model_name))
