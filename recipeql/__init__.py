"""recipeql: request-scoped semantic-layer reference resolution and SQL rendering."""

__version__ = "0.1.0"

from recipeql.auth import ProjectAuth
from recipeql.core.dimension import Dimension, FieldType
from recipeql.core.mapping import CommonMapping
from recipeql.core.measure import TOTAL_ROWS_MEASURE, Measure
from recipeql.core.model import Materialize, Model, SQLTarget, TableTarget
from recipeql.core.post_operation import PostOperation, PostOperationType, Timeframe
from recipeql.core.relation import Relation
from recipeql.validation import (
    InvalidInputError,
    ModelNotFoundError,
    NotFoundError,
    RecipeQLError,
    UnauthorizedError,
)

__all__ = [
    "CommonMapping",
    "Dimension",
    "FieldType",
    "InvalidInputError",
    "Materialize",
    "Measure",
    "Model",
    "ModelNotFoundError",
    "NotFoundError",
    "PostOperation",
    "PostOperationType",
    "ProjectAuth",
    "QueryGeneratorContext",
    "RecipeQLError",
    "Relation",
    "SQLTarget",
    "TOTAL_ROWS_MEASURE",
    "TableTarget",
    "Timeframe",
    "UnauthorizedError",
    "prepare_models_for_installation",
]


def __getattr__(name):  # Lazy import to avoid importing jinja2 and sqlglot on package import
    if name == "QueryGeneratorContext":
        from recipeql.core.context import QueryGeneratorContext

        return QueryGeneratorContext
    if name == "prepare_models_for_installation":
        from recipeql.recipe import prepare_models_for_installation

        return prepare_models_for_installation
    raise AttributeError(name)
