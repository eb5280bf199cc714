"""Field-type discovery for model dimensions."""

import logging
from typing import TYPE_CHECKING

from recipeql.core.dimension import Dimension

if TYPE_CHECKING:
    from recipeql.core.context import QueryGeneratorContext
    from recipeql.core.model import SQLTarget, TableTarget
    from recipeql.db.base import BaseDataSource

logger = logging.getLogger(__name__)


class DiscoverService:
    """Discovers dimension value types by describing a probe query on the warehouse."""

    def __init__(self, data_source: "BaseDataSource"):
        self.data_source = data_source

    def build_probe_query(
        self,
        context: "QueryGeneratorContext",
        model_name: str,
        target: "TableTarget | SQLTarget",
        dimensions: list[Dimension],
    ) -> str:
        """SELECT every dimension of a model from its target, returning no rows."""
        quote = self.data_source.quote_identifier
        projections = [
            f"{context.get_dimension_sql(dimension.name, model_name)} AS {quote(dimension.name)}"
            for dimension in dimensions
        ]
        reference = context.get_sql_reference(target, model_name)
        return f"{context.view_prologue()}SELECT {', '.join(projections)} FROM {reference} LIMIT 0"

    def discover_dimension_field_types(
        self,
        context: "QueryGeneratorContext",
        model_name: str,
        target: "TableTarget | SQLTarget",
        dimensions: list[Dimension],
    ) -> list[Dimension]:
        """Fill in field types of dimensions that do not declare one.

        Args:
            context: Context the model is registered in
            model_name: Model the dimensions belong to
            target: Model target
            dimensions: Declared dimensions

        Returns:
            Dimensions in declaration order, with discovered field types

        Raises:
            RecipeQLError: If the data source cannot describe the probe query
        """
        unknown = [dimension for dimension in dimensions if dimension.field_type is None]
        if not unknown:
            return dimensions

        columns = self.data_source.describe_query(self.build_probe_query(context, model_name, target, unknown))
        logger.debug("Discovered %d columns for model %s", len(columns), model_name)

        discovered = []
        for dimension in dimensions:
            database_type = columns.get(dimension.name) if dimension.field_type is None else None
            if database_type is not None:
                dimension = dimension.model_copy(update={"field_type": self.data_source.to_field_type(database_type)})
            discovered.append(dimension)
        return discovered

    @staticmethod
    def fill_default_post_operations(dimension: Dimension, data_source: "BaseDataSource") -> list[str] | None:
        """Post-operations of a dimension, defaulting temporal ones to every supported timeframe."""
        if dimension.post_operations is not None:
            return dimension.post_operations
        return data_source.default_post_operations(dimension.field_type)
