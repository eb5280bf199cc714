"""Installation of recipe models: validation, field discovery and defaults."""

import logging
from typing import TYPE_CHECKING

from recipeql.core.discover import DiscoverService
from recipeql.validation import InvalidInputError, RecipeQLError, validate_models

if TYPE_CHECKING:
    from recipeql.core.context import QueryGeneratorContext
    from recipeql.core.model import Model
    from recipeql.db.base import BaseDataSource

logger = logging.getLogger(__name__)


def prepare_models_for_installation(
    data_source: "BaseDataSource",
    context: "QueryGeneratorContext",
    models: list["Model"],
) -> list["Model"]:
    """Validate a batch of models and finalize them for installation.

    The whole batch is validated before any model is registered. Field-type
    discovery is best effort: a model whose discovery fails keeps its
    declared dimensions.

    Args:
        data_source: Warehouse the models read from
        context: Context the finalized models are registered in
        models: Candidate models

    Returns:
        Finalized models, in input order

    Raises:
        InvalidInputError: With every validation message, if any check fails
    """
    errors = validate_models(models)
    if errors:
        raise InvalidInputError(f"Unable to install {len(models)} models", errors=errors)

    discover_service = DiscoverService(data_source)

    # Discovery resolves dimensions of related models, so the whole batch must be visible first
    for model in models:
        context.add_model(model)

    finalized = []
    for model in models:
        try:
            dimensions = discover_service.discover_dimension_field_types(
                context, model.name, model.target, model.dimensions
            )
        except RecipeQLError as e:
            logger.warning("Field type discovery failed for model %s: %s", model.name, e.message)
            dimensions = model.dimensions

        dimensions = [
            dimension.model_copy(
                update={"post_operations": DiscoverService.fill_default_post_operations(dimension, data_source)}
            )
            for dimension in dimensions
        ]

        model_with_field_types = model.model_copy(
            update={"target": data_source.fill_defaults_to_target(model.target), "dimensions": dimensions}
        )
        context.add_model(model_with_field_types)
        finalized.append(model_with_field_types)

    return finalized
