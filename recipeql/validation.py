"""Validation and error handling for model resolution and installation."""

import re
from http import HTTPStatus
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from recipeql.core.model import Model

# Model, relation, measure and dimension names
RESOURCE_NAME_PATTERN = re.compile(r"[a-z0-9_]+")


class RecipeQLError(Exception):
    """Base error surfaced to callers.

    Carries an HTTP status classification and, for batch validation
    failures, the list of individual messages.
    """

    status = HTTPStatus.BAD_REQUEST

    def __init__(self, message: str, status: HTTPStatus | None = None, errors: list[str] | None = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        self.errors = list(errors) if errors else []

    def __str__(self) -> str:
        if not self.errors:
            return self.message
        return self.message + "\n" + "\n".join(f"  - {e}" for e in self.errors)


class NotFoundError(RecipeQLError):
    """Raised when a named model, dimension, measure, relation or mapping is missing."""

    status = HTTPStatus.NOT_FOUND


class ModelNotFoundError(NotFoundError):
    """Raised when the model service has no model with the requested name."""

    status = HTTPStatus.BAD_REQUEST


class InvalidInputError(RecipeQLError):
    """Raised for bad names, field collisions and missing relation targets."""

    status = HTTPStatus.BAD_REQUEST


class UnauthorizedError(RecipeQLError):
    """Raised when a credential is missing or invalid."""

    status = HTTPStatus.UNAUTHORIZED


def _invalid_names(names: list[str]) -> list[str]:
    return [name for name in names if not RESOURCE_NAME_PATTERN.fullmatch(name)]


def validate_resource_names(models: list["Model"]) -> list[str]:
    """Check model names and every field name against the resource pattern.

    Args:
        models: Models to validate

    Returns:
        List of validation errors (empty if valid)
    """
    errors = []

    invalid_models = _invalid_names([model.name for model in models])
    if invalid_models:
        errors.append(f"Invalid model names {invalid_models}. Must be lower case and can only contain '_'")

    for model in models:
        for kind, names in (
            ("relation", [relation.name for relation in model.relations]),
            ("measure", [measure.name for measure in model.measures]),
            ("dimension", [dimension.name for dimension in model.dimensions]),
        ):
            invalid = _invalid_names(names)
            if invalid:
                errors.append(
                    f"Invalid {kind} names {invalid}, in model '{model.name}'. "
                    f"Must be lower case and can only contain '_'"
                )

    return errors


def validate_field_uniqueness(models: list["Model"]) -> list[str]:
    """Check that no dimension shares its name with a measure in the same model."""
    errors = []
    for model in models:
        measure_names = {measure.name for measure in model.measures}
        colliding = [dimension.name for dimension in model.dimensions if dimension.name in measure_names]
        if colliding:
            fields = ", ".join(f"`{name}`" for name in colliding)
            errors.append(f"`{model.name}`: Field names must be unique, duplicate fields found: {fields}")
    return errors


def validate_relation_targets(models: list["Model"]) -> list[str]:
    """Check that every relation points at a model in the same batch."""
    model_names = {model.name for model in models}
    errors = []
    for model in models:
        for relation in model.relations:
            if relation.model_name not in model_names:
                errors.append(f"`{relation.model_name}` model not found for relation {model.name}.{relation.name}")
    return errors


def validate_measure_columns(models: list["Model"]) -> list[str]:
    """Check that non-count column measures name the column they aggregate."""
    errors = []
    for model in models:
        for measure in model.measures:
            if measure.needs_column:
                errors.append(f"`{model.name}`: Measure `{measure.name}` needs a column for {measure.aggregation}")
    return errors


def validate_models(models: list["Model"]) -> list[str]:
    """Run every installation check and return all errors found."""
    return (
        validate_resource_names(models)
        + validate_field_uniqueness(models)
        + validate_relation_targets(models)
        + validate_measure_columns(models)
    )
