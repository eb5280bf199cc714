"""Deterministic aliases for dimensions and measures in generated SQL."""

import re
from collections.abc import Callable

from recipeql.core.mapping import get_mapping_dimension
from recipeql.core.post_operation import PostOperation

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")
_NON_SLUG = re.compile(r"[^a-z0-9]+")


def to_snake_case(value: str) -> str:
    """Convert UPPER_SNAKE, CamelCase or mixed names to lower_snake.

    Examples:
        >>> to_snake_case("DATE_TRUNC")
        'date_trunc'
        >>> to_snake_case("DayOfWeek")
        'day_of_week'
    """
    return _CAMEL_BOUNDARY.sub("_", value).lower()


def to_slug(value: str) -> str:
    """Lowercase and collapse anything non-alphanumeric into single underscores."""
    return _NON_SLUG.sub("_", value.lower()).strip("_")


def dimension_alias(
    dimension_name: str,
    relation_name: str | None = None,
    post_operation: PostOperation | None = None,
) -> str:
    """Alias of a dimension column in the generated query.

    Args:
        dimension_name: Dimension or mapping name
        relation_name: Relation the dimension is reached through
        post_operation: Transform applied to the dimension

    Returns:
        Alias such as "orders.amount__date_trunc_month"
    """
    mapping = get_mapping_dimension(dimension_name)
    label = to_slug(mapping.name) if mapping is not None else dimension_name
    prefix = f"{relation_name}." if relation_name else ""
    if post_operation is None:
        return prefix + label
    return f"{prefix}{label}__{to_snake_case(post_operation.type.name)}_{to_snake_case(post_operation.value.name)}"


def measure_alias(measure_name: str, relation_name: str | None, quote: Callable[[str], str]) -> str:
    """Quoted alias of a measure column in the generated query."""
    prefix = f"{relation_name}." if relation_name else ""
    return quote(prefix + measure_name)
