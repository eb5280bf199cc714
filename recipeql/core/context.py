"""Request-scoped query generation context.

One context is created per query request. It resolves model, dimension,
measure and relation references, renders SQL templates through the Jinja
renderer, and accumulates the side-channel state (view aliases, raw columns,
comments) the caller needs to assemble the final query. Every cache is safe
for concurrent access from worker threads resolving fields of the same query.
"""

import logging
import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol

from recipeql.core.cache import ConcurrentCache, ConcurrentSet, ViewAliasTable
from recipeql.core.mapping import CommonMapping, get_mapping_dimension
from recipeql.core.measure import TOTAL_ROWS_MEASURE
from recipeql.core.model import Model, ModelDimension, ModelMeasure, ModelRelation, SQLTarget, TableTarget
from recipeql.core.naming import dimension_alias, measure_alias
from recipeql.core.registry import ModelRegistry
from recipeql.core.template import DateRange, JinjaRendererService, RenderHook, SQLRenderable
from recipeql.validation import NotFoundError

if TYPE_CHECKING:
    from recipeql.auth import ProjectAuth
    from recipeql.core.model_service import ModelService
    from recipeql.core.post_operation import PostOperation
    from recipeql.db.base import BaseDataSource

logger = logging.getLogger(__name__)


class QueryContext(Protocol):
    """Operations collaborators (renderer, discovery) call back into."""

    auth: "ProjectAuth"
    data_source: "BaseDataSource"
    variables: Mapping[str, Any]

    def add_comment(self, comment: str) -> None: ...

    def get_model(self, model_name: str) -> Model: ...

    def get_model_dimension(self, dimension_name: str, model_name: str) -> ModelDimension: ...

    def get_model_measure(self, measure_name: str, model_name: str) -> ModelMeasure: ...

    def get_relation(self, source_model_name: str, relation_name: str) -> ModelRelation: ...

    def get_dimension_sql(self, dimension_name: str, model_name: str, alias: str | None = None) -> str: ...

    def get_measure_sql(self, measure_name: str, model_name: str, alias: str | None = None) -> str: ...

    def get_sql_reference(
        self,
        model_target: TableTarget | SQLTarget,
        alias_name: str,
        column_name: str | None = None,
        in_query_dimension_names: list[str] | None = None,
        date_range: DateRange | None = None,
    ) -> str: ...

    def render_sql(
        self,
        renderable: str | SQLRenderable,
        model_name: str | None = None,
        in_query_dimension_names: list[str] | None = None,
        date_range: DateRange | None = None,
        target_model_name: str | None = None,
        hook: RenderHook | None = None,
    ) -> str: ...


class QueryGeneratorContext:
    """Resolution and rendering state for a single query request.

    Args:
        auth: Identity the request runs as
        data_source: Warehouse the SQL is generated for
        model_service: Lists the project's installed models
        renderer: Jinja renderer (a fresh one when omitted)
        comments: Comment bag to append to
        variables: Named parameters exposed to every template
    """

    def __init__(
        self,
        auth: "ProjectAuth",
        data_source: "BaseDataSource",
        model_service: "ModelService",
        renderer: JinjaRendererService | None = None,
        comments: list[str] | None = None,
        variables: Mapping[str, Any] | None = None,
    ):
        self.auth = auth
        self.data_source = data_source
        self.model_service = model_service
        self.renderer = renderer or JinjaRendererService()
        self.comments = comments if comments is not None else []
        self.variables = dict(variables or {})

        self.registry = ModelRegistry(auth, model_service)
        self.registry.on_model_replaced(self._evict_model)

        self.view_models = ViewAliasTable()
        self.columns: ConcurrentSet[tuple[str, str]] = ConcurrentSet()
        self.dimensions: ConcurrentCache[tuple[str, str], ModelDimension] = ConcurrentCache()
        self.measures: ConcurrentCache[tuple[str, str], ModelMeasure] = ConcurrentCache()
        self.relations: ConcurrentCache[tuple[str, str], ModelRelation] = ConcurrentCache()
        self._comment_lock = threading.Lock()

    def add_comment(self, comment: str) -> None:
        with self._comment_lock:
            self.comments.append(comment)

    # Model registry

    def add_model(self, model: Model) -> None:
        """Register a model for this request, replacing any model with the same name."""
        self.registry.add_model(model)

    def get_model(self, model_name: str) -> Model:
        return self.registry.get_model(model_name)

    def get_aggregates_for_model(self, target: TableTarget | SQLTarget, report_type: str):
        return self.registry.get_aggregates_for_model(target, report_type)

    def _evict_model(self, model_name: str) -> None:
        for cache in (self.dimensions, self.measures, self.relations):
            cache.remove_where(lambda key: key[0] == model_name)

    # Reference resolution

    def get_mapping_dimensions(self, model_name: str) -> dict[CommonMapping, str]:
        return self.get_model(model_name).mappings

    def get_model_dimension(self, dimension_name: str, model_name: str) -> ModelDimension:
        """Resolve a dimension, translating mapping names through the model's mappings.

        Raises:
            NotFoundError: If the dimension or the mapping entry is missing
        """
        return self.dimensions.compute_if_absent((model_name, dimension_name), self._resolve_dimension)

    def _resolve_dimension(self, key: tuple[str, str]) -> ModelDimension:
        model_name, dimension_name = key
        model = self.get_model(model_name)

        not_found = NotFoundError(f"The dimension `{dimension_name}` in model `{model_name}` not found")
        mapping = get_mapping_dimension(dimension_name)
        if mapping is not None:
            target_name = model.mappings.get(mapping)
            if target_name is None:
                raise not_found
        else:
            target_name = dimension_name

        dimension = model.get_dimension(target_name)
        if dimension is None:
            raise not_found
        return ModelDimension(model.name, model.target, dimension)

    def get_model_measure(self, measure_name: str, model_name: str) -> ModelMeasure:
        """Resolve a measure; `$total_rows` is available on every model.

        Raises:
            NotFoundError: If the measure is missing
        """
        return self.measures.compute_if_absent((model_name, measure_name), self._resolve_measure)

    def _resolve_measure(self, key: tuple[str, str]) -> ModelMeasure:
        model_name, measure_name = key
        model = self.get_model(model_name)
        measure = model.get_measure(measure_name)
        if measure is None and measure_name == TOTAL_ROWS_MEASURE.name:
            measure = TOTAL_ROWS_MEASURE
        if measure is None:
            raise NotFoundError(f"The measure `{measure_name}` not found in model `{model.name}`")
        return ModelMeasure(model.name, model.target, measure)

    def get_relation(self, source_model_name: str, relation_name: str) -> ModelRelation:
        """Resolve a relation together with its target model.

        Raises:
            NotFoundError: If the relation is missing
            ModelNotFoundError: If the relation's target model is missing
        """
        return self.relations.compute_if_absent((source_model_name, relation_name), self._resolve_relation)

    def _resolve_relation(self, key: tuple[str, str]) -> ModelRelation:
        source_model_name, relation_name = key
        source_model = self.get_model(source_model_name)
        relation = source_model.get_relation(relation_name)
        if relation is None:
            raise NotFoundError(f"The relation `{relation_name}` in model `{source_model_name}` not found")
        target_model = self.get_model(relation.model_name)
        return ModelRelation(source_model.target, source_model.name, target_model.target, target_model.name, relation)

    # Aliases

    def get_dimension_alias(
        self,
        dimension_name: str,
        relation_name: str | None = None,
        post_operation: "PostOperation | None" = None,
    ) -> str:
        return dimension_alias(dimension_name, relation_name, post_operation)

    def get_measure_alias(self, measure_name: str, relation_name: str | None = None) -> str:
        return measure_alias(measure_name, relation_name, self.data_source.quote_identifier)

    # SQL references and rendering

    def get_sql_reference(
        self,
        model_target: TableTarget | SQLTarget,
        alias_name: str,
        column_name: str | None = None,
        in_query_dimension_names: list[str] | None = None,
        date_range: DateRange | None = None,
    ) -> str:
        """SQL referring to a model target, or to one of its columns.

        Without a column, targets that do not carry their own alias (SQL
        targets) are recorded as views under alias_name and only the quoted
        alias is returned; the caller assembles the WITH clause from
        `view_models`.

        Args:
            model_target: Target of the referenced model
            alias_name: Alias the model is exposed under
            column_name: Column to reference, None for the whole target
            in_query_dimension_names: Dimensions taking part in the query
            date_range: Date range the query is restricted to

        Returns:
            SQL fragment
        """
        # Read back by query assembly to project the raw columns of SQL target views
        if isinstance(model_target, SQLTarget) and column_name is not None:
            self.columns.add((alias_name, column_name))

        if column_name is not None:
            return self.data_source.sql_reference_for_column(model_target, alias_name, column_name)

        def render(sql: str) -> str:
            return self.renderer.render(
                self.auth,
                self.data_source,
                sql,
                alias_name,
                self,
                in_query_dimension_names=in_query_dimension_names,
                date_range=date_range,
            )

        reference = self.data_source.sql_reference_for_target(model_target, alias_name, render)

        if not self.data_source.needs_alias(model_target):
            logger.debug("Registering view %s", alias_name)
            self.view_models.add(alias_name, reference)
            return self.data_source.quote_identifier(alias_name)

        return reference

    def render_sql(
        self,
        renderable: str | SQLRenderable,
        model_name: str | None = None,
        in_query_dimension_names: list[str] | None = None,
        date_range: DateRange | None = None,
        target_model_name: str | None = None,
        hook: RenderHook | None = None,
        model_alias: str | None = None,
    ) -> str:
        """Render a SQL template with this context resolving its references."""
        return self.renderer.render(
            self.auth,
            self.data_source,
            renderable,
            model_name,
            self,
            in_query_dimension_names=in_query_dimension_names,
            date_range=date_range,
            target_model_name=target_model_name,
            hook=hook,
            model_alias=model_alias,
        )

    def get_dimension_sql(self, dimension_name: str, model_name: str, alias: str | None = None) -> str:
        """SQL expression of a dimension, referenced through alias (defaults to model_name)."""
        model_dimension = self.get_model_dimension(dimension_name, model_name)
        dimension = model_dimension.dimension
        alias = alias or model_name
        if dimension.type == "sql":
            return self.render_sql(dimension.sql or "", model_name, model_alias=alias)
        return self.get_sql_reference(model_dimension.target, alias, dimension.column_name)

    def get_measure_sql(self, measure_name: str, model_name: str, alias: str | None = None) -> str:
        """Aggregate SQL expression of a measure, referenced through alias (defaults to model_name)."""
        model_measure = self.get_model_measure(measure_name, model_name)
        measure = model_measure.measure
        alias = alias or model_name
        if measure.type == "sql":
            return self.render_sql(measure.sql or "", model_name, model_alias=alias)

        value = self.get_sql_reference(model_measure.target, alias, measure.column) if measure.column else None
        if measure.filters:
            condition = " AND ".join(
                f"({self.render_sql(condition, model_name, model_alias=alias)})" for condition in measure.filters
            )
            value = f"CASE WHEN {condition} THEN {value or 1} END"
        return measure.aggregate(value)

    def view_prologue(self) -> str:
        """WITH clause defining the views registered so far, empty when there are none."""
        views = self.view_models.items()
        if not views:
            return ""
        definitions = ",\n".join(
            f"{self.data_source.quote_identifier(alias)} AS ({sql})" for alias, sql in views
        )
        return f"WITH {definitions}\n"
