"""Jinja rendering of SQL templates against a query generation context."""

from collections.abc import Callable
from datetime import date
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, TemplateSyntaxError
from pydantic import BaseModel, Field

from recipeql.validation import InvalidInputError

if TYPE_CHECKING:
    from recipeql.auth import ProjectAuth
    from recipeql.core.context import QueryContext
    from recipeql.db.base import BaseDataSource

RenderHook = Callable[[dict[str, Any]], dict[str, Any]]


class DateRange(BaseModel):
    """Inclusive date range a query is restricted to."""

    model_config = {"frozen": True}

    start: date = Field(..., description="First day of the range")
    end: date = Field(..., description="Last day of the range")


class SQLRenderable(BaseModel):
    """SQL template plus bindings that only apply to this template."""

    sql: str = Field(..., description="Jinja SQL template")
    bindings: dict[str, Any] = Field(default_factory=dict, description="Extra template variables")


class _FieldAccessor:
    """Resolves `dimension.<name>` / `measure.<name>` to SQL."""

    def __init__(self, resolve: Callable[[str, str, str], str], model_name: str, alias: str):
        self._resolve = resolve
        self._model_name = model_name
        self._alias = alias

    def __getattr__(self, name: str) -> str:
        if name.startswith("_"):
            raise AttributeError(name)
        return self._resolve(name, self._model_name, self._alias)

    def __getitem__(self, name: str) -> str:
        return self._resolve(name, self._model_name, self._alias)


class _ModelReference:
    """A model inside a template, exposed under an alias.

    Rendering it directly yields the SQL reference for the model's target.
    """

    def __init__(self, context: "QueryContext", model_name: str, alias: str, in_query, date_range):
        self._context = context
        self._model_name = model_name
        self._alias = alias
        self._in_query = in_query
        self._date_range = date_range

    @property
    def dimension(self) -> _FieldAccessor:
        return _FieldAccessor(self._context.get_dimension_sql, self._model_name, self._alias)

    @property
    def measure(self) -> _FieldAccessor:
        return _FieldAccessor(self._context.get_measure_sql, self._model_name, self._alias)

    @property
    def relation(self) -> "_RelationAccessor":
        return _RelationAccessor(self._context, self._model_name, self._in_query, self._date_range)

    def __str__(self) -> str:
        model = self._context.get_model(self._model_name)
        return self._context.get_sql_reference(
            model.target,
            self._alias,
            in_query_dimension_names=self._in_query,
            date_range=self._date_range,
        )


class _ModelAccessor:
    """Resolves `model.<name>` to a model reference aliased by its own name."""

    def __init__(self, context: "QueryContext", in_query, date_range):
        self._context = context
        self._in_query = in_query
        self._date_range = date_range

    def __getattr__(self, name: str) -> _ModelReference:
        if name.startswith("_"):
            raise AttributeError(name)
        return _ModelReference(self._context, name, name, self._in_query, self._date_range)

    def __getitem__(self, name: str) -> _ModelReference:
        return self.__getattr__(name)


class _RelationAccessor:
    """Resolves `relation.<name>` to the related model, aliased by the relation name."""

    def __init__(self, context: "QueryContext", model_name: str, in_query, date_range):
        self._context = context
        self._model_name = model_name
        self._in_query = in_query
        self._date_range = date_range

    def __getattr__(self, name: str) -> _ModelReference:
        if name.startswith("_"):
            raise AttributeError(name)
        relation = self._context.get_relation(self._model_name, name)
        return _ModelReference(self._context, relation.target_model_name, name, self._in_query, self._date_range)

    def __getitem__(self, name: str) -> _ModelReference:
        return self.__getattr__(name)


class _InQuery:
    """`in_query.<dimension>` is true when the dimension takes part in the query.

    Without a restriction every dimension counts as in the query.
    """

    def __init__(self, dimension_names: list[str] | None):
        self._names = dimension_names

    def __getattr__(self, name: str) -> bool:
        if name.startswith("_"):
            raise AttributeError(name)
        return name in self

    def __contains__(self, name: str) -> bool:
        return self._names is None or name in self._names


class JinjaRendererService:
    """Renders SQL templates with model, dimension and measure bindings.

    Field references inside a template call back into the query context that
    requested the rendering, so nested templates resolve recursively.
    """

    def __init__(self):
        """Initialize template environment with SQL-friendly settings."""
        self.env = Environment(
            variable_start_string="{{",
            variable_end_string="}}",
            block_start_string="{%",
            block_end_string="%}",
            comment_start_string="{#",
            comment_end_string="#}",
            # Don't auto-escape since we're generating SQL
            autoescape=False,
        )

    def is_template(self, sql: str) -> bool:
        """Check if a SQL string contains Jinja template syntax."""
        return any(marker in sql for marker in ["{{", "{%", "{#"])

    def render(
        self,
        auth: "ProjectAuth",
        data_source: "BaseDataSource",
        renderable: "str | SQLRenderable",
        model_name: str | None,
        context: "QueryContext",
        in_query_dimension_names: list[str] | None = None,
        date_range: DateRange | None = None,
        target_model_name: str | None = None,
        hook: RenderHook | None = None,
        model_alias: str | None = None,
    ) -> str:
        """Render a SQL template.

        Args:
            auth: Identity the request runs as
            data_source: Data source whose dialect quotes identifiers
            renderable: Template string or SQLRenderable
            model_name: Model the template belongs to (binds TABLE, dimension, measure, relation)
            context: Query context that resolves references
            in_query_dimension_names: Dimensions taking part in the query
            date_range: Date range the query is restricted to
            target_model_name: Related model for join templates (binds TARGET)
            hook: Rewrites the bindings before rendering
            model_alias: Alias the model is exposed under (defaults to model_name)

        Returns:
            Rendered SQL string

        Raises:
            InvalidInputError: If the template has syntax errors
        """
        if isinstance(renderable, SQLRenderable):
            sql, extra_bindings = renderable.sql, renderable.bindings
        else:
            sql, extra_bindings = renderable, {}

        if not self.is_template(sql) and hook is None:
            return sql

        bindings = self._bindings(
            auth,
            data_source,
            model_name,
            model_alias or model_name,
            context,
            in_query_dimension_names,
            date_range,
            target_model_name,
        )
        bindings.update(extra_bindings)
        if hook is not None:
            bindings = hook(bindings)

        try:
            template = self.env.from_string(sql)
        except TemplateSyntaxError as e:
            raise InvalidInputError(f"Template syntax error: {e}") from e
        return template.render(**bindings)

    def _bindings(
        self,
        auth,
        data_source,
        model_name,
        model_alias,
        context,
        in_query_dimension_names,
        date_range,
        target_model_name,
    ) -> dict[str, Any]:
        def comment(text: str) -> str:
            context.add_comment(str(text))
            return ""

        bindings: dict[str, Any] = dict(context.variables)
        bindings.update(
            {
                "model": _ModelAccessor(context, in_query_dimension_names, date_range),
                "in_query": _InQuery(in_query_dimension_names),
                "date_range": date_range,
                "user": auth.attributes,
                "variables": dict(context.variables),
                "comment": comment,
                "TABLE": data_source.quote_identifier(model_alias) if model_alias else None,
                "TARGET": data_source.quote_identifier(target_model_name) if target_model_name else None,
            }
        )
        if model_name:
            reference = _ModelReference(context, model_name, model_alias, in_query_dimension_names, date_range)
            bindings["dimension"] = reference.dimension
            bindings["measure"] = reference.measure
            bindings["relation"] = reference.relation
        return bindings
