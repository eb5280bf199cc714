"""Test SQL references to model targets and columns."""

import pytest

from recipeql import InvalidInputError, Measure, Model, SQLTarget, TableTarget
from recipeql.core.context import QueryGeneratorContext
from recipeql.core.model_service import InMemoryModelService
from recipeql.db.dialect import DialectDataSource


def test_column_reference_on_table_target(context, orders_model):
    sql = context.get_sql_reference(orders_model.target, "orders", "amount")

    assert sql == '"orders"."amount"'
    # Raw columns are only tracked for SQL targets
    assert len(context.columns) == 0
    assert len(context.view_models) == 0


def test_table_target_reference_is_inline(context, orders_model):
    sql = context.get_sql_reference(orders_model.target, "orders")

    assert sql == '"main"."orders" AS "orders"'
    assert len(context.view_models) == 0


def test_table_reference_with_database(context):
    target = TableTarget(database="analytics", schema_name="public", table="events")

    assert context.get_sql_reference(target, "e") == '"analytics"."public"."events" AS "e"'


def test_sql_target_column_reference_is_tracked(context, big_orders_model):
    sql = context.get_sql_reference(big_orders_model.target, "big_orders", "amount")

    assert sql == '"big_orders"."amount"'
    assert list(context.columns) == [("big_orders", "amount")]
    # Column references never render the target
    assert len(context.view_models) == 0


def test_sql_target_reference_registers_view(context, big_orders_model):
    sql = context.get_sql_reference(big_orders_model.target, "big_orders")

    assert sql == '"big_orders"'
    assert context.view_models.to_dict() == {
        "big_orders": 'SELECT * FROM "main"."orders" AS "orders" WHERE amount > 100',
    }


def test_nested_views_are_recorded_in_dependency_order(context):
    from recipeql import Dimension

    context.add_model(
        Model(name="base_events", target=SQLTarget(sql="SELECT 1 AS id"), dimensions=[Dimension(name="id")])
    )
    context.add_model(
        Model(
            name="filtered_events",
            target=SQLTarget(sql="SELECT * FROM {{ model.base_events }} WHERE id > 0"),
            dimensions=[Dimension(name="id")],
        )
    )

    sql = context.get_sql_reference(context.get_model("filtered_events").target, "filtered_events")

    assert sql == '"filtered_events"'
    assert [alias for alias, _ in context.view_models.items()] == ["base_events", "filtered_events"]
    assert context.view_models.get("filtered_events") == 'SELECT * FROM "base_events" WHERE id > 0'


def test_view_prologue(context, big_orders_model):
    assert context.view_prologue() == ""

    context.get_sql_reference(big_orders_model.target, "big_orders")

    assert context.view_prologue() == (
        'WITH "big_orders" AS (SELECT * FROM "main"."orders" AS "orders" WHERE amount > 100)\n'
    )


def test_sql_target_rendering_receives_in_query_and_date_range(context):
    from datetime import date

    from recipeql.core.template import DateRange

    context.add_model(
        Model(
            name="sessions",
            target=SQLTarget(
                sql="SELECT * FROM raw_sessions WHERE day BETWEEN '{{ date_range.start }}' AND '{{ date_range.end }}'"
                "{% if in_query.device %} AND device IS NOT NULL{% endif %}"
            ),
        )
    )
    target = context.get_model("sessions").target

    context.get_sql_reference(
        target,
        "sessions",
        in_query_dimension_names=["device"],
        date_range=DateRange(start=date(2024, 1, 1), end=date(2024, 1, 31)),
    )

    assert context.view_models.get("sessions") == (
        "SELECT * FROM raw_sessions WHERE day BETWEEN '2024-01-01' AND '2024-01-31' AND device IS NOT NULL"
    )


def test_dimension_sql(context):
    assert context.get_dimension_sql("status", "orders") == '"orders"."status"'
    assert context.get_dimension_sql("status", "orders", "o") == '"o"."status"'
    assert context.get_dimension_sql(":primary_key", "orders") == '"orders"."id"'


def test_sql_dimension_renders_template(context):
    assert context.get_dimension_sql("status_label", "orders") == 'UPPER("orders"."status")'
    assert context.get_dimension_sql("status_label", "orders", "o") == 'UPPER("o"."status")'


def test_measure_sql(context):
    assert context.get_measure_sql("revenue", "orders") == 'SUM("orders"."amount")'
    assert context.get_measure_sql("order_count", "orders") == "COUNT(*)"
    assert context.get_measure_sql("$total_rows", "customers") == "COUNT(*)"


def test_measure_sql_without_column(auth, data_source):
    model = Model(name="sales", target=TableTarget(table="sales"), measures=[Measure(name="total", aggregation="sum")])
    context = QueryGeneratorContext(auth, data_source, InMemoryModelService([model]))

    with pytest.raises(InvalidInputError) as exc_info:
        context.get_measure_sql("total", "sales")

    assert exc_info.value.status == 400


def test_filtered_measure_sql(context):
    assert context.get_measure_sql("completed_revenue", "orders") == (
        "SUM(CASE WHEN (\"orders\".\"status\" = 'completed') THEN \"orders\".\"amount\" END)"
    )


def test_bigquery_references():
    from recipeql.auth import ProjectAuth

    context = QueryGeneratorContext(ProjectAuth.single_project(), DialectDataSource("bigquery"), InMemoryModelService())
    target = TableTarget(database="project", schema_name="dataset", table="orders")

    assert context.get_sql_reference(target, "orders", "amount") == "`orders`.`amount`"
    assert context.get_measure_alias("revenue", "orders") == "`orders.revenue`"
