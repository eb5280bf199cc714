"""Pytest configuration and fixtures."""

import pytest

from recipeql import Dimension, FieldType, Measure, Model, ProjectAuth, Relation, SQLTarget, TableTarget
from recipeql.core.context import QueryGeneratorContext
from recipeql.core.model_service import InMemoryModelService
from recipeql.db.dialect import DialectDataSource


@pytest.fixture
def auth():
    return ProjectAuth(project_id=1, user_id=7, timezone="UTC", attributes={"region": "emea"})


@pytest.fixture
def orders_model():
    return Model(
        name="orders",
        target=TableTarget(schema_name="main", table="orders"),
        dimensions=[
            Dimension(name="id", primary=True),
            Dimension(name="status"),
            Dimension(name="amount"),
            Dimension(name="created_at", field_type=FieldType.TIMESTAMP),
            Dimension(name="customer_id"),
            Dimension(name="status_label", type="sql", sql="UPPER({{ dimension.status }})"),
        ],
        measures=[
            Measure(name="revenue", aggregation="sum", column="amount"),
            Measure(name="order_count", aggregation="count"),
            Measure(
                name="completed_revenue",
                aggregation="sum",
                column="amount",
                filters=["{{ dimension.status }} = 'completed'"],
            ),
        ],
        relations=[
            Relation(name="customer", model_name="customers", source_column="customer_id", target_column="id"),
        ],
        mappings={"primary_key": "id", "event_timestamp": "created_at"},
    )


@pytest.fixture
def customers_model():
    return Model(
        name="customers",
        target=TableTarget(table="customers"),
        dimensions=[
            Dimension(name="id", primary=True),
            Dimension(name="name"),
            Dimension(name="country"),
        ],
    )


@pytest.fixture
def big_orders_model():
    return Model(
        name="big_orders",
        target=SQLTarget(sql="SELECT * FROM {{ model.orders }} WHERE amount > 100"),
        dimensions=[Dimension(name="id"), Dimension(name="amount")],
    )


@pytest.fixture
def model_service(orders_model, customers_model, big_orders_model):
    return InMemoryModelService([orders_model, customers_model, big_orders_model])


@pytest.fixture
def data_source():
    return DialectDataSource("duckdb")


@pytest.fixture
def context(auth, data_source, model_service):
    """Fresh request context over the fixture models."""
    return QueryGeneratorContext(auth, data_source, model_service, variables={"currency": "USD"})
