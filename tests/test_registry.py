"""Test model registry lookups and caching."""

import pytest

from recipeql import Materialize, Model, ModelNotFoundError, NotFoundError, TableTarget
from recipeql.core.model_service import InMemoryModelService
from recipeql.core.registry import ModelRegistry


class CountingModelService(InMemoryModelService):
    def __init__(self, models=None):
        super().__init__(models)
        self.calls = []

    def get_model(self, auth, name):
        self.calls.append(name)
        return super().get_model(auth, name)


def test_get_model_fetches_from_service(auth, orders_model):
    registry = ModelRegistry(auth, InMemoryModelService([orders_model]))

    assert registry.get_model("orders") == orders_model


def test_get_model_is_cached(auth, orders_model):
    service = CountingModelService([orders_model])
    registry = ModelRegistry(auth, service)

    first = registry.get_model("orders")
    second = registry.get_model("orders")

    assert first is second
    assert service.calls == ["orders"]


def test_missing_model_raises_not_found_with_bad_request(auth):
    registry = ModelRegistry(auth, InMemoryModelService())

    with pytest.raises(ModelNotFoundError) as exc_info:
        registry.get_model("ghost")

    assert isinstance(exc_info.value, NotFoundError)
    assert exc_info.value.status == 400
    assert "Model 'ghost' not found" in str(exc_info.value)


def test_failed_lookup_is_not_cached(auth, orders_model):
    service = CountingModelService()
    registry = ModelRegistry(auth, service)

    with pytest.raises(ModelNotFoundError):
        registry.get_model("orders")

    service.update(orders_model)
    assert registry.get_model("orders") == orders_model
    assert service.calls == ["orders", "orders"]


def test_add_model_overwrites(auth, orders_model):
    service = CountingModelService([orders_model])
    registry = ModelRegistry(auth, service)
    registry.get_model("orders")

    replacement = orders_model.model_copy(update={"description": "Replaced"})
    registry.add_model(replacement)

    assert registry.get_model("orders").description == "Replaced"
    assert service.calls == ["orders"]


def test_added_model_does_not_touch_service(auth, orders_model):
    service = CountingModelService()
    registry = ModelRegistry(auth, service)

    registry.add_model(orders_model)

    assert registry.get_model("orders") is orders_model
    assert "orders" in registry
    assert service.calls == []


def test_add_model_notifies_listeners(auth, orders_model):
    registry = ModelRegistry(auth, InMemoryModelService())
    replaced = []
    registry.on_model_replaced(replaced.append)

    registry.add_model(orders_model)
    registry.add_model(orders_model)

    assert replaced == ["orders", "orders"]


def test_get_aggregates_for_model(auth):
    target = TableTarget(schema_name="main", table="events")
    events = Model(
        name="events",
        target=target,
        materializes=[
            Materialize(name="daily", report_type="segmentation", value={"dimensions": ["day"]}),
            Materialize(name="funnel_steps", report_type="funnel"),
        ],
    )
    events_copy = Model(
        name="events_copy",
        target=TableTarget(schema_name="main", table="events"),
        materializes=[Materialize(name="weekly", report_type="segmentation")],
    )
    other = Model(
        name="other",
        target=TableTarget(table="other"),
        materializes=[Materialize(name="daily", report_type="segmentation")],
    )
    registry = ModelRegistry(auth, InMemoryModelService([events, events_copy, other]))

    aggregates = registry.get_aggregates_for_model(target, "segmentation")

    assert aggregates == [
        ("events", "daily", {"dimensions": ["day"]}),
        ("events_copy", "weekly", {}),
    ]
