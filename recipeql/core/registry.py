"""Request-scoped registry of model definitions."""

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from recipeql.core.cache import ConcurrentCache
from recipeql.validation import ModelNotFoundError

if TYPE_CHECKING:
    from recipeql.auth import ProjectAuth
    from recipeql.core.model import Model, SQLTarget, TableTarget
    from recipeql.core.model_service import ModelService

logger = logging.getLogger(__name__)


class ModelRegistry:
    """Lazily loads models from the model service and memoizes them by name.

    Models added explicitly (e.g. during installation, before they exist in
    the service) shadow the service's copy for the registry's lifetime.
    """

    def __init__(self, auth: "ProjectAuth", model_service: "ModelService"):
        self.auth = auth
        self.model_service = model_service
        self._models: ConcurrentCache[str, Model] = ConcurrentCache()
        self._listeners: list[Callable[[str], None]] = []

    def on_model_replaced(self, listener: Callable[[str], None]) -> None:
        """Register a callback invoked with the model name on every add_model."""
        self._listeners.append(listener)

    def add_model(self, model: "Model") -> None:
        """Register a model, replacing any model with the same name."""
        self._models[model.name] = model
        for listener in self._listeners:
            listener(model.name)

    def get_model(self, name: str) -> "Model":
        """Get a model by name, fetching it from the model service on first use.

        Raises:
            ModelNotFoundError: If the model service has no such model
        """
        return self._models.compute_if_absent(name, self._fetch)

    def _fetch(self, name: str) -> "Model":
        logger.debug("Fetching model %s for project %s", name, self.auth.project_id)
        model = self.model_service.get_model(self.auth, name)
        if model is None:
            raise ModelNotFoundError(f"Model '{name}' not found")
        return model

    def __contains__(self, name: str) -> bool:
        return name in self._models

    def list_models(self) -> list["Model"]:
        """List every model the service knows for this project."""
        return self.model_service.list(self.auth)

    def get_aggregates_for_model(
        self, target: "TableTarget | SQLTarget", report_type: str
    ) -> list[tuple[str, str, dict[str, Any]]]:
        """Find pre-aggregated tables that answer reports over the given target.

        Args:
            target: Target of the model being queried
            report_type: Report type the aggregate must answer

        Returns:
            (model name, materialize name, materialize definition) triples
        """
        aggregates = []
        for model in self.list_models():
            if model.target != target:
                continue
            for materialize in model.materializes or []:
                if materialize.report_type == report_type:
                    aggregates.append((model.name, materialize.name, materialize.value))
        return aggregates
