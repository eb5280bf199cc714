"""Model-listing service interface."""

import threading
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from recipeql.auth import ProjectAuth
    from recipeql.core.model import Model


class ModelService(Protocol):
    """Lists the models installed for a project."""

    def get_model(self, auth: "ProjectAuth", name: str) -> "Model | None": ...

    def list(self, auth: "ProjectAuth") -> list["Model"]: ...


class InMemoryModelService:
    """Model service backed by a dict, shared by every project."""

    def __init__(self, models: list["Model"] | None = None):
        self._models: dict[str, Model] = {}
        self._lock = threading.Lock()
        for model in models or []:
            self.update(model)

    def update(self, model: "Model") -> None:
        """Install or replace a model."""
        with self._lock:
            self._models[model.name] = model

    def update_all(self, models: list["Model"]) -> None:
        """Replace the installed models with a new batch."""
        with self._lock:
            self._models = {model.name: model for model in models}

    def get_model(self, auth: "ProjectAuth", name: str) -> "Model | None":
        return self._models.get(name)

    def list(self, auth: "ProjectAuth") -> list["Model"]:
        return list(self._models.values())
