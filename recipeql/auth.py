"""Authenticated project identity passed through query generation."""

from typing import Any

from pydantic import BaseModel, Field


class ProjectAuth(BaseModel):
    """Identity a request runs as.

    Query generation never interprets these values; templates can read
    `attributes` through the `user` binding.
    """

    model_config = {"frozen": True}

    project_id: int = Field(..., description="Project the request is scoped to")
    user_id: int | str | None = Field(None, description="User id, None for system requests")
    timezone: str | None = Field(None, description="IANA timezone of the user")
    permissions: frozenset[str] = Field(default_factory=frozenset, description="Granted permissions")
    attributes: dict[str, Any] = Field(default_factory=dict, description="User attributes (e.g. JWT claims)")
    is_owner: bool = Field(False, description="Whether the user owns the project")

    def __hash__(self) -> int:
        return hash((self.project_id, self.user_id))

    @classmethod
    def single_project(cls, timezone: str | None = None) -> "ProjectAuth":
        """Identity used when authentication is disabled."""
        return cls(project_id=-1, user_id=None, timezone=timezone, is_owner=True)
