"""Loading model definitions from YAML files."""

import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from recipeql.core.model import Model

logger = logging.getLogger(__name__)


def load_models_from_file(file_path: str | Path) -> list[Model]:
    """Parse the `models:` list of a YAML file.

    Example file:
        models:
          - name: orders
            target:
              type: table
              table: orders
            dimensions:
              - name: status
            measures:
              - name: revenue
                aggregation: sum
                column: amount

    Args:
        file_path: YAML file

    Returns:
        Models defined in the file (empty if it has no `models` key)

    Raises:
        ValueError: If the file is not valid YAML or a model is malformed
    """
    file_path = Path(file_path)
    try:
        data = yaml.safe_load(file_path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {file_path}: {e}") from e

    if not isinstance(data, dict):
        return []

    try:
        return [Model(**definition) for definition in data.get("models") or []]
    except ValidationError as e:
        raise ValueError(f"Invalid model definition in {file_path}: {e}") from e


def load_models_from_directory(directory: str | Path) -> list[Model]:
    """Load every model defined in YAML files under a directory.

    Files that fail to parse are skipped with a warning.

    Args:
        directory: Directory to search recursively

    Returns:
        Models in file path order
    """
    directory = Path(directory)
    if not directory.exists():
        raise ValueError(f"Directory {directory} does not exist")

    models = []
    for file_path in sorted(directory.rglob("*")):
        if not file_path.is_file() or file_path.suffix.lower() not in {".yml", ".yaml"}:
            continue
        if file_path.name.startswith("recipeql."):
            continue
        try:
            models.extend(load_models_from_file(file_path))
        except ValueError as e:
            logger.warning("Could not parse %s: %s", file_path, e)
    return models
