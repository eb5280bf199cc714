"""Configuration file format for recipeql."""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field

if TYPE_CHECKING:
    from recipeql.db.base import BaseDataSource

CONFIG_FILE_NAMES = ["recipeql.yaml", "recipeql.yml", "recipeql.json"]


class DuckDBConnection(BaseModel):
    """DuckDB connection configuration."""

    type: Literal["duckdb"] = "duckdb"
    path: str = Field(":memory:", description="Path to DuckDB database file or :memory:")
    database: str | None = Field(default=None, description="Default database for table targets")
    schema_name: str | None = Field(default=None, alias="schema", description="Default schema for table targets")

    model_config = {"populate_by_name": True}


class DialectConnection(BaseModel):
    """Connectionless warehouse: SQL is generated for the dialect but never executed."""

    type: Literal["dialect"] = "dialect"
    dialect: str = Field(..., description="SQLGlot dialect name (e.g. postgres, bigquery, snowflake)")
    database: str | None = Field(default=None, description="Default database for table targets")
    schema_name: str | None = Field(default=None, alias="schema", description="Default schema for table targets")

    model_config = {"populate_by_name": True}


Connection = DuckDBConnection | DialectConnection


class RecipeQLConfig(BaseModel):
    """recipeql configuration file format.

    Can be saved as recipeql.yaml or recipeql.json.

    Example YAML:
        models_dir: ./models
        connection:
          type: duckdb
          path: data/warehouse.db
          schema: main
        variables:
          currency: USD
    """

    models_dir: str = Field(default=".", description="Directory containing model files (defaults to current dir)")
    connection: Connection | None = Field(default=None, description="Warehouse connection configuration")
    variables: dict[str, Any] = Field(default_factory=dict, description="Variables exposed to every SQL template")

    def resolve_paths(self, base_dir: Path | None = None) -> "RecipeQLConfig":
        """Resolve relative paths to absolute paths.

        Args:
            base_dir: Base directory for resolving relative paths (defaults to cwd)

        Returns:
            New config with resolved paths
        """
        base = base_dir or Path.cwd()

        models_path = Path(self.models_dir)
        if not models_path.is_absolute():
            models_path = (base / models_path).resolve()

        connection = self.connection
        if isinstance(connection, DuckDBConnection) and connection.path != ":memory:":
            db_path = Path(connection.path)
            if not db_path.is_absolute():
                db_path = (base / db_path).resolve()
            connection = connection.model_copy(update={"path": str(db_path)})

        return self.model_copy(update={"models_dir": str(models_path), "connection": connection})


def load_config(config_path: Path) -> RecipeQLConfig:
    """Load configuration from YAML or JSON file.

    Args:
        config_path: Path to config file (recipeql.yaml or recipeql.json)

    Returns:
        Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config file format is invalid
    """
    import json

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()

    if suffix in {".yaml", ".yml"}:
        import yaml

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
    elif suffix == ".json":
        with open(config_path) as f:
            data = json.load(f)
    else:
        raise ValueError(f"Unsupported config format: {suffix}. Use .yaml, .yml, or .json")

    config = RecipeQLConfig(**data)

    # Relative paths are relative to the config file
    return config.resolve_paths(config_path.parent)


def find_config(start_dir: Path | None = None) -> Path | None:
    """Find config file by searching up the directory tree.

    Args:
        start_dir: Directory to start searching from (defaults to cwd)

    Returns:
        Path to config file if found, None otherwise
    """
    current = (start_dir or Path.cwd()).resolve()

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.exists():
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def build_data_source(config: RecipeQLConfig | None) -> "BaseDataSource":
    """Build the data source a config describes (in-memory DuckDB by default)."""
    from recipeql.db.dialect import DialectDataSource
    from recipeql.db.duckdb import DuckDBDataSource

    connection = config.connection if config else None
    if connection is None:
        return DuckDBDataSource()
    if isinstance(connection, DuckDBConnection):
        return DuckDBDataSource(connection.path, database=connection.database, schema_name=connection.schema_name)
    if isinstance(connection, DialectConnection):
        return DialectDataSource(connection.dialect, database=connection.database, schema_name=connection.schema_name)
    raise ValueError(f"Unknown connection type: {type(connection)}")
