"""CLI for recipeql model operations."""

import logging
from pathlib import Path

import typer

from recipeql import __version__
from recipeql.config import RecipeQLConfig, build_data_source, find_config, load_config


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"recipeql {__version__}")
        raise typer.Exit()


app = typer.Typer(
    help="recipeql: semantic-layer SQL generation",
    no_args_is_help=True,
)

# Global state for config (set in callback, used in commands)
_loaded_config: RecipeQLConfig | None = None


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-V", callback=version_callback, is_eager=True, help="Show version"
    ),
    config: Path = typer.Option(None, "--config", "-c", help="Path to config file (recipeql.yaml)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """recipeql CLI.

    You can use a config file (recipeql.yaml or recipeql.json) to set the
    models directory, the warehouse connection and template variables.
    """
    global _loaded_config
    _loaded_config = None

    if verbose:
        logging.basicConfig(level=logging.DEBUG)

    config_path = config or find_config()
    if config_path:
        try:
            _loaded_config = load_config(config_path)
            typer.echo(f"Loaded config from: {config_path}", err=True)
        except Exception as e:
            typer.echo(f"Warning: Failed to load config: {e}", err=True)
            _loaded_config = None


def _models_directory(directory: Path) -> Path:
    if directory == Path(".") and _loaded_config:
        directory = Path(_loaded_config.models_dir)
    if not directory.exists():
        typer.echo(f"Error: Directory {directory} does not exist", err=True)
        raise typer.Exit(1)
    return directory


def _install(directory: Path):
    from recipeql.auth import ProjectAuth
    from recipeql.core.context import QueryGeneratorContext
    from recipeql.core.model_service import InMemoryModelService
    from recipeql.loaders import load_models_from_directory
    from recipeql.recipe import prepare_models_for_installation
    from recipeql.validation import RecipeQLError

    data_source = build_data_source(_loaded_config)
    models = load_models_from_directory(directory)
    service = InMemoryModelService()
    variables = _loaded_config.variables if _loaded_config else None
    context = QueryGeneratorContext(ProjectAuth.single_project(), data_source, service, variables=variables)

    try:
        installed = prepare_models_for_installation(data_source, context, models)
    except RecipeQLError as e:
        typer.echo(f"Error: {e.message}", err=True)
        for error in e.errors:
            typer.echo(f"  - {error}", err=True)
        raise typer.Exit(1)

    service.update_all(installed)
    return data_source, service, installed


@app.command()
def validate(
    directory: Path = typer.Argument(".", help="Directory containing model files (defaults to current dir)"),
):
    """
    Validate model definitions and discover their field types.

    Examples:
      recipeql validate models/
    """
    directory = _models_directory(directory)
    _, _, installed = _install(directory)

    for model in installed:
        typer.echo(f"{model.name}: {len(model.dimensions)} dimensions, {len(model.measures)} measures")
        for dimension in model.dimensions:
            field_type = dimension.field_type.value if dimension.field_type else "unknown"
            typer.echo(f"  {dimension.name} ({field_type})")

    typer.echo(f"Validated {len(installed)} models", err=True)


@app.command()
def reference(
    model: str = typer.Argument(..., help="Model name"),
    directory: Path = typer.Option(".", "--models", "-m", help="Directory containing model files"),
    column: str = typer.Option(None, "--column", help="Reference a single column instead of the model"),
):
    """
    Print the SQL reference for a model, prefixed by the views it depends on.

    Examples:
      recipeql reference orders
      recipeql reference orders --column amount
    """
    from recipeql.auth import ProjectAuth
    from recipeql.core.context import QueryGeneratorContext
    from recipeql.validation import RecipeQLError

    directory = _models_directory(directory)
    data_source, service, _ = _install(directory)
    variables = _loaded_config.variables if _loaded_config else None
    # Views discovered during installation belong to the whole batch
    context = QueryGeneratorContext(ProjectAuth.single_project(), data_source, service, variables=variables)

    try:
        target = context.get_model(model).target
        sql = context.get_sql_reference(target, model, column)
    except RecipeQLError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(1)

    typer.echo(context.view_prologue() + sql)


if __name__ == "__main__":
    app()
