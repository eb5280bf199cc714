"""Tests for CLI command wiring."""

from pathlib import Path

import duckdb
import pytest
from typer.testing import CliRunner

from recipeql import __version__
from recipeql.cli import app

runner = CliRunner()


def _write_models(directory: Path, orders_name: str = "orders") -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "models.yml").write_text(
        f"""
models:
  - name: {orders_name}
    target:
      type: table
      schema: main
      table: orders
    dimensions:
      - name: status
      - name: amount
    measures:
      - name: revenue
        aggregation: sum
        column: amount
  - name: big_orders
    target:
      type: sql
      sql: "SELECT * FROM {{{{ model.orders }}}} WHERE amount > 100"
"""
    )


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"recipeql {__version__}" in result.output


def test_validate_without_warehouse_table(tmp_path):
    models_dir = tmp_path / "models"
    _write_models(models_dir)

    result = runner.invoke(app, ["validate", str(models_dir)])

    assert result.exit_code == 0
    assert "orders: 2 dimensions, 1 measures" in result.output
    assert "  status (unknown)" in result.output
    assert "Validated 2 models" in result.output


def test_validate_discovers_field_types(tmp_path):
    db_path = tmp_path / "warehouse.db"
    connection = duckdb.connect(str(db_path))
    connection.execute("CREATE TABLE orders (status VARCHAR, amount DOUBLE)")
    connection.close()

    _write_models(tmp_path / "models")
    (tmp_path / "recipeql.yaml").write_text("models_dir: models\nconnection:\n  type: duckdb\n  path: warehouse.db\n")

    result = runner.invoke(app, ["validate"])

    assert result.exit_code == 0
    assert "Loaded config from" in result.output
    assert "  status (string)" in result.output
    assert "  amount (double)" in result.output


def test_validate_reports_invalid_models(tmp_path):
    models_dir = tmp_path / "models"
    _write_models(models_dir, orders_name="Orders")

    result = runner.invoke(app, ["validate", str(models_dir)])

    assert result.exit_code == 1
    assert "Unable to install 2 models" in result.output
    assert "Invalid model names ['Orders']" in result.output


def test_validate_missing_directory(tmp_path):
    result = runner.invoke(app, ["validate", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_reference_sql_target_prints_view_prologue(tmp_path):
    _write_models(tmp_path / "models")

    result = runner.invoke(app, ["reference", "big_orders", "--models", str(tmp_path / "models")])

    assert result.exit_code == 0
    assert 'WITH "big_orders" AS (SELECT * FROM "main"."orders" AS "orders" WHERE amount > 100)' in result.output
    assert result.output.rstrip().endswith('"big_orders"')


def test_reference_prints_only_views_of_requested_model(tmp_path):
    models_dir = tmp_path / "models"
    _write_models(models_dir)
    (models_dir / "derived.yml").write_text(
        "models:\n  - name: derived\n    target:\n      type: sql\n      sql: SELECT 1 AS id\n"
        "    dimensions:\n      - name: id\n"
    )

    result = runner.invoke(app, ["reference", "orders", "-m", str(models_dir)])

    assert result.exit_code == 0
    assert "AS (SELECT 1 AS id)" not in result.output
    assert '"main"."orders" AS "orders"' in result.output


def test_reference_column(tmp_path):
    _write_models(tmp_path / "models")

    result = runner.invoke(app, ["reference", "orders", "-m", str(tmp_path / "models"), "--column", "amount"])

    assert result.exit_code == 0
    assert '"orders"."amount"' in result.output


def test_reference_unknown_model(tmp_path):
    _write_models(tmp_path / "models")

    result = runner.invoke(app, ["reference", "customers", "-m", str(tmp_path / "models")])

    assert result.exit_code == 1
    assert "Model 'customers' not found" in result.output
