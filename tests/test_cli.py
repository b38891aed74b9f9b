# tests/test_cli.py
from __future__ import annotations

import pytest
from click.testing import CliRunner
from rich.console import Console

from stridehr import __version__, cli as cli_module
from stridehr.cli import cli
from stridehr.db import migrate


@pytest.fixture
def runner(monkeypatch):
    # wide console so table cells are never truncated
    monkeypatch.setattr(cli_module, "console", Console(width=200))
    return CliRunner()


def test_version(runner):
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_order(runner):
    result = runner.invoke(cli, ["db", "order"])
    assert result.exit_code == 0
    names = [line.split()[1] for line in result.output.splitlines()]
    assert names == migrate.table_dependency_order()
    assert result.output.splitlines()[0].split()[0] == "1"


def test_drop_order(runner):
    result = runner.invoke(cli, ["db", "order", "--drop"])
    assert result.exit_code == 0
    names = [line.split()[1] for line in result.output.splitlines()]
    assert names == migrate.drop_order()


def test_tables_for_domain(runner):
    result = runner.invoke(cli, ["db", "tables", "--domain", "payroll"])
    assert result.exit_code == 0, result.output
    assert "payroll_records" in result.output
    assert "exchange_rates" in result.output
    assert "employees " not in result.output


def test_tables_unknown_domain(runner):
    result = runner.invoke(cli, ["db", "tables", "--domain", "astrology"])
    assert result.exit_code == 1
    assert "unknown domain" in result.output


def test_upgrade_current_downgrade(runner, db_url):
    result = runner.invoke(cli, ["db", "current", "--url", db_url])
    assert result.exit_code == 0, result.output
    assert "current: base" in result.output
    assert "pending: 0001_initial_schema, 0002_seed_reference_data" in result.output

    result = runner.invoke(cli, ["db", "upgrade", "--url", db_url])
    assert result.exit_code == 0, result.output
    assert "Upgraded to 0002_seed_reference_data" in result.output

    result = runner.invoke(cli, ["db", "current", "--url", db_url])
    assert "current: 0002_seed_reference_data" in result.output
    assert "up to date" in result.output

    result = runner.invoke(cli, ["db", "downgrade", "0001_initial_schema", "--url", db_url, "--yes"])
    assert result.exit_code == 0, result.output
    assert "Downgraded to 0001_initial_schema" in result.output
    assert migrate.current_revision(db_url) == "0001_initial_schema"


def test_downgrade_can_be_declined(runner, migrated_url):
    result = runner.invoke(cli, ["db", "downgrade", "--url", migrated_url], input="n\n")
    assert result.exit_code == 1
    assert "Aborted" in result.output
    assert migrate.current_revision(migrated_url) == "0002_seed_reference_data"


def test_upgrade_sql(runner, db_url):
    result = runner.invoke(cli, ["db", "upgrade", "--sql", "--url", db_url])
    assert result.exit_code == 0, result.output
    assert "CREATE TABLE employees" in result.output
    assert migrate.current_revision(db_url) is None


def test_history(runner):
    result = runner.invoke(cli, ["db", "history"])
    assert result.exit_code == 0, result.output
    assert "0001_initial_schema" in result.output
    assert "Seed default organization" in result.output


def test_check_migrated(runner, migrated_url):
    result = runner.invoke(cli, ["db", "check", "--url", migrated_url])
    assert result.exit_code == 0, result.output


def test_check_strict_on_empty_database(runner, db_url):
    result = runner.invoke(cli, ["db", "check", "--url", db_url, "--strict"])
    assert result.exit_code == 1
    assert "add_table on employees" in result.output
    assert "schema difference(s) detected" in result.output


def test_errors_are_reported(runner, db_url):
    result = runner.invoke(cli, ["db", "upgrade", "no_such_revision", "--url", db_url])
    assert result.exit_code == 1
    assert "Error" in result.output
    assert "upgrade failed" in result.output


def test_configuration_errors_are_reported(runner):
    result = runner.invoke(cli, ["db", "current", "--url", "not a database url"])
    assert result.exit_code == 1
    assert "could not parse database URL" in result.output
