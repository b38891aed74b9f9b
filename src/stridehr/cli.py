#!/usr/bin/env python3
from __future__ import annotations

from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table

from stridehr import __version__
from stridehr.db import migrate
from stridehr.errors import SchemaDriftError, StrideHRError

# -----------------------------------------------------------------------------
# Globals
# -----------------------------------------------------------------------------
console = Console()


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def show_table(items: list[dict[str, Any]], columns: list[str], title: Optional[str] = None) -> None:
    t = Table(show_lines=False, title=title)
    for col in columns:
        t.add_column(col)
    for it in items:
        t.add_row(*(str(it.get(c, "")) for c in columns))
    console.print(t)


def _fail(exc: Exception) -> None:
    console.print(f"[red]Error[/]: {escape(str(exc))}")
    raise click.exceptions.Exit(1)


url_option = click.option(
    "--url",
    default=None,
    help="Database URL (defaults to STRIDEHR_DATABASE_URL / DATABASE_URL).",
)
sql_option = click.option("--sql", is_flag=True, help="Print the SQL instead of running it (offline mode).")


# ------------------------------
# Root CLI
# ------------------------------
@click.group(help="StrideHR schema tooling")
@click.version_option(__version__, prog_name="stridehr")
def cli() -> None:
    """Top-level command group."""


@cli.group("db", help="Apply, revert and inspect database migrations")
def db_group() -> None:
    pass


@db_group.command("upgrade", help="Apply migrations up to REVISION (default: head)")
@click.argument("revision", default="head")
@sql_option
@url_option
def upgrade_cmd(revision: str, sql: bool, url: Optional[str]) -> None:
    try:
        rendered = migrate.upgrade(revision, url=url, sql=sql)
    except StrideHRError as exc:
        _fail(exc)
    if sql:
        click.echo(rendered)
        return
    console.print(f"[green]Upgraded[/] to [cyan]{migrate.current_revision(url) or 'base'}[/]")


@db_group.command("downgrade", help="Revert migrations down to REVISION (default: base)")
@click.argument("revision", default="base")
@sql_option
@url_option
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
def downgrade_cmd(revision: str, sql: bool, url: Optional[str], yes: bool) -> None:
    if not sql and not yes and not Confirm.ask(f"Downgrade database to [bold]{revision}[/]?"):
        console.print("[yellow]Aborted[/]")
        raise click.exceptions.Exit(1)
    try:
        rendered = migrate.downgrade(revision, url=url, sql=sql)
    except StrideHRError as exc:
        _fail(exc)
    if sql:
        click.echo(rendered)
        return
    console.print(f"[green]Downgraded[/] to [cyan]{migrate.current_revision(url) or 'base'}[/]")


@db_group.command("current", help="Show the revision applied to the database")
@url_option
def current_cmd(url: Optional[str]) -> None:
    try:
        rev = migrate.current_revision(url)
        pending = migrate.pending_revisions(url)
    except StrideHRError as exc:
        _fail(exc)
    console.print(f"current: [cyan]{rev or 'base'}[/]")
    if pending:
        console.print(f"pending: [yellow]{', '.join(pending)}[/]")
    else:
        console.print("[green]up to date[/]")


@db_group.command("history", help="List migration revisions, oldest first")
def history_cmd() -> None:
    try:
        revisions = migrate.history()
    except StrideHRError as exc:
        _fail(exc)
    show_table(
        [
            {
                "revision": r.revision,
                "down_revision": r.down_revision or "-",
                "head": "*" if r.is_head else "",
                "description": r.doc,
            }
            for r in revisions
        ],
        ["revision", "down_revision", "head", "description"],
    )


@db_group.command("check", help="Compare the live database with the model metadata")
@url_option
@click.option("--strict", is_flag=True, help="Exit with status 1 when differences are found.")
def check_cmd(url: Optional[str], strict: bool) -> None:
    try:
        differences = migrate.check_schema(url, strict=strict)
    except SchemaDriftError as exc:
        for diff in exc.differences:
            console.print(f"  [yellow]{escape(str(diff))}[/]")
        _fail(exc)
    except StrideHRError as exc:
        _fail(exc)
    if not differences:
        console.print("[green]Schema matches models[/]")
        return
    console.print(f"[yellow]{len(differences)} difference(s)[/]")
    for diff in differences:
        console.print(f"  {escape(str(diff))}")


@db_group.command("tables", help="Summarise tables (columns, foreign keys, indexes)")
@click.option("--domain", default=None, help="Only tables of this domain, e.g. payroll.")
def tables_cmd(domain: Optional[str]) -> None:
    summary = migrate.schema_summary()
    if domain:
        summary = [s for s in summary if s.domain == domain]
        if not summary:
            _fail(click.BadParameter(f"unknown domain {domain!r}", param_hint="--domain"))
    show_table(
        [
            {
                "table": s.name,
                "domain": s.domain or "",
                "columns": s.columns,
                "fks": s.foreign_keys,
                "indexes": s.indexes,
                "uniques": s.unique_constraints,
            }
            for s in summary
        ],
        ["table", "domain", "columns", "fks", "indexes", "uniques"],
        title=f"{len(summary)} tables",
    )


@db_group.command("order", help="Print tables in creation (or --drop) order")
@click.option("--drop", is_flag=True, help="Print drop order instead.")
def order_cmd(drop: bool) -> None:
    names = migrate.drop_order() if drop else migrate.table_dependency_order()
    for i, name in enumerate(names, 1):
        click.echo(f"{i:4d} {name}")


if __name__ == "__main__":
    cli()
