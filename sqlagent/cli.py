"""
SQL Agent CLI

Command-line interface for the SQL agent.

Usage:
    sqlagent ask "How many companies do we have?"   # Answer one question
    sqlagent ask "List projects" --show-sql         # Also print the SQL
    sqlagent sql "SELECT COUNT(*) FROM company"     # Guarded direct SQL
    sqlagent tables                                 # Categories and loaded tables
    sqlagent serve --port 8000                      # Run the HTTP API
"""

import os

os.environ.setdefault("GRPC_VERBOSITY", "ERROR")
os.environ.setdefault("GLOG_minloglevel", "2")

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.table import Table

from sqlagent import __version__
from sqlagent.catalog.categories import DEFAULT_CATEGORIES
from sqlagent.config import get_settings
from sqlagent.connectors.base import ConnectorError
from sqlagent.models.agent import AgentError
from sqlagent.pipeline.context import AgentContext

console = Console()

T = TypeVar("T")


def configure_cli_logging() -> None:
    logging.basicConfig(level=logging.CRITICAL)
    for logger_name in ("sqlagent", "httpx", "openai", "asyncio", "google", "grpc"):
        logging.getLogger(logger_name).setLevel(logging.CRITICAL)


async def _with_context(action: Callable[[AgentContext], Awaitable[T]]) -> T:
    context = await AgentContext.create(get_settings())
    try:
        return await action(context)
    finally:
        await context.close()


def _run(action: Callable[[AgentContext], Awaitable[Any]]) -> Any:
    try:
        return asyncio.run(_with_context(action))
    except (ConnectorError, ValueError) as e:
        console.print(f"[red]Failed to start SQL agent: {e}[/red]")
        console.print("[yellow]Hint: check DATABASE_URL and LLM_* settings in .env[/yellow]")
        sys.exit(1)


def print_rows(rows: list[dict[str, Any]], limit: int = 20) -> None:
    """Render result rows as a table."""
    if not rows:
        console.print("[dim]No rows returned.[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    columns = list(rows[0].keys())
    for col_name in columns:
        table.add_column(str(col_name))
    for row in rows[:limit]:
        table.add_row(*[str(row.get(col, "")) for col in columns])
    console.print(table)
    if len(rows) > limit:
        console.print(f"[dim]... {len(rows) - limit} more rows[/dim]")


# ============================================================================
# CLI Commands
# ============================================================================


@click.group()
@click.version_option(version=__version__, prog_name="sqlagent")
def cli():
    """Ask questions of the MySQL database in plain English."""


@cli.command()
@click.argument("question")
@click.option("--no-cache", is_flag=True, help="Bypass the query result cache")
@click.option("--show-sql", is_flag=True, help="Print the SQL that was executed")
def ask(question: str, no_cache: bool, show_sql: bool):
    """Answer a single question and exit."""
    configure_cli_logging()

    async def answer(context: AgentContext):
        with console.status("[cyan]Processing question...[/cyan]", spinner="dots"):
            return await context.pipeline.run(question, use_cache=not no_cache)

    result = _run(answer)
    title = "[bold green]Answer[/bold green]" if result.success else "[bold red]Error[/bold red]"
    console.print(Panel(Markdown(result.response), title=title))

    if show_sql and result.query:
        console.print(Panel(result.query, title="SQL", border_style="cyan", highlight=True))

    details = [f"Category: {result.category or '-'}", f"Rows: {result.row_count}"]
    if result.execution_time_ms is not None:
        details.append(f"Time: {result.execution_time_ms}ms")
    if result.from_cache:
        details.append("cached")
    console.print(f"[dim]{' | '.join(details)}[/dim]")

    if not result.success:
        sys.exit(1)


@cli.command()
@click.argument("query")
def sql(query: str):
    """Validate and run a SQL statement directly."""
    configure_cli_logging()

    async def execute(context: AgentContext):
        validated = context.guard.validate(query)
        return validated, await context.executor.execute_sql(validated, use_cache=False)

    try:
        validated, result = _run(execute)
    except AgentError as e:
        console.print(f"[red]Query validation failed: {e.message}[/red]")
        sys.exit(1)

    console.print(Panel(validated, title="SQL", border_style="cyan", highlight=True))
    if not result.success:
        console.print(f"[red]Query execution failed: {result.error}[/red]")
        sys.exit(1)
    print_rows(result.rows)
    console.print(f"[dim]{result.row_count} rows in {result.execution_time_ms}ms[/dim]")


@cli.command()
def tables():
    """Show categories and the tables loaded from the database."""
    configure_cli_logging()

    async def summaries(context: AgentContext):
        return context.catalog.summaries()

    loaded = _run(summaries)

    category_table = Table(title="Categories", show_header=True, header_style="bold cyan")
    category_table.add_column("Category")
    category_table.add_column("Tables")
    for category in DEFAULT_CATEGORIES:
        category_table.add_row(category.name, ", ".join(category.tables))
    console.print(category_table)

    schema_table = Table(
        title=f"Tables ({len(loaded)})", show_header=True, header_style="bold cyan"
    )
    schema_table.add_column("Table")
    schema_table.add_column("Columns", justify="right")
    schema_table.add_column("Primary keys")
    schema_table.add_column("Comment")
    for summary in loaded:
        schema_table.add_row(
            summary["name"],
            str(summary["columnCount"]),
            ", ".join(summary["primaryKeys"]),
            summary["comment"] or "",
        )
    console.print(schema_table)


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to API_HOST)")
@click.option("--port", default=None, type=int, help="Port (defaults to API_PORT)")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str | None, port: int | None, reload: bool):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    console.print(f"[cyan]Starting SQL agent API on {host}:{port}[/cyan]")
    uvicorn.run("sqlagent.api.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    cli()
