"""Customer Sync CLI - Main entry point."""

import asyncio
import json
import logging
from typing import Any

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import settings

app = typer.Typer(
    name="customer-sync",
    help="Customer list sync - paginated fetch with a local offline cache",
    no_args_is_help=True,
)
console = Console()

# Sub-command groups
customers_app = typer.Typer(help="Fetch and browse customers")
cache_app = typer.Typer(help="Local customer cache")
config_app = typer.Typer(help="Configuration")

app.add_typer(customers_app, name="customers")
app.add_typer(cache_app, name="cache")
app.add_typer(config_app, name="config")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log sync activity"),
):
    """Configure logging for every command."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def _output_json(result: dict[str, Any]) -> None:
    """Print a command result as JSON."""
    console.print_json(json.dumps(result, default=str))


def _customer_table(customers: list, title: str) -> Table:
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("cgId", style="white")
    table.add_column("Email", style="white")
    table.add_column("Mobile", style="green")

    for c in customers:
        table.add_row(
            str(c.id),
            c.name or "No Name",
            c.cg_id or "No cgId",
            c.email or "No Email",
            c.mobile or "No Mobile",
        )
    return table


def _open_cache():
    from .cache import CustomerCache

    return CustomerCache(settings.database_url, settings.schema_version, echo=settings.echo_sql)


# ============================================================================
# Customer Commands
# ============================================================================


@customers_app.command("list")
def customers_list(
    search: str = typer.Option("", "--search", "-s", help="Search text"),
    pages: int = typer.Option(1, "--pages", "-p", help="Pages to load (infinite scroll steps)"),
    page_size: int = typer.Option(None, "--page-size", help="Records per page"),
    sort: str = typer.Option(None, "--sort", help="Server sort key"),
    filter_by: str = typer.Option(None, "--filter", help="Server filter expression"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Fetch customers, falling back to the local cache when offline."""
    from .api import CustomerAPIClient
    from .sync import LoadOutcome, SyncManager

    async def _list():
        async with CustomerAPIClient.from_settings() as api, _open_cache() as cache:
            manager = SyncManager(
                api.customers,
                cache,
                page_size=page_size or settings.page_size,
                debounce_seconds=settings.debounce_seconds,
                search_query=search,
                sort_by=sort if sort is not None else settings.default_sort,
                filter_by=filter_by if filter_by is not None else settings.default_filter,
                discard_stale=settings.discard_stale,
            )
            first = await manager.load_page(1, is_refresh=True)
            for _ in range(max(pages, 1) - 1):
                more = await manager.on_reach_end()
                if more.outcome is not LoadOutcome.LOADED:
                    break
            manager.close()
            return manager, first

    manager, first = asyncio.run(_list())

    if json_output:
        _output_json(
            {
                "outcome": first.outcome.value,
                "total": manager.total_count,
                "customers": [c.to_wire() for c in manager.items],
            }
        )
        return

    if first.outcome is LoadOutcome.FALLBACK:
        console.print("[yellow]Customer API unreachable - showing cached customers[/yellow]")

    if not manager.items:
        console.print(Panel("No customers found", title=f"Total Customers: {manager.total_count}"))
        return

    console.print(_customer_table(manager.items, f"Total Customers: {manager.total_count}"))


# ============================================================================
# Cache Commands
# ============================================================================


@cache_app.command("list")
def cache_list(
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show every customer in the local cache."""

    async def _list():
        async with _open_cache() as cache:
            return await cache.get_all()

    customers = asyncio.run(_list())

    if json_output:
        _output_json({"customers": [c.to_wire() for c in customers]})
    elif not customers:
        console.print("[dim]No customers found[/dim]")
    else:
        console.print(_customer_table(customers, f"Cached Customers ({len(customers)})"))


@cache_app.command("clear")
def cache_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
):
    """Delete every customer from the local cache."""
    if not yes:
        typer.confirm("Delete all cached customers?", abort=True)

    async def _clear():
        async with _open_cache() as cache:
            return await cache.clear()

    removed = asyncio.run(_clear())
    console.print(f"[green]Removed {removed} cached customers[/green]")


# ============================================================================
# Config Commands
# ============================================================================


@config_app.command("show")
def config_show():
    """Show effective settings (token redacted)."""
    table = Table(title="Customer Sync Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key, value in settings.redacted().items():
        table.add_row(key, "[red]Not set[/red]" if value is None else str(value))

    console.print(table)


# ============================================================================
# Main
# ============================================================================


@app.command()
def version():
    """Show version information."""
    from . import __version__

    console.print(f"Customer Sync v{__version__}")


if __name__ == "__main__":
    app()
