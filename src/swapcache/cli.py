"""Click CLI for swapcache — inspect and maintain the durable token cache."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from swapcache.cache.context import CacheContext
from swapcache.config.hierarchy import load_config_hierarchy
from swapcache.config.schema import CacheSettings
from swapcache.tokens import TokenMetadataCache

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int) -> None:
    """Configure logging based on verbosity level."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _open_context(db_path: str | None) -> CacheContext:
    context = CacheContext.from_config(cache_db_path=db_path)
    if context.metadata is None:
        error_console.print("[red]Error:[/red] persistence is disabled in the configuration")
        sys.exit(1)
    return context


@click.group()
@click.version_option(package_name="swapcache")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
def cli(verbose: int) -> None:
    """swapcache — quote and token metadata cache for a DEX front end."""
    _setup_logging(verbose)


@cli.command("config")
def show_config() -> None:
    """Show the resolved configuration."""
    settings = CacheSettings.from_mapping(load_config_hierarchy())

    table = Table(title="Configuration", show_header=True)
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        table.add_row(key, "-" if value is None else str(value))

    console.print(table)


@cli.group()
def cache() -> None:
    """Cache management commands."""


@cache.command("stats")
@click.option("--db", "db_path", type=click.Path(dir_okay=False), help="SQLite cache file.")
def cache_stats(db_path: str | None) -> None:
    """Show durable cache statistics."""
    with _open_context(db_path) as context:
        stats = context.stats()
        settings = context.settings

        table = Table(title="Cache Statistics", show_header=True)
        table.add_column("Metric", style="cyan")
        table.add_column("Value")
        table.add_row("Namespace", settings.metadata_namespace)
        table.add_row("Persisted records", str(stats.persisted_records))
        table.add_row("Storage errors", str(stats.storage_errors))
        table.add_row("Quote TTL (s)", f"{settings.quote_ttl_seconds:g}")
        table.add_row("Metadata TTL (s)", f"{settings.metadata_ttl_seconds:g}")

        console.print(table)


@cache.command("clear")
@click.option("--db", "db_path", type=click.Path(dir_okay=False), help="SQLite cache file.")
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
def cache_clear(db_path: str | None) -> None:
    """Clear all persisted token metadata."""
    with _open_context(db_path) as context:
        count = context.metadata.clear()
    console.print(f"[green]Cache cleared ({count} records).[/green]")


@cli.group()
def tokens() -> None:
    """Token metadata commands."""


@tokens.command("show")
@click.argument("address")
@click.option("--db", "db_path", type=click.Path(dir_okay=False), help="SQLite cache file.")
def tokens_show(address: str, db_path: str | None) -> None:
    """Show the cached metadata for a token address."""
    with _open_context(db_path) as context:
        record = TokenMetadataCache(context).get(address)

    if record is None:
        console.print(f"[yellow]{address.lower()} is not cached.[/yellow]")
        return

    table = Table(title=address.lower(), show_header=True)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Symbol", record.symbol)
    table.add_row("Name", record.name)
    table.add_row("Decimals", str(record.decimals))
    table.add_row("Stored at", f"{record.stored_at:.0f}")
    console.print(table)


@tokens.command("evict")
@click.argument("address")
@click.option("--db", "db_path", type=click.Path(dir_okay=False), help="SQLite cache file.")
def tokens_evict(address: str, db_path: str | None) -> None:
    """Remove the cached metadata for a token address."""
    with _open_context(db_path) as context:
        TokenMetadataCache(context).evict(address)
    console.print(f"[green]Evicted {address.lower()}.[/green]")


def main() -> None:
    """Entry point for the CLI."""
    cli()
