"""CLI interface for sqlcache.

Values are read and written as JSON (JsonSerializer), so entries written by
an application using the default pickle serializer cannot be displayed.
"""

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from sqlcache.cache.sqlite_cache import SQLiteCache
from sqlcache.exceptions import StorageError
from sqlcache.models.model_entry import CacheItem
from sqlcache.serializers import JsonSerializer

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="sqlcache",
    help="sqlcache - Inspect and maintain an embedded cache database",
)

console = Console()

DATABASE_OPTION = typer.Option(..., "--database", "-d", help="Path of the cache database file")
VERBOSE_OPTION = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _open_cache(database: Path, **options: object) -> SQLiteCache:
    """Open the cache or exit with an error message."""
    try:
        return SQLiteCache({"database": str(database), **options}, serializer=JsonSerializer())
    except StorageError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _format_bytes(size: int) -> str:
    """Human-readable byte count."""
    for unit in ("B", "KB", "MB"):
        if size < 1024:
            return f"{size:.0f} {unit}" if unit == "B" else f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


@app.command()
def get(
    key: str = typer.Argument(..., help="Entry key"),
    database: Path = DATABASE_OPTION,
    meta: bool = typer.Option(False, "--meta", help="Show entry metadata"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Print the JSON value stored under KEY."""
    _configure_logging(verbose)

    with _open_cache(database) as cache:
        try:
            result = cache.get(key, include_meta=meta)
        except ValueError as e:
            console.print(f"[red]Error:[/red] Entry '{key}' is not JSON: {e}")
            raise typer.Exit(1)

    if result is None:
        console.print(f"[yellow]No entry for '{key}'[/yellow]")
        raise typer.Exit(1)

    if isinstance(result, CacheItem):
        table = Table(title=f"Entry '{key}'")
        table.add_column("Field", style="cyan")
        table.add_column("Value")
        table.add_row("Key", result.key)
        table.add_row("Compressed", "[green]yes[/green]" if result.compressed else "no")
        console.print(table)
        result = result.value

    console.print_json(json.dumps(result))


@app.command("set")
def set_value(
    key: str = typer.Argument(..., help="Entry key"),
    value: str = typer.Argument(..., help="Value as JSON"),
    database: Path = DATABASE_OPTION,
    ttl_ms: float = typer.Option(None, "--ttl-ms", help="Time-to-live in milliseconds"),
    compress: bool = typer.Option(False, "--compress", help="Compress large values"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Store a JSON VALUE under KEY."""
    _configure_logging(verbose)

    try:
        parsed = json.loads(value)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error:[/red] Value is not valid JSON: {e}")
        raise typer.Exit(1)

    with _open_cache(database) as cache:
        stored = cache.set(key, parsed, ttl_ms=ttl_ms, compress=compress)

    if not stored:
        console.print(f"[red]Error:[/red] Failed to store '{key}'")
        raise typer.Exit(1)

    expiry = f" (expires in {ttl_ms:g}ms)" if ttl_ms is not None else ""
    console.print(f"[green]Stored[/green] '{key}'{expiry}")


@app.command()
def delete(
    key: str = typer.Argument(..., help="Entry key"),
    database: Path = DATABASE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Delete the entry stored under KEY."""
    _configure_logging(verbose)

    with _open_cache(database) as cache:
        cache.delete(key)
    console.print(f"Deleted '{key}'")


@app.command()
def clear(
    database: Path = DATABASE_OPTION,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Delete every entry."""
    _configure_logging(verbose)

    if not yes and not typer.confirm(f"Delete every entry in {database}?"):
        console.print("[yellow]Aborted.[/yellow]")
        raise typer.Exit(1)

    with _open_cache(database) as cache:
        count = cache.stats().total_entries
        cache.clear()
    logger.info(f"Cleared {count} entries from {database}")
    console.print(f"Cleared {count} entries")


@app.command()
def sweep(
    database: Path = DATABASE_OPTION,
    max_items: int = typer.Option(None, "--max-items", help="Keep only this many most recent entries"),
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Delete expired entries, and entries beyond --max-items."""
    _configure_logging(verbose)

    options: dict[str, object] = {}
    if max_items is not None:
        if max_items <= 0:
            console.print("[red]Error:[/red] --max-items must be positive")
            raise typer.Exit(1)
        options["max_items"] = max_items

    with _open_cache(database, **options) as cache:
        removed = cache.sweep()
    console.print(f"Removed {removed} entries")


@app.command()
def stats(
    database: Path = DATABASE_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Show entry counts and stored size."""
    _configure_logging(verbose)

    with _open_cache(database) as cache:
        result = cache.stats()

    table = Table(title=f"Cache Statistics ({database})")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="magenta")
    table.add_row("Total entries", str(result.total_entries))
    table.add_row("Live entries", str(result.live_entries))
    table.add_row("Expired (not yet swept)", str(result.expired_entries))
    table.add_row("Compressed entries", str(result.compressed_entries))
    table.add_row("Stored size", _format_bytes(result.total_bytes))
    console.print(table)


if __name__ == "__main__":
    app()
