"""``toolpin pins`` and ``toolpin mirror`` — inspect and mirror source pins."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from toolpin.config import config
from toolpin.core.errors import IntegrityError
from toolpin.core.fetchers import FetchError
from toolpin.core.pin_registry import PinRegistry
from toolpin.core.source_store import SourceStore

console = Console()


def _load_registry(sources: Path | None) -> PinRegistry:
    path = sources or config.sources_path
    try:
        return PinRegistry.from_sources_file(path)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[bold red]Cannot load pins:[/bold red] {exc}")
        raise typer.Exit(code=1)


def pins_cmd(
    sources: Path = typer.Option(
        None,
        "--sources",
        "-s",
        help="Path to sources.json (defaults to TOOLPIN_SOURCES_PATH).",
    ),
    verify: bool = typer.Option(
        False,
        "--verify",
        help="Fetch each pin and check its checksum.",
    ),
) -> None:
    """List registered source pins, optionally verifying their content."""
    registry = _load_registry(sources)

    if not len(registry):
        console.print("[dim]No source pins registered.[/dim]")
        return

    results = registry.verify_all() if verify else {}

    table = Table(title="Source Pins")
    table.add_column("Name", style="cyan")
    table.add_column("Location")
    table.add_column("SHA-256", style="green")
    if verify:
        table.add_column("Verified", justify="center")

    for pin in registry:
        row = [pin.name, pin.location, pin.sha256[:16]]
        if verify:
            row.append("[green]Yes[/green]" if results[pin.name] else "[bold red]NO[/bold red]")
        table.add_row(*row)

    console.print(table)

    if verify and not all(results.values()):
        raise typer.Exit(code=1)


def mirror_cmd(
    sources: Path = typer.Option(
        None,
        "--sources",
        "-s",
        help="Path to sources.json (defaults to TOOLPIN_SOURCES_PATH).",
    ),
    store_dir: Path = typer.Option(
        None,
        "--store",
        help="Offline store directory (defaults to TOOLPIN_STORE_PATH).",
    ),
) -> None:
    """Copy every verified pin into the content-addressed offline store."""
    registry = _load_registry(sources)
    store = SourceStore(store_dir or config.store_path)

    failed = False
    for pin in registry:
        try:
            address = store.store(registry.fetch(pin))
        except (IntegrityError, FetchError) as exc:
            console.print(f"[bold red]{pin.name}:[/bold red] {exc}")
            failed = True
            continue
        console.print(f"[green]{pin.name}[/green] -> {address}")

    if failed:
        raise typer.Exit(code=1)
