"""``toolpin capabilities`` — show what the composed universe provides."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from toolpin.config import config
from toolpin.core.errors import ToolpinError
from toolpin.core.fetchers import FetchError
from toolpin.core.pipeline import ResolutionPipeline

console = Console()


def capabilities_cmd(
    sources: Path = typer.Option(
        None,
        "--sources",
        "-s",
        help="Path to sources.json (defaults to TOOLPIN_SOURCES_PATH).",
    ),
) -> None:
    """List every capability and the layer that defined it."""
    settings = config if sources is None else config.model_copy(update={"sources_path": sources})

    try:
        universe = ResolutionPipeline.from_config(settings).universe
    except (ToolpinError, FetchError, ValueError, FileNotFoundError) as exc:
        console.print(f"[bold red]Composition failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    table = Table(title=f"Universe: {' -> '.join(universe.layers)}")
    table.add_column("Capability", style="cyan")
    table.add_column("Defined by", style="green")
    table.add_column("Kind")
    for name, layer in universe.describe().items():
        kind = "function" if callable(universe[name]) else type(universe[name]).__name__
        table.add_row(name, layer, kind)
    console.print(table)
