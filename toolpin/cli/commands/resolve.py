"""``toolpin resolve`` — resolve a channel specification to a toolchain.

Composes the configured base universe and overlays, resolves the
requested channel, date, and targets, and prints the toolchain descriptor.
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel

from toolpin.config import config
from toolpin.core.errors import ToolpinError
from toolpin.core.fetchers import FetchError
from toolpin.core.pipeline import ResolutionPipeline
from toolpin.models.channels import ChannelSpec

console = Console()


def resolve_cmd(
    channel: str = typer.Option(
        ...,
        "--channel",
        "-c",
        help="Release channel: stable, beta, or nightly.",
    ),
    date: str = typer.Option(
        ...,
        "--date",
        "-d",
        help="Exact release date (YYYY-MM-DD).",
    ),
    targets: list[str] = typer.Option(
        [],
        "--target",
        "-t",
        help="Target triple; repeat for several targets.",
    ),
    sources: Path = typer.Option(
        None,
        "--sources",
        "-s",
        help="Path to sources.json (defaults to TOOLPIN_SOURCES_PATH).",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the descriptor as JSON.",
    ),
) -> None:
    """Resolve a toolchain for an exact channel, date, and target set.

    No defaults are filled in: every target must be named explicitly and
    the date must match a published release exactly.
    """
    settings = config if sources is None else config.model_copy(update={"sources_path": sources})

    try:
        spec = ChannelSpec.build(channel, date, targets)
        pipeline = ResolutionPipeline.from_config(settings)
        descriptor = pipeline.resolve(spec)
    except (ToolpinError, FetchError, ValueError, FileNotFoundError) as exc:
        console.print(f"[bold red]Resolution failed:[/bold red] {exc}")
        raise typer.Exit(code=1)

    if as_json:
        # Plain stdout so the output can be piped.
        typer.echo(descriptor.to_json())
        return

    console.print()
    console.print(
        Panel(
            "\n".join([
                "[bold green]Toolchain resolved[/bold green]",
                "",
                f"[bold]Channel:[/bold]   {descriptor.channel.value}",
                f"[bold]Date:[/bold]      {descriptor.date.isoformat()}",
                f"[bold]Targets:[/bold]   {', '.join(sorted(descriptor.targets))}",
                f"[bold]Artifact:[/bold]  {descriptor.artifact_reference}",
                "",
                f"[dim]Layers: {' -> '.join(pipeline.universe.layers)}[/dim]",
            ]),
            title="[bold]toolpin[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )
    console.print()

    # Print the reference plainly for scripting
    console.print(f"[bold]{descriptor.artifact_reference}[/bold]")
