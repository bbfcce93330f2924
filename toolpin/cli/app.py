"""Main Typer application — imports and registers all CLI commands.

Entry point: ``toolpin`` (configured via pyproject.toml project.scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from toolpin.cli.commands.capabilities import capabilities_cmd
from toolpin.cli.commands.pins import mirror_cmd, pins_cmd
from toolpin.cli.commands.resolve import resolve_cmd
from toolpin.config import config

app = typer.Typer(
    name="toolpin",
    help="toolpin: reproducible, content-addressed toolchain pinning.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to TOOLPIN_LOG_LEVEL).",
    ),
) -> None:
    """Configure logging for every subcommand."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# Register subcommands
app.command(name="resolve", help="Resolve a channel specification to a toolchain.")(resolve_cmd)
app.command(name="pins", help="List registered source pins.")(pins_cmd)
app.command(name="capabilities", help="List capabilities of the composed universe.")(
    capabilities_cmd
)
app.command(name="mirror", help="Copy verified pin content into the offline store.")(mirror_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
