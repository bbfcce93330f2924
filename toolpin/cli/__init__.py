"""toolpin CLI — Typer-based command-line interface.

Provides the ``toolpin`` command with subcommands for resolving toolchains,
inspecting and verifying pins, listing composed capabilities, and mirroring
pinned content for offline use.

All output uses Rich for formatted terminal display.
"""
