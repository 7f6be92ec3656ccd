"""Thin CLI wrapper for gapsdeb.

This module provides the command-line interface using Typer.
All business logic is delegated to gapsdeb.orchestrator.
"""

import logging
from typing import Annotated

import typer
from rich.console import Console
from rich.logging import RichHandler

from gapsdeb.config import get_settings
from gapsdeb.errors import GapsDebError, GateDeclinedError
from gapsdeb.prompts import DefaultsDecisionProvider, InteractiveDecisionProvider
from gapsdeb.user_config import GAPS_CONFIG_SNIPPET

app = typer.Typer(
    name="gapsdeb",
    help="Build Debian packages of i3-gaps from the upstream git repository.",
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def config_callback(value: bool) -> None:
    """Print the i3 configuration snippet and exit."""
    if value:
        typer.echo(GAPS_CONFIG_SNIPPET, nl=False)
        raise typer.Exit()


@app.command(context_settings={"help_option_names": ["-h", "--help"]})
def main(
    show_config: Annotated[
        bool,
        typer.Option(
            "--config",
            help="Print the i3-gaps configuration snippet and exit",
            callback=config_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Clone, patch, version and build i3-gaps Debian packages.

    Every step that changes the system asks for confirmation first.
    Settings come from GAPSDEB_* environment variables, .env, or
    gapsdeb.yaml in the current directory.
    """
    from gapsdeb.orchestrator import run_pipeline

    settings = get_settings()
    configure_logging(settings.log_level)

    if settings.assume_defaults:
        decider = DefaultsDecisionProvider()
    else:
        decider = InteractiveDecisionProvider()

    try:
        result = run_pipeline(settings, decider)
    except GateDeclinedError as e:
        console.print(f"[yellow]Aborted: {e.message}[/yellow]")
        raise typer.Exit(code=e.exit_code) from None
    except GapsDebError as e:
        console.print(f"[red]Build failed: {e.message}[/red]")
        raise typer.Exit(code=e.exit_code) from None

    context = result.context
    console.print("[green]✓ Build succeeded[/green]")
    console.print(f"  Branch:  {context.branch}")
    console.print(f"  Version: {context.version}")
    console.print(f"  Log:     {result.build.log_path}")
    if result.artifacts:
        console.print(f"[bold]Packages ({len(result.artifacts)}):[/bold]")
        for path in result.artifacts:
            console.print(f"  {path.name}")
    else:
        console.print("[yellow]No packages found for this build[/yellow]")
    if result.installed:
        console.print("[green]✓ Packages installed[/green]")
    for path in result.config_files_updated:
        console.print(f"  Updated {path}")
    if result.removed:
        console.print(f"  Removed {len(result.removed)} build file(s)")
