"""
gonstructor CLI - Main entry point.

Typically driven from a go:generate directive:

    //go:generate gonstructor --type=Person --constructorTypes=allArgs,builder
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from typer.core import TyperCommand
from rich.console import Console
from rich.markup import escape

from gonstructor import __version__
from gonstructor.config.loader import create_config_from_args, load_config_from_yaml
from gonstructor.errors import GonstructorError
from gonstructor.orchestrator import GonstructorOrchestrator

app = typer.Typer(
    name="gonstructor",
    help="Generate constructors and builders for Go structs",
    add_completion=False,
)

console = Console()
err_console = Console(stderr=True)

INVOCATION_ARGS = "gonstructor.invocation_args"


# =============================================================================
# Helper Functions
# =============================================================================


def configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=log_level, format="%(name)s: %(message)s")


class RecordingCommand(TyperCommand):
    """Keeps the raw argument list in the context so the banner can record it."""

    def parse_args(self, ctx, args):
        ctx.meta[INVOCATION_ARGS] = list(args)
        return super().parse_args(ctx, args)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"gonstructor {__version__}")
        raise typer.Exit()


# =============================================================================
# Commands
# =============================================================================


@app.command(cls=RecordingCommand)
def generate(
    ctx: typer.Context,
    patterns: Optional[list[str]] = typer.Argument(
        None, help="Files or directories of the package to analyze (default: .)"
    ),
    type_name: Optional[str] = typer.Option(None, "--type", help="[mandatory] a type name"),
    output: Optional[str] = typer.Option(
        None, "--output", help="[optional] output file name; default srcdir/<type>_gen.go"
    ),
    constructor_types: Optional[str] = typer.Option(
        None,
        "--constructorTypes",
        help="[optional] comma-separated list of constructor types; "
        "it expects `allArgs` and `builder` (default: allArgs)",
    ),
    formatter: Optional[str] = typer.Option(
        None, "--formatter", help="External formatter: auto, goimports, gofmt or none"
    ),
    config: Optional[str] = typer.Option(
        None, "--config", "-c", help="Path to a YAML file with default settings"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """
    Generate an all-args constructor and/or a builder for a Go struct.

    Examples:
        gonstructor --type=Person
        gonstructor --type=Person --constructorTypes=allArgs,builder ./models
        gonstructor --type=Person --output=person_constructors.go person.go
    """
    configure_logging(verbose)

    try:
        defaults = load_config_from_yaml(Path(config)) if config else None
        cfg = create_config_from_args(
            type_name=type_name,
            output=output,
            constructor_types=constructor_types,
            patterns=patterns,
            formatter=formatter,
            invocation_args=ctx.meta.get(INVOCATION_ARGS, []),
            defaults=defaults,
        )

        output_path = GonstructorOrchestrator(cfg).run()
        console.print(f"[green]✓[/green] Generated {escape(str(output_path))}")

    except GonstructorError as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        if e.exit_code == 2:
            err_console.print(ctx.get_usage(), markup=False, highlight=False)
        if verbose:
            err_console.print_exception()
        raise typer.Exit(e.exit_code)
    except Exception as e:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        if verbose:
            err_console.print_exception()
        raise typer.Exit(1)


# =============================================================================
# Entry Point
# =============================================================================


def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
