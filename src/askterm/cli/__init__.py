"""
askterm CLI - Main application entry point.

Ask a question in a new terminal window from scripts and background
processes, and inspect which terminal askterm would use.
"""

import asyncio
import json
import logging
import sys
import traceback
from typing import Annotated, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from askterm import __version__
from askterm.core.config import load_config
from askterm.core.launch import NoTerminalAvailableError
from askterm.core.services import InputService, InputServiceError

app = typer.Typer(
    name="askterm",
    help="Ask the user a question in a new terminal window and wait for the answer",
    no_args_is_help=True,
    add_completion=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)

console = Console(stderr=True)

# Global debug flag
_debug_mode = False

DebugOption = Annotated[
    bool,
    typer.Option(
        "--debug",
        help="Enable debug mode with full tracebacks and verbose logging",
    ),
]


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for askterm commands.

    Args:
        debug: If True, enable DEBUG level logging and full tracebacks
    """
    global _debug_mode
    _debug_mode = debug

    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def handle_error(error: Exception, command_name: str) -> None:
    """
    Display an error with a user-friendly panel.

    Args:
        error: The exception that was raised
        command_name: Name of the command that failed
    """
    error_text = Text()
    error_text.append("Error in ", style="bold red")
    error_text.append(command_name, style="bold yellow")
    error_text.append(": ", style="bold red")
    error_text.append(str(error))

    console.print()
    console.print(
        Panel(
            error_text,
            title="[bold red]Error[/bold red]",
            border_style="red",
            expand=False,
        )
    )

    if _debug_mode:
        console.print("\n[dim]Full traceback:[/dim]")
        console.print(traceback.format_exc())
    else:
        console.print("[dim]Run with --debug for full traceback[/dim]")


def _load_service() -> InputService:
    return InputService.from_config(load_config())


@app.command()
def ask(
    prompt: Annotated[str, typer.Argument(help="Question to ask")],
    project: Annotated[
        Optional[str],
        typer.Option("--project", "-p", help="Project name shown in the prompt window"),
    ] = None,
    option: Annotated[
        Optional[list[str]],
        typer.Option("--option", "-o", help="Predefined answer (repeatable)"),
    ] = None,
    timeout: Annotated[
        Optional[int],
        typer.Option("--timeout", "-t", min=1, help="Seconds to wait for an answer"),
    ] = None,
    no_countdown: Annotated[
        bool,
        typer.Option("--no-countdown", help="Don't show the remaining time"),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print answer and outcome as JSON"),
    ] = False,
    debug: DebugOption = False,
) -> None:
    """
    Ask a question in a new terminal window and print the answer.

    Exits with status 1 when no answer was obtained.

    Examples:
        askterm ask "Deploy to production?" -o yes -o no
        askterm ask "Release notes headline?" --timeout 300 --json
    """
    setup_logging(debug)

    try:
        service = _load_service()
        result = asyncio.run(
            service.ask(
                prompt,
                project_name=project,
                predefined_options=option,
                timeout_seconds=timeout,
                show_countdown=False if no_countdown else None,
            )
        )
    except (InputServiceError, ValidationError) as e:
        handle_error(e, "ask")
        raise typer.Exit(2)

    if as_json:
        typer.echo(
            json.dumps(
                {
                    "answer": result.answer,
                    "outcome": result.outcome.value,
                    "sessionId": result.session_id,
                    "detail": result.detail,
                }
            )
        )
    elif result.answered:
        typer.echo(result.answer)
    else:
        console.print(f"[yellow]No answer ({result.outcome.value})[/yellow]")

    if not result.answered:
        raise typer.Exit(1)


@app.command()
def terminal(debug: DebugOption = False) -> None:
    """
    Show which terminal askterm would open, and how.

    Examples:
        askterm terminal
        TERMINAL=/usr/bin/alacritty askterm terminal
    """
    setup_logging(debug)

    try:
        service = _load_service()
        spec = service.describe_launch_target()
    except (NoTerminalAvailableError, ValidationError) as e:
        handle_error(e, "terminal")
        raise typer.Exit(1)

    table = Table(title="Launch target", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Preferred ($TERMINAL)", service.config.terminal or "[dim](not set)[/dim]")
    table.add_row("Executable", spec.executable)
    table.add_row("Arguments", " ".join(spec.arguments) or "[dim](none)[/dim]")
    table.add_row("Through shell", "yes" if spec.use_shell else "no")
    Console().print(table)


@app.command()
def version() -> None:
    """Show askterm version."""
    typer.echo(f"askterm {__version__}")


def main() -> None:
    """Entry point for the askterm CLI."""
    app()


__all__ = ["app", "main"]
