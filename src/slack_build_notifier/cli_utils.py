"""Shared CLI helpers: console, exit codes, logging setup and messages."""

import logging
import os
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from slack_build_notifier.core.config import CONFIG_ENV_VAR

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2

console = Console()
err_console = Console(stderr=True)


def _setup_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Configure root logging with a rich handler on stderr.

    Args:
        verbose: Log at DEBUG level.
        quiet: Log only warnings and errors. Ignored when verbose is set.

    """
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, rich_tracebacks=verbose, show_path=verbose)],
        force=True,
    )


def _resolve_config_path(config: str | None) -> Path | None:
    """Return the config path from the option or the environment."""
    value = config or os.environ.get(CONFIG_ENV_VAR)
    return Path(value).expanduser() if value else None


def _read_input(source: str) -> str:
    """Read a file, or stdin when source is '-'."""
    if source == "-":
        return sys.stdin.read()
    return Path(source).expanduser().read_text(encoding="utf-8")


def _error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {message}", highlight=False)


def _warning(message: str) -> None:
    err_console.print(f"[yellow]Warning:[/yellow] {message}", highlight=False)


def _success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}", highlight=False)
