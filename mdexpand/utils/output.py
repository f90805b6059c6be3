"""Output formatting utilities.

Expanded documents are written to stdout untouched, so everything else the
CLI prints (errors, import lists, confirmations) goes to stderr:
- stderr console: Rich-formatted diagnostics
- JSON error output for CI integration (--json-errors)
"""

import json
import sys
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape

from ..core.exceptions import ExitCode, format_json_error

# Diagnostics console; stderr=True resolves sys.stderr at print time
stderr_console = Console(stderr=True)


def print_error(message: str) -> None:
    """Print error message."""
    stderr_console.print(f"[red]Error: {escape(message)}[/red]")


def print_success(message: str) -> None:
    """Print success message."""
    stderr_console.print(f"[green]✓ {escape(message)}[/green]")


def print_warning(message: str) -> None:
    """Print warning message."""
    stderr_console.print(f"[yellow]⚠ {escape(message)}[/yellow]")


def handle_error(
    exc: Exception,
    json_errors: bool = False,
    context: Optional[dict[str, Any]] = None,
) -> int:
    """Handle an exception with appropriate output format.

    Args:
        exc: The exception to handle
        json_errors: If True, output JSON format; otherwise Rich format
        context: Optional additional context (input file, etc.)

    Returns:
        Exit code to use for sys.exit()
    """
    if json_errors:
        print(format_json_error(exc, context), file=sys.stderr)
    else:
        print_error(str(exc))

    if hasattr(exc, "exit_code"):
        return exc.exit_code
    return ExitCode.GENERAL_ERROR


def print_json(data: Any) -> None:
    """Print data as formatted JSON to stdout."""
    print(json.dumps(data, indent=2, default=str))
