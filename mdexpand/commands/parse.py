"""
mdexpand parse - List the directives in a document without resolving them.

Usage:
    mdexpand parse prompt.md
    mdexpand parse prompt.md --json
    mdexpand parse prompt.md --check && echo "has imports"
"""

import dataclasses
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table
from rich.text import Text

from ..core.directives import Directive
from ..core.parser import has_directives, parse_directives
from ..utils.output import print_json

console = Console()


def _line_number(text: str, index: int) -> int:
    return text.count("\n", 0, index) + 1


def directive_to_dict(directive: Directive, text: str) -> dict:
    """Serialize a directive with its kind and 1-based line number."""
    data = {"kind": directive.kind, "line": _line_number(text, directive.index)}
    data.update(dataclasses.asdict(directive))
    return data


@click.command("parse")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, allow_dash=True))
@click.option("--json", "json_output", is_flag=True, help="Output directives as JSON")
@click.option(
    "--check",
    is_flag=True,
    help="Exit 0 if the document has directives, 1 if not; print nothing",
)
def parse(file: str, json_output: bool, check: bool) -> None:
    """List the directives in a document without resolving them.

    Directives inside fenced code blocks and inline code are ignored, as
    they are during expansion.

    \b
    Examples:
      mdexpand parse prompt.md
      mdexpand parse prompt.md --json | jq '.[].kind'
      mdexpand parse prompt.md --check
    """
    if file == "-":
        text = click.get_text_stream("stdin").read()
    else:
        text = Path(file).read_text(errors="replace")

    if check:
        sys.exit(0 if has_directives(text) else 1)

    directives = parse_directives(text)

    if json_output:
        print_json([directive_to_dict(d, text) for d in directives])
        return

    if not directives:
        console.print("[dim]No directives found[/dim]")
        return

    table = Table(title=f"Directives in {file}")
    table.add_column("Line", justify="right", style="cyan")
    table.add_column("Kind", style="green")
    table.add_column("Target")

    for d in directives:
        table.add_row(str(_line_number(text, d.index)), d.kind, Text(d.target))

    console.print(table)
