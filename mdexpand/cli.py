#!/usr/bin/env python3
"""
mdexpand - Markdown import expansion

Turns a markdown prompt with @file, @url, glob and symbol imports, command
substitutions and executable code fences into one self-contained document.

Usage:
    mdexpand expand prompt.md
    mdexpand expand prompt.md -o expanded.md --list-imports
    mdexpand parse prompt.md --json

For more information: mdexpand --help
"""

import click

from . import __version__
from .commands.expand import expand
from .commands.parse import parse
from .core.logging import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="mdexpand")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v, -vv, -vvv)")
@click.option("-q", "--quiet", is_flag=True, help="Suppress output except errors")
@click.option("--json-errors", is_flag=True, help="Output errors as JSON for CI integration")
@click.pass_context
def cli(ctx: click.Context, verbose: int, quiet: bool, json_errors: bool) -> None:
    """mdexpand - Markdown import expansion

    Expands imports in markdown documents into a single prompt.

    \b
    Commands:
      expand   Expand all imports in a document
      parse    List the directives in a document

    \b
    Verbosity (stderr):
      -v       INFO level (files loaded, URLs fetched, commands run)
      -vv      DEBUG level (resolved paths, ignore files)
      -vvv     TRACE level (parsed directives, safe ranges)
      -q       Quiet mode (errors only)

    \b
    Error output:
      --json-errors  Output errors as structured JSON (for CI integration)

    \b
    Examples:
      mdexpand expand prompt.md > expanded.md
      mdexpand -vv expand prompt.md --dry-run
      mdexpand --json-errors expand prompt.md 2>&1 | jq .error
    """
    ctx.ensure_object(dict)
    ctx.obj["verbosity"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["json_errors"] = json_errors
    setup_logging(verbose, quiet or json_errors)


cli.add_command(expand)
cli.add_command(parse)


def main():
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
