"""
mdexpand expand - Expand all imports in a markdown document.

Usage:
    mdexpand expand prompt.md
    mdexpand expand prompt.md -o expanded.md
    mdexpand expand prompt.md --dry-run --list-imports
    cat prompt.md | mdexpand expand -
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.markup import escape

from ..core.config import load_config
from ..core.exceptions import ExpansionError
from ..core.expander import ImportExpander, ImportTracker
from ..core.logging import get_logger
from ..utils.output import handle_error, print_success, print_warning, stderr_console

logger = get_logger(__name__)


def _parse_env_pairs(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse KEY=VALUE options into a dict."""
    env = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {pair!r}", param_hint="--env")
        env[key] = value
    return env


def _print_imports(tracker: ImportTracker) -> None:
    stderr_console.print(f"[bold]Resolved imports ({len(tracker.resolved)}):[/bold]")
    for entry in tracker.resolved:
        stderr_console.print(f"  {escape(entry)}")
    for warning in tracker.warnings:
        print_warning(warning)


@click.command("expand")
@click.argument("file", type=click.Path(dir_okay=False, allow_dash=True))
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the expanded document here instead of stdout",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Resolve file and URL imports but do not execute commands",
)
@click.option(
    "--no-commands",
    is_flag=True,
    help="Leave !`cmd` directives and executable fences untouched",
)
@click.option(
    "--list-imports",
    is_flag=True,
    help="Print every resolved import to stderr",
)
@click.option(
    "--cwd",
    "command_cwd",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Run commands here instead of each importing file's directory",
)
@click.option(
    "-e", "--env",
    "env_pairs",
    multiple=True,
    help="Extra environment variable for commands, KEY=VALUE (can be repeated)",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Use this config file instead of searching for .mdexpand.yaml",
)
@click.pass_context
def expand(
    ctx: click.Context,
    file: str,
    output: Optional[Path],
    dry_run: bool,
    no_commands: bool,
    list_imports: bool,
    command_cwd: Optional[Path],
    env_pairs: tuple[str, ...],
    config_path: Optional[Path],
) -> None:
    """Expand all imports in a markdown document.

    FILE is the document to expand, or - to read from stdin (relative
    imports then resolve against the current directory).

    \b
    Directives:
      @./file.md              File contents, recursively expanded
      @./file.ts:10-50        Lines 10 to 50
      @./file.ts#Name         One declaration
      @./src/**/*.ts          Every matching file as tagged blocks
      @https://host/doc.md    Remote markdown or JSON
      !`git status`           Command output

    \b
    Examples:
      mdexpand expand prompt.md > expanded.md
      mdexpand expand prompt.md --dry-run --list-imports
      mdexpand -v expand prompt.md -e BRANCH=main
      MDEXPAND_FORCE_CONTEXT=1 mdexpand expand big-glob.md
    """
    json_errors = (ctx.obj or {}).get("json_errors", False)
    env = _parse_env_pairs(env_pairs)
    config = load_config(config_path, use_cache=False) if config_path else load_config()
    tracker = ImportTracker()

    expander = ImportExpander(
        config=config,
        env=env,
        invocation_cwd=command_cwd,
        dry_run=dry_run,
        include_commands=not no_commands,
        tracker=tracker,
        verbose=(ctx.obj or {}).get("verbosity", 0) >= 1,
    )

    try:
        if file == "-":
            text = click.get_text_stream("stdin").read()
            result = expander.expand(text, Path.cwd())
        else:
            result = expander.expand_file(Path(file))
    except ExpansionError as e:
        logger.debug(f"Expansion of {file} failed: {type(e).__name__}")
        sys.exit(handle_error(e, json_errors, {"file": file}))

    if list_imports:
        _print_imports(tracker)

    if output:
        output.write_text(result)
        print_success(f"Wrote {output} ({len(result):,} chars, {len(tracker.resolved)} imports)")
    else:
        click.echo(result)
