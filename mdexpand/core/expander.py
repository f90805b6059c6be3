"""
Recursive import expansion.

Expands every directive in a document into its resolved content:

    @./rules.md           file contents, recursively expanded
    @./api.ts:10-40       lines 10 to 40, verbatim
    @./api.ts#Client      one declaration, verbatim
    @./docs/*.md          every matching file as tagged blocks, verbatim
    @https://x/doc.md     fetched markdown/JSON, verbatim
    !`git status`         command output
    ```sh / #!/bin/sh     executable fence output

Directives are resolved one at a time in reverse document order and spliced
into the text immediately; earlier offsets stay valid because everything
changed so far lies after them. Only whole-file imports nest. Each nested
file gets a frame on an explicit stack with its own copy of the visited
chain, so a file may appear in two unrelated branches but never inside its
own ancestry, and deep chains never hit the interpreter's recursion limit.

Any resolver failure aborts the whole expansion. The error carries the
offending directive's original text.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

from .config import Config, force_context_enabled, load_config
from .directives import (
    CONTENT_KINDS,
    CommandDirective,
    Directive,
    ExecutableFenceDirective,
    FileDirective,
    GlobDirective,
    SymbolDirective,
    UrlDirective,
)
from .exceptions import (
    BinaryFileImport,
    CircularImport,
    ExpansionError,
    FileSizeLimitExceeded,
    ImportNotFound,
    NetworkError,
    SymbolNotFound,
)
from .executor import CommandExecutor, ShellExecutor, combine_output
from .extract import extract_lines, extract_symbol
from .globs import collect_glob
from .limits import exceeds_limit, is_binary_file
from .logging import ImportLoggerAdapter, get_import_logger
from .parser import has_directives, parse_directives
from .remote import HttpFetcher, RemoteFetcher, validate_remote_content


@dataclass(frozen=True)
class ResolutionContext:
    """Where an expansion is happening and which files enclose it.

    ``visited`` is the ordered chain of canonical paths currently being
    expanded. It is never mutated; descending into a file returns a new
    context with that file appended.
    """
    directory: Path
    visited: tuple[str, ...] = ()
    verbose: bool = False

    def descend(self, canonical_path: str, directory: Path) -> "ResolutionContext":
        return ResolutionContext(
            directory=directory,
            visited=self.visited + (canonical_path,),
            verbose=self.verbose,
        )


@dataclass
class ImportTracker:
    """Side-channel for callers that want to report on an expansion.

    Attributes:
        resolved: Every file path, line range/symbol ref, glob pattern and
            URL that was resolved, in resolution order
        warnings: Non-fatal warnings (e.g. glob token counts)
    """
    resolved: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class _Frame:
    """A document being expanded; ``pending`` is in document order."""
    text: str
    context: ResolutionContext
    log: ImportLoggerAdapter
    pending: list[Directive]
    current: Optional[Directive] = None

    def splice(self, replacement: str) -> None:
        start = self.current.index
        end = start + len(self.current.original)
        self.text = self.text[:start] + replacement + self.text[end:]


def to_canonical_path(path: Union[str, Path]) -> str:
    """Resolve symlinks so two links to one file compare equal."""
    return os.path.realpath(path)


def resolve_import_path(import_path: str, directory: Path) -> Path:
    """Resolve an import path against the importing file's directory.

    ``~`` expands to the home directory; absolute paths pass through.
    """
    expanded = os.path.expanduser(import_path)
    if os.path.isabs(expanded):
        return Path(os.path.normpath(expanded))
    return Path(os.path.normpath(os.path.join(directory, expanded)))


class ImportExpander:
    """Expands directives in documents.

    Args:
        config: Limits and collaborator settings (default: load_config())
        fetcher: Remote fetcher for URL directives
        executor: Command executor for command and fence directives
        env: Extra environment variables for commands, merged over os.environ
        invocation_cwd: Run commands here instead of the importing file's dir
        dry_run: Replace command/fence output with a placeholder
        include_commands: If False, leave command/fence directives untouched
        tracker: Optional ImportTracker to record what was resolved
        verbose: Log each directive as it is resolved
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        fetcher: Optional[RemoteFetcher] = None,
        executor: Optional[CommandExecutor] = None,
        env: Optional[dict[str, str]] = None,
        invocation_cwd: Optional[Path] = None,
        dry_run: bool = False,
        include_commands: bool = True,
        tracker: Optional[ImportTracker] = None,
        verbose: bool = False,
    ):
        self.config = config or load_config()
        self.fetcher = fetcher or HttpFetcher(
            timeout=self.config.remote.timeout,
            user_agent=self.config.remote.user_agent,
        )
        self.executor = executor or ShellExecutor(
            timeout=self.config.commands.timeout,
            shell=self.config.commands.shell,
        )
        self.env = os.environ.copy()
        if env:
            self.env.update(env)
        self.invocation_cwd = invocation_cwd
        self.dry_run = dry_run
        self.include_commands = include_commands
        self.tracker = tracker
        self.verbose = verbose

    def expand(
        self,
        text: str,
        directory: Union[str, Path],
        context: Optional[ResolutionContext] = None,
    ) -> str:
        """Expand all directives in text.

        Whole-file imports are expanded on an explicit stack of frames, so
        import depth is limited only by cycle detection.

        Args:
            text: Document content
            directory: Directory that relative paths resolve against
            context: Starting context, e.g. the root file from expand_file

        Returns:
            The fully expanded text
        """
        if context is None:
            context = ResolutionContext(
                directory=Path(os.path.abspath(directory)), verbose=self.verbose
            )

        stack = [self._open_frame(text, context)]
        while True:
            frame = stack[-1]
            if not frame.pending:
                stack.pop()
                if not stack:
                    return frame.text
                stack[-1].splice(frame.text)
                continue

            directive = frame.pending.pop()
            frame.current = directive
            if frame.context.verbose:
                frame.log.info(f"Resolving {directive.kind}: {directive.target}")
            else:
                frame.log.debug(f"Resolving {directive.kind}: {directive.target}")

            try:
                if isinstance(directive, FileDirective) and directive.line_range is None:
                    content, child = self._enter_file(directive, frame.context, frame.log)
                    stack.append(self._open_frame(content, child))
                else:
                    frame.splice(self._resolve(directive, frame.context, frame.log))
            except ExpansionError as e:
                if e.directive is None:
                    e.directive = directive.original
                raise

    def _open_frame(self, text: str, context: ResolutionContext) -> _Frame:
        log = get_import_logger(__name__, context.visited)
        directives = parse_directives(text)
        if not self.include_commands:
            directives = [d for d in directives if d.kind in CONTENT_KINDS]
        if directives:
            log.trace(f"Resolving {len(directives)} directive(s) in {context.directory}")
        return _Frame(text=text, context=context, log=log, pending=directives)

    def expand_file(self, path: Union[str, Path]) -> str:
        """Read and expand a file, treating it as the root of the import chain."""
        resolved = Path(os.path.abspath(path))
        content = self._read_checked(str(path), resolved)
        context = ResolutionContext(
            directory=resolved.parent,
            visited=(to_canonical_path(resolved),),
            verbose=self.verbose,
        )
        return self.expand(content, resolved.parent, context)

    def _record(self, entry: str) -> None:
        if self.tracker is not None:
            self.tracker.resolved.append(entry)

    def _resolve(self, directive: Directive, ctx: ResolutionContext, log: ImportLoggerAdapter) -> str:
        """Resolve a directive that does not open a new frame."""
        match directive:
            case FileDirective():
                return self._resolve_line_range(directive, ctx, log)
            case SymbolDirective():
                return self._resolve_symbol(directive, ctx, log)
            case GlobDirective():
                return self._resolve_glob(directive, ctx)
            case UrlDirective():
                return self._resolve_url(directive, log)
            case CommandDirective():
                return self._resolve_command(directive, ctx, log)
            case ExecutableFenceDirective():
                return self._resolve_fence(directive, ctx, log)
        raise TypeError(f"Unknown directive type: {type(directive).__name__}")

    def _read_checked(self, import_path: str, resolved: Path) -> str:
        """Read a file after existence, size and binary checks."""
        if not resolved.is_file():
            raise ImportNotFound(path=import_path, resolved_path=str(resolved))

        size = resolved.stat().st_size
        limit = self.config.limits.max_file_size
        if exceeds_limit(size, limit):
            raise FileSizeLimitExceeded(path=str(resolved), size=size, limit=limit)

        if is_binary_file(resolved):
            raise BinaryFileImport(path=import_path, resolved_path=str(resolved))

        return resolved.read_text(encoding="utf-8", errors="replace")

    def _enter_file(
        self, directive: FileDirective, ctx: ResolutionContext, log
    ) -> tuple[str, ResolutionContext]:
        """Load a whole-file import and return its content with the child context."""
        resolved = resolve_import_path(directive.path, ctx.directory)
        if not resolved.is_file():
            raise ImportNotFound(path=directive.path, resolved_path=str(resolved))

        canonical = to_canonical_path(resolved)
        if canonical in ctx.visited:
            raise CircularImport(chain=[*ctx.visited, canonical])

        content = self._read_checked(directive.path, resolved)
        log.info(f"Loading: {directive.path}")
        self._record(directive.path)

        return content, ctx.descend(canonical, resolved.parent)

    def _resolve_line_range(self, directive: FileDirective, ctx: ResolutionContext, log) -> str:
        resolved = resolve_import_path(directive.path, ctx.directory)
        content = self._read_checked(directive.path, resolved)
        line_range = directive.line_range
        log.info(f"Loading lines {line_range.start}-{line_range.end} from: {directive.path}")
        self._record(directive.target)
        return extract_lines(content, line_range.start, line_range.end)

    def _resolve_symbol(self, directive: SymbolDirective, ctx: ResolutionContext, log) -> str:
        resolved = resolve_import_path(directive.path, ctx.directory)
        content = self._read_checked(directive.path, resolved)
        log.info(f'Extracting symbol "{directive.symbol}" from: {directive.path}')
        try:
            snippet = extract_symbol(content, directive.symbol)
        except SymbolNotFound as e:
            e.path = directive.path
            raise
        self._record(directive.target)
        return snippet

    def _resolve_glob(self, directive: GlobDirective, ctx: ResolutionContext) -> str:
        limits = self.config.limits
        result = collect_glob(
            directive.pattern,
            ctx.directory,
            max_tokens=self.config.max_tokens(self.env),
            warn_tokens=limits.warn_tokens,
            max_file_size=limits.max_file_size,
            chars_per_token=limits.chars_per_token,
            force=force_context_enabled(self.env),
        )
        if result.warning and self.tracker is not None:
            self.tracker.warnings.append(result.warning)
        self._record(directive.pattern)
        return result.text

    def _resolve_url(self, directive: UrlDirective, log) -> str:
        log.info(f"Fetching: {directive.url}")
        response = self.fetcher.fetch(directive.url)
        if not 200 <= response.status < 300:
            raise NetworkError(
                url=directive.url, reason=f"HTTP {response.status}", status=response.status
            )
        content = validate_remote_content(response)
        self._record(directive.url)
        return content

    def _command_cwd(self, ctx: ResolutionContext) -> Path:
        return self.invocation_cwd or ctx.directory

    def _resolve_command(self, directive: CommandDirective, ctx: ResolutionContext, log) -> str:
        if self.dry_run:
            log.info(f"Dry-run: skipping execution of '{directive.command}'")
            return f'[Dry Run: Command "{directive.command}" not executed]'

        log.info(f"Executing: {directive.command}")
        result = self.executor.run_shell(directive.command, self._command_cwd(ctx), self.env)
        if result.exit_code != 0:
            log.warning(f"Command exited with code {result.exit_code}: {directive.command}")
        return combine_output(result, self.config.commands.max_output)

    def _resolve_fence(self, directive: ExecutableFenceDirective, ctx: ResolutionContext, log) -> str:
        if self.dry_run:
            log.info(f"Dry-run: skipping code fence ({directive.language})")
            return "[Dry Run: Code fence not executed]"

        log.info(f"Executing code fence ({directive.language}): {directive.shebang}")
        result = self.executor.run_script(
            directive.shebang,
            directive.language,
            directive.code,
            self._command_cwd(ctx),
            self.env,
        )
        if result.exit_code != 0:
            log.warning(f"Code fence exited with code {result.exit_code}: {directive.shebang}")
        return combine_output(result, self.config.commands.max_output)


def expand_imports(
    text: str,
    directory: Union[str, Path],
    tracker: Optional[ImportTracker] = None,
    **options,
) -> str:
    """Expand directives in text with a one-off ImportExpander.

    Keyword options are passed to ImportExpander.
    """
    return ImportExpander(tracker=tracker, **options).expand(text, directory)


__all__ = [
    "ImportExpander",
    "ImportTracker",
    "ResolutionContext",
    "expand_imports",
    "has_directives",
    "resolve_import_path",
    "to_canonical_path",
]
