"""
Directive parser.

Scans a document and returns the directives it contains, in document order.
This is a pure function with no I/O: matching only happens in the safe
ranges reported by the code span scanner, so examples inside code blocks and
inline code are never mistaken for live directives.

Surface syntax:
  @./rel/path.md  @~/home/path  @/abs/path    File
  @./file.ts:10-50                            File, lines 10 to 50
  @./file.ts#SymbolName                       Symbol
  @./src/**/*.ts                              Glob (path contains * ? or [)
  @https://example.com/doc.md                 Url
  !`git log -5`                               Command
  ```sh + first line "#!/bin/sh" + ```        Executable fence

A path runs until the first whitespace, so ``@./a.md@./b.md`` is a single
File directive. When two matches overlap, the one that starts first wins.
"""

import re
from typing import Optional

from .directives import (
    CommandDirective,
    Directive,
    ExecutableFenceDirective,
    FileDirective,
    GlobDirective,
    LineRange,
    SymbolDirective,
    UrlDirective,
)
from .logging import get_logger
from .scanner import find_code_spans, find_safe_ranges, is_in_safe_range

logger = get_logger(__name__)

# Path must start with ".", "/" or "~/" so "user@example.com" never matches
FILE_DIRECTIVE_PATTERN = re.compile(r"@(~?[./][^\s]+)")

# Requires the scheme, so bare "@example.com" never matches
URL_DIRECTIVE_PATTERN = re.compile(r"@(https?://[^\s]+)")

COMMAND_DIRECTIVE_PATTERN = re.compile(r"!`([^`]+)`")

LINE_RANGE_PATTERN = re.compile(r"^(.+):(\d+)-(\d+)$")
SYMBOL_PATTERN = re.compile(r"^(.+)#([A-Za-z_$][A-Za-z0-9_$]*)$")

# Cheap existence check used before running the full scanner
_ANY_DIRECTIVE_PATTERN = re.compile(
    r"@~?[./]\S|@https?://\S|!`[^`]+`|^[ \t]*`{3,}[^\n]*\n#!",
    re.MULTILINE,
)


def is_glob_pattern(path: str) -> bool:
    """Check if a path contains glob metacharacters."""
    return "*" in path or "?" in path or "[" in path


def parse_line_range(path: str) -> tuple[str, Optional[LineRange]]:
    """Split ``./file.ts:10-50`` into its path and line range."""
    match = LINE_RANGE_PATTERN.match(path)
    if match:
        return match.group(1), LineRange(int(match.group(2)), int(match.group(3)))
    return path, None


def parse_symbol_reference(path: str) -> tuple[str, Optional[str]]:
    """Split ``./file.ts#Name`` into its path and symbol name."""
    match = SYMBOL_PATTERN.match(path)
    if match:
        return match.group(1), match.group(2)
    return path, None


def _classify_path(original: str, path: str, index: int) -> Directive:
    if is_glob_pattern(path):
        return GlobDirective(pattern=path, original=original, index=index)

    symbol_path, symbol = parse_symbol_reference(path)
    if symbol:
        return SymbolDirective(path=symbol_path, symbol=symbol, original=original, index=index)

    range_path, line_range = parse_line_range(path)
    if line_range:
        return FileDirective(
            path=range_path, line_range=line_range, original=original, index=index
        )

    return FileDirective(path=path, original=original, index=index)


def _parse_executable_fences(text: str, spans) -> list[ExecutableFenceDirective]:
    fences = []
    for span in spans:
        if not (span.fenced and span.closed and span.fence.startswith("`")):
            continue

        body = text[span.content_start:span.content_end]
        first_line, _, rest = body.partition("\n")
        if not first_line.startswith("#!"):
            continue

        language = span.info.split()[0] if span.info else "txt"
        fences.append(
            ExecutableFenceDirective(
                shebang=first_line.rstrip(),
                language=language,
                code=rest.strip(),
                original=text[span.start:span.marker_end],
                index=span.start,
            )
        )
    return fences


def parse_directives(text: str) -> list[Directive]:
    """Parse all directives from text.

    Args:
        text: The document to scan

    Returns:
        Directives sorted by ``index`` with no overlapping spans
    """
    spans = find_code_spans(text)
    safe_ranges = find_safe_ranges(text, spans)
    found: list[Directive] = []

    for match in FILE_DIRECTIVE_PATTERN.finditer(text):
        if is_in_safe_range(match.start(), safe_ranges):
            found.append(_classify_path(match.group(0), match.group(1), match.start()))

    for match in URL_DIRECTIVE_PATTERN.finditer(text):
        if is_in_safe_range(match.start(), safe_ranges):
            found.append(
                UrlDirective(url=match.group(1), original=match.group(0), index=match.start())
            )

    for match in COMMAND_DIRECTIVE_PATTERN.finditer(text):
        if is_in_safe_range(match.start(), safe_ranges):
            found.append(
                CommandDirective(
                    command=match.group(1), original=match.group(0), index=match.start()
                )
            )

    found.extend(_parse_executable_fences(text, spans))
    found.sort(key=lambda d: d.index)

    directives: list[Directive] = []
    covered_until = -1
    for directive in found:
        if directive.index < covered_until:
            logger.trace(f"Dropping overlapping directive at {directive.index}: {directive.original}")
            continue
        directives.append(directive)
        covered_until = directive.index + len(directive.original)

    logger.trace(f"Parsed {len(directives)} directive(s) across {len(safe_ranges)} safe range(s)")
    return directives


def has_directives(text: str) -> bool:
    """Check if text contains any live directive.

    A regex pre-screen rejects most documents without scanning for code
    spans; only candidates pay for a full parse.
    """
    if not _ANY_DIRECTIVE_PATTERN.search(text):
        return False
    return bool(parse_directives(text))
