"""
Code span scanner.

Finds fenced code blocks and inline code spans so that directive matching
only ever happens in prose. Everything outside a code span is a "safe
range"; a directive whose first character is not in a safe range is
documentation, not an instruction.

Rules:
- A fence opens on a line whose trimmed content starts with 3+ backticks or
  3+ tildes, optionally followed by an info string (a backtick fence's info
  string may not contain backticks).
- A fence closes only on a line whose trimmed content is a run of the same
  character at least as long as the opener. A run in the middle of a line
  never closes it, and an unclosed fence runs to the end of the document.
- An inline span opens with a run of N backticks and closes with the next
  run of exactly N backticks on the same line. A run with no partner is
  literal text.
"""

import bisect
from dataclasses import dataclass
from typing import Optional

from .directives import SafeRange


@dataclass(frozen=True)
class CodeSpan:
    """A fenced block or inline span, as the half-open interval [start, end).

    For fenced blocks ``content_start``/``content_end`` bound the lines
    between the fences and ``marker_end`` is the offset just past the
    closing fence characters.
    """
    start: int
    end: int
    fenced: bool = False
    fence: str = ""
    info: str = ""
    closed: bool = True
    content_start: int = 0
    content_end: int = 0
    marker_end: int = 0


@dataclass(frozen=True)
class _FenceOpen:
    char: str
    length: int
    position: int
    info: str
    line_end: int


def _line_end(text: str, start: int) -> int:
    end = text.find("\n", start)
    return len(text) if end == -1 else end


def _match_fence_open(text: str, line_start: int) -> Optional[_FenceOpen]:
    eol = _line_end(text, line_start)
    line = text[line_start:eol]
    stripped = line.lstrip(" \t")
    if not stripped or stripped[0] not in "`~":
        return None

    char = stripped[0]
    length = len(stripped) - len(stripped.lstrip(char))
    if length < 3:
        return None

    info = stripped[length:].strip()
    if char == "`" and "`" in info:
        return None

    return _FenceOpen(
        char=char,
        length=length,
        position=line_start + len(line) - len(stripped),
        info=info,
        line_end=eol,
    )


def _scan_fence(text: str, opener: _FenceOpen) -> CodeSpan:
    n = len(text)
    content_start = min(opener.line_end + 1, n)
    pos = content_start

    while pos < n:
        eol = _line_end(text, pos)
        line = text[pos:eol]
        stripped = line.strip()
        if (
            len(stripped) >= opener.length
            and stripped == opener.char * len(stripped)
        ):
            marker_start = pos + line.index(stripped)
            return CodeSpan(
                start=opener.position,
                end=min(eol + 1, n),
                fenced=True,
                fence=opener.char * opener.length,
                info=opener.info,
                content_start=content_start,
                content_end=pos,
                marker_end=marker_start + len(stripped),
            )
        pos = eol + 1

    return CodeSpan(
        start=opener.position,
        end=n,
        fenced=True,
        fence=opener.char * opener.length,
        info=opener.info,
        closed=False,
        content_start=content_start,
        content_end=n,
        marker_end=n,
    )


def _backtick_run(text: str, start: int) -> int:
    end = start
    while end < len(text) and text[end] == "`":
        end += 1
    return end - start


def _find_inline_close(text: str, start: int, length: int) -> Optional[int]:
    """Return the offset just past the closing run, or None."""
    eol = _line_end(text, start)
    pos = start
    while pos < eol:
        tick = text.find("`", pos, eol)
        if tick == -1:
            return None
        run = _backtick_run(text, tick)
        if run == length:
            return tick + run
        pos = tick + run
    return None


def find_code_spans(text: str) -> list[CodeSpan]:
    """Scan text and return every code span in document order."""
    spans: list[CodeSpan] = []
    n = len(text)
    i = 0

    while i < n:
        if i == 0 or text[i - 1] == "\n":
            opener = _match_fence_open(text, i)
            if opener is not None:
                span = _scan_fence(text, opener)
                spans.append(span)
                i = span.end
                continue

        if text[i] == "`":
            run = _backtick_run(text, i)
            close = _find_inline_close(text, i + run, run)
            if close is not None:
                spans.append(CodeSpan(start=i, end=close))
                i = close
            else:
                i += run
            continue

        i += 1

    return spans


def find_safe_ranges(text: str, spans: Optional[list[CodeSpan]] = None) -> list[SafeRange]:
    """Return the sorted, non-overlapping ranges outside all code spans."""
    if spans is None:
        spans = find_code_spans(text)
    ranges: list[SafeRange] = []
    pos = 0
    for span in spans:
        if span.start > pos:
            ranges.append(SafeRange(pos, span.start))
        pos = max(pos, span.end)
    if pos < len(text):
        ranges.append(SafeRange(pos, len(text)))
    return ranges


def is_in_safe_range(index: int, ranges: list[SafeRange]) -> bool:
    """Check if an offset falls inside any of the (sorted) safe ranges."""
    starts = [r.start for r in ranges]
    slot = bisect.bisect_right(starts, index) - 1
    return slot >= 0 and ranges[slot].contains(index)
