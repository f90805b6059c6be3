"""
Line range and symbol extraction.

Line ranges are 1-based and inclusive, clamped to the file bounds:
    @./file.ts:10-50

Symbols are located by declaration patterns and delimited by balanced
brace/paren scanning, which covers TypeScript/JavaScript-style sources:
    @./file.ts#SymbolName

Supported declarations (each optionally exported / async / abstract):
interface, type alias, function, class, enum, const/let/var.
"""

import re

from .exceptions import SymbolNotFound

_MODIFIERS = r"(?:export\s+)?(?:default\s+)?(?:declare\s+)?"


def _declaration_patterns(name: str) -> list[re.Pattern]:
    n = re.escape(name)
    return [
        re.compile(rf"^{_MODIFIERS}interface\s+{n}\s*(?:<[^>]+>\s*)?(?:extends\s+[^{{]+)?\{{"),
        re.compile(rf"^{_MODIFIERS}type\s+{n}\s*(?:<[^>]+>)?\s*="),
        re.compile(rf"^{_MODIFIERS}(?:async\s+)?function(?:\s*\*\s*|\s+){n}\s*(?:<[^>]+>)?\s*\("),
        re.compile(
            rf"^{_MODIFIERS}(?:abstract\s+)?class\s+{n}\s*(?:<[^>]+>\s*)?"
            rf"(?:extends\s+[^{{]+)?(?:implements\s+[^{{]+)?\{{"
        ),
        re.compile(rf"^{_MODIFIERS}(?:const\s+)?enum\s+{n}\s*\{{"),
        re.compile(rf"^{_MODIFIERS}(?:const|let|var)\s+{n}\s*(?::[^=]+)?\s*="),
    ]


def extract_lines(content: str, start: int, end: int) -> str:
    """Extract lines by 1-based inclusive range.

    Bounds outside the file are clamped rather than rejected, so the
    result is whatever overlap exists (possibly empty).
    """
    lines = content.split("\n")
    start_idx = max(0, start - 1)
    end_idx = min(len(lines), end)
    return "\n".join(lines[start_idx:end_idx])


class _DepthScanner:
    """Tracks brace/paren depth across lines, skipping string literals."""

    def __init__(self):
        self.brace_depth = 0
        self.paren_depth = 0
        self.quote = ""
        self.escaped = False

    def feed(self, line: str) -> None:
        for char in line:
            if self.quote:
                if self.escaped:
                    self.escaped = False
                elif char == "\\":
                    self.escaped = True
                elif char == self.quote:
                    self.quote = ""
                continue

            if char in "\"'`":
                self.quote = char
            elif char == "{":
                self.brace_depth += 1
            elif char == "}":
                self.brace_depth -= 1
            elif char == "(":
                self.paren_depth += 1
            elif char == ")":
                self.paren_depth -= 1

        # Only template literals span lines
        if self.quote and self.quote != "`":
            self.quote = ""
            self.escaped = False

    @property
    def balanced(self) -> bool:
        return self.brace_depth == 0 and self.paren_depth == 0 and not self.quote


def extract_symbol(content: str, symbol_name: str) -> str:
    """Extract one declaration from source content.

    The first line matching any declaration pattern starts the span. It
    ends on the first line where braces and parens are balanced and the
    line ends with ``;`` or ``}``, or the next line does not continue the
    expression with a leading ``.``. If the depth never returns to zero the
    rest of the file is returned.

    Raises:
        SymbolNotFound: If no declaration of ``symbol_name`` exists
    """
    lines = content.split("\n")
    patterns = _declaration_patterns(symbol_name)

    start_line = -1
    for i, line in enumerate(lines):
        stripped = line.strip()
        if any(p.match(stripped) for p in patterns):
            start_line = i
            break

    if start_line == -1:
        raise SymbolNotFound(symbol=symbol_name)

    scanner = _DepthScanner()
    for i in range(start_line, len(lines)):
        scanner.feed(lines[i])
        if not scanner.balanced:
            continue

        trimmed = lines[i].strip()
        has_next = i + 1 < len(lines)
        if (
            trimmed.endswith(";")
            or trimmed.endswith("}")
            or (has_next and not lines[i + 1].strip().startswith("."))
        ):
            return "\n".join(lines[start_line:i + 1])

    return "\n".join(lines[start_line:])
