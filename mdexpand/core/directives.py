"""
Directive types produced by the parser.

Each directive records the exact matched text (``original``) and where the
match starts in the scanned document (``index``); together they define the
span that gets replaced by resolved content.
"""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class SafeRange:
    """Half-open [start, end) span of text outside any code span."""
    start: int
    end: int

    def contains(self, index: int) -> bool:
        return self.start <= index < self.end


@dataclass(frozen=True)
class LineRange:
    """1-based inclusive line bounds."""
    start: int
    end: int


@dataclass(frozen=True)
class FileDirective:
    """@./path, optionally with a :start-end line slice."""
    path: str
    original: str
    index: int
    line_range: Optional[LineRange] = None
    kind = "file"

    @property
    def target(self) -> str:
        if self.line_range:
            return f"{self.path}:{self.line_range.start}-{self.line_range.end}"
        return self.path


@dataclass(frozen=True)
class SymbolDirective:
    """@./path#Name - one declaration from a source file."""
    path: str
    symbol: str
    original: str
    index: int
    kind = "symbol"

    @property
    def target(self) -> str:
        return f"{self.path}#{self.symbol}"


@dataclass(frozen=True)
class GlobDirective:
    """@./src/**/*.ts - every matching, non-ignored file."""
    pattern: str
    original: str
    index: int
    kind = "glob"

    @property
    def target(self) -> str:
        return self.pattern


@dataclass(frozen=True)
class UrlDirective:
    """@https://... - fetched markdown, JSON or plain text."""
    url: str
    original: str
    index: int
    kind = "url"

    @property
    def target(self) -> str:
        return self.url


@dataclass(frozen=True)
class CommandDirective:
    """!`cmd` - captured output of a shell command."""
    command: str
    original: str
    index: int
    kind = "command"

    @property
    def target(self) -> str:
        return self.command


@dataclass(frozen=True)
class ExecutableFenceDirective:
    """A fenced block whose first code line is a shebang."""
    shebang: str
    language: str
    code: str
    original: str
    index: int
    kind = "executable_fence"

    @property
    def target(self) -> str:
        return f"{self.language}: {self.shebang}"


Directive = Union[
    FileDirective,
    SymbolDirective,
    GlobDirective,
    UrlDirective,
    CommandDirective,
    ExecutableFenceDirective,
]

CONTENT_KINDS = frozenset({"file", "symbol", "glob", "url"})
