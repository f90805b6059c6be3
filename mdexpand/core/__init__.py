"""Core components for mdexpand."""

from .config import Config, load_config
from .directives import (
    CommandDirective,
    Directive,
    ExecutableFenceDirective,
    FileDirective,
    GlobDirective,
    LineRange,
    SafeRange,
    SymbolDirective,
    UrlDirective,
)
from .exceptions import ExitCode, ExpansionError
from .expander import ImportExpander, ImportTracker, ResolutionContext, expand_imports
from .logging import get_logger, setup_logging
from .parser import has_directives, parse_directives
from .scanner import find_safe_ranges

__all__ = [
    "CommandDirective",
    "Config",
    "Directive",
    "ExecutableFenceDirective",
    "ExitCode",
    "ExpansionError",
    "FileDirective",
    "GlobDirective",
    "ImportExpander",
    "ImportTracker",
    "LineRange",
    "ResolutionContext",
    "SafeRange",
    "SymbolDirective",
    "UrlDirective",
    "expand_imports",
    "find_safe_ranges",
    "get_logger",
    "has_directives",
    "load_config",
    "parse_directives",
    "setup_logging",
]
