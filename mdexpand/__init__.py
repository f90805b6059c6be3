"""
mdexpand - Markdown import expansion

Expands @file, @url, glob, symbol and line-range imports, command
substitutions and executable code fences in markdown documents into a
single self-contained prompt.
"""

__version__ = "0.1.0"

from .core.expander import ImportExpander, ImportTracker, expand_imports
from .core.parser import has_directives, parse_directives

__all__ = [
    "ImportExpander",
    "ImportTracker",
    "__version__",
    "expand_imports",
    "has_directives",
    "parse_directives",
]
