"""Command implementations for mdexpand CLI."""

from .expand import expand
from .parse import parse

__all__ = ["expand", "parse"]
