"""
Logging configuration for mdexpand.

Provides centralized logging setup with verbosity levels:
- 0 (default): WARNING - errors and warnings only (glob token warnings)
- 1 (-v):      INFO - key operations (file loads, fetches, commands)
- 2 (-vv):     DEBUG - detailed info (resolved paths, ignore files, sizes)
- 3+ (-vvv):   TRACE - everything (parsed directives, safe ranges)

ImportLoggerAdapter adds the current import chain to each message so
nested expansion output can be traced back to the file that caused it.
"""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

# Custom TRACE level (more verbose than DEBUG)
TRACE = 5
logging.addLevelName(TRACE, "TRACE")


def trace(self, message, *args, **kwargs):
    """Log at TRACE level."""
    if self.isEnabledFor(TRACE):
        self._log(TRACE, message, args, **kwargs)


logging.Logger.trace = trace


@dataclass
class ImportChain:
    """The files currently being expanded, outermost first."""
    files: tuple[str, ...] = field(default_factory=tuple)
    max_shown: int = 3

    def format_prefix(self) -> str:
        """Format the chain as a log prefix.

        Examples:
            [prompt.md]
            [prompt.md>rules.md]
            [...>b.md>c.md>d.md]
        """
        if not self.files:
            return ""

        names = [Path(f).name for f in self.files]
        if len(names) > self.max_shown:
            names = ["..."] + names[-self.max_shown:]
        return f"[{'>'.join(names)}]"


class ImportLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that includes the import chain in messages.

    Usage:
        logger = get_import_logger("mdexpand.core.expander", ("/p/a.md", "/p/b.md"))
        logger.info("Loading: ./c.md")  # Logs: [a.md>b.md] Loading: ./c.md
    """

    def __init__(self, logger: logging.Logger, chain: ImportChain):
        super().__init__(logger, {})
        self.chain = chain

    def process(self, msg, kwargs):
        prefix = self.chain.format_prefix()
        if prefix:
            return f"{prefix} {msg}", kwargs
        return msg, kwargs

    def trace(self, msg, *args, **kwargs):
        if self.isEnabledFor(TRACE):
            self.log(TRACE, msg, *args, **kwargs)


def setup_logging(verbosity: int = 0, quiet: bool = False) -> logging.Logger:
    """Configure logging based on verbosity level.

    Args:
        verbosity: Number of -v flags (0=WARNING, 1=INFO, 2=DEBUG, 3+=TRACE)
        quiet: If True, suppress all output except errors

    Returns:
        The configured root logger for mdexpand
    """
    if quiet:
        level = logging.ERROR
    elif verbosity == 0:
        level = logging.WARNING
    elif verbosity == 1:
        level = logging.INFO
    elif verbosity == 2:
        level = logging.DEBUG
    else:
        level = TRACE

    logger = logging.getLogger("mdexpand")
    logger.setLevel(level)
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    if verbosity >= 2:
        fmt = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        formatter = logging.Formatter(fmt, datefmt="%H:%M:%S")
    elif verbosity == 1:
        formatter = logging.Formatter("[%(levelname)s] %(message)s")
    else:
        formatter = logging.Formatter("%(message)s")

    handler.setFormatter(formatter)
    logger.addHandler(handler)

    # At TRACE level, also enable debug for httpx and friends
    if verbosity >= 3:
        logging.getLogger().setLevel(logging.DEBUG)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Module name (e.g., "mdexpand.core.globs").
              If None, returns the root mdexpand logger.
    """
    if name is None:
        return logging.getLogger("mdexpand")
    return logging.getLogger(name)


def get_import_logger(name: str, files: tuple[str, ...] = ()) -> ImportLoggerAdapter:
    """Get a logger that prefixes messages with an import chain."""
    return ImportLoggerAdapter(get_logger(name), ImportChain(files=tuple(files)))
