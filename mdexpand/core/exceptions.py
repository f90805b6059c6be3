"""
Custom exceptions for mdexpand.

Provides specific exception types with associated exit codes for each way
import expansion can fail. All exceptions support JSON serialization for CI
integration via the --json-errors flag.

Every resolver failure is fatal to the enclosing expansion: the orchestrator
never returns a half-expanded document. The ``directive`` field carries the
original directive text so users can find the offending line.
"""

import json
from dataclasses import dataclass
from typing import Any, Optional


class ExitCode:
    """Standard exit codes for mdexpand."""
    SUCCESS = 0
    GENERAL_ERROR = 1
    IMPORT_NOT_FOUND = 2
    CIRCULAR_IMPORT = 3
    LIMIT_EXCEEDED = 4
    SYMBOL_NOT_FOUND = 5
    UNSUPPORTED_CONTENT = 6
    COMMAND_FAILED = 7
    NETWORK_ERROR = 8


class ExpansionError(Exception):
    """Base class for all import expansion failures."""

    directive: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return ExitCode.GENERAL_ERROR

    def _with_directive(self, message: str) -> str:
        if self.directive:
            return f"{message} (in directive {self.directive})"
        return message


@dataclass
class ImportNotFound(ExpansionError):
    """Raised when an imported file does not exist.

    Attributes:
        path: Path as written in the directive
        resolved_path: Absolute path it resolved to
    """
    path: str
    resolved_path: str
    directive: Optional[str] = None

    def __str__(self) -> str:
        return self._with_directive(
            f"Import not found: {self.path} (resolved to {self.resolved_path})"
        )

    @property
    def exit_code(self) -> int:
        return ExitCode.IMPORT_NOT_FOUND


@dataclass
class CircularImport(ExpansionError):
    """Raised when a file imports one of its own ancestors.

    Attributes:
        chain: Canonical paths from the outermost file to the repeated one
    """
    chain: list[str]
    directive: Optional[str] = None

    def __str__(self) -> str:
        return self._with_directive(
            f"Circular import detected: {' -> '.join(self.chain)}"
        )

    @property
    def exit_code(self) -> int:
        return ExitCode.CIRCULAR_IMPORT


@dataclass
class FileSizeLimitExceeded(ExpansionError):
    """Raised when a file exceeds the global input size ceiling."""
    path: str
    size: int
    limit: int
    directive: Optional[str] = None

    def __str__(self) -> str:
        from .limits import format_bytes

        return self._with_directive(
            f'File "{self.path}" exceeds {format_bytes(self.limit)} limit '
            f"({format_bytes(self.size)}). Consider using line ranges "
            f"(@./file.ts:1-100) or symbol extraction (@./file.ts#FunctionName) "
            f"to import only the relevant portion."
        )

    @property
    def exit_code(self) -> int:
        return ExitCode.LIMIT_EXCEEDED


@dataclass
class BinaryFileImport(ExpansionError):
    """Raised when a directive imports a binary file directly."""
    path: str
    resolved_path: str
    directive: Optional[str] = None

    def __str__(self) -> str:
        return self._with_directive(
            f"Cannot import binary file: {self.path} (resolved to {self.resolved_path})"
        )

    @property
    def exit_code(self) -> int:
        return ExitCode.UNSUPPORTED_CONTENT


@dataclass
class SymbolNotFound(ExpansionError):
    """Raised when no declaration of the requested symbol exists."""
    symbol: str
    path: Optional[str] = None
    directive: Optional[str] = None

    def __str__(self) -> str:
        where = f" in {self.path}" if self.path else " in file"
        return self._with_directive(f'Symbol "{self.symbol}" not found{where}')

    @property
    def exit_code(self) -> int:
        return ExitCode.SYMBOL_NOT_FOUND


@dataclass
class TokenBudgetExceeded(ExpansionError):
    """Raised when a glob expansion would exceed the token ceiling.

    Attributes:
        pattern: Glob pattern as written
        file_count: Number of matched, non-ignored files
        estimate: Estimated token count across all files
        limit: Configured token ceiling
    """
    pattern: str
    file_count: int
    estimate: int
    limit: int
    directive: Optional[str] = None

    def __str__(self) -> str:
        return self._with_directive(
            f'Glob import "{self.pattern}" would include ~{self.estimate:,} tokens '
            f"({self.file_count} files), which exceeds the {self.limit:,} token limit. "
            f"To override this limit, set the MDEXPAND_FORCE_CONTEXT=1 environment variable."
        )

    @property
    def exit_code(self) -> int:
        return ExitCode.LIMIT_EXCEEDED


@dataclass
class UnsupportedContentType(ExpansionError):
    """Raised when a URL returns content that is not markdown, JSON or text."""
    url: str
    content_type: Optional[str] = None
    directive: Optional[str] = None

    def __str__(self) -> str:
        return self._with_directive(
            f"URL returned unsupported content type: {self.content_type or 'unknown'}. "
            f"Only markdown and JSON are allowed. URL: {self.url}"
        )

    @property
    def exit_code(self) -> int:
        return ExitCode.UNSUPPORTED_CONTENT


@dataclass
class CommandFailed(ExpansionError):
    """Raised when a command could not be executed at all.

    A command that runs and exits non-zero is not an error; its output is
    inlined like any other.

    Attributes:
        command: The command (or script description) that failed
        reason: Why the executor could not run it
        timeout: Whether the command was killed after the timeout
    """
    command: str
    reason: str = ""
    timeout: bool = False
    directive: Optional[str] = None

    def __str__(self) -> str:
        if self.timeout:
            return self._with_directive(f"Command timed out: {self.command}")
        return self._with_directive(f"Command failed: {self.command} - {self.reason}")

    @property
    def exit_code(self) -> int:
        return ExitCode.COMMAND_FAILED


@dataclass
class NetworkError(ExpansionError):
    """Raised when a URL cannot be fetched."""
    url: str
    reason: str
    status: Optional[int] = None
    directive: Optional[str] = None

    def __str__(self) -> str:
        return self._with_directive(f"Failed to fetch URL: {self.url} - {self.reason}")

    @property
    def exit_code(self) -> int:
        return ExitCode.NETWORK_ERROR


def exception_to_json(exc: Exception, context: Optional[dict[str, Any]] = None) -> dict[str, Any]:
    """Convert an exception to a JSON-serializable dictionary.

    Args:
        exc: The exception to convert
        context: Optional additional context (input file, etc.)

    Returns:
        JSON-serializable dict with error details
    """
    error_dict: dict[str, Any] = {
        "type": type(exc).__name__,
        "message": str(exc),
    }

    if hasattr(exc, "exit_code"):
        error_dict["exit_code"] = exc.exit_code
    else:
        error_dict["exit_code"] = ExitCode.GENERAL_ERROR

    if isinstance(exc, ExpansionError) and exc.directive:
        error_dict["directive"] = exc.directive

    if isinstance(exc, (ImportNotFound, BinaryFileImport)):
        error_dict["path"] = exc.path
        error_dict["resolved_path"] = exc.resolved_path

    elif isinstance(exc, CircularImport):
        error_dict["chain"] = exc.chain

    elif isinstance(exc, FileSizeLimitExceeded):
        error_dict["path"] = exc.path
        error_dict["size"] = exc.size
        error_dict["limit"] = exc.limit

    elif isinstance(exc, SymbolNotFound):
        error_dict["symbol"] = exc.symbol
        if exc.path:
            error_dict["path"] = exc.path

    elif isinstance(exc, TokenBudgetExceeded):
        error_dict["pattern"] = exc.pattern
        error_dict["file_count"] = exc.file_count
        error_dict["estimate"] = exc.estimate
        error_dict["limit"] = exc.limit

    elif isinstance(exc, UnsupportedContentType):
        error_dict["url"] = exc.url
        error_dict["content_type"] = exc.content_type

    elif isinstance(exc, CommandFailed):
        error_dict["command"] = exc.command
        error_dict["timeout"] = exc.timeout

    elif isinstance(exc, NetworkError):
        error_dict["url"] = exc.url
        if exc.status is not None:
            error_dict["status"] = exc.status

    if context:
        error_dict["context"] = context

    return {"error": error_dict}


def format_json_error(exc: Exception, context: Optional[dict[str, Any]] = None) -> str:
    """Format an exception as a JSON string."""
    return json.dumps(exception_to_json(exc, context), indent=2, default=str)
