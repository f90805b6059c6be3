"""
Command execution for !`cmd` directives and executable code fences.

A command that runs is never an error here, whatever its exit code: its
output (error text included) is what the document author asked to see.
CommandFailed is reserved for commands that could not be run at all or
that hit the timeout.
"""

import os
import re
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from .exceptions import CommandFailed

ANSI_ESCAPE_PATTERN = re.compile(
    r"[\u001b\u009b][\[()#;?]*(?:[0-9]{1,4}(?:;[0-9]{0,4})*)?[0-9A-ORZcf-nqry=><]"
)

# Language tag -> temp file suffix for executable fences
SCRIPT_EXTENSIONS = {
    "ts": ".ts",
    "typescript": ".ts",
    "js": ".js",
    "javascript": ".js",
    "py": ".py",
    "python": ".py",
    "sh": ".sh",
    "bash": ".sh",
    "zsh": ".sh",
    "rb": ".rb",
    "ruby": ".rb",
}


@dataclass
class CommandResult:
    """Captured output of one command."""
    stdout: str
    stderr: str
    exit_code: int


class CommandExecutor(Protocol):
    def run_shell(self, command: str, cwd: Path, env: dict[str, str]) -> CommandResult: ...

    def run_script(
        self, shebang: str, language: str, code: str, cwd: Path, env: dict[str, str]
    ) -> CommandResult: ...


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences (colors, cursor movement)."""
    return ANSI_ESCAPE_PATTERN.sub("", text)


def truncate_output(text: str, limit: Optional[int]) -> str:
    """Truncate output to limit if set, noting how much was cut."""
    if limit is None or len(text) <= limit:
        return text
    removed = len(text) - limit
    return f"{text[:limit]}\n... [Output truncated: {removed:,} characters removed]"


def combine_output(result: CommandResult, limit: Optional[int] = None) -> str:
    """Merge stderr and stdout into the text that gets inlined.

    Both streams are ANSI-stripped and trimmed; stderr comes first when both
    are non-empty.
    """
    stdout = strip_ansi(result.stdout).strip()
    stderr = strip_ansi(result.stderr).strip()
    if stdout and stderr:
        output = f"{stderr}\n{stdout}"
    else:
        output = stdout or stderr
    return truncate_output(output, limit)


class ShellExecutor:
    """Runs commands with subprocess.

    Args:
        timeout: Seconds before a command is killed
        shell: Shell used for !`cmd` directives
    """

    def __init__(self, timeout: float = 30.0, shell: str = "sh"):
        self.timeout = timeout
        self.shell = shell

    def _run(self, args: list[str], cwd: Path, env: dict[str, str], label: str) -> CommandResult:
        try:
            proc = subprocess.run(
                args,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
                cwd=cwd,
                env=env,
            )
        except subprocess.TimeoutExpired as e:
            raise CommandFailed(command=label, reason=f"timed out after {self.timeout}s", timeout=True) from e
        except OSError as e:
            raise CommandFailed(command=label, reason=str(e)) from e

        return CommandResult(stdout=proc.stdout, stderr=proc.stderr, exit_code=proc.returncode)

    def run_shell(self, command: str, cwd: Path, env: dict[str, str]) -> CommandResult:
        if os.name == "nt":
            args = ["cmd.exe", "/d", "/s", "/c", command]
        else:
            args = [self.shell, "-c", command]
        return self._run(args, cwd, env, command)

    def run_script(
        self, shebang: str, language: str, code: str, cwd: Path, env: dict[str, str]
    ) -> CommandResult:
        """Write the fence to a temporary executable and run it."""
        suffix = SCRIPT_EXTENSIONS.get(language.lower(), f".{language}" if language else "")
        fd, script_path = tempfile.mkstemp(prefix="mdexpand-", suffix=suffix)
        try:
            with os.fdopen(fd, "w") as f:
                f.write(f"{shebang}\n{code}\n")
            os.chmod(script_path, 0o755)
            return self._run([script_path], cwd, env, f"code fence ({language}): {shebang}")
        finally:
            try:
                os.unlink(script_path)
            except FileNotFoundError:
                pass
