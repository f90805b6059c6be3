"""
Glob expansion for @./src/**/*.ts directives.

Matches files relative to the importing file's directory, drops anything
ignored by .gitignore files (walked upward to the repository root) or the
built-in ignore set, and formats the survivors as one XML-style block per
file, sorted by relative path.

A token budget bounds the output: above ``warn_tokens`` a warning goes to
the log and the tracker, above ``max_tokens`` the import fails unless
MDEXPAND_FORCE_CONTEXT is set.
"""

import glob as glob_module
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pathspec

from .exceptions import FileSizeLimitExceeded, TokenBudgetExceeded
from .limits import (
    CHARS_PER_TOKEN,
    MAX_INPUT_SIZE,
    estimate_tokens,
    exceeds_limit,
    is_binary_file,
)
from .logging import get_logger

logger = get_logger(__name__)

# Always ignored, whatever the .gitignore files say
DEFAULT_IGNORES = [
    ".git",
    "node_modules",
    "__pycache__",
    ".venv",
    ".DS_Store",
    "*.log",
]


@dataclass
class GlobFile:
    """A matched file, with its path relative to the glob base."""
    path: str
    content: str


@dataclass
class GlobResult:
    """Outcome of a glob expansion."""
    pattern: str
    files: list[GlobFile]
    estimated_tokens: int
    skipped_binary: list[str] = field(default_factory=list)
    warning: Optional[str] = None

    @property
    def text(self) -> str:
        return format_files_as_xml(self.files)


class IgnoreRules:
    """Combined .gitignore rules from a directory and its ancestors.

    Each .gitignore is anchored at its own directory, so a pattern like
    ``/build`` only matches relative to the file that declares it.
    """

    def __init__(self, base: Path):
        self.base = base
        self.builtin = pathspec.GitIgnoreSpec.from_lines(DEFAULT_IGNORES)
        self.specs: list[tuple[Path, pathspec.GitIgnoreSpec]] = []

    def add_file(self, gitignore: Path) -> None:
        lines = [
            line for line in gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
            if line.strip() and not line.startswith("#")
        ]
        if lines:
            self.specs.append((gitignore.parent, pathspec.GitIgnoreSpec.from_lines(lines)))

    def ignores(self, path: Path) -> bool:
        """Check whether an absolute path is ignored."""
        try:
            rel = path.relative_to(self.base)
        except ValueError:
            rel = Path(*path.parts[1:])
        if self.builtin.match_file(rel.as_posix()):
            return True

        for root, spec in self.specs:
            try:
                rel_to_root = path.relative_to(root)
            except ValueError:
                continue
            if spec.match_file(rel_to_root.as_posix()):
                return True
        return False


def load_ignore_rules(directory: Path) -> IgnoreRules:
    """Collect .gitignore files from directory up to the repository root.

    The walk stops at the first directory containing a ``.git`` entry, or
    at the filesystem root.
    """
    rules = IgnoreRules(directory)
    current = directory
    while True:
        gitignore = current / ".gitignore"
        if gitignore.is_file():
            logger.debug(f"Loading ignore rules from {gitignore}")
            rules.add_file(gitignore)
        if (current / ".git").exists() or current.parent == current:
            break
        current = current.parent
    return rules


def format_tag_name(path: str) -> str:
    """Derive an XML tag name from a file's base name.

    ``src/User Profile.test.ts`` -> ``user-profile-test``,
    ``2024-notes.md`` -> ``_2024-notes``.
    """
    stem = os.path.basename(path)
    stem = re.sub(r"\.[^.]+$", "", stem).lower()
    name = re.sub(r"[^a-z0-9]+", "-", stem).strip("-")
    name = re.sub(r"^(\d)", r"_\1", name)
    return name or "file"


def format_files_as_xml(files: list[GlobFile]) -> str:
    """Format files as tagged blocks for LLM consumption."""
    blocks = []
    for f in files:
        tag = format_tag_name(f.path)
        blocks.append(f'<{tag} path="{f.path}">\n{f.content}\n</{tag}>')
    return "\n\n".join(blocks)


def _match_files(pattern: str, base: Path) -> list[Path]:
    expanded = os.path.expanduser(pattern)
    if os.path.isabs(expanded):
        matches = glob_module.glob(expanded, recursive=True)
    else:
        relative = expanded[2:] if expanded.startswith("./") else expanded
        matches = [
            os.path.join(base, m)
            for m in glob_module.glob(relative, root_dir=base, recursive=True)
        ]
    return [Path(m) for m in matches if os.path.isfile(m)]


def collect_glob(
    pattern: str,
    base: Path,
    max_tokens: int = 100_000,
    warn_tokens: int = 50_000,
    max_file_size: int = MAX_INPUT_SIZE,
    chars_per_token: int = CHARS_PER_TOKEN,
    force: bool = False,
) -> GlobResult:
    """Expand a glob pattern into the files it matches.

    Args:
        pattern: Glob pattern as written after ``@``
        base: Directory of the importing file
        max_tokens: Token ceiling for the whole expansion
        warn_tokens: Threshold above which a warning is emitted
        max_file_size: Per-file byte ceiling
        chars_per_token: Divisor for the token estimate
        force: Skip the token ceiling

    Returns:
        GlobResult with files sorted by relative path

    Raises:
        FileSizeLimitExceeded: If any matched file is too large
        TokenBudgetExceeded: If the estimate exceeds max_tokens and not forced
    """
    base = base.resolve()
    rules = load_ignore_rules(base)
    files: list[GlobFile] = []
    skipped_binary: list[str] = []

    for absolute in _match_files(pattern, base):
        rel = os.path.relpath(absolute, base)
        if rules.ignores(absolute):
            logger.debug(f"Ignored: {rel}")
            continue

        if is_binary_file(absolute):
            skipped_binary.append(rel)
            continue

        size = absolute.stat().st_size
        if exceeds_limit(size, max_file_size):
            raise FileSizeLimitExceeded(path=str(absolute), size=size, limit=max_file_size)

        content = absolute.read_text(encoding="utf-8", errors="replace")
        files.append(GlobFile(path=Path(rel).as_posix(), content=content))

    if skipped_binary:
        logger.info(f"Skipped {len(skipped_binary)} binary file(s): {', '.join(skipped_binary)}")

    files.sort(key=lambda f: f.path)
    tokens = estimate_tokens("\n".join(f.content for f in files), chars_per_token)
    logger.info(f"Expanding {pattern}: {len(files)} files (~{tokens:,} tokens est)")

    if tokens > max_tokens and not force:
        raise TokenBudgetExceeded(
            pattern=pattern, file_count=len(files), estimate=tokens, limit=max_tokens
        )

    warning = None
    if tokens > warn_tokens:
        warning = f"High token count for {pattern} (~{tokens:,}). This may be expensive."
        logger.warning(warning)

    return GlobResult(
        pattern=pattern,
        files=files,
        estimated_tokens=tokens,
        skipped_binary=skipped_binary,
        warning=warning,
    )
