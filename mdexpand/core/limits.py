"""
Size limits and cheap content checks.

Token Estimation Note:
    Token counts are estimated using a simple heuristic of ~4 characters per
    token. This is a rough approximation that works reasonably well for
    English text and code; actual counts vary by model and content type.
"""

from pathlib import Path
from typing import Optional

# Maximum size of any single imported file (10MB)
MAX_INPUT_SIZE = 10 * 1024 * 1024

CHARS_PER_TOKEN = 4

# Size of the prefix inspected for NUL bytes
BINARY_CHECK_SIZE = 8192

BINARY_EXTENSIONS = {
    # Images
    ".png", ".jpg", ".jpeg", ".gif", ".ico", ".webp", ".bmp", ".svg", ".tiff", ".tif",
    # Executables and libraries
    ".exe", ".dll", ".so", ".dylib", ".bin",
    # Archives
    ".zip", ".tar", ".gz", ".7z", ".rar", ".bz2", ".xz",
    # Documents
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    # Databases
    ".sqlite", ".db", ".sqlite3",
    ".dat", ".data",
    ".wasm", ".pyc", ".class", ".o", ".a", ".lib",
}


def estimate_tokens(content: str, chars_per_token: int = CHARS_PER_TOKEN) -> int:
    """Estimate token count for content."""
    return len(content) // chars_per_token


def exceeds_limit(size: int, limit: int = MAX_INPUT_SIZE) -> bool:
    """Check if a byte size exceeds the input limit."""
    return size > limit


def format_bytes(size: int) -> str:
    """Format bytes as a human-readable string."""
    if size < 1024:
        return f"{size} bytes"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}KB"
    return f"{size / (1024 * 1024):.1f}MB"


def is_binary_file(path: Path, head: Optional[bytes] = None) -> bool:
    """Check if a file is binary based on its extension or content.

    Args:
        path: Path to the file
        head: Leading bytes of the file, read from disk when not supplied

    Returns:
        True if the file appears to be binary
    """
    if path.name == ".DS_Store" or path.suffix.lower() in BINARY_EXTENSIONS:
        return True

    if head is None:
        try:
            with open(path, "rb") as f:
                head = f.read(BINARY_CHECK_SIZE)
        except OSError:
            return False

    return b"\x00" in head[:BINARY_CHECK_SIZE]
