"""
Configuration file loading for mdexpand.

Loads .mdexpand.yaml from the project root or home directory.
Config values provide defaults for limits, command execution and remote
fetches; a few environment variables override them at call time.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .limits import CHARS_PER_TOKEN, MAX_INPUT_SIZE

CONFIG_FILENAME = ".mdexpand.yaml"

# Set to any value other than "" or "0" to lift the glob token ceiling
FORCE_CONTEXT_ENV = "MDEXPAND_FORCE_CONTEXT"
MAX_TOKENS_ENV = "MDEXPAND_MAX_TOKENS"


@dataclass
class ConfigLimits:
    """Size and token limits."""
    max_tokens: int = 100_000
    warn_tokens: int = 50_000
    max_file_size: int = MAX_INPUT_SIZE
    chars_per_token: int = CHARS_PER_TOKEN


@dataclass
class ConfigCommands:
    """Settings for !`command` and executable fence directives."""
    timeout: float = 30.0
    max_output: int = 100_000
    shell: str = "sh"


@dataclass
class ConfigRemote:
    """Settings for @https:// directives."""
    timeout: float = 30.0
    user_agent: str = "mdexpand/0.1"


@dataclass
class Config:
    """Loaded configuration."""
    limits: ConfigLimits = field(default_factory=ConfigLimits)
    commands: ConfigCommands = field(default_factory=ConfigCommands)
    remote: ConfigRemote = field(default_factory=ConfigRemote)
    source_path: Optional[Path] = None

    @classmethod
    def from_dict(cls, data: dict, source_path: Optional[Path] = None) -> "Config":
        """Create Config from parsed YAML dict."""
        config = cls(source_path=source_path)

        if "limits" in data and isinstance(data["limits"], dict):
            limits = data["limits"]
            config.limits.max_tokens = int(limits.get("max_tokens", config.limits.max_tokens))
            config.limits.warn_tokens = int(limits.get("warn_tokens", config.limits.warn_tokens))
            config.limits.max_file_size = int(
                limits.get("max_file_size", config.limits.max_file_size)
            )
            config.limits.chars_per_token = max(
                1, int(limits.get("chars_per_token", config.limits.chars_per_token))
            )

        if "commands" in data and isinstance(data["commands"], dict):
            cmds = data["commands"]
            config.commands.timeout = float(cmds.get("timeout", config.commands.timeout))
            config.commands.max_output = int(cmds.get("max_output", config.commands.max_output))
            config.commands.shell = cmds.get("shell", config.commands.shell)

        if "remote" in data and isinstance(data["remote"], dict):
            remote = data["remote"]
            config.remote.timeout = float(remote.get("timeout", config.remote.timeout))
            config.remote.user_agent = remote.get("user_agent", config.remote.user_agent)

        return config

    def max_tokens(self, env: Optional[dict[str, str]] = None) -> int:
        """Token ceiling for glob imports, honoring MDEXPAND_MAX_TOKENS."""
        env = os.environ if env is None else env
        override = env.get(MAX_TOKENS_ENV)
        if override:
            try:
                return int(override)
            except ValueError:
                logging.getLogger("mdexpand.core.config").warning(
                    f"Ignoring non-integer {MAX_TOKENS_ENV}={override!r}"
                )
        return self.limits.max_tokens


def force_context_enabled(env: Optional[dict[str, str]] = None) -> bool:
    """Check whether the glob token ceiling has been lifted."""
    env = os.environ if env is None else env
    return env.get(FORCE_CONTEXT_ENV, "") not in ("", "0")


# Global cached config
_cached_config: Optional[Config] = None


def load_config(path: Optional[Path] = None, use_cache: bool = True) -> Config:
    """Load .mdexpand.yaml from project root or home.

    Search order:
    1. Explicit path if provided
    2. .mdexpand.yaml in current directory
    3. .mdexpand.yaml in parent directories (up to git root or /)
    4. ~/.mdexpand.yaml in home directory

    Returns:
        Loaded Config, or default Config if no file found
    """
    global _cached_config

    if use_cache and _cached_config is not None:
        return _cached_config

    config_path = None

    if path and path.exists():
        config_path = path
    else:
        search_dir = Path.cwd()
        while search_dir != search_dir.parent:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                config_path = candidate
                break
            if (search_dir / ".git").exists():
                break
            search_dir = search_dir.parent

        if config_path is None:
            home_config = Path.home() / CONFIG_FILENAME
            if home_config.exists():
                config_path = home_config

    if config_path is None:
        config = Config()
    else:
        try:
            data = yaml.safe_load(config_path.read_text())
            config = Config.from_dict(data or {}, source_path=config_path)
        except (yaml.YAMLError, OSError, ValueError, TypeError) as e:
            logging.getLogger("mdexpand.core.config").warning(
                f"Failed to load config from {config_path}: {e}"
            )
            config = Config()

    if use_cache:
        _cached_config = config

    return config


def clear_config_cache() -> None:
    """Clear the cached config (useful for testing)."""
    global _cached_config
    _cached_config = None
