"""Shared fixtures for mdexpand tests."""

import logging

import pytest

from mdexpand.core.config import Config, clear_config_cache
from mdexpand.core.executor import CommandResult
from mdexpand.core.remote import FetchResponse


class RecordingFetcher:
    """RemoteFetcher that serves canned responses and records each URL."""

    def __init__(self, responses: dict[str, FetchResponse]):
        self.responses = responses
        self.calls: list[str] = []

    def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        return self.responses[url]


class RecordingExecutor:
    """CommandExecutor that returns a fixed result and records each call."""

    def __init__(self, result: CommandResult = None):
        self.result = result or CommandResult(stdout="ok\n", stderr="", exit_code=0)
        self.shell_calls: list[tuple] = []
        self.script_calls: list[tuple] = []

    def run_shell(self, command, cwd, env):
        self.shell_calls.append((command, cwd, env))
        return self.result

    def run_script(self, shebang, language, code, cwd, env):
        self.script_calls.append((shebang, language, code, cwd, env))
        return self.result


@pytest.fixture(autouse=True)
def reset_config_cache():
    """Keep a cached .mdexpand.yaml from leaking between tests."""
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture(autouse=True)
def reset_mdexpand_logger():
    """Undo setup_logging() calls made by CLI tests."""
    yield
    logger = logging.getLogger("mdexpand")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def config():
    """Default configuration, independent of any .mdexpand.yaml on disk."""
    return Config()


@pytest.fixture
def workspace(tmp_path):
    """A temporary directory marked as a repository root."""
    (tmp_path / ".git").mkdir()
    return tmp_path


@pytest.fixture
def fetcher():
    return RecordingFetcher({})


@pytest.fixture
def executor():
    return RecordingExecutor()
