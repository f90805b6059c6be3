"""Tests for mdexpand custom exceptions and JSON serialization."""

import json

import pytest

from mdexpand.core.exceptions import (
    BinaryFileImport,
    CircularImport,
    CommandFailed,
    ExitCode,
    ExpansionError,
    FileSizeLimitExceeded,
    ImportNotFound,
    NetworkError,
    SymbolNotFound,
    TokenBudgetExceeded,
    UnsupportedContentType,
    exception_to_json,
    format_json_error,
)

pytestmark = pytest.mark.unit


class TestExitCodes:
    """Test exit code constants."""

    def test_exit_codes_are_distinct(self):
        codes = [
            ExitCode.SUCCESS,
            ExitCode.GENERAL_ERROR,
            ExitCode.IMPORT_NOT_FOUND,
            ExitCode.CIRCULAR_IMPORT,
            ExitCode.LIMIT_EXCEEDED,
            ExitCode.SYMBOL_NOT_FOUND,
            ExitCode.UNSUPPORTED_CONTENT,
            ExitCode.COMMAND_FAILED,
            ExitCode.NETWORK_ERROR,
        ]
        assert len(codes) == len(set(codes))

    def test_success_is_zero(self):
        assert ExitCode.SUCCESS == 0

    @pytest.mark.parametrize("exc,code", [
        (ImportNotFound("./a.md", "/p/a.md"), ExitCode.IMPORT_NOT_FOUND),
        (CircularImport(["/a", "/b", "/a"]), ExitCode.CIRCULAR_IMPORT),
        (FileSizeLimitExceeded("/p/a", 10, 5), ExitCode.LIMIT_EXCEEDED),
        (TokenBudgetExceeded("*.md", 3, 900, 100), ExitCode.LIMIT_EXCEEDED),
        (SymbolNotFound("Foo"), ExitCode.SYMBOL_NOT_FOUND),
        (BinaryFileImport("./a.png", "/p/a.png"), ExitCode.UNSUPPORTED_CONTENT),
        (UnsupportedContentType("https://x"), ExitCode.UNSUPPORTED_CONTENT),
        (CommandFailed("ls"), ExitCode.COMMAND_FAILED),
        (NetworkError("https://x", "refused"), ExitCode.NETWORK_ERROR),
    ])
    def test_exception_exit_codes(self, exc, code):
        assert isinstance(exc, ExpansionError)
        assert exc.exit_code == code

    def test_base_is_general_error(self):
        assert ExpansionError("boom").exit_code == ExitCode.GENERAL_ERROR


class TestMessages:
    """Test string representations."""

    def test_directive_appended(self):
        exc = ImportNotFound("./a.md", "/p/a.md", directive="@./a.md")
        assert str(exc) == "Import not found: ./a.md (resolved to /p/a.md) (in directive @./a.md)"

    def test_directive_can_be_set_later(self):
        exc = SymbolNotFound("Foo", path="./a.ts")
        exc.directive = "@./a.ts#Foo"
        assert str(exc).endswith("(in directive @./a.ts#Foo)")

    def test_circular_lists_chain(self):
        exc = CircularImport(["/p/a.md", "/p/b.md", "/p/a.md"])
        assert "/p/a.md -> /p/b.md -> /p/a.md" in str(exc)

    def test_size_limit_suggests_ranges(self):
        exc = FileSizeLimitExceeded("/p/big.ts", 20 * 1024 * 1024, 10 * 1024 * 1024)
        message = str(exc)
        assert "10.0MB" in message
        assert "20.0MB" in message
        assert "@./file.ts:1-100" in message

    def test_token_budget_mentions_override(self):
        exc = TokenBudgetExceeded("./src/**/*.ts", 12, 150_000, 100_000)
        message = str(exc)
        assert "~150,000 tokens" in message
        assert "12 files" in message
        assert "MDEXPAND_FORCE_CONTEXT=1" in message

    def test_command_timeout_message(self):
        assert str(CommandFailed("sleep 99", timeout=True)) == "Command timed out: sleep 99"

    def test_unsupported_without_type(self):
        assert "unknown" in str(UnsupportedContentType("https://x/a"))


class TestExceptionToJson:
    """Test JSON serialization."""

    def test_generic_exception(self):
        result = exception_to_json(ValueError("bad"))
        assert result == {
            "error": {"type": "ValueError", "message": "bad", "exit_code": ExitCode.GENERAL_ERROR}
        }

    def test_import_not_found_fields(self):
        exc = ImportNotFound("./a.md", "/p/a.md", directive="@./a.md")
        error = exception_to_json(exc)["error"]

        assert error["type"] == "ImportNotFound"
        assert error["exit_code"] == ExitCode.IMPORT_NOT_FOUND
        assert error["directive"] == "@./a.md"
        assert error["path"] == "./a.md"
        assert error["resolved_path"] == "/p/a.md"

    def test_circular_chain(self):
        error = exception_to_json(CircularImport(["/a", "/b", "/a"]))["error"]
        assert error["chain"] == ["/a", "/b", "/a"]
        assert "directive" not in error

    def test_token_budget_fields(self):
        error = exception_to_json(TokenBudgetExceeded("*.md", 3, 900, 100))["error"]
        assert (error["pattern"], error["file_count"], error["estimate"], error["limit"]) == (
            "*.md", 3, 900, 100
        )

    def test_network_status(self):
        error = exception_to_json(NetworkError("https://x", "HTTP 404", status=404))["error"]
        assert error["url"] == "https://x"
        assert error["status"] == 404

    def test_context_included(self):
        result = exception_to_json(CommandFailed("ls"), {"file": "prompt.md"})
        assert result["error"]["context"] == {"file": "prompt.md"}

    def test_format_json_error_is_valid_json(self):
        output = format_json_error(SymbolNotFound("Foo", path="./a.ts"))
        parsed = json.loads(output)
        assert parsed["error"]["symbol"] == "Foo"
        assert parsed["error"]["path"] == "./a.ts"
