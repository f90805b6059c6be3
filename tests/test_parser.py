"""Tests for the directive parser."""

import pytest

from mdexpand.core.directives import (
    CommandDirective,
    ExecutableFenceDirective,
    FileDirective,
    GlobDirective,
    LineRange,
    SymbolDirective,
    UrlDirective,
)
from mdexpand.core.parser import (
    has_directives,
    is_glob_pattern,
    parse_directives,
    parse_line_range,
    parse_symbol_reference,
)

pytestmark = pytest.mark.unit


class TestFileDirectives:
    """Test @path parsing."""

    def test_relative_paths_with_offsets(self):
        """Each directive records its exact text and start offset."""
        directives = parse_directives("Before @./first.md and @./second.md")

        assert directives == [
            FileDirective(path="./first.md", original="@./first.md", index=7),
            FileDirective(path="./second.md", original="@./second.md", index=23),
        ]

    def test_home_and_absolute_paths(self):
        """~/ and / prefixes are file directives."""
        directives = parse_directives("@~/notes.md and @/etc/motd")
        assert [d.path for d in directives] == ["~/notes.md", "/etc/motd"]

    def test_parent_relative_path(self):
        """../ paths are file directives."""
        directives = parse_directives("@../shared/rules.md")
        assert directives[0].path == "../shared/rules.md"

    def test_email_is_not_a_directive(self):
        """An @ followed by a bare word is not an import."""
        assert parse_directives("contact user@example.com or @team") == []

    def test_adjacent_directives_are_one_path(self):
        """A path runs to the next whitespace."""
        directives = parse_directives("@./a.md@./b.md")
        assert len(directives) == 1
        assert directives[0].path == "./a.md@./b.md"

    def test_line_range(self):
        """path:START-END becomes a file directive with a line range."""
        directives = parse_directives("@./src/api.ts:10-50")
        assert directives == [
            FileDirective(
                path="./src/api.ts",
                original="@./src/api.ts:10-50",
                index=0,
                line_range=LineRange(10, 50),
            )
        ]
        assert directives[0].target == "./src/api.ts:10-50"

    def test_symbol(self):
        """path#Name becomes a symbol directive."""
        directives = parse_directives("See @./src/api.ts#Client now")
        assert directives == [
            SymbolDirective(
                path="./src/api.ts",
                symbol="Client",
                original="@./src/api.ts#Client",
                index=4,
            )
        ]

    def test_symbol_allows_dollar_and_underscore(self):
        """Symbol names follow identifier rules."""
        directives = parse_directives("@./x.js#$_private1")
        assert directives[0].symbol == "$_private1"

    def test_invalid_symbol_is_plain_file(self):
        """A fragment that is not an identifier stays part of the path."""
        directives = parse_directives("@./notes.md#1-intro")
        assert isinstance(directives[0], FileDirective)
        assert directives[0].path == "./notes.md#1-intro"

    def test_glob(self):
        """Paths with glob metacharacters become glob directives."""
        directives = parse_directives("@./src/**/*.ts")
        assert directives == [
            GlobDirective(pattern="./src/**/*.ts", original="@./src/**/*.ts", index=0)
        ]

    def test_glob_wins_over_symbol(self):
        """Glob classification is checked first."""
        directives = parse_directives("@./src/*.ts#Foo")
        assert isinstance(directives[0], GlobDirective)


class TestUrlDirectives:
    """Test @https:// parsing."""

    def test_https_url(self):
        directives = parse_directives("Read @https://example.com/doc.md first")
        assert directives == [
            UrlDirective(
                url="https://example.com/doc.md",
                original="@https://example.com/doc.md",
                index=5,
            )
        ]

    def test_http_url(self):
        directives = parse_directives("@http://localhost:8000/x.json")
        assert directives[0].url == "http://localhost:8000/x.json"

    def test_bare_domain_is_not_url(self):
        """The scheme is required."""
        assert parse_directives("@example.com/doc.md") == []


class TestCommandDirectives:
    """Test !`command` parsing."""

    def test_command(self):
        directives = parse_directives("Status: !`git status --short`")
        assert directives == [
            CommandDirective(
                command="git status --short",
                original="!`git status --short`",
                index=8,
            )
        ]

    def test_plain_inline_code_is_not_command(self):
        """Inline code without the ! prefix is just code."""
        assert parse_directives("run `git status` yourself") == []

    def test_command_inside_fence_ignored(self):
        """Command syntax inside a fenced block is an example."""
        assert parse_directives("```\n!`rm -rf /`\n```\n") == []


class TestExecutableFences:
    """Test shebang code fence parsing."""

    def test_shebang_fence(self):
        """A backtick fence whose first line is a shebang is executable."""
        text = "Output:\n```sh\n#!/bin/sh\necho hi\n```\nDone"
        directives = parse_directives(text)

        assert directives == [
            ExecutableFenceDirective(
                shebang="#!/bin/sh",
                language="sh",
                code="echo hi",
                original="```sh\n#!/bin/sh\necho hi\n```",
                index=8,
            )
        ]

    def test_fence_without_language_is_txt(self):
        """A missing info string defaults the language to txt."""
        directives = parse_directives("```\n#!/usr/bin/env python3\nprint(1)\n```\n")
        assert directives[0].language == "txt"
        assert directives[0].shebang == "#!/usr/bin/env python3"

    def test_fence_without_shebang_is_not_executable(self):
        """Ordinary code blocks are not directives."""
        assert parse_directives("```sh\necho hi\n```\n") == []

    def test_shebang_not_on_first_line_is_not_executable(self):
        """The shebang must open the fence body to make it executable."""
        text = "```sh\necho hi\n#!/bin/sh\n```\n"
        assert parse_directives(text) == []
        assert not has_directives(text)

    def test_unclosed_shebang_fence_is_not_executable(self):
        """An unclosed fence is never executed."""
        assert parse_directives("```sh\n#!/bin/sh\necho hi\n") == []

    def test_directives_inside_executable_fence_ignored(self):
        """File syntax inside an executable fence belongs to the script."""
        text = "```sh\n#!/bin/sh\ncat @./secret.md\n```\n"
        directives = parse_directives(text)
        assert len(directives) == 1
        assert directives[0].kind == "executable_fence"


class TestSafeRangeFiltering:
    """Test that code spans hide directive syntax."""

    def test_inline_code_hides_directive(self):
        directives = parse_directives("use `@./x.md` to import, like @./y.md")
        assert [d.path for d in directives] == ["./y.md"]

    def test_fenced_block_hides_directives(self):
        text = "```md\n@./a.md\n@https://example.com/x.md\n```\n"
        assert parse_directives(text) == []

    def test_mixed_kinds_sorted_by_index(self):
        """Results come back in document order whatever the kind."""
        text = "!`date` then @https://x.io/a.md then @./b.md"
        kinds = [d.kind for d in parse_directives(text)]
        assert kinds == ["command", "url", "file"]

    def test_overlapping_directive_dropped(self):
        """A directive starting inside an earlier one is dropped."""
        directives = parse_directives("@./a.md!`ls`")
        assert len(directives) == 1
        assert isinstance(directives[0], FileDirective)


class TestHasDirectives:
    """Test the cheap existence check."""

    def test_plain_text(self):
        assert not has_directives("Nothing to see here.")

    def test_directive_present(self):
        assert has_directives("Load @./rules.md")

    def test_only_inside_code(self):
        """Syntax that exists only inside code spans does not count."""
        assert not has_directives("`@./rules.md`")
        assert not has_directives("```\n@./rules.md\n!`ls`\n```\n")

    def test_executable_fence(self):
        assert has_directives("```sh\n#!/bin/sh\necho hi\n```\n")


class TestHelpers:
    """Test path classification helpers."""

    @pytest.mark.parametrize("path,expected", [
        ("./src/*.ts", True),
        ("./file?.md", True),
        ("./[ab].md", True),
        ("./plain.md", False),
    ])
    def test_is_glob_pattern(self, path, expected):
        assert is_glob_pattern(path) is expected

    def test_parse_line_range(self):
        assert parse_line_range("./a.ts:1-1") == ("./a.ts", LineRange(1, 1))
        assert parse_line_range("./a.ts") == ("./a.ts", None)

    def test_parse_symbol_reference(self):
        assert parse_symbol_reference("./a.ts#Foo") == ("./a.ts", "Foo")
        assert parse_symbol_reference("./a.ts") == ("./a.ts", None)
