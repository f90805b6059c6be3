"""Tests for remote fetching and content validation."""

import httpx
import pytest

from mdexpand.core.exceptions import NetworkError, UnsupportedContentType
from mdexpand.core.remote import (
    ACCEPT_HEADER,
    FetchResponse,
    HttpFetcher,
    infer_content_type,
    is_allowed_content_type,
    to_raw_url,
    validate_remote_content,
)

pytestmark = pytest.mark.unit


def _fetcher(handler) -> HttpFetcher:
    return HttpFetcher(transport=httpx.MockTransport(handler))


class TestToRawUrl:
    """Test page URL to raw URL rewriting."""

    def test_github_blob(self):
        assert to_raw_url("https://github.com/o/r/blob/main/docs/README.md") == (
            "https://raw.githubusercontent.com/o/r/main/docs/README.md"
        )

    def test_gist(self):
        assert to_raw_url("https://gist.github.com/user/abc123") == (
            "https://gist.githubusercontent.com/user/abc123/raw"
        )

    def test_gitlab_blob(self):
        assert to_raw_url("https://gitlab.com/g/p/-/blob/main/x.md") == (
            "https://gitlab.com/g/p/-/raw/main/x.md"
        )

    def test_other_urls_unchanged(self):
        url = "https://example.com/blob/doc.md"
        assert to_raw_url(url) == url


class TestContentTypes:
    """Test the allow-list and sniffing."""

    @pytest.mark.parametrize("content_type,expected", [
        ("text/markdown", True),
        ("text/markdown; charset=utf-8", True),
        ("Application/JSON", True),
        ("text/plain", True),
        ("text/html", False),
        ("application/octet-stream", False),
        (None, False),
        ("", False),
    ])
    def test_is_allowed_content_type(self, content_type, expected):
        assert is_allowed_content_type(content_type) is expected

    def test_infer_json(self):
        assert infer_content_type('{"a": 1}') == "json"
        assert infer_content_type("[1, 2]") == "json"

    def test_infer_invalid_json_is_not_json(self):
        assert infer_content_type("{not json}") == "unknown"

    def test_infer_markdown(self):
        assert infer_content_type("# Title\n\nBody") == "markdown"
        assert infer_content_type("intro\n- item") == "markdown"
        assert infer_content_type("```py\nx\n```") == "markdown"

    def test_infer_from_url_suffix(self):
        assert infer_content_type("plain words", "https://x/doc.md?raw=1") == "markdown"
        assert infer_content_type("plain words", "https://x/data.json") == "json"

    def test_infer_unknown(self):
        assert infer_content_type("just some words") == "unknown"


class TestValidateRemoteContent:
    """Test the accept/reject decision."""

    def test_markdown_header_accepted(self):
        response = FetchResponse("https://x/doc.md", 200, "text/markdown", "# Hi\n")
        assert validate_remote_content(response) == "# Hi"

    def test_octet_stream_with_plain_body_rejected(self):
        response = FetchResponse(
            "https://x/doc.md", 200, "application/octet-stream", "just some bytes"
        )
        with pytest.raises(UnsupportedContentType) as exc_info:
            validate_remote_content(response)
        assert exc_info.value.url == "https://x/doc.md"
        assert exc_info.value.content_type == "application/octet-stream"

    def test_generic_header_with_markdown_body_accepted(self):
        response = FetchResponse("https://x/page", 200, "text/html", "# Heading\n")
        assert validate_remote_content(response) == "# Heading"

    def test_missing_header_uses_url_suffix(self):
        response = FetchResponse("https://x/doc.md", 200, None, "plain words")
        assert validate_remote_content(response) == "plain words"

    def test_html_rejected(self):
        response = FetchResponse("https://x/", 200, "text/html", "<html><body>hi</body></html>")
        with pytest.raises(UnsupportedContentType):
            validate_remote_content(response)


class TestHttpFetcher:
    """Test HttpFetcher against a mock transport."""

    def test_fetch_success(self):
        def handler(request):
            return httpx.Response(200, headers={"content-type": "text/markdown"}, text="# Title\n")

        response = _fetcher(handler).fetch("https://example.com/doc.md")

        assert response.status == 200
        assert response.content_type == "text/markdown"
        assert response.body == "# Title\n"
        assert response.url == "https://example.com/doc.md"

    def test_sends_accept_and_user_agent(self):
        seen = {}

        def handler(request):
            seen["accept"] = request.headers["accept"]
            seen["user-agent"] = request.headers["user-agent"]
            return httpx.Response(200, text="ok")

        HttpFetcher(user_agent="test-agent", transport=httpx.MockTransport(handler)).fetch(
            "https://example.com/x"
        )

        assert seen["accept"] == ACCEPT_HEADER
        assert seen["user-agent"] == "test-agent"

    def test_fetches_raw_url(self):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, text="ok")

        _fetcher(handler).fetch("https://github.com/o/r/blob/main/README.md")
        assert seen == ["https://raw.githubusercontent.com/o/r/main/README.md"]

    def test_http_error_status(self):
        def handler(request):
            return httpx.Response(404, text="missing")

        with pytest.raises(NetworkError) as exc_info:
            _fetcher(handler).fetch("https://example.com/gone.md")

        assert exc_info.value.status == 404
        assert "404" in str(exc_info.value)

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        with pytest.raises(NetworkError) as exc_info:
            _fetcher(handler).fetch("https://example.com/doc.md")

        assert "connection refused" in exc_info.value.reason

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow")

        with pytest.raises(NetworkError) as exc_info:
            _fetcher(handler).fetch("https://example.com/doc.md")

        assert "timed out" in exc_info.value.reason
