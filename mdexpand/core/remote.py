"""
Remote content for @https:// directives.

HttpFetcher performs the request; validate_remote_content decides whether
the response may be inlined. Only markdown, JSON and plain text are
accepted: the Content-Type header is trusted when it names one of those,
otherwise the body and URL are sniffed.
"""

import json
import re
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from .exceptions import NetworkError, UnsupportedContentType
from .logging import get_logger

logger = get_logger(__name__)

ALLOWED_CONTENT_TYPES = {
    "text/markdown",
    "text/x-markdown",
    "text/plain",
    "application/json",
    "application/x-json",
    "text/json",
}

ACCEPT_HEADER = "text/markdown, application/json, text/plain, */*"

_GIST_PATTERN = re.compile(r"gist\.github\.com/([^/]+)/([a-f0-9]+)")


@dataclass
class FetchResponse:
    """What a fetcher hands back to the expander."""
    url: str
    status: int
    content_type: Optional[str]
    body: str


class RemoteFetcher(Protocol):
    def fetch(self, url: str) -> FetchResponse: ...


def to_raw_url(url: str) -> str:
    """Rewrite GitHub/Gist/GitLab page URLs to their raw-content form."""
    if "gist.github.com" in url:
        match = _GIST_PATTERN.search(url)
        if match:
            return f"https://gist.githubusercontent.com/{match.group(1)}/{match.group(2)}/raw"

    if "github.com" in url and "/blob/" in url:
        return url.replace("github.com", "raw.githubusercontent.com", 1).replace("/blob/", "/", 1)

    if "gitlab.com" in url and "/-/blob/" in url:
        return url.replace("/-/blob/", "/-/raw/", 1)

    return url


def is_allowed_content_type(content_type: Optional[str]) -> bool:
    """Check a Content-Type header against the allow-list, ignoring params."""
    if not content_type:
        return False
    base_type = content_type.split(";")[0].strip().lower()
    return base_type in ALLOWED_CONTENT_TYPES


def infer_content_type(content: str, url: Optional[str] = None) -> str:
    """Guess "markdown", "json" or "unknown" from the body, and the URL if given."""
    trimmed = content.strip()

    if (trimmed.startswith("{") and trimmed.endswith("}")) or (
        trimmed.startswith("[") and trimmed.endswith("]")
    ):
        try:
            json.loads(trimmed)
            return "json"
        except ValueError:
            pass

    if url:
        path = url.split("?")[0].split("#")[0].lower()
        if path.endswith(".md") or path.endswith(".markdown"):
            return "markdown"
        if path.endswith(".json"):
            return "json"

    if (
        trimmed.startswith("#")
        or "\n#" in trimmed
        or "\n- " in trimmed
        or "\n* " in trimmed
        or "```" in trimmed
    ):
        return "markdown"

    return "unknown"


def validate_remote_content(response: FetchResponse) -> str:
    """Return the trimmed body if it is an accepted content type.

    The URL suffix only counts when the server sent no Content-Type; a
    declared but unlisted type must be backed up by the body itself.

    Raises:
        UnsupportedContentType: If neither the header nor sniffing accepts it
    """
    if is_allowed_content_type(response.content_type):
        return response.body.strip()

    sniff_url = None if response.content_type else response.url
    if infer_content_type(response.body, sniff_url) in ("markdown", "json"):
        return response.body.strip()

    raise UnsupportedContentType(url=response.url, content_type=response.content_type)


class HttpFetcher:
    """Fetches URLs with httpx.

    Args:
        timeout: Seconds before the request is abandoned
        user_agent: User-Agent header value
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = "mdexpand/0.1",
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    def fetch(self, url: str) -> FetchResponse:
        raw_url = to_raw_url(url)
        if raw_url != url:
            logger.debug(f"Rewrote {url} -> {raw_url}")

        headers = {"Accept": ACCEPT_HEADER, "User-Agent": self.user_agent}
        try:
            with httpx.Client(
                timeout=self.timeout,
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                response = client.get(raw_url, headers=headers)
        except httpx.TimeoutException as e:
            raise NetworkError(url=url, reason=f"timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise NetworkError(url=url, reason=str(e) or type(e).__name__) from e

        if not response.is_success:
            raise NetworkError(
                url=url,
                reason=f"HTTP {response.status_code}: {response.reason_phrase}",
                status=response.status_code,
            )

        return FetchResponse(
            url=url,
            status=response.status_code,
            content_type=response.headers.get("content-type"),
            body=response.text,
        )
