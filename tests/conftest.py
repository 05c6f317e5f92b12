"""
Shared pytest fixtures for Crawly tests.

Provides reusable fixtures for:
- An in-memory website served through httpx.MockTransport
- Crawl configuration tuned for fast tests
- Sample data
- Temporary resources
"""

import asyncio
import tempfile
from pathlib import Path
from typing import Generator

import httpx
import pytest

from crawly.config import CrawlConfig
from crawly.utils.logging import reset_logging


class MockSite:
    """
    A fake website keyed by absolute URL.

    Records every request and the peak number of requests being served at
    once. Unknown URLs (including robots.txt) answer 404.
    """

    def __init__(self, delay: float = 0.0) -> None:
        self.delay = delay
        self.routes: dict[str, object] = {}
        self.requests: list[str] = []
        self.user_agents: list[str] = []
        self.request_times: dict[str, list[float]] = {}
        self.in_flight = 0
        self.max_in_flight = 0

    def page(
        self,
        url: str,
        text: str = "",
        links: tuple[str, ...] | list[str] = (),
        headers: dict[str, str] | None = None,
        status: int = 200,
    ) -> None:
        """Serve an HTML page with a paragraph of text and anchors."""
        anchors = "".join(f'<li><a href="{link}">link</a></li>' for link in links)
        html = (
            "<!DOCTYPE html><html><head><title>Page</title></head>"
            f"<body><p>{text}</p><ul>{anchors}</ul></body></html>"
        )
        self.raw(url, html, "text/html; charset=utf-8", status=status, headers=headers)

    def raw(
        self,
        url: str,
        content: str | bytes,
        content_type: str | None = "text/plain",
        status: int = 200,
        headers: dict[str, str] | None = None,
    ) -> None:
        """Serve a body with an explicit content type (None omits the header)."""
        all_headers = dict(headers or {})
        if content_type is not None:
            all_headers["content-type"] = content_type
        if isinstance(content, str):
            content = content.encode("utf-8")
        self.routes[url] = (status, all_headers, content)

    def robots(self, host: str, body: str) -> None:
        """Serve robots.txt for a host (``https://example.com``)."""
        self.raw(f"{host}/robots.txt", body, "text/plain")

    def redirect(self, url: str, location: str, status: int = 301) -> None:
        self.routes[url] = (status, {"location": location}, b"")

    def fail(self, url: str, exc_type: type[Exception] = httpx.ConnectError) -> None:
        """Make requests to a URL raise a transport error."""
        self.routes[url] = exc_type

    def count(self, url: str) -> int:
        """Number of requests made to a URL."""
        return self.requests.count(url)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        loop = asyncio.get_running_loop()

        self.requests.append(url)
        self.user_agents.append(request.headers.get("user-agent", ""))
        self.request_times.setdefault(url, []).append(loop.time())

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)

            route = self.routes.get(url)
            if route is None:
                return httpx.Response(404, text="Not Found")
            if isinstance(route, type):
                raise route("Simulated failure", request=request)

            status, headers, content = route
            return httpx.Response(status, headers=headers, content=content)
        finally:
            self.in_flight -= 1


@pytest.fixture(autouse=True)
def isolate_logging():
    """
    Reset logging before and after each test.

    This ensures handlers installed by one test never leak into another.
    """
    reset_logging()
    yield
    reset_logging()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def site() -> MockSite:
    """Provide an empty in-memory website."""
    return MockSite()


@pytest.fixture
def fast_config() -> CrawlConfig:
    """
    Provide crawl settings for fast tests.

    No rate limiting, generous page budget.
    """
    return CrawlConfig(rate_limit_interval=0.0, max_pages=50)


@pytest.fixture
def sample_html() -> str:
    """Provide sample HTML for extraction tests."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <title>Test Page Title</title>
        <style>body { color: red; }</style>
        <script>var tracking = "should not appear";</script>
    </head>
    <body>
        <nav>
            <a href="/">Home</a>
            <a href="/about">About</a>
        </nav>
        <main>
            <h1>Main Heading</h1>
            <p>This is the   first paragraph.</p>
            <p>Second paragraph with <a href="https://other.example.org/page#section">external link</a>.</p>
            <a href="/about#team">About again</a>
            <a href="mailto:team@example.com">Mail</a>
            <a href="javascript:void(0)">Script</a>
            <a href="ftp://files.example.com/file.txt">FTP</a>
            <a href="#top">Top</a>
        </main>
        <noscript>Enable JavaScript</noscript>
    </body>
    </html>
    """
