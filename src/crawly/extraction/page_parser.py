"""
HTML and plain-text page parsing.

Turns a fetched body into plain text and the set of outbound hyperlinks
the crawler may follow.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup

from crawly.core.exceptions import ExtractionError
from crawly.extraction.content_type import ContentType
from crawly.utils.logging import get_logger

logger = get_logger(__name__)

FOLLOWABLE_SCHEMES = ("http", "https")


@dataclass
class ParsedPage:
    """
    Text and outbound links extracted from one page.

    Links are absolute, fragment-free and in document order without
    duplicates.
    """

    url: str
    text: str
    links: list[str] = field(default_factory=list)
    title: str = ""


class PageParser:
    """
    Parses HTML or plain text into text and links.

    Example:
        >>> parser = PageParser()
        >>> page = parser.parse(b"<a href='/a'>A</a>", ContentType("text/html"),
        ...                     url="https://example.com/")
        >>> page.links
        ['https://example.com/a']
    """

    # Tags whose content is never page text
    REMOVE_TAGS = {
        "script",
        "style",
        "noscript",
        "template",
        "iframe",
        "svg",
        "canvas",
        "object",
        "embed",
    }

    def __init__(self, parser_backend: str = "html.parser") -> None:
        """
        Initialize page parser.

        Args:
            parser_backend: BeautifulSoup tree builder to use
        """
        self.parser_backend = parser_backend

    def parse(self, body: bytes, content_type: ContentType, url: str = "") -> ParsedPage:
        """
        Parse a response body.

        Args:
            body: Raw response bytes
            content_type: Resolved content type of the body
            url: Final response URL, used to resolve relative links

        Returns:
            ParsedPage with text and links

        Raises:
            ExtractionError: If the body cannot be decoded or parsed
        """
        if content_type.is_html:
            return self._parse_html(body, content_type.charset, url)
        return ParsedPage(url=url, text=self._decode(body, content_type.charset, url))

    def _parse_html(self, body: bytes, charset: str | None, url: str) -> ParsedPage:
        try:
            soup = BeautifulSoup(body, self.parser_backend, from_encoding=charset)
        except Exception as e:
            raise ExtractionError(f"HTML parsing failed: {e}", url=url) from e

        base_url = self._base_url(soup, url)
        links = self._extract_links(soup, base_url)

        title_tag = soup.find("title")
        title = title_tag.get_text(strip=True) if title_tag else ""

        for tag_name in self.REMOVE_TAGS:
            for tag in soup.find_all(tag_name):
                tag.decompose()

        body_tag = soup.find("body") or soup
        text = self._clean_text(body_tag.get_text(separator="\n"))

        return ParsedPage(url=url, text=text, links=links, title=title)

    def _decode(self, body: bytes, charset: str | None, url: str) -> str:
        try:
            return body.decode(charset or "utf-8", errors="replace")
        except LookupError as e:
            raise ExtractionError(f"Unknown charset: {charset}", url=url) from e

    def _base_url(self, soup: BeautifulSoup, url: str) -> str:
        """Honor a <base href> element when present."""
        base = soup.find("base", href=True)
        if base is not None:
            return urljoin(url, base["href"].strip())
        return url

    def _extract_links(self, soup: BeautifulSoup, base_url: str) -> list[str]:
        """Extract absolute http(s) links from all anchors."""
        links = []
        seen = set()

        for a in soup.find_all("a", href=True):
            href = a["href"].strip()

            if not href or href.startswith(("javascript:", "mailto:", "tel:", "data:")):
                continue

            try:
                absolute, _ = urldefrag(urljoin(base_url, href))
                parsed = urlparse(absolute)
            except ValueError:
                logger.debug(f"Ignoring malformed link {href!r} on {base_url}")
                continue

            if parsed.scheme not in FOLLOWABLE_SCHEMES or not parsed.netloc:
                continue

            if absolute in seen:
                continue

            seen.add(absolute)
            links.append(absolute)

        return links

    @staticmethod
    def _clean_text(raw: str) -> str:
        """Collapse whitespace inside lines and drop empty lines."""
        lines = (re.sub(r"[ \t\r\f\v]+", " ", line).strip() for line in raw.splitlines())
        return "\n".join(line for line in lines if line)
