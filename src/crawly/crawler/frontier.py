"""
Crawl frontier: visited set, depth and page budgets.

The frontier is a LIFO stack so that discovery order is depth-first: the
links of a page are explored before the page's siblings.
"""

from dataclasses import dataclass
from urllib.parse import urldefrag, urlparse, urlunparse

from crawly.core.exceptions import InvalidSeedError
from crawly.utils.logging import get_logger

logger = get_logger(__name__)

_DEFAULT_PORTS = {"http": ":80", "https": ":443"}


def _strip_default_port(scheme: str, netloc: str) -> str:
    port = _DEFAULT_PORTS.get(scheme)
    if port is not None and netloc.endswith(port):
        return netloc[: -len(port)]
    return netloc


def normalize_url(url: str) -> str:
    """
    Normalize URL for consistent comparison.

    - Lowercases scheme and host
    - Removes default ports
    - Removes trailing slashes (except root)
    - Removes fragments
    - Sorts query parameters

    Args:
        url: URL to normalize

    Returns:
        Normalized URL string
    """
    try:
        parsed = urlparse(url)
    except ValueError:
        return url

    scheme = parsed.scheme.lower()
    netloc = _strip_default_port(scheme, parsed.netloc.lower())

    path = parsed.path or "/"
    if path != "/" and path.endswith("/"):
        path = path.rstrip("/")

    query = parsed.query
    if query:
        query = "&".join(sorted(query.split("&")))

    return urlunparse((scheme, netloc, path, parsed.params, query, ""))


def host_key(url: str) -> str:
    """
    Get the host a URL belongs to: scheme, domain and port.

    Robots rules and rate limits are tracked per host key.
    """
    parsed = urlparse(url)
    scheme = parsed.scheme.lower()
    return f"{scheme}://{_strip_default_port(scheme, parsed.netloc.lower())}"


def validate_seed(url: str) -> str:
    """
    Check that a seed is an absolute http(s) URL.

    Args:
        url: Candidate seed URL

    Returns:
        The seed, stripped and without fragment

    Raises:
        InvalidSeedError: If the URL is malformed
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidSeedError("Seed URL is empty", url=str(url))

    candidate = url.strip()
    try:
        parsed = urlparse(candidate)
        # Accessing port validates it
        parsed.port
    except ValueError as e:
        raise InvalidSeedError(f"Malformed seed URL: {e}", url=candidate) from e

    if parsed.scheme.lower() not in ("http", "https"):
        raise InvalidSeedError(
            f"Seed URL must use http or https, got {parsed.scheme!r}", url=candidate)
    if not parsed.hostname:
        raise InvalidSeedError("Seed URL has no host", url=candidate)
    if any(ch.isspace() for ch in candidate):
        raise InvalidSeedError("Seed URL contains whitespace", url=candidate)

    return urldefrag(candidate)[0]


@dataclass(frozen=True)
class FrontierEntry:
    """
    A URL waiting to be dispatched.

    Attributes:
        url: URL to fetch (fragment removed)
        key: Normalized form, the deduplication key
        depth: Link hops from the seed
    """

    url: str
    key: str
    depth: int = 0


class Frontier:
    """
    Depth-first frontier with deduplication and budgets.

    A URL is recorded as visited when it is enqueued, not when its fetch
    completes, so the same link found by two pages is enqueued only once.
    Methods never suspend, so under asyncio each call is atomic with
    respect to other coroutines.

    Example:
        >>> frontier = Frontier(max_depth=2, max_pages=10)
        >>> frontier.add("https://example.com/", depth=0)
        True
        >>> entry = frontier.pop()
        >>> entry.depth
        0
    """

    def __init__(self, max_depth: int, max_pages: int) -> None:
        """
        Initialize frontier.

        Args:
            max_depth: Maximum crawl depth (0 = seed only)
            max_pages: Maximum number of entries ever handed out by pop()
        """
        self.max_depth = max_depth
        self.max_pages = max_pages
        self._stack: list[FrontierEntry] = []
        self._visited: set[str] = set()
        self._dispatched = 0

    def add(self, url: str, depth: int) -> bool:
        """
        Enqueue a URL if it is new, shallow enough and budget remains.

        Args:
            url: Absolute URL
            depth: Link hops from the seed

        Returns:
            True if the URL was enqueued
        """
        if depth > self.max_depth:
            return False

        if self.exhausted:
            return False

        key = normalize_url(url)
        if key in self._visited:
            return False

        self._visited.add(key)
        self._stack.append(FrontierEntry(url=urldefrag(url)[0], key=key, depth=depth))
        return True

    def add_links(self, links: list[str], depth: int) -> int:
        """
        Enqueue the links of one page.

        Links are pushed in reverse so the first link in the document is
        popped first.

        Args:
            links: Absolute URLs in document order
            depth: Depth of the linked pages

        Returns:
            Number of links actually enqueued
        """
        if depth > self.max_depth:
            logger.debug(f"Not following links at depth {depth} > {self.max_depth}")
            return 0

        added = 0
        for link in reversed(links):
            if self.add(link, depth):
                added += 1
        return added

    def pop(self) -> FrontierEntry | None:
        """
        Take the next entry to dispatch and count it against the page budget.

        Returns:
            FrontierEntry, or None if the frontier is empty or the budget is spent
        """
        if self.exhausted or not self._stack:
            return None

        self._dispatched += 1
        return self._stack.pop()

    @property
    def exhausted(self) -> bool:
        """True once max_pages entries have been dispatched."""
        return self._dispatched >= self.max_pages

    @property
    def dispatched_count(self) -> int:
        """Number of entries handed out by pop()."""
        return self._dispatched

    @property
    def pending_count(self) -> int:
        """Number of entries waiting in the stack."""
        return len(self._stack)

    def is_visited(self, url: str) -> bool:
        """Check whether a URL has been enqueued during this crawl."""
        return normalize_url(url) in self._visited
