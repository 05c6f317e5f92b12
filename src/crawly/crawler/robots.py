"""
robots.txt compliance cache.

Fetches each host's robots.txt once per crawl and answers allow/deny
queries from the cached ruleset.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from urllib.robotparser import RobotFileParser

from crawly.config.settings import CrawlConfig
from crawly.core.exceptions import FetchError
from crawly.crawler.frontier import host_key
from crawly.crawler.http_client import HttpFetcher
from crawly.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class HostRobotsEntry:
    """
    Cached robots.txt decision for one host.

    Attributes:
        host: Host key (scheme://domain[:port])
        parser: Parsed ruleset, None when the host has no usable robots.txt
        fetched_at: When the robots.txt fetch completed
        crawl_delay: Crawl-delay for the configured agent, if any
        status_code: HTTP status of the robots.txt response, None on failure
    """

    host: str
    parser: RobotFileParser | None = None
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    crawl_delay: float | None = None
    status_code: int | None = None

    def allows(self, user_agent: str, url: str) -> bool:
        """No ruleset means allow everything."""
        if self.parser is None:
            return True
        return self.parser.can_fetch(user_agent, url)


class RobotsCache:
    """
    Checks URLs against robots.txt rules, one fetch per host.

    The first query for a host fetches its robots.txt; concurrent queries
    for the same host wait on that fetch instead of issuing their own.
    Missing, unreachable or non-2xx robots.txt means no restrictions.

    Example:
        >>> cache = RobotsCache(config, http)
        >>> await cache.is_allowed("https://example.com/page")
        True
        >>> await cache.is_allowed("https://example.com/admin")
        False
    """

    def __init__(self, config: CrawlConfig, http: HttpFetcher) -> None:
        """
        Initialize robots cache.

        Args:
            config: Crawl configuration (user agent, respect_robots)
            http: Raw GET capability used for robots.txt fetches
        """
        self.user_agent = config.user_agent
        self.respect_robots = config.respect_robots
        self._http = http
        self._entries: dict[str, HostRobotsEntry] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._fetch_count = 0

    async def is_allowed(self, url: str) -> bool:
        """
        Check if URL is allowed by its host's robots.txt.

        Args:
            url: URL to check

        Returns:
            True if allowed, False if blocked
        """
        if not self.respect_robots:
            return True

        entry = await self._get_entry(host_key(url))
        allowed = entry.allows(self.user_agent, url)

        if not allowed:
            logger.debug(f"Blocked by robots.txt: {url}")

        return allowed

    def crawl_delay(self, url: str) -> float | None:
        """
        Get the cached Crawl-delay for a URL's host.

        Never fetches: returns None until the host's robots.txt is cached.

        Args:
            url: URL whose host to look up

        Returns:
            Crawl delay in seconds, or None if not specified
        """
        if not self.respect_robots:
            return None

        entry = self._entries.get(host_key(url))
        return entry.crawl_delay if entry is not None else None

    def get_entry(self, url: str) -> HostRobotsEntry | None:
        """Get the cached entry for a URL's host without fetching."""
        return self._entries.get(host_key(url))

    @property
    def fetch_count(self) -> int:
        """Number of robots.txt fetches issued."""
        return self._fetch_count

    async def _get_entry(self, host: str) -> HostRobotsEntry:
        entry = self._entries.get(host)
        if entry is not None:
            return entry

        lock = self._locks.setdefault(host, asyncio.Lock())
        async with lock:
            # Another caller may have filled the entry while we waited
            entry = self._entries.get(host)
            if entry is None:
                entry = await self._fetch_robots(host)
                self._entries[host] = entry
            return entry

    async def _fetch_robots(self, host: str) -> HostRobotsEntry:
        """Fetch and parse robots.txt for a host."""
        robots_url = f"{host}/robots.txt"
        self._fetch_count += 1

        try:
            response = await self._http.get(robots_url)
        except FetchError as e:
            logger.warning(f"Error fetching robots.txt from {robots_url}: {e}")
            return HostRobotsEntry(host=host)

        if not response.is_success:
            logger.debug(
                f"No robots.txt at {robots_url} ({response.status_code}), allowing all")
            return HostRobotsEntry(host=host, status_code=response.status_code)

        parser = RobotFileParser(robots_url)
        parser.parse(response.text.splitlines())

        delay = None
        try:
            raw_delay = parser.crawl_delay(self.user_agent)
            delay = float(raw_delay) if raw_delay is not None else None
        except (TypeError, ValueError):
            delay = None

        logger.debug(f"Loaded robots.txt from {robots_url} (crawl_delay={delay})")
        return HostRobotsEntry(
            host=host,
            parser=parser,
            crawl_delay=delay,
            status_code=response.status_code,
        )
