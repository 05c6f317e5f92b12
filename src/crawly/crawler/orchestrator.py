"""
Crawl orchestration for Crawly.

Holds the validated configuration, wires the crawl components together
for each crawl and provides the main entry point.
"""

from typing import Any

import httpx
from pydantic import ValidationError

from crawly.config.settings import CrawlConfig
from crawly.core.exceptions import ConfigurationError
from crawly.crawler.engine import CrawlResult, TraversalEngine
from crawly.crawler.fetcher import FetchUnit
from crawly.crawler.frontier import validate_seed
from crawly.crawler.http_client import HttpFetcher
from crawly.crawler.mitigation import MitigationDetector
from crawly.crawler.rate_limiter import RateLimiter
from crawly.crawler.robots import RobotsCache
from crawly.extraction.page_parser import PageParser
from crawly.utils.logging import get_logger
from crawly.utils.metrics import CrawlMetrics

logger = get_logger(__name__)


class Crawler:
    """
    Main crawler facade.

    Every call to crawl() builds a fresh HTTP client, robots cache, rate
    limiter, metrics and frontier, so no state survives between crawls.

    Example:
        >>> crawler = Crawler(CrawlConfig(max_pages=50, max_depth=3))
        >>> result = await crawler.crawl("https://example.com")
        >>> print(f"Crawled {len(result)} pages")
    """

    def __init__(
        self,
        config: CrawlConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        parser: PageParser | None = None,
    ) -> None:
        """
        Initialize crawler.

        Args:
            config: Crawl configuration. None uses defaults.
            transport: Optional httpx transport used for every request
            parser: Optional page parser replacing the default one
        """
        self.config = config or CrawlConfig()
        self._transport = transport
        self._parser = parser or PageParser()

    async def crawl(self, seed_url: str) -> CrawlResult:
        """
        Crawl the link graph reachable from a seed URL.

        Args:
            seed_url: Absolute http(s) URL to start from

        Returns:
            CrawlResult mapping fetched URL to extracted text

        Raises:
            InvalidSeedError: If the seed is malformed
            ClientBuildError: If the HTTP client cannot be constructed
            SeedFetchError: If the seed itself fails
        """
        seed = validate_seed(seed_url)

        async with HttpFetcher.build(self.config, self._transport) as http:
            fetch_unit = FetchUnit(
                config=self.config,
                http=http,
                robots=RobotsCache(self.config, http),
                rate_limiter=RateLimiter(self.config.rate_limit_interval),
                detector=MitigationDetector(self.config.mitigation_headers),
                parser=self._parser,
                metrics=CrawlMetrics(),
            )
            engine = TraversalEngine(self.config, fetch_unit)
            return await engine.start(seed)


class CrawlerBuilder:
    """
    Fluent construction of a Crawler.

    Options are collected and validated once, in build().

    Example:
        >>> crawler = (
        ...     CrawlerBuilder()
        ...     .with_max_depth(2)
        ...     .with_max_pages(100)
        ...     .with_rate_limit_interval(0.5)
        ...     .build()
        ... )
    """

    def __init__(self) -> None:
        self._options: dict[str, Any] = {}
        self._transport: httpx.AsyncBaseTransport | None = None
        self._parser: PageParser | None = None

    def with_max_depth(self, depth: int) -> "CrawlerBuilder":
        self._options["max_depth"] = depth
        return self

    def with_max_pages(self, pages: int) -> "CrawlerBuilder":
        self._options["max_pages"] = pages
        return self

    def with_max_concurrent_requests(self, requests: int) -> "CrawlerBuilder":
        self._options["max_concurrent_requests"] = requests
        return self

    def with_rate_limit_interval(self, seconds: float) -> "CrawlerBuilder":
        self._options["rate_limit_interval"] = seconds
        return self

    def with_robots(self, respect: bool) -> "CrawlerBuilder":
        self._options["respect_robots"] = respect
        return self

    def with_user_agent(self, user_agent: str) -> "CrawlerBuilder":
        self._options["user_agent"] = user_agent
        return self

    def with_request_timeout(self, seconds: float) -> "CrawlerBuilder":
        self._options["request_timeout"] = seconds
        return self

    def with_allowed_mimes(self, mime_types: list[str]) -> "CrawlerBuilder":
        """Only extract responses whose media type is in this list."""
        self._options["allowed_mimes"] = tuple(mime_types)
        return self

    def with_crawl_delay(self, honor: bool) -> "CrawlerBuilder":
        """Honor robots.txt Crawl-delay when longer than the rate limit interval."""
        self._options["honor_crawl_delay"] = honor
        return self

    def with_transport(self, transport: httpx.AsyncBaseTransport) -> "CrawlerBuilder":
        self._transport = transport
        return self

    def with_parser(self, parser: PageParser) -> "CrawlerBuilder":
        self._parser = parser
        return self

    def build(self) -> Crawler:
        """
        Validate options and create the crawler.

        Returns:
            Configured Crawler

        Raises:
            ConfigurationError: If any option is invalid
        """
        try:
            config = CrawlConfig(**self._options)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid crawler options: {e}", details=dict(self._options)) from e

        return Crawler(config, transport=self._transport, parser=self._parser)


async def crawl_website(
    seed_url: str,
    config: CrawlConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CrawlResult:
    """
    Convenience function to crawl a website.

    Args:
        seed_url: Starting URL
        config: Crawl configuration (defaults if None)
        transport: Optional httpx transport

    Returns:
        CrawlResult mapping fetched URL to extracted text
    """
    crawler = Crawler(config, transport=transport)
    return await crawler.crawl(seed_url)
