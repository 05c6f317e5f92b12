"""
Fetch unit: one URL's complete fetch attempt.

Runs the politeness gates (rate limit, robots.txt), the GET, the mitigation
check, the content-type check and the extraction, and reports a single
outcome. Per-URL errors never escape this module: any exception that is
not a fatal crawl error is logged and reported as a failed fetch.
"""

from dataclasses import dataclass, field
from enum import Enum

from crawly.config.settings import CrawlConfig
from crawly.core.exceptions import ExtractionError, FetchError, is_fatal
from crawly.crawler.frontier import host_key
from crawly.crawler.http_client import HttpFetcher
from crawly.crawler.mitigation import MitigationDetector
from crawly.crawler.rate_limiter import RateLimiter
from crawly.crawler.robots import RobotsCache
from crawly.extraction.content_type import is_supported, resolve_content_type
from crawly.extraction.page_parser import PageParser
from crawly.utils.logging import get_logger
from crawly.utils.metrics import CrawlMetrics

logger = get_logger(__name__)


class FetchOutcome(str, Enum):
    """How a fetch attempt ended."""

    SUCCESS = "success"
    DISALLOWED = "disallowed"
    MITIGATED = "mitigated"
    UNSUPPORTED = "unsupported"
    FAILED = "failed"

    @property
    def is_policy_skip(self) -> bool:
        """Skips decided by crawl policy rather than by a failure."""
        return self in (FetchOutcome.DISALLOWED, FetchOutcome.MITIGATED, FetchOutcome.UNSUPPORTED)


@dataclass
class FetchResult:
    """
    Result of one fetch attempt.

    Only SUCCESS carries text and links.
    """

    url: str
    outcome: FetchOutcome
    text: str = ""
    links: list[str] = field(default_factory=list)
    status_code: int | None = None
    final_url: str | None = None
    content_type: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is FetchOutcome.SUCCESS


class FetchUnit:
    """
    Composes the per-URL fetch sequence.

    Sequence: rate limit wait, robots check, GET, mitigation check,
    status and content-type checks, text and link extraction.

    Example:
        >>> unit = FetchUnit(config, http, robots, limiter, detector)
        >>> result = await unit.fetch("https://example.com/")
        >>> result.outcome
        <FetchOutcome.SUCCESS: 'success'>
    """

    def __init__(
        self,
        config: CrawlConfig,
        http: HttpFetcher,
        robots: RobotsCache,
        rate_limiter: RateLimiter,
        detector: MitigationDetector,
        parser: PageParser | None = None,
        metrics: CrawlMetrics | None = None,
    ) -> None:
        self.config = config
        self._http = http
        self._robots = robots
        self._rate_limiter = rate_limiter
        self._detector = detector
        self._parser = parser or PageParser()
        self.metrics = metrics or CrawlMetrics()

    def _interval_for(self, url: str) -> float:
        interval = self.config.rate_limit_interval
        if self.config.honor_crawl_delay:
            delay = self._robots.crawl_delay(url)
            if delay is not None and delay > interval:
                interval = delay
        return interval

    async def fetch(self, url: str) -> FetchResult:
        """
        Run the full fetch sequence for one URL.

        Args:
            url: Absolute URL

        Returns:
            FetchResult; never raises for per-URL problems
        """
        try:
            result = await self._fetch(url)
        except Exception as e:
            if is_fatal(e):
                raise
            logger.warning(f"Unexpected error fetching {url}: {e}", exc_info=True)
            result = FetchResult(url=url, outcome=FetchOutcome.FAILED, error=str(e))
        self.metrics.record_outcome(result.outcome.value)

        if result.ok:
            logger.debug(f"Fetched {url} ({len(result.links)} links)")
        else:
            logger.debug(f"Skipped {url}: {result.outcome.value}"
                         + (f" ({result.error})" if result.error else ""))

        return result

    async def _fetch(self, url: str) -> FetchResult:
        host = host_key(url)
        await self._rate_limiter.wait(host, self._interval_for(url))

        if not await self._robots.is_allowed(url):
            return FetchResult(url=url, outcome=FetchOutcome.DISALLOWED)

        try:
            with self.metrics.time_request(host):
                response = await self._http.get(url)
        except FetchError as e:
            return FetchResult(url=url, outcome=FetchOutcome.FAILED, error=str(e))

        final_url = str(response.url)

        signal = self._detector.signal(response.headers)
        if signal is not None:
            logger.info(f"Bot mitigation detected on {url} ({signal}), skipping")
            return FetchResult(
                url=url,
                outcome=FetchOutcome.MITIGATED,
                status_code=response.status_code,
                final_url=final_url,
            )

        if response.status_code >= 400:
            return FetchResult(
                url=url,
                outcome=FetchOutcome.FAILED,
                status_code=response.status_code,
                final_url=final_url,
                error=f"HTTP {response.status_code}",
            )

        body = response.content
        content_type = resolve_content_type(response.headers.get("content-type"), body)
        if not is_supported(content_type, self.config.allowed_mimes):
            return FetchResult(
                url=url,
                outcome=FetchOutcome.UNSUPPORTED,
                status_code=response.status_code,
                final_url=final_url,
                content_type=content_type.mime,
            )

        try:
            page = self._parser.parse(body, content_type, url=final_url)
        except ExtractionError as e:
            return FetchResult(
                url=url,
                outcome=FetchOutcome.FAILED,
                status_code=response.status_code,
                final_url=final_url,
                content_type=content_type.mime,
                error=str(e),
            )

        return FetchResult(
            url=url,
            outcome=FetchOutcome.SUCCESS,
            text=page.text,
            links=page.links,
            status_code=response.status_code,
            final_url=final_url,
            content_type=content_type.mime,
        )
