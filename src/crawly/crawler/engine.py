"""
Traversal engine for the crawler.

Drives the depth-first exploration of the link graph under a global
concurrency cap, enforces the depth and page budgets and assembles the
URL to text result.
"""

import asyncio
from collections.abc import Iterator, Mapping
from datetime import datetime, timezone
from types import MappingProxyType

from crawly.config.settings import CrawlConfig
from crawly.core.exceptions import SeedFetchError
from crawly.crawler.fetcher import FetchOutcome, FetchResult, FetchUnit
from crawly.crawler.frontier import Frontier, FrontierEntry, validate_seed
from crawly.utils.logging import get_logger
from crawly.utils.metrics import LatencyStats

logger = get_logger(__name__)


class CrawlResult(Mapping[str, str]):
    """
    Read-only mapping from fetched URL to extracted text.

    Insertion order follows fetch completion. Also carries per-outcome
    counters, GET latency and timing for reporting.

    Example:
        >>> result = await crawler.crawl("https://example.com")
        >>> for url, text in result.items():
        ...     print(url, len(text))
    """

    def __init__(
        self,
        seed_url: str,
        pages: dict[str, str],
        outcomes: Mapping[str, int] | None = None,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        latency: LatencyStats | None = None,
        host_latency: Mapping[str, LatencyStats] | None = None,
    ) -> None:
        now = datetime.now(timezone.utc)
        self.seed_url = seed_url
        self._pages = MappingProxyType(dict(pages))
        self.outcomes: Mapping[str, int] = MappingProxyType(dict(outcomes or {}))
        self.started_at = started_at or now
        self.completed_at = completed_at or now
        self.latency = latency or LatencyStats()
        self.host_latency: Mapping[str, LatencyStats] = MappingProxyType(dict(host_latency or {}))

    def __getitem__(self, url: str) -> str:
        return self._pages[url]

    def __iter__(self) -> Iterator[str]:
        return iter(self._pages)

    def __len__(self) -> int:
        return len(self._pages)

    def __repr__(self) -> str:
        return f"CrawlResult(seed_url={self.seed_url!r}, pages={len(self)})"

    @property
    def pages(self) -> Mapping[str, str]:
        """Read-only view of URL to text."""
        return self._pages

    @property
    def dispatched_count(self) -> int:
        """Number of fetches dispatched, whatever their outcome."""
        return sum(self.outcomes.values())

    @property
    def duration_seconds(self) -> float:
        return (self.completed_at - self.started_at).total_seconds()

    def slowest_host(self) -> tuple[str, LatencyStats] | None:
        """Host with the highest average GET latency, None if nothing was timed."""
        if not self.host_latency:
            return None
        return max(self.host_latency.items(), key=lambda item: item[1].avg_ms)


class TraversalEngine:
    """
    Depth-first crawl under a bounded worker pool.

    A single dispatcher coroutine owns the frontier and the result map.
    It pops entries from the frontier while fewer than
    max_concurrent_requests tasks are in flight, then waits for any task
    to finish and feeds its links back into the frontier. Each task holds
    a slot of the counting gate for the whole fetch sequence.

    Discovery order is depth-first. Completion order depends on the
    network.

    Example:
        >>> engine = TraversalEngine(config, fetch_unit)
        >>> result = await engine.start("https://example.com/")
    """

    def __init__(self, config: CrawlConfig, fetch_unit: FetchUnit) -> None:
        """
        Initialize engine.

        Args:
            config: Crawl configuration (read-only)
            fetch_unit: Per-URL fetch sequence
        """
        self.config = config
        self._fetch_unit = fetch_unit

    async def start(self, seed_url: str) -> CrawlResult:
        """
        Crawl from a seed URL.

        Args:
            seed_url: Absolute http(s) URL

        Returns:
            CrawlResult with every successfully fetched and parsed URL

        Raises:
            InvalidSeedError: If the seed is malformed
            SeedFetchError: If the seed itself could not be fetched or parsed
        """
        seed = validate_seed(seed_url)
        started_at = datetime.now(timezone.utc)

        frontier = Frontier(
            max_depth=self.config.max_depth,
            max_pages=self.config.max_pages,
        )
        frontier.add(seed, depth=0)

        gate = asyncio.Semaphore(self.config.max_concurrent_requests)
        in_flight: dict[asyncio.Task, FrontierEntry] = {}
        pages: dict[str, str] = {}
        metrics = self._fetch_unit.metrics

        logger.info(
            f"Starting crawl from {seed} (max_depth={self.config.max_depth}, "
            f"max_pages={self.config.max_pages}, "
            f"concurrency={self.config.max_concurrent_requests})"
        )

        try:
            while True:
                while len(in_flight) < self.config.max_concurrent_requests:
                    entry = frontier.pop()
                    if entry is None:
                        break
                    task = asyncio.create_task(self._run(gate, entry))
                    in_flight[task] = entry

                if not in_flight:
                    break

                done, _ = await asyncio.wait(
                    in_flight, return_when=asyncio.FIRST_COMPLETED)

                for task in done:
                    entry = in_flight.pop(task)
                    result = task.result()

                    if entry.depth == 0:
                        self._check_seed(result)

                    if not result.ok:
                        continue

                    pages[entry.url] = result.text
                    added = frontier.add_links(result.links, entry.depth + 1)
                    if added:
                        logger.debug(f"Discovered {added} new links from {entry.url}")
        finally:
            # Only reached with tasks left when the dispatcher itself failed
            for task in in_flight:
                task.cancel()
            if in_flight:
                await asyncio.gather(*in_flight, return_exceptions=True)

        if frontier.exhausted:
            logger.info(f"Reached page limit: {self.config.max_pages}")

        result = CrawlResult(
            seed_url=seed,
            pages=pages,
            outcomes=metrics.outcomes,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            latency=metrics.latency,
            host_latency=metrics.host_latency,
        )
        logger.info(
            f"Crawl finished: {len(result)} pages from {result.dispatched_count} "
            f"fetches in {result.duration_seconds:.1f}s"
        )
        return result

    async def _run(self, gate: asyncio.Semaphore, entry: FrontierEntry) -> FetchResult:
        async with gate:
            return await self._fetch_unit.fetch(entry.url)

    def _check_seed(self, result: FetchResult) -> None:
        """Fail the crawl when the seed hit an error rather than a policy skip."""
        if result.outcome is FetchOutcome.FAILED:
            raise SeedFetchError(
                f"Seed could not be fetched: {result.error or 'unknown error'}",
                url=result.url,
                outcome=result.outcome.value,
            )
