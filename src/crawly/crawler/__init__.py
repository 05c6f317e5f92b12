"""
Crawler module for Crawly.

Provides the crawl engine and its policy components:
- Per-host rate limiting
- robots.txt compliance cache
- Bot-mitigation detection
- Depth-first frontier with deduplication
- Crawl orchestration
"""

from crawly.crawler.rate_limiter import RateLimiter, HostRateState
from crawly.crawler.robots import RobotsCache, HostRobotsEntry
from crawly.crawler.mitigation import MitigationDetector
from crawly.crawler.frontier import (
    Frontier,
    FrontierEntry,
    normalize_url,
    host_key,
    validate_seed,
)
from crawly.crawler.http_client import HttpFetcher
from crawly.crawler.fetcher import FetchUnit, FetchOutcome, FetchResult
from crawly.crawler.engine import TraversalEngine, CrawlResult
from crawly.crawler.orchestrator import Crawler, CrawlerBuilder, crawl_website

__all__ = [
    # Rate limiting
    "RateLimiter",
    "HostRateState",
    # Robots
    "RobotsCache",
    "HostRobotsEntry",
    # Mitigation
    "MitigationDetector",
    # Frontier
    "Frontier",
    "FrontierEntry",
    "normalize_url",
    "host_key",
    "validate_seed",
    # Fetching
    "HttpFetcher",
    "FetchUnit",
    "FetchOutcome",
    "FetchResult",
    # Engine
    "TraversalEngine",
    "CrawlResult",
    # Orchestrator
    "Crawler",
    "CrawlerBuilder",
    "crawl_website",
]
