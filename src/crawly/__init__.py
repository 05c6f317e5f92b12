"""
Crawly - a polite, concurrent web crawler.

Crawls the link graph reachable from a seed URL and returns the extracted
text of every page, while bounding depth, page count and concurrency,
honoring robots.txt and skipping sites that block automated access.
"""

from crawly.config import CrawlConfig, Settings, load_config
from crawly.utils.logging import setup_logging, get_logger
from crawly.core.exceptions import CrawlyError
from crawly.crawler import Crawler, CrawlerBuilder, CrawlResult, crawl_website

__version__ = "0.1.0"

__all__ = [
    "CrawlConfig",
    "Settings",
    "load_config",
    "setup_logging",
    "get_logger",
    "CrawlyError",
    "Crawler",
    "CrawlerBuilder",
    "CrawlResult",
    "crawl_website",
]
