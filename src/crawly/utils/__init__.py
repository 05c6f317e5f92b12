"""
Utilities module for Crawly.

Provides logging setup and per-crawl metrics.
"""

from crawly.utils.logging import setup_logging, get_logger, reset_logging
from crawly.utils.metrics import CrawlMetrics, LatencyStats

__all__ = [
    # Logging
    "setup_logging",
    "get_logger",
    "reset_logging",
    # Metrics
    "CrawlMetrics",
    "LatencyStats",
]
