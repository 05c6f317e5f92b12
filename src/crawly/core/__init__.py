"""
Core module for Crawly.

Contains the exception hierarchy shared by every subsystem.
"""

from crawly.core.exceptions import (
    CrawlyError,
    ConfigurationError,
    CrawlerError,
    InvalidSeedError,
    ClientBuildError,
    SeedFetchError,
    FetchError,
    ExtractionError,
    is_fatal,
)

__all__ = [
    # Base
    "CrawlyError",
    "ConfigurationError",
    # Crawler
    "CrawlerError",
    "InvalidSeedError",
    "ClientBuildError",
    "SeedFetchError",
    "FetchError",
    "ExtractionError",
    # Helpers
    "is_fatal",
]
