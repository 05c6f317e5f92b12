"""
Custom exceptions for Crawly.

Provides a hierarchy of exceptions for precise error handling across
the crawler. All exceptions inherit from CrawlyError.

Exception Hierarchy:
    CrawlyError (base)
    ├── ConfigurationError
    └── CrawlerError
        ├── InvalidSeedError
        ├── ClientBuildError
        ├── SeedFetchError
        ├── FetchError
        └── ExtractionError

Only the first three crawler errors (plus ConfigurationError) ever reach the
caller of a crawl. FetchError and ExtractionError describe why a single URL
contributed nothing and are absorbed by the fetch unit.
"""

from typing import Any


class CrawlyError(Exception):
    """
    Base exception for all Crawly errors.

    All custom exceptions inherit from this class, allowing for
    catch-all handling when needed.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary with additional context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(
                f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Errors
# =============================================================================


class ConfigurationError(CrawlyError):
    """
    Error in configuration loading or validation.

    Raised when:
    - Configuration file is missing or malformed
    - An option value fails validation (e.g. max_pages < 1)
    """

    pass


# =============================================================================
# Crawler Errors
# =============================================================================


class CrawlerError(CrawlyError):
    """
    Base error for crawling operations.

    Raised for general crawl-related failures not covered by
    more specific subclasses.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if url:
            details["url"] = url
        super().__init__(message, details)
        self.url = url


class InvalidSeedError(CrawlerError):
    """
    Seed URL is not an absolute http(s) URL.

    Fatal: the crawl is never started.
    """

    pass


class ClientBuildError(CrawlerError):
    """
    The HTTP client could not be constructed (e.g. bad TLS settings).

    Fatal: no request can be issued.
    """

    pass


class SeedFetchError(CrawlerError):
    """
    The seed URL itself could not be fetched or parsed.

    Distinguishes total failure from a partial crawl.
    """

    def __init__(
        self,
        message: str,
        url: str | None = None,
        outcome: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        details = details or {}
        if outcome:
            details["outcome"] = outcome
        super().__init__(message, url, details)
        self.outcome = outcome


class FetchError(CrawlerError):
    """
    Network failure for one URL.

    Raised when:
    - The connection fails or times out
    - The URL cannot be requested (unsupported scheme, invalid URL)
    """

    pass


class ExtractionError(CrawlerError):
    """
    Error extracting text or links from a response body.

    Raised when:
    - The body cannot be decoded with its declared charset
    - HTML parsing fails
    """

    pass


# =============================================================================
# Utility Functions
# =============================================================================


def is_fatal(error: Exception) -> bool:
    """
    Check whether an error must abort the whole crawl.

    Args:
        error: The exception to check

    Returns:
        True for errors that prevent the crawl from doing any useful work
    """
    return isinstance(
        error,
        (ConfigurationError, InvalidSeedError, ClientBuildError, SeedFetchError),
    )
