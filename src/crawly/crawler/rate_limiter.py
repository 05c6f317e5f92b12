"""
Per-host rate limiting for web crawling.

Ensures consecutive requests to the same host are spaced by a minimum
interval, without pausing requests to other hosts.
"""

import asyncio
import time
from dataclasses import dataclass, field

from crawly.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class HostRateState:
    """
    Tracks rate limit state for a single host.

    Attributes:
        host: Host key (scheme://domain[:port])
        last_request_at: Monotonic time the last request began, None if never
        request_count: Total requests begun to this host
        lock: Serializes read-wait-update for this host
    """

    host: str
    last_request_at: float | None = None
    request_count: int = 0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)


class RateLimiter:
    """
    Rate limiter enforcing a minimum delay between requests to one host.

    Each host has its own lock, so waiting on a slow host never delays
    requests to other hosts. Two concurrent callers for the same host
    serialize: the second one sees the timestamp written by the first.

    Example:
        >>> limiter = RateLimiter(interval=1.0)
        >>> await limiter.wait("https://example.com")
        >>> # Makes request...
        >>> await limiter.wait("https://example.com")
        >>> # Waits ~1 second before returning
    """

    def __init__(self, interval: float = 0.0) -> None:
        """
        Initialize rate limiter.

        Args:
            interval: Minimum seconds between requests begun to one host
        """
        if interval < 0:
            raise ValueError("interval must be >= 0")
        self.interval = interval
        self._states: dict[str, HostRateState] = {}

    def _get_state(self, host: str) -> HostRateState:
        state = self._states.get(host)
        if state is None:
            state = HostRateState(host=host)
            self._states[host] = state
        return state

    async def wait(self, host: str, interval: float | None = None) -> float:
        """
        Block until a request to the host may begin, then record it.

        The start time is recorded even when the effective interval is zero.
        A longer interval learned later (a robots Crawl-delay) is measured
        from it.

        Args:
            host: Host key the request goes to
            interval: Effective interval for this request, replacing the
                configured one (e.g. when a robots Crawl-delay is longer)

        Returns:
            Time waited in seconds
        """
        effective = self.interval if interval is None else interval
        state = self._get_state(host)
        waited = 0.0

        async with state.lock:
            if effective > 0 and state.last_request_at is not None:
                elapsed = time.monotonic() - state.last_request_at
                if elapsed < effective:
                    waited = effective - elapsed
                    logger.debug(f"Rate limit: waiting {waited:.2f}s for {host}")
                    await asyncio.sleep(waited)

            state.last_request_at = time.monotonic()
            state.request_count += 1

        return waited

    def get_state(self, host: str) -> HostRateState | None:
        """Get rate state for a host, None if it has not been requested."""
        return self._states.get(host)

