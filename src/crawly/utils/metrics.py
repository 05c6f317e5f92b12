"""
Per-crawl fetch metrics.

Each crawl owns one CrawlMetrics instance. The fetch unit records every
outcome and the latency of every GET into it, and the traversal engine
copies the totals into the CrawlResult for reporting.
"""

import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Iterator


@dataclass
class LatencyStats:
    """Running latency summary in milliseconds."""

    count: int = 0
    total_ms: float = 0.0
    min_ms: float | None = None
    max_ms: float = 0.0

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0

    def record(self, duration_ms: float) -> None:
        self.count += 1
        self.total_ms += duration_ms
        self.min_ms = duration_ms if self.min_ms is None else min(self.min_ms, duration_ms)
        self.max_ms = max(self.max_ms, duration_ms)

    def to_dict(self) -> dict:
        return {
            "count": self.count,
            "avg_ms": round(self.avg_ms, 2),
            "min_ms": round(self.min_ms or 0.0, 2),
            "max_ms": round(self.max_ms, 2),
        }


@dataclass
class CrawlMetrics:
    """
    Outcome counters and GET latency for one crawl.

    Latency is kept overall and per host key.

    Example:
        >>> metrics = CrawlMetrics()
        >>> with metrics.time_request("example.com:443"):
        ...     response = await http.get(url)
        >>> metrics.record_outcome("success")
        >>> metrics.latency.avg_ms
    """

    outcomes: Counter = field(default_factory=Counter)
    latency: LatencyStats = field(default_factory=LatencyStats)
    host_latency: dict[str, LatencyStats] = field(default_factory=dict)

    def record_outcome(self, outcome: str) -> None:
        self.outcomes[outcome] += 1

    def record_latency(self, host: str, duration_ms: float) -> None:
        self.latency.record(duration_ms)
        self.host_latency.setdefault(host, LatencyStats()).record(duration_ms)

    @contextmanager
    def time_request(self, host: str) -> Iterator[None]:
        """Time a block and record it against ``host``, also when it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.record_latency(host, (time.perf_counter() - start) * 1000)

