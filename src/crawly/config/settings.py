"""
Pydantic settings models for Crawly.

CrawlConfig is the single validated, immutable value that every crawl
component reads. It is validated once at construction and never mutated
while a crawl is running.
"""

import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


# Depth bound used when the caller does not limit depth.
UNBOUNDED_DEPTH = sys.maxsize

DEFAULT_USER_AGENT = "CrawlyBot/0.1 (+https://github.com/crawly/crawly)"


class CrawlConfig(BaseModel):
    """Crawl bounds and politeness policy."""

    max_depth: int = Field(
        default=UNBOUNDED_DEPTH,
        ge=0,
        description="Maximum link hops from the seed that are still fetched",
    )
    max_pages: int = Field(
        default=15,
        ge=1,
        description="Hard cap on the number of dispatched fetches",
    )
    max_concurrent_requests: int = Field(
        default=32,
        ge=1,
        description="Global cap on fetches in flight",
    )
    rate_limit_interval: float = Field(
        default=1.0,
        ge=0.0,
        description="Minimum seconds between requests begun to one host",
    )
    respect_robots: bool = Field(
        default=True,
        description="Whether robots.txt is fetched and obeyed",
    )
    user_agent: str = Field(
        default=DEFAULT_USER_AGENT,
        min_length=1,
        description="User agent sent on every request and matched against robots rules",
    )
    request_timeout: float = Field(
        default=30.0,
        gt=0.0,
        le=600.0,
        description="Timeout for a single HTTP request in seconds",
    )
    follow_redirects: bool = Field(
        default=True,
        description="Whether HTTP redirects are followed",
    )
    verify_tls: bool = Field(
        default=True,
        description="Whether TLS certificates are verified",
    )
    honor_crawl_delay: bool = Field(
        default=True,
        description="Space requests by robots.txt Crawl-delay when it exceeds rate_limit_interval",
    )
    allowed_mimes: tuple[str, ...] = Field(
        default=(),
        description="MIME types accepted for extraction. Empty means any text/HTML type.",
    )
    mitigation_headers: tuple[str, ...] = Field(
        default=("cf-mitigated",),
        description="Response headers that mark a bot-mitigation challenge",
    )

    model_config = {
        "frozen": True,
        "extra": "forbid",
        "validate_default": True,
    }

    @field_validator("allowed_mimes", "mitigation_headers", mode="before")
    @classmethod
    def normalize_names(
        cls, v: str | list[str] | tuple[str, ...] | None
    ) -> tuple[str, ...]:
        """
        Lowercase and strip MIME types and header names.

        None (a null YAML value or an empty environment variable) means no
        entries. A string is split on commas.
        """
        if v is None:
            return ()
        if isinstance(v, str):
            v = v.split(",")
        if not isinstance(v, (list, tuple, set, frozenset)):
            raise ValueError(f"expected a list of names, got {type(v).__name__}")

        names = []
        for item in v:
            if not isinstance(item, str):
                raise ValueError(f"expected a string, got {item!r}")
            if item.strip():
                names.append(item.strip().lower())
        return tuple(names)

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("user_agent must not be blank")
        return v


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Minimum logging level",
    )
    format: str = Field(
        default="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        description="Log message format string",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Date format for log timestamps",
    )
    file_path: Path | None = Field(
        default=None,
        description="Path to log file. None means console only.",
    )
    max_file_size_mb: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Maximum log file size before rotation",
    )
    backup_count: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Number of backup log files to keep",
    )
    log_to_console: bool = Field(
        default=True,
        description="Whether to output logs to console",
    )

    @field_validator("file_path", mode="before")
    @classmethod
    def convert_file_path(cls, v: str | Path | None) -> Path | None:
        """Convert string paths to Path objects."""
        if v is None:
            return None
        return Path(v) if isinstance(v, str) else v


class Settings(BaseModel):
    """
    Root configuration model.

    Settings are loaded from YAML with environment variable overrides.
    """

    crawler: CrawlConfig = Field(
        default_factory=CrawlConfig,
        description="Crawl bounds and politeness settings",
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings,
        description="Logging configuration",
    )

    model_config = {
        "extra": "forbid",
        "validate_default": True,
    }
