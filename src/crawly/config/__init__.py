"""
Configuration module for Crawly.

Provides Pydantic-based settings management with YAML file support
and environment variable overrides.
"""

from crawly.config.settings import (
    Settings,
    CrawlConfig,
    LoggingSettings,
    UNBOUNDED_DEPTH,
    DEFAULT_USER_AGENT,
)
from crawly.config.loader import load_config

__all__ = [
    "Settings",
    "CrawlConfig",
    "LoggingSettings",
    "UNBOUNDED_DEPTH",
    "DEFAULT_USER_AGENT",
    "load_config",
]
