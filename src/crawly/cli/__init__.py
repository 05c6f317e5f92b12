"""
CLI module for Crawly.

Provides command-line interface using Typer:
- crawl: Crawl a site from a seed URL
- config: Configuration management
"""

from crawly.cli.main import app

__all__ = ["app"]
