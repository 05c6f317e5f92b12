"""
Main CLI application for Crawly.

Provides the command-line interface for:
- Crawling a site from a seed URL
- Viewing and initializing configuration
"""

import asyncio
import json
from pathlib import Path
from typing import List, Optional

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from crawly import __version__
from crawly.config import UNBOUNDED_DEPTH, CrawlConfig, Settings, load_config
from crawly.core.exceptions import ConfigurationError, CrawlyError
from crawly.crawler import Crawler, CrawlResult
from crawly.utils.logging import setup_logging, get_logger

app = typer.Typer(
    name="crawly",
    help="Crawly - a polite, concurrent web crawler",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
logger = get_logger(__name__)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold blue]Crawly[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to configuration file",
        exists=True,
        dir_okay=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Enable debug logging",
    ),
) -> None:
    """
    Crawly - crawl a site and extract the text of every page.

    Use 'crawly --help' for command list.
    """
    try:
        settings = load_config(config_file)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    setup_logging(settings.logging, level="DEBUG" if verbose else None)

    ctx.obj = settings


@app.command()
def crawl(
    ctx: typer.Context,
    url: str = typer.Argument(
        ...,
        help="URL to start crawling from",
    ),
    max_depth: Optional[int] = typer.Option(
        None,
        "--max-depth",
        "-d",
        help="Maximum link hops from the seed",
        min=0,
    ),
    max_pages: Optional[int] = typer.Option(
        None,
        "--max-pages",
        "-m",
        help="Maximum pages to fetch",
        min=1,
    ),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        "-n",
        help="Maximum requests in flight",
        min=1,
    ),
    interval: Optional[float] = typer.Option(
        None,
        "--interval",
        help="Minimum seconds between requests to one host",
        min=0.0,
    ),
    robots: Optional[bool] = typer.Option(
        None,
        "--robots/--no-robots",
        help="Respect robots.txt",
    ),
    user_agent: Optional[str] = typer.Option(
        None,
        "--user-agent",
        "-u",
        help="User agent string",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Request timeout in seconds",
    ),
    allowed_mime: Optional[List[str]] = typer.Option(
        None,
        "--allowed-mime",
        help="Only extract this media type (repeatable)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the result as JSON to this file",
        dir_okay=False,
    ),
) -> None:
    """
    Crawl a site from a seed URL.

    Example:
        crawly crawl https://example.com --max-pages 50 --max-depth 2
    """
    settings: Settings = ctx.obj or Settings()

    overrides = {
        "max_depth": max_depth,
        "max_pages": max_pages,
        "max_concurrent_requests": concurrency,
        "rate_limit_interval": interval,
        "respect_robots": robots,
        "user_agent": user_agent,
        "request_timeout": timeout,
        "allowed_mimes": tuple(allowed_mime) if allowed_mime else None,
    }

    try:
        config = build_crawl_config(settings.crawler, overrides)
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold]Crawling:[/bold] {escape(url)}\n"
        f"[dim]Max pages: {config.max_pages} | Depth: {_format_depth(config.max_depth)} | "
        f"Concurrency: {config.max_concurrent_requests} | "
        f"Interval: {config.rate_limit_interval}s | "
        f"Robots: {'on' if config.respect_robots else 'off'}[/dim]",
        title="Crawly",
        border_style="blue",
    ))

    try:
        result = asyncio.run(Crawler(config).crawl(url))
    except KeyboardInterrupt:
        console.print("\n[yellow]Crawl cancelled by user[/yellow]")
        raise typer.Exit(1)
    except CrawlyError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        logger.debug("Crawl failed", exc_info=True)
        raise typer.Exit(1)

    _print_summary(result)

    if output is not None:
        write_result(result, output)
        console.print(f"[green]✓[/green] Result saved to: {output}")


def build_crawl_config(base: CrawlConfig, overrides: dict) -> CrawlConfig:
    """
    Apply command-line overrides on top of configured crawl settings.

    Args:
        base: Crawl settings from file/environment
        overrides: Option values; None means not given

    Returns:
        Validated CrawlConfig

    Raises:
        ConfigurationError: If the merged options are invalid
    """
    data = base.model_dump()
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return CrawlConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid crawl options: {e}") from e


def write_result(result: CrawlResult, path: Path) -> None:
    """Write a crawl result as JSON."""
    payload = {
        "seed_url": result.seed_url,
        "started_at": result.started_at.isoformat(),
        "completed_at": result.completed_at.isoformat(),
        "outcomes": dict(result.outcomes),
        "latency": {
            "overall": result.latency.to_dict(),
            "hosts": {host: stats.to_dict() for host, stats in sorted(result.host_latency.items())},
        },
        "pages": dict(result.items()),
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def _format_depth(depth: int) -> str:
    return "unbounded" if depth == UNBOUNDED_DEPTH else str(depth)


def _format_latency(result: CrawlResult) -> str:
    stats = result.latency
    if not stats.count:
        return "Fetch latency: [dim]n/a[/dim]"

    line = (
        f"Fetch latency: [bold]{stats.avg_ms:.0f} ms[/bold] avg "
        f"[dim](min {stats.min_ms:.0f}, max {stats.max_ms:.0f})[/dim]"
    )
    slowest = result.slowest_host()
    if slowest is not None and len(result.host_latency) > 1:
        host, host_stats = slowest
        line += f"\nSlowest host: {escape(host)} [dim]({host_stats.avg_ms:.0f} ms avg)[/dim]"
    return line


def _print_summary(result: CrawlResult) -> None:
    table = Table(title="Pages", show_lines=False)
    table.add_column("URL", style="cyan", overflow="fold")
    table.add_column("Characters", justify="right")

    for page_url, text in result.items():
        table.add_row(escape(page_url), f"{len(text):,}")

    console.print(table)

    outcome_lines = "\n".join(
        f"{name}: [bold]{count}[/bold]" for name, count in sorted(result.outcomes.items())
    )
    console.print(Panel(
        f"[green]✓ Crawl complete![/green]\n\n"
        f"Pages extracted: [bold]{len(result)}[/bold]\n"
        f"Fetches dispatched: [bold]{result.dispatched_count}[/bold]\n"
        f"{outcome_lines}\n"
        f"{_format_latency(result)}\n"
        f"Duration: [dim]{result.duration_seconds:.1f}s[/dim]",
        title="Summary",
        border_style="green",
    ))


@app.command()
def config(
    ctx: typer.Context,
    show: bool = typer.Option(
        False,
        "--show",
        "-s",
        help="Show current configuration",
    ),
    init: bool = typer.Option(
        False,
        "--init",
        help="Create default configuration file",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output path for config file",
    ),
) -> None:
    """
    Configuration management.

    Examples:
        crawly config --show
        crawly config --init --output ./crawly.yaml
    """
    if init:
        _init_config(output)
    elif show:
        _show_config(ctx.obj or Settings())
    else:
        console.print(
            "Use --show to view config or --init to create default config")


def _show_config(settings: Settings) -> None:
    """Show current configuration."""
    config_dict = settings.model_dump(mode="json")

    console.print(Panel(
        "[bold]Current Configuration[/bold]",
        border_style="blue",
    ))

    for section, values in config_dict.items():
        console.print(f"\n[bold cyan]{section}:[/bold cyan]")
        for key, value in values.items():
            console.print(f"  {key}: [dim]{escape(str(value))}[/dim]")


def _init_config(output: Optional[Path]) -> None:
    """Create default configuration file."""
    config_dict = Settings().model_dump(mode="json")
    output_path = output or Path("crawly.yaml")

    if output_path.exists():
        if not typer.confirm(f"File {output_path} exists. Overwrite?"):
            raise typer.Exit(0)

    with open(output_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config_dict, f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]✓[/green] Configuration saved to: {output_path}")
